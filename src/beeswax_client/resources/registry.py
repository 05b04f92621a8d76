"""Configuration records for every Beeswax resource."""

from __future__ import annotations

from beeswax_client.models.entities import (
    Advertiser,
    Campaign,
    Creative,
    CreativeAsset,
    CreativeLineItem,
    LineItem,
    Report,
    Segment,
    TargetingTemplate,
)
from beeswax_client.resources.base import ResourceConfig
from beeswax_client.resources.compat import (
    CAMPAIGN_ALIASES,
    CREATIVE_ALIASES,
    LINE_ITEM_ALIASES,
    shape_line_item_budget,
)

# Fields owned by the server on every entity
AUDIT_FIELDS = frozenset({
    "created_date",
    "updated_date",
    "create_date",
    "update_date",
    "push_status",
    "push_update",
    "buzz_key",
    "last_active",
})

TARGETING_TEMPLATE_DEPRECATION = (
    "Targeting templates are deprecated. Please use targeting expressions API directly."
)

ADVERTISER = ResourceConfig(
    name="advertiser",
    path="/rest/advertiser",
    id_field="advertiser_id",
    model=Advertiser,
    read_only_fields=AUDIT_FIELDS | {"advertiser_id"},
)

CAMPAIGN = ResourceConfig(
    name="campaign",
    path="/rest/campaign",
    id_field="campaign_id",
    model=Campaign,
    aliases=CAMPAIGN_ALIASES,
    # 2 = budget in currency minor units
    defaults={"budget_type": 2},
    read_only_fields=AUDIT_FIELDS | {"campaign_id", "campaign_spend"},
)

LINE_ITEM = ResourceConfig(
    name="line_item",
    path="/rest/line_item",
    id_field="line_item_id",
    model=LineItem,
    aliases=LINE_ITEM_ALIASES,
    current_create_path="/rest/v2/line-items",
    prepare=shape_line_item_budget,
    read_only_fields=AUDIT_FIELDS | {
        "line_item_id",
        "line_item_spend",
        "line_item_impressions",
        "line_item_version",
        "has_skad_assignment",
        "account_id",
    },
)

CREATIVE = ResourceConfig(
    name="creative",
    path="/rest/creative",
    id_field="creative_id",
    model=Creative,
    aliases=CREATIVE_ALIASES,
    read_only_fields=AUDIT_FIELDS | {"creative_id"},
)

CREATIVE_LINE_ITEM = ResourceConfig(
    name="creative_line_item",
    path="/rest/creative_line_item",
    id_field="cli_id",
    model=CreativeLineItem,
    read_only_fields=AUDIT_FIELDS | {"cli_id"},
)

TARGETING_TEMPLATE = ResourceConfig(
    name="targeting_template",
    path="/rest/targeting_template",
    id_field="targeting_template_id",
    model=TargetingTemplate,
    writes_disabled=True,
    disabled_code=410,
    disabled_message=TARGETING_TEMPLATE_DEPRECATION,
)

CREATIVE_ASSET = ResourceConfig(
    name="creative_asset",
    path="/rest/creative_asset",
    id_field="creative_asset_id",
    model=CreativeAsset,
    read_only_fields=AUDIT_FIELDS | {"creative_asset_id"},
)

SEGMENT = ResourceConfig(
    name="segment",
    path="/rest/segment",
    id_field="segment_id",
    model=Segment,
)

REPORT = ResourceConfig(
    name="report",
    path="/rest/report",
    id_field="report_id",
    model=Report,
)

ALL_RESOURCES: dict[str, ResourceConfig] = {
    config.name: config
    for config in (
        ADVERTISER,
        CAMPAIGN,
        LINE_ITEM,
        CREATIVE,
        CREATIVE_LINE_ITEM,
        TARGETING_TEMPLATE,
        CREATIVE_ASSET,
        SEGMENT,
        REPORT,
    )
}
