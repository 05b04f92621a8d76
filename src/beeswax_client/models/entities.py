"""Remote entity models.

Each model types the fields the client reads or rewrites and keeps every
other remote field in the pydantic extra map, so records round-trip intact.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CreativeType(IntEnum):
    DISPLAY = 0
    VIDEO = 1
    NATIVE = 2


class Entity(BaseModel):
    model_config = ConfigDict(extra="allow")

    active: bool | None = None
    created_date: str | None = None
    updated_date: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Dump back to a plain API record, unknown fields included."""
        return self.model_dump(exclude_none=True)


class Advertiser(Entity):
    advertiser_id: int | None = None
    advertiser_name: str | None = None
    alternative_id: str | None = None


class Campaign(Entity):
    campaign_id: int | None = None
    advertiser_id: int | None = None
    campaign_name: str | None = None
    name: str | None = None
    campaign_budget: int | float | None = None
    budget: int | float | None = None
    budget_type: int | str | None = None
    currency: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.campaign_name

    @property
    def budget_amount(self) -> int | float | None:
        return self.budget if self.budget is not None else self.campaign_budget


class SpendBudget(BaseModel):
    model_config = ConfigDict(extra="allow")

    lifetime: str | float | None = None
    daily: str | float | None = None
    include_fees: bool = True


class LineItem(Entity):
    line_item_id: int | None = None
    campaign_id: int | None = None
    advertiser_id: int | None = None
    line_item_name: str | None = None
    name: str | None = None
    line_item_budget: float | None = None
    budget: float | None = None
    line_item_type_id: int | None = None
    bidding: dict[str, Any] | None = None
    spend_budget: SpendBudget | None = None
    frequency_caps: list[dict[str, Any]] | None = None
    targeting_expression_id: int | None = None
    start_date: str | None = None
    end_date: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.line_item_name


class Creative(Entity):
    creative_id: int | None = None
    advertiser_id: int | None = None
    creative_name: str | None = None
    name: str | None = None
    creative_type: int | str | None = None
    creative_template_id: int | None = None
    creative_asset_id: int | None = None
    width: int | None = None
    height: int | None = None
    click_url: str | None = None
    secure: bool | None = None


class CreativeLineItem(Entity):
    cli_id: int | None = None
    creative_id: int | None = None
    line_item_id: int | None = None
    weighting: int | None = None


class CreativeAsset(Entity):
    creative_asset_id: int | None = None
    advertiser_id: int | None = None
    creative_asset_name: str | None = None
    size_in_bytes: int | None = None
    notes: str | None = None
    asset_type: str | None = None
    url: str | None = None


class TargetingTemplate(Entity):
    targeting_template_id: int | None = None
    advertiser_id: int | None = None
    targeting_template_name: str | None = None
    targeting: dict[str, Any] | None = None


class Segment(Entity):
    segment_id: int | None = None
    advertiser_id: int | None = None
    segment_name: str | None = None
    segment_description: str | None = None


class Report(Entity):
    report_id: int | None = None
    advertiser_id: int | None = None
    report_name: str | None = None
    report_type: str | None = None
    dimensions: list[str] = []
    metrics: list[str] = []
    filters: dict[str, Any] | None = None
    start_date: str | None = None
    end_date: str | None = None
