"""Campaign macros: multi-call workflows with partial-success semantics.

Every macro resolves to a BeeswaxResponse. Sub-entity failures are logged and
recorded as skipped; only the anchor entity (the campaign) is fatal.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from beeswax_client.models.entities import Campaign
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.macros import (
    BulkLineItem,
    BulkStatusResult,
    CampaignCreationOptions,
    CloneOptions,
    CreativeCreationOptions,
    FullCampaignResult,
    LineItemCreationOptions,
    TreeDeletionResult,
)
from beeswax_client.models.requests import LineItemParams, UploadCreativeAssetParams
from beeswax_client.resources.compat import (
    CAMPAIGN_ALIASES,
    LINE_ITEM_ALIASES,
    get_field,
    set_field,
)
from beeswax_client.resources.registry import CAMPAIGN, LINE_ITEM
from beeswax_client.utils.errors import BeeswaxError, NotFoundError
from beeswax_client.utils.records import clean_record, strip_fields

if TYPE_CHECKING:
    from beeswax_client.client import BeeswaxClient

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTING = 100

PERFORMANCE_METRICS = ["impressions", "clicks", "conversions", "spend"]


def _scale(value: Any, multiplier: float) -> int | float:
    """Multiply a budget, keeping whole amounts integral."""
    scaled = float(value or 0) * multiplier
    return int(scaled) if scaled.is_integer() else round(scaled, 2)


def _failure(error: Exception, default: str) -> BeeswaxResponse:
    return BeeswaxResponse.failure(str(error) or default, errors=[repr(error)])


class CampaignMacros:
    """Workflows composed from several resource calls."""

    def __init__(self, client: BeeswaxClient, pacing_delay: float = 0.1) -> None:
        self._client = client
        self._pacing_delay = pacing_delay

    async def _pace(self, factor: float = 1.0) -> None:
        """Flat delay between dependent calls."""
        if self._pacing_delay > 0:
            await asyncio.sleep(self._pacing_delay * factor)

    # ── Full campaign ────────────────────────────────────────────────

    async def create_full_campaign(
        self, options: CampaignCreationOptions | dict[str, Any]
    ) -> BeeswaxResponse:
        """Create a campaign with its targeting templates, line items and creatives.

        The campaign, its line items and its creatives are created inactive;
        creative/line item associations are created active. Succeeds as long
        as the campaign itself was created.
        """
        try:
            if not isinstance(options, CampaignCreationOptions):
                options = CampaignCreationOptions.model_validate(options)

            campaign_data = clean_record({
                "advertiser_id": options.advertiser_id,
                "name": options.name or options.campaign_name,
                "budget": options.budget if options.budget is not None else options.campaign_budget,
                "budget_type": options.budget_type,
                "start_date": options.start_date,
                "end_date": options.end_date,
                "currency": options.currency,
            })
            campaign_data["active"] = False

            campaign_response = await self._client.campaigns.create(campaign_data)
            if not campaign_response.success or not campaign_response.payload:
                raise BeeswaxError(
                    f"Failed to create campaign: {campaign_response.message or 'no payload'}"
                )
            campaign = Campaign.model_validate(campaign_response.payload)
            if not campaign.campaign_id:
                raise BeeswaxError("Campaign ID not returned from API")

            result = FullCampaignResult(campaign=campaign_response.payload)
            await self._create_targeting_templates(options, result)

            for line_item_options in options.line_items:
                await self._create_line_item_tree(options, campaign, line_item_options, result)

            return BeeswaxResponse.ok(result)

        except Exception as e:
            logger.error(f"Full campaign creation failed: {e}")
            return _failure(e, "Failed to create full campaign")

    async def _create_targeting_templates(
        self, options: CampaignCreationOptions, result: FullCampaignResult
    ) -> None:
        for template in options.targeting_templates:
            data = {
                "advertiser_id": options.advertiser_id,
                "targeting_template_name": template.targeting_template_name,
                "targeting": template.targeting,
                "active": True,
            }
            try:
                response = await self._client.targeting_templates.create(data)
            except BeeswaxError as e:
                response = BeeswaxResponse.failure(str(e))

            if response.success and response.payload:
                result.targeting_templates.append(response.payload)
            else:
                self._skip(result, "targeting_template", template.targeting_template_name, response.message)

    async def _create_line_item_tree(
        self,
        options: CampaignCreationOptions,
        campaign: Campaign,
        line_item_options: LineItemCreationOptions,
        result: FullCampaignResult,
    ) -> None:
        label = line_item_options.resolved_name or "unnamed line item"
        try:
            params = LineItemParams(
                campaign_id=campaign.campaign_id,
                name=line_item_options.resolved_name,
                budget=line_item_options.budget,
                line_item_budget=line_item_options.line_item_budget,
                bid_price=line_item_options.bid_price,
                bidding=line_item_options.bidding,
                spend_budget=line_item_options.spend_budget,
                frequency_caps=line_item_options.frequency_caps,
                targeting=line_item_options.targeting,
                targeting_expression_id=line_item_options.targeting_expression_id,
                start_date=line_item_options.start_date,
                end_date=line_item_options.end_date,
                currency=line_item_options.currency,
                type=line_item_options.type,
                guaranteed=line_item_options.guaranteed,
                # Inactive until its creatives are attached
                active=False,
            )
            response = await self._client.create_line_item(params)
        except (BeeswaxError, ValueError) as e:
            response = BeeswaxResponse.failure(str(e))

        if not response.success or not response.payload:
            self._skip(result, "line_item", label, response.message)
            return

        line_item = response.payload
        result.line_items.append(line_item)

        for creative_options in line_item_options.creatives:
            await self._create_creative(options.advertiser_id, line_item, creative_options, result)

    async def _create_creative(
        self,
        advertiser_id: int,
        line_item: dict[str, Any],
        creative_options: CreativeCreationOptions,
        result: FullCampaignResult,
    ) -> None:
        label = creative_options.resolved_name or "unnamed creative"

        asset_id = None
        if creative_options.asset_url:
            try:
                asset = await self._client.upload_creative_asset(
                    UploadCreativeAssetParams(
                        advertiser_id=advertiser_id,
                        source_url=creative_options.asset_url,
                        creative_asset_name=creative_options.resolved_name,
                    )
                )
                asset_id = asset.get("creative_asset_id")
            except (BeeswaxError, ValueError) as e:
                logger.warning(f"Asset upload for creative '{label}' failed, creating it without content: {e}")

        creative_data = clean_record({
            "advertiser_id": advertiser_id,
            "name": creative_options.resolved_name,
            "type": creative_options.resolved_type,
            "creative_template_id": creative_options.creative_template_id,
            "width": creative_options.width,
            "height": creative_options.height,
            "click_url": creative_options.click_url,
            "attributes": creative_options.attributes or creative_options.creative_attributes,
            "creative_asset_id": asset_id,
        })
        creative_data["secure"] = True
        # Inactive until it has usable content
        creative_data["active"] = False

        try:
            creative_response = await self._client.creatives.create(creative_data)
        except BeeswaxError as e:
            creative_response = BeeswaxResponse.failure(str(e))
        if not creative_response.success or not creative_response.payload:
            self._skip(result, "creative", label, creative_response.message)
            return

        creative = creative_response.payload
        result.creatives.append(creative)

        creative_id = creative.get("creative_id")
        line_item_id = line_item.get("line_item_id")
        if not creative_id or not line_item_id:
            self._skip(result, "creative_line_item", label, "missing creative or line item id")
            return

        try:
            cli_response = await self._client.creative_line_items.create({
                "creative_id": creative_id,
                "line_item_id": line_item_id,
                "active": True,
                "weighting": creative_options.weighting,
            })
        except BeeswaxError as e:
            cli_response = BeeswaxResponse.failure(str(e))
        if cli_response.success and cli_response.payload:
            result.creative_line_items.append(cli_response.payload)
        else:
            self._skip(result, "creative_line_item", label, cli_response.message)

    @staticmethod
    def _skip(result: FullCampaignResult, kind: str, label: str, reason: str | None) -> None:
        logger.warning(f"Skipped {kind} '{label}': {reason or 'unknown error'}")
        result.skipped.append(f"{kind} '{label}': {reason or 'unknown error'}")

    # ── Clone ────────────────────────────────────────────────────────

    async def clone_campaign(
        self,
        campaign_id: int,
        new_name: str,
        options: CloneOptions | dict[str, Any] | None = None,
    ) -> BeeswaxResponse:
        """Copy a campaign, its line items and (by default) their creative associations.

        Server-owned fields are stripped before the source records are reused.
        `budget_multiplier` scales the campaign and every line item budget.
        """
        try:
            if not isinstance(options, CloneOptions):
                options = CloneOptions.model_validate(options or {})
            mode = self._client.campaigns.schema_mode

            source_response = await self._client.campaigns.find(campaign_id)
            if not source_response.success or not source_response.payload:
                raise NotFoundError(
                    f"Campaign {campaign_id} not found", "GET", CAMPAIGN.path, status_code=404
                )
            source = source_response.payload

            campaign_data = strip_fields(source, CAMPAIGN.read_only_fields)
            set_field(campaign_data, CAMPAIGN_ALIASES[0], new_name, mode)
            if options.start_date:
                campaign_data["start_date"] = options.start_date
            if options.end_date:
                campaign_data["end_date"] = options.end_date
            if options.budget_multiplier:
                budget = get_field(campaign_data, CAMPAIGN_ALIASES[1])
                set_field(campaign_data, CAMPAIGN_ALIASES[1], _scale(budget, options.budget_multiplier), mode)

            new_campaign_response = await self._client.campaigns.create(campaign_data)
            if not new_campaign_response.success or not new_campaign_response.payload:
                raise BeeswaxError(
                    f"Failed to create new campaign: {new_campaign_response.message or 'no payload'}"
                )
            new_campaign_id = new_campaign_response.payload.get("campaign_id")
            if not new_campaign_id:
                raise BeeswaxError("New campaign ID not returned from API")

            result = FullCampaignResult(campaign=new_campaign_response.payload)

            line_items_response = await self._client.line_items.query_all({"campaign_id": campaign_id})
            for line_item in line_items_response.payload or []:
                await self._clone_line_item(line_item, new_campaign_id, options, result)
                await self._pace()

            return BeeswaxResponse.ok(result)

        except Exception as e:
            logger.error(f"Clone of campaign {campaign_id} failed: {e}")
            return _failure(e, "Failed to clone campaign")

    async def _clone_line_item(
        self,
        line_item: dict[str, Any],
        new_campaign_id: int,
        options: CloneOptions,
        result: FullCampaignResult,
    ) -> None:
        mode = self._client.line_items.schema_mode
        source_id = line_item.get("line_item_id")
        label = get_field(line_item, LINE_ITEM_ALIASES[0]) or f"line item {source_id}"

        data = strip_fields(line_item, LINE_ITEM.read_only_fields)
        data["campaign_id"] = new_campaign_id
        was_active = bool(data.get("active"))
        data["active"] = False

        if options.budget_multiplier:
            budget = get_field(data, LINE_ITEM_ALIASES[1])
            if budget is not None:
                set_field(data, LINE_ITEM_ALIASES[1], _scale(budget, options.budget_multiplier), mode)
            spend_budget = data.get("spend_budget")
            if isinstance(spend_budget, dict) and spend_budget.get("lifetime") is not None:
                data["spend_budget"] = {
                    **spend_budget,
                    "lifetime": str(_scale(spend_budget["lifetime"], options.budget_multiplier)),
                }

        try:
            response = await self._client.line_items.create(data)
        except BeeswaxError as e:
            response = BeeswaxResponse.failure(str(e))
        if not response.success or not response.payload:
            self._skip(result, "line_item", label, response.message)
            return

        new_line_item = response.payload
        new_id = new_line_item.get("line_item_id")
        result.line_items.append(new_line_item)
        if not new_id:
            self._skip(result, "creative_line_item", label, "missing new line item id")
            return

        if options.clone_creatives is not False:
            associations = await self._client.creative_line_items.query_all({"line_item_id": source_id})
            for cli in associations.payload or []:
                try:
                    cli_response = await self._client.creative_line_items.create({
                        "creative_id": cli.get("creative_id"),
                        "line_item_id": new_id,
                        "active": cli.get("active", True),
                        "weighting": cli.get("weighting", DEFAULT_WEIGHTING),
                    })
                except BeeswaxError as e:
                    cli_response = BeeswaxResponse.failure(str(e))
                if cli_response.success and cli_response.payload:
                    result.creative_line_items.append(cli_response.payload)
                else:
                    self._skip(result, "creative_line_item", f"creative {cli.get('creative_id')}", cli_response.message)

        if was_active:
            activated = await self._client.line_items.edit(new_id, {"active": True})
            if activated.success and activated.payload:
                result.line_items[-1] = activated.payload
            else:
                self._skip(result, "line_item_activation", label, activated.message)

    # ── Bulk operations ──────────────────────────────────────────────

    async def bulk_update_campaign_status(
        self, campaign_ids: list[int], active: bool
    ) -> BeeswaxResponse:
        """Pause or resume campaigns one by one. Always succeeds; counts per-item outcomes."""
        counts = BulkStatusResult()

        for campaign_id in campaign_ids:
            try:
                response = await self._client.campaigns.edit(campaign_id, {"active": active})
                if response.success:
                    counts.updated += 1
                else:
                    counts.failed += 1
                    logger.warning(f"Status update of campaign {campaign_id} failed: {response.message}")
            except Exception as e:
                counts.failed += 1
                logger.warning(f"Status update of campaign {campaign_id} failed: {e}")

            await self._pace(0.5)

        return BeeswaxResponse.ok(counts)

    async def bulk_create_line_items(
        self,
        campaign_id: int,
        line_items: list[BulkLineItem | dict[str, Any]],
    ) -> BeeswaxResponse:
        """Create several inactive line items under one campaign.

        Every item is attempted; success only if none failed.
        """
        try:
            campaign_response = await self._client.campaigns.find(campaign_id)
            if not campaign_response.success or not campaign_response.payload:
                return BeeswaxResponse.failure("Campaign not found", code=404)

            created: list[dict[str, Any]] = []
            errors: list[str] = []

            for index, raw_item in enumerate(line_items):
                name = f"#{index + 1}"
                try:
                    if isinstance(raw_item, dict):
                        name = raw_item.get("name") or name
                    item = raw_item if isinstance(raw_item, BulkLineItem) else BulkLineItem.model_validate(raw_item)
                    name = item.name
                    response = await self._client.create_line_item(
                        LineItemParams(
                            campaign_id=campaign_id,
                            name=item.name,
                            budget=item.budget,
                            bid_price=item.bid_price,
                            targeting=item.targeting,
                            active=False,
                        )
                    )
                    if response.success and response.payload:
                        created.append(response.payload)
                    else:
                        errors.append(f"Failed to create line item {name}: {response.message}")
                except Exception as e:
                    errors.append(f"Error creating line item {name}: {e}")

                await self._pace()

            return BeeswaxResponse(
                success=not errors,
                payload=created,
                errors=errors or None,
            )

        except Exception as e:
            logger.error(f"Bulk line item creation in campaign {campaign_id} failed: {e}")
            return _failure(e, "Failed to create line items")

    # ── Reporting & cleanup ──────────────────────────────────────────

    async def get_campaign_performance(
        self, campaign_id: int, start_date: str, end_date: str
    ) -> BeeswaxResponse:
        """Request a campaign performance report for a date range."""
        try:
            campaign_response = await self._client.campaigns.find(campaign_id)
            if not campaign_response.success or not campaign_response.payload:
                return BeeswaxResponse.failure("Campaign not found", code=404)
            campaign = Campaign.model_validate(campaign_response.payload)

            return await self._client.reports.create({
                "advertiser_id": campaign.advertiser_id,
                "report_name": f"Campaign {campaign_id} Performance",
                "report_type": "campaign_performance",
                "dimensions": ["campaign_id", "date"],
                "metrics": PERFORMANCE_METRICS,
                "filters": {"campaign_id": campaign_id},
                "start_date": start_date,
                "end_date": end_date,
            })
        except Exception as e:
            return _failure(e, "Failed to get campaign performance")

    async def delete_campaign_tree(self, campaign_id: int) -> BeeswaxResponse:
        """Delete a campaign in reverse-dependency order.

        Associations go first, then line items, then the campaign, since the
        API refuses to delete a parent that is still referenced.
        """
        try:
            deleted = TreeDeletionResult()
            line_items = await self._client.line_items.query_all({"campaign_id": campaign_id})

            for line_item in line_items.payload or []:
                line_item_id = line_item.get("line_item_id")
                associations = await self._client.creative_line_items.query_all(
                    {"line_item_id": line_item_id}
                )
                for cli in associations.payload or []:
                    response = await self._client.creative_line_items.delete(cli.get("cli_id"))
                    if response.success:
                        deleted.creative_line_items += 1
                response = await self._client.line_items.delete(line_item_id)
                if response.success:
                    deleted.line_items += 1

            response = await self._client.campaigns.delete(campaign_id)
            deleted.campaign = response.success
            return BeeswaxResponse(success=response.success, payload=deleted, message=response.message)

        except Exception as e:
            logger.error(f"Deleting campaign {campaign_id} failed: {e}")
            return _failure(e, "Failed to delete campaign")
