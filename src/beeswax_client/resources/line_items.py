"""Line item request bodies for the legacy and current schemas."""

from __future__ import annotations

from typing import Any

from beeswax_client.models.entities import Campaign
from beeswax_client.models.requests import LineItemParams
from beeswax_client.resources.compat import SchemaMode

DEFAULT_CPM_BID = 3
DEFAULT_CURRENCY = "USD"


def validate_bid(bid: Any) -> str | None:
    """Return a problem description, or None if the bid is usable."""
    if bid is None:
        return None
    if isinstance(bid, bool) or not isinstance(bid, (int, float)):
        return f"Invalid bid value {bid!r}: must be a number"
    if bid <= 0:
        return f"Invalid bid value {bid!r}: must be greater than zero"
    return None


def _legacy_body(params: LineItemParams, bid: Any) -> dict[str, Any]:
    """Integer-coded schema (line_item_type_id, numeric budget_type)."""
    return {
        "line_item_name": params.resolved_name,
        "line_item_budget": params.resolved_budget,
        "line_item_type_id": 0,
        "budget_type": 2,
        "bidding": params.bidding or {
            "bidding_strategy": "CPM_PACED",
            "values": {"cpm_bid": bid},
            "pacing": "lifetime",
            "bid_shading": True,
            "pacing_behavior": "even",
            "catchup_behavior": "even",
            "bid_shading_win_rate_control": "NORMAL",
            "custom": False,
            "multiplier": 1,
        },
        "creative_weighting_method": "RANDOM",
        "frequency_cap": params.frequency_caps or [],
        "frequency_cap_type": 0,
        "frequency_cap_vendor": None,
    }


def _current_body(params: LineItemParams, bid: Any) -> dict[str, Any]:
    """Named-object schema served by the versioned line item endpoint."""
    body: dict[str, Any] = {
        "name": params.resolved_name,
        "type": params.type or "banner",
        "budget_type": "spend including vendor fees",
        "spend_budget": params.spend_budget or {
            "lifetime": str(params.resolved_budget),
            "include_fees": True,
        },
        "bidding": params.bidding or {
            "strategy": "CPM",
            "values": {"cpm_bid": bid},
            "pacing": "none",
            "custom": False,
            "bid_shading_control": "normal",
        },
    }
    if params.frequency_caps:
        body["frequency_caps"] = params.frequency_caps
    return body


def build_line_item_body(
    params: LineItemParams,
    campaign: Campaign,
    mode: SchemaMode,
) -> dict[str, Any]:
    """Full create body, inheriting advertiser, currency and dates from the campaign."""
    bid = params.resolved_bid if params.resolved_bid is not None else DEFAULT_CPM_BID
    body = _current_body(params, bid) if mode == "current" else _legacy_body(params, bid)

    body.update({
        "advertiser_id": campaign.advertiser_id,
        "campaign_id": params.campaign_id,
        "currency": params.currency or campaign.currency or DEFAULT_CURRENCY,
        "guaranteed": params.guaranteed,
        "active": params.active,
    })
    start_date = params.start_date or campaign.start_date
    end_date = params.end_date or campaign.end_date
    if start_date:
        body["start_date"] = start_date
    if end_date:
        body["end_date"] = end_date
    if params.targeting:
        body["targeting"] = params.targeting
    if params.targeting_expression_id:
        body["targeting_expression_id"] = params.targeting_expression_id
    return body
