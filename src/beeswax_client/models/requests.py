"""Parameter models for the client's helper operations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class LineItemParams(BaseModel):
    """Input to `BeeswaxClient.create_line_item`.

    Accepts both the legacy (`line_item_name`, `line_item_budget`, `cpm_bid`)
    and the current (`name`, `budget`, `bid_price`) spellings.
    """

    campaign_id: int
    name: str | None = None
    line_item_name: str | None = None
    budget: float | None = None
    line_item_budget: float | None = None
    cpm_bid: float | None = None
    bid_price: float | None = None
    bidding: dict[str, Any] | None = None
    spend_budget: dict[str, Any] | None = None
    frequency_caps: list[dict[str, Any]] | None = None
    targeting: dict[str, Any] | None = None
    targeting_expression_id: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    currency: str | None = None
    type: str | None = None
    guaranteed: bool = False
    active: bool = False

    @model_validator(mode="after")
    def _require_name(self) -> "LineItemParams":
        if not (self.name or self.line_item_name):
            raise ValueError("line item requires name or line_item_name")
        return self

    @property
    def resolved_name(self) -> str:
        return self.name or self.line_item_name or ""

    @property
    def resolved_budget(self) -> float:
        if self.budget is not None:
            return self.budget
        return self.line_item_budget or 0

    @property
    def resolved_bid(self) -> Any:
        """Bid from explicit bidding values, then cpm_bid, then bid_price."""
        if self.bidding and isinstance(self.bidding.get("values"), dict):
            values = self.bidding["values"]
            for key in ("cpm_bid", "cpc_bid", "cpa_bid"):
                if key in values:
                    return values[key]
        if self.cpm_bid is not None:
            return self.cpm_bid
        return self.bid_price


class UploadCreativeAssetParams(BaseModel):
    """Input to `BeeswaxClient.upload_creative_asset`."""

    advertiser_id: int
    source_url: str | None = Field(default=None, alias="sourceUrl")
    content: bytes | None = None
    creative_asset_name: str | None = None
    size_in_bytes: int | None = None
    notes: str | None = None
    active: bool = True

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _require_source(self) -> "UploadCreativeAssetParams":
        if not self.source_url and self.content is None:
            raise ValueError("upload_creative_asset requires a source_url (or raw content)")
        return self

    @property
    def resolved_name(self) -> str:
        if self.creative_asset_name:
            return self.creative_asset_name
        if self.source_url:
            return self.source_url.rstrip("/").split("/")[-1].split("?")[0]
        return "creative_asset"
