"""Option and result models for campaign macros."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TargetingTemplateCreationOptions(BaseModel):
    targeting_template_name: str
    targeting: dict[str, Any] | None = None


class CreativeCreationOptions(BaseModel):
    name: str | None = None
    creative_name: str | None = None
    type: str | int | None = None
    creative_type: str | int | None = None
    creative_template_id: int = 1
    width: int | None = None
    height: int | None = None
    attributes: dict[str, Any] | None = None
    creative_attributes: dict[str, Any] | None = None
    asset_url: str | None = None
    click_url: str = "https://example.com"
    weighting: int = 100

    @property
    def resolved_name(self) -> str | None:
        return self.name or self.creative_name

    @property
    def resolved_type(self) -> str | int:
        for value in (self.type, self.creative_type):
            if value is not None:
                return value
        return "display"


class LineItemCreationOptions(BaseModel):
    name: str | None = None
    line_item_name: str | None = None
    budget: float | None = None
    line_item_budget: float | None = None
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
    creatives: list[CreativeCreationOptions] = []

    @property
    def resolved_name(self) -> str | None:
        return self.name or self.line_item_name


class CampaignCreationOptions(BaseModel):
    advertiser_id: int
    name: str | None = None
    campaign_name: str | None = None
    budget: int | float | None = None
    campaign_budget: int | float | None = None
    budget_type: int | str | None = None
    start_date: str | None = None
    end_date: str | None = None
    currency: str | None = None
    line_items: list[LineItemCreationOptions] = []
    targeting_templates: list[TargetingTemplateCreationOptions] = []


class CloneOptions(BaseModel):
    start_date: str | None = None
    end_date: str | None = None
    budget_multiplier: float | None = None
    clone_creatives: bool | None = None


class BulkLineItem(BaseModel):
    name: str
    budget: float
    bid_price: float | None = None
    targeting: dict[str, Any] | None = None


class FullCampaignResult(BaseModel):
    """Every sub-entity a macro managed to create, plus what it skipped."""

    campaign: dict[str, Any]
    line_items: list[dict[str, Any]] = []
    creatives: list[dict[str, Any]] = []
    creative_line_items: list[dict[str, Any]] = []
    targeting_templates: list[dict[str, Any]] = []
    skipped: list[str] = Field(default_factory=list)


class BulkStatusResult(BaseModel):
    updated: int = 0
    failed: int = 0


class TreeDeletionResult(BaseModel):
    creative_line_items: int = 0
    line_items: int = 0
    campaign: bool = False
