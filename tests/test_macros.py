"""Tests for macros/campaigns.py — multi-entity workflows."""
from __future__ import annotations

import logging

import pytest

from beeswax_client.models.macros import (
    BulkStatusResult,
    CampaignCreationOptions,
    CloneOptions,
    FullCampaignResult,
)


def _full_options(**overrides) -> dict:
    options = {
        "advertiser_id": 9,
        "name": "Launch",
        "budget": 10000,
        "start_date": "2024-05-01 00:00:00",
        "end_date": "2024-05-31 23:59:59",
        "line_items": [
            {
                "name": "A",
                "budget": 4000,
                "bid_price": 2.0,
                "creatives": [{"name": "A-banner", "width": 300, "height": 250}],
            },
            {"name": "B", "budget": 6000, "bid_price": -1},
        ],
    }
    options.update(overrides)
    return options


# ── create_full_campaign ─────────────────────────────────────────────

@pytest.mark.asyncio
async def test_full_campaign_skips_invalid_line_item(client, fake_api, caplog):
    with caplog.at_level(logging.WARNING, logger="beeswax_client.macros.campaigns"):
        response = await client.macros.create_full_campaign(_full_options())

    assert response.success is True
    result = response.payload
    assert isinstance(result, FullCampaignResult)
    assert result.campaign["campaign_name"] == "Launch"
    assert [li["line_item_name"] for li in result.line_items] == ["A"]
    assert len(result.skipped) == 1
    assert "'B'" in result.skipped[0]
    assert "Skipped line_item 'B'" in caplog.text


@pytest.mark.asyncio
async def test_full_campaign_creates_inactive_structure(client, fake_api):
    response = await client.macros.create_full_campaign(
        CampaignCreationOptions.model_validate(_full_options())
    )

    result = response.payload
    campaign = fake_api.records("campaign")[0]
    assert campaign["active"] is False
    assert campaign["campaign_budget"] == 10000
    assert campaign["budget_type"] == 2

    line_item = fake_api.records("line_item")[0]
    assert line_item["active"] is False
    assert line_item["campaign_id"] == campaign["campaign_id"]
    assert line_item["start_date"] == "2024-05-01 00:00:00"

    creative = fake_api.records("creative")[0]
    assert creative["active"] is False
    assert creative["creative_name"] == "A-banner"
    assert creative["creative_type"] == 0
    assert creative["advertiser_id"] == 9

    association = fake_api.records("creative_line_item")[0]
    assert association == {
        "cli_id": association["cli_id"],
        "creative_id": creative["creative_id"],
        "line_item_id": line_item["line_item_id"],
        "active": True,
        "weighting": 100,
        "created_date": "2024-01-01 00:00:00",
    }
    assert len(result.creatives) == 1
    assert len(result.creative_line_items) == 1


@pytest.mark.asyncio
async def test_full_campaign_keeps_whole_budget_integral(client, fake_api):
    options = CampaignCreationOptions.model_validate(_full_options(line_items=[]))
    assert isinstance(options.budget, int)

    await client.macros.create_full_campaign(options)

    sent = fake_api.bodies("POST", "/rest/campaign/strict")[-1]
    assert sent["campaign_budget"] == 10000
    assert isinstance(sent["campaign_budget"], int)


@pytest.mark.asyncio
async def test_full_campaign_single_line_item(client, fake_api):
    options = _full_options(line_items=[{"line_item_name": "Only", "line_item_budget": 100}])

    response = await client.macros.create_full_campaign(options)

    assert response.success is True
    assert len(response.payload.line_items) == 1
    assert response.payload.skipped == []


@pytest.mark.asyncio
async def test_full_campaign_targeting_templates_are_skipped(client, fake_api):
    options = _full_options(
        line_items=[],
        targeting_templates=[{"targeting_template_name": "geo", "targeting": {"geo": ["US"]}}],
    )

    response = await client.macros.create_full_campaign(options)

    assert response.success is True
    assert response.payload.targeting_templates == []
    assert response.payload.skipped[0].startswith("targeting_template 'geo'")


@pytest.mark.asyncio
async def test_full_campaign_asset_upload_failure_is_not_fatal(client, fake_api):
    options = _full_options(line_items=[{
        "name": "A",
        "budget": 100,
        "creatives": [{"name": "hero", "asset_url": "https://cdn.example.com/missing.png"}],
    }])

    response = await client.macros.create_full_campaign(options)

    assert response.success is True
    assert len(response.payload.creatives) == 1
    assert "creative_asset_id" not in fake_api.records("creative")[0]


@pytest.mark.asyncio
async def test_full_campaign_attaches_uploaded_asset(client, fake_api):
    url = "https://cdn.example.com/hero.png"
    fake_api.external[url] = b"image"
    options = _full_options(line_items=[{
        "name": "A",
        "budget": 100,
        "creatives": [{"name": "hero", "type": "video", "asset_url": url, "weighting": 40}],
    }])

    response = await client.macros.create_full_campaign(options)

    asset = fake_api.records("creative_asset")[0]
    creative = fake_api.records("creative")[0]
    assert creative["creative_asset_id"] == asset["creative_asset_id"]
    assert creative["creative_type"] == 1
    assert response.payload.creative_line_items[0]["weighting"] == 40


@pytest.mark.asyncio
async def test_full_campaign_fails_when_campaign_fails(client, fake_api):
    await client.authenticate()
    fake_api.fail("POST", "/rest/campaign/strict", status=400, message="advertiser_id is invalid")

    response = await client.macros.create_full_campaign(_full_options())

    assert response.success is False
    assert "advertiser_id is invalid" in response.message
    assert response.errors
    assert fake_api.records("line_item") == []


@pytest.mark.asyncio
async def test_full_campaign_invalid_options(client):
    response = await client.macros.create_full_campaign({"name": "no advertiser"})

    assert response.success is False
    assert response.errors


# ── clone_campaign ───────────────────────────────────────────────────

def _seed_source(fake_api, **line_item_fields) -> tuple[dict, dict]:
    campaign = fake_api.seed(
        "campaign",
        campaign_id=10,
        advertiser_id=9,
        campaign_name="Original",
        campaign_budget=10000,
        budget_type=2,
        active=True,
        start_date="2024-01-01 00:00:00",
        created_date="2023-12-01 00:00:00",
    )
    line_item = fake_api.seed(
        "line_item",
        line_item_id=20,
        campaign_id=10,
        advertiser_id=9,
        line_item_name="Original LI",
        line_item_budget=5000,
        active=True,
        line_item_spend=123,
        **line_item_fields,
    )
    fake_api.seed("creative_line_item", cli_id=30, line_item_id=20, creative_id=77, weighting=50, active=True)
    return campaign, line_item


@pytest.mark.asyncio
async def test_clone_with_budget_multiplier(client, fake_api):
    _seed_source(fake_api)

    response = await client.macros.clone_campaign(10, "Copy", CloneOptions(budget_multiplier=1.5))

    assert response.success is True
    result = response.payload
    assert result.campaign["campaign_id"] != 10
    assert result.campaign["campaign_name"] == "Copy"
    assert result.campaign["campaign_budget"] == 15000
    assert "created_date" not in fake_api.bodies("POST", "/rest/campaign/strict")[-1]

    new_line_item = result.line_items[0]
    assert new_line_item["line_item_id"] != 20
    assert new_line_item["campaign_id"] == result.campaign["campaign_id"]
    assert new_line_item["line_item_budget"] == 7500
    assert "line_item_spend" not in fake_api.bodies("POST", "/rest/line_item/strict")[-1]


@pytest.mark.asyncio
async def test_clone_copies_associations_then_activates(client, fake_api):
    _seed_source(fake_api)

    response = await client.macros.clone_campaign(10, "Copy")

    result = response.payload
    new_line_item_id = result.line_items[0]["line_item_id"]
    created_li = fake_api.bodies("POST", "/rest/line_item/strict")[-1]
    assert created_li["active"] is False
    assert result.line_items[0]["active"] is True

    association = result.creative_line_items[0]
    assert association["creative_id"] == 77
    assert association["line_item_id"] == new_line_item_id
    assert association["weighting"] == 50

    # Associations exist before the line item is switched on
    order = [(m, p) for m, p, _ in fake_api.calls if m in ("POST", "PUT")]
    assert order.index(("POST", "/rest/creative_line_item/strict")) < order.index(("PUT", "/rest/line_item/strict"))


@pytest.mark.asyncio
async def test_clone_without_creatives(client, fake_api):
    _seed_source(fake_api)

    response = await client.macros.clone_campaign(
        10, "Copy", {"clone_creatives": False, "start_date": "2024-06-01 00:00:00"}
    )

    assert response.payload.creative_line_items == []
    assert len(fake_api.records("creative_line_item")) == 1
    assert response.payload.campaign["start_date"] == "2024-06-01 00:00:00"


@pytest.mark.asyncio
async def test_clone_current_schema_names(current_client, fake_api):
    _seed_source(fake_api)

    response = await current_client.macros.clone_campaign(10, "Copy", {"budget_multiplier": 0.5})

    sent = fake_api.bodies("POST", "/rest/campaign/strict")[-1]
    assert sent["name"] == "Copy"
    assert sent["budget"] == 5000
    assert "campaign_name" not in sent
    line_item = fake_api.bodies("POST", "/rest/v2/line-items")[-1]
    assert line_item["spend_budget"]["lifetime"] == "2500"
    assert response.success is True


@pytest.mark.asyncio
async def test_clone_keeps_spend_budget_caps(client, fake_api):
    _seed_source(fake_api, spend_budget={"lifetime": "5000", "daily": "100", "include_fees": False})

    response = await client.macros.clone_campaign(10, "Copy", {"budget_multiplier": 1.5})

    assert response.success is True
    sent = fake_api.bodies("POST", "/rest/line_item/strict")[-1]
    assert sent["line_item_budget"] == 7500
    assert sent["spend_budget"] == {"lifetime": "7500", "daily": "100", "include_fees": False}


@pytest.mark.asyncio
async def test_clone_current_schema_sends_only_spend_budget(current_client, fake_api):
    _seed_source(fake_api, spend_budget={"lifetime": "5000", "daily": "100", "include_fees": False})

    response = await current_client.macros.clone_campaign(10, "Copy", {"budget_multiplier": 1.5})

    assert response.success is True
    sent = fake_api.bodies("POST", "/rest/v2/line-items")[-1]
    assert "budget" not in sent
    assert "line_item_budget" not in sent
    assert sent["spend_budget"] == {"lifetime": "7500", "daily": "100", "include_fees": False}


@pytest.mark.asyncio
async def test_clone_missing_source_fails(client, fake_api):
    response = await client.macros.clone_campaign(404, "Copy")

    assert response.success is False
    assert "404" in response.message
    assert fake_api.count("POST", "/rest/campaign/strict") == 0


# ── bulk operations ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_bulk_status_counts_partial_failure(client, fake_api):
    fake_api.seed("campaign", campaign_id=1, active=True)

    response = await client.macros.bulk_update_campaign_status([1, 2], active=False)

    assert response.success is True
    assert response.payload == BulkStatusResult(updated=1, failed=1)
    assert fake_api.tables["campaign"][1]["active"] is False


@pytest.mark.asyncio
async def test_bulk_status_counts_raised_errors(client, fake_api):
    await client.authenticate()
    fake_api.fail("PUT", "/rest/campaign/strict", status=400, message="locked")

    response = await client.macros.bulk_update_campaign_status([3], active=True)

    assert response.success is True
    assert response.payload.failed == 1


@pytest.mark.asyncio
async def test_bulk_create_line_items(client, fake_api):
    fake_api.seed("campaign", campaign_id=5, advertiser_id=9)

    response = await client.macros.bulk_create_line_items(5, [
        {"name": "one", "budget": 10},
        {"name": "two", "budget": 20, "bid_price": 1.25},
    ])

    assert response.success is True
    assert [li["line_item_name"] for li in response.payload] == ["one", "two"]
    assert all(li["active"] is False for li in fake_api.records("line_item"))


@pytest.mark.asyncio
async def test_bulk_create_line_items_reports_errors(client, fake_api):
    fake_api.seed("campaign", campaign_id=5, advertiser_id=9)

    response = await client.macros.bulk_create_line_items(5, [
        {"name": "good", "budget": 10},
        {"name": "bad", "budget": 10, "bid_price": 0},
        {"name": "also-good", "budget": 10},
    ])

    assert response.success is False
    assert len(response.payload) == 2
    assert len(response.errors) == 1
    assert "bad" in response.errors[0]


@pytest.mark.asyncio
async def test_bulk_create_line_items_malformed_entry_is_reported(client, fake_api):
    fake_api.seed("campaign", campaign_id=5, advertiser_id=9)

    response = await client.macros.bulk_create_line_items(5, [{"name": "a", "budget": 1}, None, {"budget": 2}])

    assert response.success is False
    assert [li["line_item_name"] for li in response.payload] == ["a"]
    assert len(response.errors) == 2
    assert "#2" in response.errors[0]
    assert "#3" in response.errors[1]


@pytest.mark.asyncio
async def test_bulk_create_line_items_lookup_error_is_a_failure(client, fake_api):
    await client.authenticate()
    fake_api.fail("GET", "/rest/campaign", status=400, message="campaign lookup rejected")

    response = await client.macros.bulk_create_line_items(5, [{"name": "a", "budget": 1}])

    assert response.success is False
    assert "campaign lookup rejected" in response.message
    assert response.errors
    assert fake_api.records("line_item") == []


@pytest.mark.asyncio
async def test_bulk_create_line_items_missing_campaign(client, fake_api):
    response = await client.macros.bulk_create_line_items(99, [{"name": "x", "budget": 1}])

    assert response.success is False
    assert response.code == 404
    assert fake_api.records("line_item") == []


# ── get_campaign_performance ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_campaign_performance_requests_report(client, fake_api):
    fake_api.seed("campaign", campaign_id=8, advertiser_id=9)

    response = await client.macros.get_campaign_performance(8, "2024-01-01", "2024-01-31")

    assert response.success is True
    report = fake_api.records("report")[0]
    assert report["advertiser_id"] == 9
    assert report["report_name"] == "Campaign 8 Performance"
    assert report["filters"] == {"campaign_id": 8}
    assert report["metrics"] == ["impressions", "clicks", "conversions", "spend"]
    assert response.payload["report_id"] == report["report_id"]


@pytest.mark.asyncio
async def test_campaign_performance_missing_campaign(client):
    response = await client.macros.get_campaign_performance(8, "2024-01-01", "2024-01-31")

    assert response.success is False
    assert response.code == 404
