"""Tests for client.py — construction and cross-resource helpers."""
from __future__ import annotations

import pytest

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import ClientOptions
from beeswax_client.models.auth import Credentials
from beeswax_client.models.requests import LineItemParams, UploadCreativeAssetParams
from beeswax_client.utils.errors import BeeswaxError, ConfigurationError, NotFoundError
from fake_api import API_ROOT


# ── Construction ─────────────────────────────────────────────────────

def test_missing_credentials_raise():
    with pytest.raises(ConfigurationError, match="credentials"):
        BeeswaxClient(ClientOptions(api_root=API_ROOT, creds=Credentials(email="a@b.c")))


def test_missing_api_root_raises():
    with pytest.raises(ConfigurationError, match="api root"):
        BeeswaxClient(ClientOptions(creds=Credentials(email="a@b.c", password="p")))


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        BeeswaxClient()


def test_keyword_options():
    c = BeeswaxClient(api_root=API_ROOT, creds=Credentials(email="a@b.c", password="p"))
    assert c.options.api_root == API_ROOT
    assert c.campaigns.schema_mode == "legacy"


@pytest.mark.asyncio
async def test_request_returns_envelope(client):
    response = await client.request("GET", "/rest/account")
    assert response.success is True
    assert response.payload["account_name"] == "Example Account"


# ── create_line_item ─────────────────────────────────────────────────

def _seed_campaign(fake_api, **overrides):
    fields = {
        "campaign_id": 500,
        "advertiser_id": 9,
        "campaign_name": "Parent",
        "currency": "EUR",
        "start_date": "2024-03-01 00:00:00",
        "end_date": "2024-03-31 23:59:59",
    }
    fields.update(overrides)
    return fake_api.seed("campaign", **fields)


@pytest.mark.asyncio
async def test_create_line_item_legacy_body(client, fake_api):
    _seed_campaign(fake_api)

    response = await client.create_line_item(
        LineItemParams(campaign_id=500, name="Prospecting", budget=1000, bid_price=2.5)
    )

    assert response.success is True
    sent = fake_api.bodies("POST", "/rest/line_item/strict")[-1]
    assert sent["line_item_name"] == "Prospecting"
    assert sent["line_item_budget"] == 1000
    assert sent["line_item_type_id"] == 0
    assert sent["bidding"]["bidding_strategy"] == "CPM_PACED"
    assert sent["bidding"]["values"] == {"cpm_bid": 2.5}
    assert sent["advertiser_id"] == 9
    assert sent["currency"] == "EUR"
    assert sent["start_date"] == "2024-03-01 00:00:00"
    assert sent["end_date"] == "2024-03-31 23:59:59"
    assert sent["active"] is False
    assert "name" not in sent
    assert response.payload["line_item_id"] is not None


@pytest.mark.asyncio
async def test_create_line_item_current_body(current_client, fake_api):
    _seed_campaign(fake_api, currency=None)

    response = await current_client.create_line_item(
        {"campaign_id": 500, "line_item_name": "Retargeting", "line_item_budget": 200}
    )

    assert response.success is True
    sent = fake_api.bodies("POST", "/rest/v2/line-items")[-1]
    assert sent["name"] == "Retargeting"
    assert sent["type"] == "banner"
    assert sent["spend_budget"] == {"lifetime": "200.0", "include_fees": True}
    assert sent["bidding"]["strategy"] == "CPM"
    assert sent["bidding"]["values"] == {"cpm_bid": 3}
    assert sent["currency"] == "USD"


@pytest.mark.asyncio
async def test_create_line_item_overrides_dates(client, fake_api):
    _seed_campaign(fake_api)

    await client.create_line_item(
        LineItemParams(campaign_id=500, name="li", budget=1, end_date="2024-03-15 00:00:00", active=True)
    )

    sent = fake_api.bodies("POST", "/rest/line_item/strict")[-1]
    assert sent["end_date"] == "2024-03-15 00:00:00"
    assert sent["active"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("bid", [0, -1.5])
async def test_create_line_item_invalid_bid(client, fake_api, bid):
    _seed_campaign(fake_api)

    response = await client.create_line_item(
        LineItemParams(campaign_id=500, name="li", budget=1, bid_price=bid)
    )

    assert response.success is False
    assert response.code == 400
    assert fake_api.calls == []


@pytest.mark.asyncio
async def test_create_line_item_missing_campaign(client, fake_api):
    with pytest.raises(NotFoundError):
        await client.create_line_item(LineItemParams(campaign_id=1, name="li", budget=1))
    assert fake_api.count("POST", "/rest/line_item/strict") == 0


def test_line_item_params_require_name():
    with pytest.raises(ValueError):
        LineItemParams(campaign_id=1, budget=1)


# ── upload_creative_asset ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_upload_creative_asset_from_url(client, fake_api):
    url = "https://cdn.example.com/img/banner-300x250.png?v=2"
    content = b"\x89PNG-bytes"
    fake_api.external[url] = content

    asset = await client.upload_creative_asset({"advertiser_id": 9, "sourceUrl": url})

    created = fake_api.bodies("POST", "/rest/creative_asset")[-1]
    assert created == {
        "advertiser_id": 9,
        "creative_asset_name": "banner-300x250.png",
        "size_in_bytes": len(content),
        "active": True,
    }
    asset_id = asset["creative_asset_id"]
    assert content in fake_api.uploads[asset_id]
    assert asset["path_to_asset"] == f"/assets/{asset_id}"


@pytest.mark.asyncio
async def test_upload_creative_asset_from_content(client, fake_api):
    asset = await client.upload_creative_asset(
        UploadCreativeAssetParams(advertiser_id=9, content=b"abc", creative_asset_name="logo.png")
    )

    created = fake_api.bodies("POST", "/rest/creative_asset")[-1]
    assert created["size_in_bytes"] == 3
    assert created["creative_asset_name"] == "logo.png"
    assert asset["creative_asset_name"] == "logo.png"


def test_upload_requires_source():
    with pytest.raises(ValueError):
        UploadCreativeAssetParams(advertiser_id=9)


@pytest.mark.asyncio
async def test_upload_failure_raises(client, fake_api):
    await client.authenticate()
    fake_api.fail("POST", "/rest/creative_asset", status=500, message="storage down")

    with pytest.raises(BeeswaxError):
        await client.upload_creative_asset({"advertiser_id": 9, "content": b"abc"})


@pytest.mark.asyncio
async def test_upload_missing_source_content_raises(client, fake_api):
    with pytest.raises(BeeswaxError):
        await client.upload_creative_asset(
            {"advertiser_id": 9, "source_url": "https://cdn.example.com/gone.png"}
        )


# ── delete_campaign_tree ─────────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_campaign_tree(client, fake_api):
    _seed_campaign(fake_api)
    li = fake_api.seed("line_item", campaign_id=500)
    fake_api.seed("line_item", campaign_id=500)
    fake_api.seed("creative_line_item", line_item_id=li["line_item_id"], creative_id=1)
    other = fake_api.seed("line_item", campaign_id=501)

    response = await client.delete_campaign_tree(500)

    assert response.success is True
    assert response.payload.creative_line_items == 1
    assert response.payload.line_items == 2
    assert response.payload.campaign is True
    assert fake_api.records("campaign") == []
    assert fake_api.records("line_item") == [other]
    assert fake_api.records("creative_line_item") == []
