"""Beeswax API client.

Wires transport, session, resources and macros together and hosts the helper
operations that span more than one resource.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from beeswax_client.config import ClientOptions
from beeswax_client.macros.campaigns import CampaignMacros
from beeswax_client.models.entities import Campaign, CreativeAsset
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.requests import LineItemParams, UploadCreativeAssetParams
from beeswax_client.resources.base import Resource
from beeswax_client.resources.line_items import build_line_item_body, validate_bid
from beeswax_client.resources.registry import (
    ADVERTISER,
    CAMPAIGN,
    CREATIVE,
    CREATIVE_ASSET,
    CREATIVE_LINE_ITEM,
    LINE_ITEM,
    REPORT,
    SEGMENT,
    TARGETING_TEMPLATE,
)
from beeswax_client.session import SessionManager
from beeswax_client.transport import SessionContext, Transport
from beeswax_client.utils.errors import BeeswaxError, ConfigurationError, NotFoundError
from beeswax_client.utils.records import clean_record, records_of

logger = logging.getLogger(__name__)


class BeeswaxClient:
    """Async client for the Beeswax API.

    Usage:
        async with BeeswaxClient(options) as client:
            campaign = await client.campaigns.find(42)
            result = await client.macros.clone_campaign(42, "Copy")
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
        verbose: bool = False,
        **kwargs: Any,
    ) -> None:
        options = options or ClientOptions(**kwargs)
        if not options.creds.email or not options.creds.password:
            raise ConfigurationError("Must provide credentials with email + password")
        if not options.api_root:
            raise ConfigurationError(
                "Must provide api root (e.g., https://example.api.beeswax.com)"
            )
        self._options = options

        self._transport = Transport(
            options.api_root,
            SessionContext(),
            timeout=options.timeout,
            retry=options.retry,
            http_transport=http_transport,
            verbose=verbose,
        )
        self._session = SessionManager(self._transport, options.creds)

        mode = options.schema_mode
        self.advertisers = Resource(self._session, ADVERTISER, mode)
        self.campaigns = Resource(self._session, CAMPAIGN, mode)
        self.line_items = Resource(self._session, LINE_ITEM, mode)
        self.creatives = Resource(self._session, CREATIVE, mode)
        self.creative_line_items = Resource(self._session, CREATIVE_LINE_ITEM, mode)
        self.targeting_templates = Resource(self._session, TARGETING_TEMPLATE, mode)
        self.creative_assets = Resource(self._session, CREATIVE_ASSET, mode)
        self.segments = Resource(self._session, SEGMENT, mode)
        self.reports = Resource(self._session, REPORT, mode)

        self.macros = CampaignMacros(self, pacing_delay=options.pacing_delay)

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def session(self) -> SessionManager:
        return self._session

    async def __aenter__(self) -> "BeeswaxClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._transport.close()

    async def authenticate(self) -> None:
        """Log in (or join the login already in flight)."""
        await self._session.authenticate()

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> BeeswaxResponse:
        """Raw authenticated request returning the API envelope."""
        data = await self._session.request(method, path, body=body, params=params, headers=headers)
        return BeeswaxResponse.from_envelope(data)

    async def get_current_user(self) -> BeeswaxResponse:
        return await self.request("GET", "/rest/user/current")

    async def get_account_info(self) -> BeeswaxResponse:
        return await self.request("GET", "/rest/account")

    async def create_line_item(self, params: LineItemParams | dict[str, Any]) -> BeeswaxResponse:
        """Create a line item that inherits advertiser, currency and dates from its campaign.

        The line item is created inactive unless `active` is passed.

        Raises:
            NotFoundError: The campaign does not exist.
        """
        if not isinstance(params, LineItemParams):
            params = LineItemParams.model_validate(params)

        problem = validate_bid(params.resolved_bid)
        if problem:
            return BeeswaxResponse.failure(problem, code=400)

        campaign_response = await self.campaigns.find(params.campaign_id)
        if not campaign_response.success or not campaign_response.payload:
            raise NotFoundError(
                f"Campaign {params.campaign_id} not found",
                "GET", CAMPAIGN.path, status_code=404,
            )
        campaign = Campaign.model_validate(campaign_response.payload)

        body = build_line_item_body(params, campaign, self.line_items.schema_mode)
        return await self.line_items.create(body)

    async def upload_creative_asset(
        self, params: UploadCreativeAssetParams | dict[str, Any]
    ) -> dict[str, Any]:
        """Create a creative asset record and upload its binary content.

        Returns:
            The asset record re-fetched after the upload.

        Raises:
            BeeswaxError: The asset could not be created, uploaded or re-fetched.
        """
        if not isinstance(params, UploadCreativeAssetParams):
            params = UploadCreativeAssetParams.model_validate(params)

        name = params.resolved_name
        size = params.size_in_bytes
        if size is None:
            if params.content is not None:
                size = len(params.content)
            else:
                size = await self._transport.probe_size(params.source_url)

        asset_def = clean_record({
            "advertiser_id": params.advertiser_id,
            "creative_asset_name": name,
            "notes": params.notes,
            "size_in_bytes": size,
            "active": params.active,
        })
        created = await self._session.request("POST", CREATIVE_ASSET.path, body=asset_def)
        asset_id = next(
            (r.get("id") or r.get(CREATIVE_ASSET.id_field) for r in records_of(created.get("payload"))),
            None,
        )
        if not asset_id:
            raise BeeswaxError("Failed to create creative asset", body=created)

        content = params.content
        if content is None:
            content = await self._transport.fetch_external(params.source_url)

        await self._session.request(
            "POST",
            f"{CREATIVE_ASSET.path}/upload/{asset_id}",
            files={"creative_content": (name, content)},
        )

        asset_response = await self.creative_assets.find(asset_id)
        if not asset_response.success or not asset_response.payload:
            raise BeeswaxError(f"Failed to retrieve uploaded creative asset {asset_id}")
        asset = CreativeAsset.model_validate(asset_response.payload)
        logger.info(f"Uploaded creative asset {asset.creative_asset_id} ({size or 0} bytes)")
        return asset_response.payload

    async def delete_campaign_tree(self, campaign_id: int) -> BeeswaxResponse:
        """Delete a campaign with its line items and creative associations."""
        return await self.macros.delete_campaign_tree(campaign_id)
