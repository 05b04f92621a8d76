"""Shared fixtures for the beeswax-client test suite."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import ApiProfile, ClientOptions, Config, Settings
from beeswax_client.models.auth import Credentials
from beeswax_client.transport import RetryPolicy
from fake_api import API_ROOT, FakeBeeswaxApi


def no_delay(attempt: int) -> float:
    return 0.0


@pytest.fixture
def fake_settings() -> Settings:
    return Settings(
        email="buyer@example.com",
        password="s3cret",
        profile="default",
        timeout=5.0,
        retries=2,
        pacing_delay=0.0,
    )


@pytest.fixture
def fake_profiles() -> dict[str, ApiProfile]:
    return {
        "default": ApiProfile(api_root=API_ROOT, schema_mode="legacy"),
        "sandbox": ApiProfile(api_root="https://sandbox.api.beeswax.com", schema_mode="current"),
    }


@pytest.fixture
def fake_config(fake_settings, fake_profiles) -> Config:
    return Config(settings=fake_settings, profiles=fake_profiles)


@pytest.fixture
def options() -> ClientOptions:
    return ClientOptions(
        api_root=API_ROOT,
        creds=Credentials(email="buyer@example.com", password="s3cret"),
        timeout=5.0,
        retry=RetryPolicy(retries=2, retry_delay=no_delay),
        pacing_delay=0.0,
    )


@pytest.fixture
def fake_api() -> FakeBeeswaxApi:
    return FakeBeeswaxApi()


@pytest_asyncio.fixture
async def client(options, fake_api):
    """BeeswaxClient (legacy schema) talking to the in-memory API."""
    async with BeeswaxClient(options, http_transport=fake_api.transport()) as c:
        yield c


@pytest_asyncio.fixture
async def current_client(options, fake_api):
    """BeeswaxClient on the current schema."""
    current = options.model_copy(update={"schema_mode": "current"})
    async with BeeswaxClient(current, http_transport=fake_api.transport()) as c:
        yield c


@pytest.fixture
def mock_client():
    """MagicMock standing in for BeeswaxClient in CLI tests."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client
