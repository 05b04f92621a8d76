"""Async client for the Beeswax DSP REST API."""

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import ClientOptions
from beeswax_client.models.envelope import BeeswaxResponse

__all__ = ["BeeswaxClient", "BeeswaxResponse", "ClientOptions"]
__version__ = "0.1.0"
