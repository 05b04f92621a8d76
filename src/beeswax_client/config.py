"""Configuration management for the Beeswax client.

Loads credentials from .env and named API profiles from profiles.yaml.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from beeswax_client.models.auth import Credentials
from beeswax_client.resources.compat import SCHEMA_MODES, SchemaMode
from beeswax_client.transport import RetryPolicy
from beeswax_client.utils.errors import ConfigurationError

DEFAULT_PROFILE = "default"


class ClientOptions(BaseModel):
    """Everything `BeeswaxClient` needs to talk to one API root."""
    api_root: str = ""
    creds: Credentials = Field(default_factory=Credentials)
    timeout: float = 30.0
    retry: RetryPolicy | None = None
    schema_mode: SchemaMode = "legacy"
    pacing_delay: float = 0.1


class ApiProfile(BaseModel):
    """A named API environment (buzz key host) from profiles.yaml."""
    api_root: str
    schema_mode: SchemaMode = "legacy"
    description: str = ""


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    email: str = Field(default="", description="Beeswax login email")
    password: str = Field(default="", description="Beeswax login password")
    api_root: str = Field(default="", description="API root; overrides the profile's")
    profile: str = Field(default=DEFAULT_PROFILE, description="Profile name in profiles.yaml")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    retries: int = Field(default=3, description="Retries for transient failures")
    schema_mode: str = Field(default="", description="legacy or current; overrides the profile's")
    pacing_delay: float = Field(default=0.1, description="Seconds between dependent macro calls")


class Config(BaseModel):
    """Full application configuration."""
    settings: Settings
    profiles: dict[str, ApiProfile] = {}

    def get_profile(self, name: str | None = None) -> ApiProfile | None:
        """Get a profile by name; None if no profiles are configured and no name was asked for."""
        name = (name or self.settings.profile).lower()
        if name in self.profiles:
            return self.profiles[name]
        if not self.profiles or (name == DEFAULT_PROFILE and self.settings.api_root):
            return None
        available = ", ".join(sorted(self.profiles))
        raise ConfigurationError(f"Unknown profile '{name}'. Available: {available}")

    def client_options(self, profile: str | None = None) -> ClientOptions:
        """Build client options from settings, falling back to the profile."""
        api_profile = self.get_profile(profile)
        api_root = self.settings.api_root or (api_profile.api_root if api_profile else "")
        schema_mode = self.settings.schema_mode or (
            api_profile.schema_mode if api_profile else "legacy"
        )
        if schema_mode not in SCHEMA_MODES:
            raise ConfigurationError(
                f"Unknown schema mode '{schema_mode}'. Use one of: {', '.join(SCHEMA_MODES)}"
            )
        return ClientOptions(
            api_root=api_root,
            creds=Credentials(email=self.settings.email, password=self.settings.password),
            timeout=self.settings.timeout,
            retry=RetryPolicy(retries=self.settings.retries),
            schema_mode=schema_mode,
            pacing_delay=self.settings.pacing_delay,
        )

    @property
    def all_profiles(self) -> list[str]:
        """List all configured profile names."""
        return sorted(self.profiles)


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "profiles.yaml").exists():
            return parent
    return Path.cwd()


def _load_profiles(project_root: Path) -> dict[str, ApiProfile]:
    """Load API profiles from profiles.yaml; none if the file is absent."""
    profiles_path = project_root / "config" / "profiles.yaml"
    if not profiles_path.exists():
        return {}

    with open(profiles_path) as f:
        data = yaml.safe_load(f) or {}

    return {
        name.lower(): ApiProfile(**profile_data)
        for name, profile_data in (data.get("profiles") or {}).items()
    }


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _load_settings() -> Settings:
    """Load settings from environment variables.

    The BEESWAX_TEST_* names used by the integration environment are accepted
    as fallbacks for the credentials.
    """
    return Settings(
        email=_env("BEESWAX_EMAIL", "BEESWAX_TEST_EMAIL"),
        password=_env("BEESWAX_PASSWORD", "BEESWAX_TEST_PASSWORD"),
        api_root=_env("BEESWAX_API_ROOT"),
        profile=_env("BEESWAX_PROFILE", default=DEFAULT_PROFILE),
        timeout=float(_env("BEESWAX_TIMEOUT", default="30")),
        retries=int(_env("BEESWAX_RETRIES", default="3")),
        schema_mode=_env("BEESWAX_SCHEMA_MODE").lower(),
        pacing_delay=float(_env("BEESWAX_PACING_DELAY", default="0.1")),
    )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache the full application configuration."""
    project_root = _find_project_root()

    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Config(settings=_load_settings(), profiles=_load_profiles(project_root))
