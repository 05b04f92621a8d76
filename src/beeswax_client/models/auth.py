"""Auth-related data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Credentials(BaseModel):
    """Login credentials posted to /rest/authenticate."""
    email: str = ""
    password: str = ""


class SessionStatus(BaseModel):
    """Current state of the session cookie jar."""
    has_session: bool
    cookie_names: list[str] = []
    authenticated_at: datetime | None = None
    login_in_flight: bool = False
