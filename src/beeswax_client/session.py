"""Cookie-session authentication for the Beeswax API.

One login at a time per client, and one transparent re-login per request
when the session has expired.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from beeswax_client.models.auth import Credentials, SessionStatus
from beeswax_client.transport import SessionContext, Transport
from beeswax_client.utils.errors import ApiError, AuthenticationError, UnauthorizedError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/rest/authenticate"

__all__ = ["LOGIN_PATH", "SessionContext", "SessionManager"]


class SessionManager:
    """Owns the authenticated session of one client instance."""

    def __init__(self, transport: Transport, credentials: Credentials) -> None:
        self._transport = transport
        self._credentials = credentials
        self._inflight: asyncio.Task[None] | None = None

    @property
    def context(self) -> SessionContext:
        return self._transport.context

    async def authenticate(self) -> None:
        """Log in, or join the login already in flight.

        Raises:
            AuthenticationError: The API rejected the credentials.
        """
        if self._inflight is not None:
            return await self._inflight

        self._inflight = asyncio.ensure_future(self._login())
        try:
            await self._inflight
        finally:
            self._inflight = None

    async def _login(self) -> None:
        try:
            await self._transport.send(
                "POST",
                LOGIN_PATH,
                body={
                    "email": self._credentials.email,
                    "password": self._credentials.password,
                    "keep_logged_in": True,
                },
                retry=False,
            )
        except ApiError as e:
            raise AuthenticationError(
                f"Authentication failed (HTTP {e.status_code}): {e.body}",
                status_code=e.status_code,
                body=e.body,
            ) from e

        if not self.context.active:
            logger.warning("Login succeeded but the response carried no session cookie")
        self.context.mark_authenticated()

    async def request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request, re-authenticating and replaying once on HTTP 401.

        A second 401 propagates as UnauthorizedError.
        """
        try:
            return await self._transport.send(method, path, **kwargs)
        except UnauthorizedError:
            logger.warning(f"Got 401 on {method} {path}, re-authenticating and retrying...")
            await self.authenticate()
        return await self._transport.send(method, path, **kwargs)

    def status(self) -> SessionStatus:
        """Get the current session status."""
        return SessionStatus(
            has_session=self.context.active,
            cookie_names=self.context.cookie_names,
            authenticated_at=self.context.authenticated_at,
            login_in_flight=self._inflight is not None,
        )

    def logout(self) -> None:
        """Forget the local session; the next request will log in again."""
        self.context.clear()
