"""HTTP transport for the Beeswax API.

Handles the session cookie, the `success: false` envelope overlay, and the
retry policy for transient failures.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Callable

import httpx
from pydantic import BaseModel

from beeswax_client.utils.errors import (
    ApiError,
    BeeswaxError,
    NetworkError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


def exponential_delay(attempt: int, base: float = 0.1) -> float:
    """Seconds to wait before retry number `attempt` (1-based)."""
    return base * (2 ** (attempt - 1))


def is_network_or_idempotent_error(error: BeeswaxError) -> bool:
    """Default retry condition.

    Connection failures are always retried. Timeouts and 5xx responses are
    retried only for idempotent methods.
    """
    if isinstance(error, NetworkError):
        return not error.timed_out or error.method in IDEMPOTENT_METHODS
    if isinstance(error, ApiError) and error.status_code is not None:
        return error.status_code >= 500 and error.method in IDEMPOTENT_METHODS
    return False


class RetryPolicy(BaseModel):
    """How many times, how long between, and which failures to retry."""
    retries: int = 3
    retry_delay: Callable[[int], float] = exponential_delay
    retry_condition: Callable[[BeeswaxError], bool] = is_network_or_idempotent_error


class SessionContext:
    """Session cookies for one client instance.

    Only the transport writes to it (cookie rotation on every response) and
    only the session manager clears or stamps it.
    """

    def __init__(self) -> None:
        self._cookies: dict[str, str] = {}
        self.authenticated_at: datetime | None = None

    @property
    def active(self) -> bool:
        return bool(self._cookies)

    @property
    def cookie_names(self) -> list[str]:
        return sorted(self._cookies)

    def cookie_header(self) -> str | None:
        if not self._cookies:
            return None
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def absorb(self, response: httpx.Response) -> bool:
        """Store every Set-Cookie pair from a response. Returns True if any changed."""
        changed = False
        for raw in response.headers.get_list("set-cookie"):
            pair = raw.split(";", 1)[0].strip()
            if "=" not in pair:
                continue
            name, value = (part.strip() for part in pair.split("=", 1))
            if not value:
                changed = self._cookies.pop(name, None) is not None or changed
                continue
            if self._cookies.get(name) != value:
                self._cookies[name] = value
                changed = True
        return changed

    def mark_authenticated(self) -> None:
        self.authenticated_at = datetime.now()

    def clear(self) -> None:
        self._cookies.clear()
        self.authenticated_at = None


def _query_params(values: dict[str, Any] | None) -> dict[str, Any] | None:
    """Flatten a request body into query parameters for GET."""
    if not values:
        return None
    params: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        params[key] = json.dumps(value) if isinstance(value, dict) else value
    return params


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_detail(data: Any) -> str:
    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        return json.dumps(data, default=str)
    return str(data)


class Transport:
    """Async HTTP exchange with cookie handling and retry."""

    def __init__(
        self,
        api_root: str,
        context: SessionContext,
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        verbose: bool = False,
    ) -> None:
        self._api_root = api_root.rstrip("/")
        self._context = context
        self._retry = retry or RetryPolicy()
        self._verbose = verbose
        self._http = httpx.AsyncClient(
            base_url=self._api_root,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=http_transport,
        )

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def send(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        retry: bool = True,
    ) -> dict[str, Any]:
        """Send one logical request, retrying transient failures.

        Args:
            method: HTTP method.
            path: API path (e.g. "/rest/campaign/strict").
            body: Query parameters for GET, JSON payload otherwise.
            params: Extra query parameters for non-GET requests.
            files: Multipart files; `body` then goes as form fields.
            headers: Additional headers.
            retry: False disables the retry policy for this call.

        Returns:
            The decoded response envelope.

        Raises:
            UnauthorizedError: HTTP 401. Never retried here.
            ApiError: Any other error status or a `success: false` envelope.
            NetworkError: No response after exhausting retries.
        """
        method = method.upper()
        attempt = 0
        while True:
            try:
                return await self._attempt(method, path, body, params, files, headers)
            except UnauthorizedError:
                raise
            except (ApiError, NetworkError) as error:
                attempt += 1
                if (
                    not retry
                    or attempt > self._retry.retries
                    or not self._retry.retry_condition(error)
                ):
                    raise
                wait = self._retry.retry_delay(attempt)
                logger.warning(
                    f"{error} Retry {attempt}/{self._retry.retries} in {wait:.2f}s..."
                )
                await asyncio.sleep(wait)

    async def _attempt(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None,
        params: dict[str, Any] | None,
        files: dict[str, Any] | None,
        headers: dict[str, str] | None,
    ) -> dict[str, Any]:
        request_headers = dict(headers or {})
        cookie = self._context.cookie_header()
        if cookie:
            request_headers["Cookie"] = cookie

        kwargs: dict[str, Any] = {}
        if method == "GET":
            kwargs["params"] = _query_params(body if body is not None else params)
        else:
            kwargs["params"] = params
            if files is not None:
                kwargs["files"] = files
                if body:
                    kwargs["data"] = body
            elif body is not None:
                kwargs["json"] = body

        if self._verbose:
            logger.info(f"{method} {self._api_root}{path}")

        try:
            response = await self._http.request(method, path, headers=request_headers, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out: {e}.", method, path, timed_out=True) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Connection error on {method} {path}: {e}.", method, path) from e

        if self._context.absorb(response):
            logger.debug("Session cookie rotated")
        # The SessionContext is the only cookie store.
        self._http.cookies.clear()

        if self._verbose:
            logger.info(f"Response: {response.status_code}")

        data = _decode(response)
        status = response.status_code

        if status == 401:
            raise UnauthorizedError(
                f"API error (HTTP 401) on {method} {path}: unauthorized.",
                method, path, status_code=401, body=data,
            )
        if status >= 400:
            raise ApiError(
                f"API error (HTTP {status}) on {method} {path}: {_error_detail(data)}",
                method, path, status_code=status, body=data,
            )
        if isinstance(data, dict) and data.get("success") is False:
            raise ApiError(
                f"API rejected {method} {path}: {_error_detail(data)}",
                method, path, status_code=status, body=data,
            )
        if not isinstance(data, dict):
            return {"success": True, "payload": data}
        return data

    async def probe_size(self, url: str) -> int | None:
        """Content length of an external URL, or None if it can't be determined."""
        try:
            response = await self._http.head(url, follow_redirects=True)
            if response.status_code >= 400 or "content-length" not in response.headers:
                logger.warning(f"Unable to detect content-length of {url} (HTTP {response.status_code})")
                return None
            return int(response.headers["content-length"])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Unable to detect content-length of {url}: {e}")
            return None

    async def fetch_external(self, url: str) -> bytes:
        """Download content from an absolute URL without session cookies."""
        try:
            response = await self._http.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise NetworkError(f"Connection error fetching {url}: {e}.", "GET", url) from e
        if response.status_code >= 400:
            raise ApiError(
                f"Could not fetch {url} (HTTP {response.status_code})",
                "GET", url, status_code=response.status_code,
            )
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
