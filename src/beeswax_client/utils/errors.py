"""Exception hierarchy and structured error output for the Beeswax client."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console

console = Console(stderr=True)


class BeeswaxError(RuntimeError):
    """Base error for everything the client raises."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ConfigurationError(BeeswaxError, ValueError):
    """Missing API root or credentials."""


class AuthenticationError(BeeswaxError):
    """Login was rejected by the remote API."""


class NetworkError(BeeswaxError):
    """The request never produced a response (connection failure, timeout)."""

    def __init__(self, message: str, method: str, path: str, timed_out: bool = False) -> None:
        self.method = method.upper()
        self.path = path
        self.timed_out = timed_out
        super().__init__(message)


class ApiError(BeeswaxError):
    """HTTP error status or a `success: false` envelope."""

    def __init__(
        self,
        message: str,
        method: str,
        path: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.method = method.upper()
        self.path = path
        super().__init__(message, status_code=status_code, body=body)


class UnauthorizedError(ApiError):
    """HTTP 401: the session cookie is missing or expired."""


class NotFoundError(ApiError):
    """The referenced object does not exist."""


# Actionable hints keyed by error substring
_ERROR_HINTS: list[tuple[str, str]] = [
    ("authentication failed", "Check BEESWAX_EMAIL / BEESWAX_PASSWORD in your .env"),
    ("401", "Session expired and could not be renewed, run `beeswax auth login`"),
    ("unauthorized", "Session expired and could not be renewed, run `beeswax auth login`"),
    ("api root", "Set BEESWAX_API_ROOT or add a profile to config/profiles.yaml"),
    ("credentials", "Set BEESWAX_EMAIL and BEESWAX_PASSWORD"),
    ("timed out", "Request timed out, try again or raise BEESWAX_TIMEOUT"),
    ("connection", "Connection error, check network connectivity and the API root"),
    ("could not load object", "The specified object does not exist, verify the ID"),
    ("not found", "The specified object does not exist, verify the ID"),
    ("deprecated", "Use the targeting expressions API instead"),
]


def _get_hint(error_message: str) -> str | None:
    """Match an error message to an actionable hint."""
    lower = error_message.lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern in lower:
            return hint
    return None


def error_code(error: Exception) -> str:
    """Map an exception to a stable machine-readable code."""
    if isinstance(error, ConfigurationError):
        return "CONFIG_ERROR"
    if isinstance(error, AuthenticationError):
        return "AUTH_ERROR"
    if isinstance(error, UnauthorizedError):
        return "SESSION_EXPIRED"
    if isinstance(error, NotFoundError):
        return "NOT_FOUND"
    if isinstance(error, NetworkError):
        return "TIMEOUT" if error.timed_out else "CONNECTION_ERROR"
    if isinstance(error, ApiError):
        return "API_ERROR"
    return "RUNTIME_ERROR"


def handle_error(error: Exception) -> None:
    """Write a JSON error object to stdout and a readable message to stderr.

    {"error": true, "code": "NOT_FOUND", "message": "...", "status": 404, "hint": "..."}
    """
    message = str(error)
    hint = _get_hint(message)

    error_obj: dict[str, object] = {
        "error": True,
        "code": error_code(error),
        "message": message,
    }
    status = getattr(error, "status_code", None)
    if status is not None:
        error_obj["status"] = status
    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")


_FAILURE_CODES: dict[int, str] = {
    400: "VALIDATION_ERROR",
    404: "NOT_FOUND",
    410: "DEPRECATED",
}


def handle_failure(message: str | None, code: int | None = None, errors: list[str] | None = None) -> None:
    """Render a structured (non-raised) failure like handle_error does."""
    message = message or "Request failed"
    hint = _get_hint(message)

    error_obj: dict[str, object] = {
        "error": True,
        "code": _FAILURE_CODES.get(code or 0, "FAILED"),
        "message": message,
    }
    if code is not None:
        error_obj["status"] = code
    if errors:
        error_obj["errors"] = errors
    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout)
    sys.stdout.write("\n")

    console.print(f"[red]Failed:[/red] {message}")
    for detail in errors or []:
        console.print(f"  [dim]{detail}[/dim]")
