"""Response envelope shared by the API and every structured client result."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class BeeswaxResponse(BaseModel, Generic[T]):
    """`{success, payload?, code?, message?, errors?}`.

    Callers must check `success` even when nothing was raised: validation,
    not-found-on-mutate, deprecation and macro failures come back here.
    """

    success: bool
    payload: T | None = None
    code: int | None = None
    message: str | None = None
    errors: list[str] | None = None

    @classmethod
    def ok(cls, payload: Any = None, message: str | None = None) -> "BeeswaxResponse":
        return cls(success=True, payload=payload, message=message)

    @classmethod
    def from_envelope(cls, data: dict[str, Any]) -> "BeeswaxResponse":
        """Wrap a raw API envelope, ignoring fields outside the shared shape."""
        code = data.get("code")
        message = data.get("message")
        return cls(
            success=bool(data.get("success", True)),
            payload=data.get("payload"),
            code=code if isinstance(code, int) else None,
            message=message if isinstance(message, str) else None,
        )

    @classmethod
    def failure(
        cls,
        message: str,
        code: int | None = None,
        errors: list[str] | None = None,
        payload: Any = None,
    ) -> "BeeswaxResponse":
        return cls(success=False, message=message, code=code, errors=errors, payload=payload)
