"""Helpers for plain API records."""

from __future__ import annotations

from typing import Any, Iterable


def is_plain_record(value: Any) -> bool:
    """True for a dict, the only body shape the API accepts."""
    return isinstance(value, dict)


def strip_fields(record: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Copy of record without the given keys."""
    excluded = set(fields)
    return {key: value for key, value in record.items() if key not in excluded}


def clean_record(record: dict[str, Any]) -> dict[str, Any]:
    """Drop None and empty-string values."""
    return {key: value for key, value in record.items() if value is not None and value != ""}


def records_of(payload: Any) -> list[dict[str, Any]]:
    """Normalize an envelope payload (list, single record, or nothing) to a list."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        return [payload]
    return []
