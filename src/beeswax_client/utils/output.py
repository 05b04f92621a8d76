"""Output formatting utilities for CLI output."""

from __future__ import annotations

import csv
import json
import sys
from enum import Enum
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.utils.errors import handle_failure

console = Console(stderr=True)


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def to_plain(data: Any) -> Any:
    """Turn pydantic models (and lists of them) into plain dicts."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_none=True)
    if isinstance(data, list):
        return [to_plain(item) for item in data]
    return data


def print_output(
    data: Any,
    fmt: OutputFormat = OutputFormat.TABLE,
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Print data in the requested format.

    Args:
        data: A dict, a list of dicts, or pydantic model(s).
        fmt: Output format (table, json, csv).
        columns: Which columns to show in table/csv mode. None = all.
        title: Optional title for table output.
    """
    data = to_plain(data)
    if fmt == OutputFormat.JSON:
        print_json(data)
    elif fmt == OutputFormat.CSV:
        print_csv(data, columns)
    else:
        print_table(data, columns, title)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    json.dump(to_plain(data), sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def _rows(data: list[dict[str, Any]] | dict[str, Any]) -> list[dict[str, Any]]:
    return [data] if isinstance(data, dict) else list(data)


def print_table(
    data: list[dict[str, Any]] | dict[str, Any],
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Print data as a Rich table on stderr."""
    rows = _rows(data)
    if not rows:
        console.print("[dim]No results.[/dim]")
        return

    if columns is None:
        columns = list(rows[0].keys())

    table = Table(title=title, show_lines=False)
    for col in columns:
        table.add_column(col, overflow="fold")

    for row in rows:
        table.add_row(*[_cell(row.get(col)) for col in columns])

    console.print(table)


def print_csv(
    data: list[dict[str, Any]] | dict[str, Any],
    columns: list[str] | None = None,
) -> None:
    """Print data as CSV to stdout."""
    rows = _rows(data)
    if not rows:
        return

    if columns is None:
        columns = list(rows[0].keys())

    writer = csv.DictWriter(sys.stdout, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: _cell(row.get(k)) for k in columns})


def print_response(
    response: BeeswaxResponse,
    fmt: OutputFormat = OutputFormat.TABLE,
    columns: list[str] | None = None,
    title: str | None = None,
) -> bool:
    """Print a response payload, or render its failure. Returns response.success."""
    if not response.success:
        handle_failure(response.message, response.code, response.errors)
        return False
    if response.message:
        console.print(f"[dim]{response.message}[/dim]")
    payload = response.payload if response.payload is not None else {}
    print_output(payload, fmt, columns=columns, title=title)
    return True
