"""CLI commands for line item management."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from beeswax_client.client import BeeswaxClient
from beeswax_client.commands.macros_cmd import _load_options
from beeswax_client.config import get_config
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.requests import LineItemParams
from beeswax_client.utils.errors import handle_error, handle_failure
from beeswax_client.utils.output import OutputFormat, print_output, print_response

console = Console(stderr=True)
app = typer.Typer(name="line-items", help="Manage line items.")

COLUMNS = [
    "line_item_id", "campaign_id", "line_item_name", "name",
    "line_item_budget", "spend_budget", "active", "start_date", "end_date",
]


def _build_client(verbose: bool = False) -> BeeswaxClient:
    return BeeswaxClient(get_config().client_options(), verbose=verbose)


async def _call(client: BeeswaxClient, action) -> BeeswaxResponse:
    async with client:
        return await action(client)


def _run(verbose: bool, action) -> BeeswaxResponse:
    return asyncio.run(_call(_build_client(verbose), action))


def _columns(records) -> list[str] | None:
    rows = records if isinstance(records, list) else [records]
    present = [c for c in COLUMNS if any(isinstance(r, dict) and c in r for r in rows)]
    return present or None


@app.command("list")
def list_line_items(
    campaign_id: Annotated[int | None, typer.Option("--campaign-id", "-c", help="Filter by campaign")] = None,
    all_pages: Annotated[bool, typer.Option("--all", help="Fetch every page, not just the first")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List line items."""
    filters = {"campaign_id": campaign_id} if campaign_id is not None else {}
    try:
        if all_pages:
            response = _run(verbose, lambda c: c.line_items.query_all(filters))
        else:
            response = _run(verbose, lambda c: c.line_items.query(filters))
        line_items = response.payload or []
        console.print(f"[dim]Found {len(line_items)} line items[/dim]")
        ok = print_response(response, output, columns=_columns(line_items), title="Line Items")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("create")
def create_line_item(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Parent campaign")] = ...,
    name: Annotated[str, typer.Option("--name", "-n", help="Line item name")] = ...,
    budget: Annotated[float, typer.Option("--budget", "-b", help="Lifetime budget")] = ...,
    bid_price: Annotated[float | None, typer.Option("--bid-price", help="CPM bid (default 3)")] = None,
    start_date: Annotated[str | None, typer.Option("--start-date", help="Defaults to the campaign's")] = None,
    end_date: Annotated[str | None, typer.Option("--end-date", help="Defaults to the campaign's")] = None,
    active: Annotated[bool, typer.Option("--active", help="Create the line item active")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create a line item under a campaign (inherits advertiser, currency and dates)."""
    params = LineItemParams(
        campaign_id=campaign_id,
        name=name,
        budget=budget,
        bid_price=bid_price,
        start_date=start_date,
        end_date=end_date,
        active=active,
    )

    if dry_run:
        console.print("[yellow]DRY RUN:[/yellow] Would create line item:")
        print_output(params, output, title="Line Item [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.create_line_item(params))
        ok = print_response(response, output, columns=_columns(response.payload), title="Line Item Created")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("bulk-create")
def bulk_create(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Parent campaign")] = ...,
    items_file: Annotated[str, typer.Option("--file", "-f", help="YAML/JSON list of {name, budget, bid_price}")] = ...,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be created without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create several inactive line items under one campaign."""
    try:
        items = _load_options(items_file)
    except (OSError, ValueError) as e:
        handle_error(RuntimeError(str(e)))
        raise typer.Exit(1)
    if not isinstance(items, list):
        handle_error(RuntimeError("Line items file must contain a list"))
        raise typer.Exit(1)

    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would create {len(items)} line item(s) in campaign {campaign_id}")
        print_output(items, output, title="Line Items [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.macros.bulk_create_line_items(campaign_id, items))
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)

    if response.payload:
        print_output(response.payload, output, columns=_columns(response.payload), title="Line Items Created")
    if not response.success:
        handle_failure(response.message or "Some line items failed", response.code, response.errors)
        raise typer.Exit(1)
