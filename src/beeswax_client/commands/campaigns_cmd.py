"""CLI commands for campaign management."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

import typer
from rich.console import Console

from beeswax_client.client import BeeswaxClient
from beeswax_client.commands.macros_cmd import print_campaign_result
from beeswax_client.config import get_config
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.macros import CloneOptions
from beeswax_client.utils.errors import handle_error
from beeswax_client.utils.output import OutputFormat, print_output, print_response
from beeswax_client.utils.records import clean_record

console = Console(stderr=True)
app = typer.Typer(name="campaigns", help="Manage campaigns.")

COLUMNS = [
    "campaign_id", "advertiser_id", "campaign_name", "name",
    "campaign_budget", "budget", "active", "start_date", "end_date",
]


def _build_client(verbose: bool = False) -> BeeswaxClient:
    return BeeswaxClient(get_config().client_options(), verbose=verbose)


async def _call(client: BeeswaxClient, action) -> BeeswaxResponse:
    async with client:
        return await action(client)


def _run(verbose: bool, action) -> BeeswaxResponse:
    """Build a client, run one async action with it and close it."""
    return asyncio.run(_call(_build_client(verbose), action))


def _columns(records: Any) -> list[str] | None:
    """Campaign columns present in the records, whichever schema they use."""
    rows = records if isinstance(records, list) else [records]
    present = [c for c in COLUMNS if any(isinstance(r, dict) and c in r for r in rows)]
    return present or None


@app.command("list")
def list_campaigns(
    advertiser_id: Annotated[int | None, typer.Option("--advertiser-id", "-a", help="Filter by advertiser")] = None,
    active: Annotated[bool | None, typer.Option("--active/--inactive", help="Filter by status")] = None,
    all_pages: Annotated[bool, typer.Option("--all", help="Fetch every page, not just the first")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List campaigns."""
    filters = clean_record({"advertiser_id": advertiser_id, "active": active})
    try:
        if all_pages:
            response = _run(verbose, lambda c: c.campaigns.query_all(filters))
        else:
            response = _run(verbose, lambda c: c.campaigns.query(filters))
        campaigns = response.payload or []
        console.print(f"[dim]Found {len(campaigns)} campaigns[/dim]")
        ok = print_response(response, output, columns=_columns(campaigns), title="Campaigns")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("get")
def get_campaign(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Campaign ID")] = ...,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Show one campaign."""
    try:
        response = _run(verbose, lambda c: c.campaigns.find(campaign_id))
        ok = print_response(response, output, title=f"Campaign {campaign_id}")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("create")
def create_campaign(
    advertiser_id: Annotated[int, typer.Option("--advertiser-id", "-a", help="Owning advertiser")] = ...,
    name: Annotated[str, typer.Option("--name", "-n", help="Campaign name")] = ...,
    budget: Annotated[float, typer.Option("--budget", "-b", help="Budget in the account currency")] = ...,
    budget_type: Annotated[int | None, typer.Option("--budget-type", help="Budget type code (default 2)")] = None,
    start_date: Annotated[str | None, typer.Option("--start-date", help="YYYY-MM-DD")] = None,
    end_date: Annotated[str | None, typer.Option("--end-date", help="YYYY-MM-DD")] = None,
    active: Annotated[bool, typer.Option("--active", help="Create the campaign active")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create a campaign."""
    body = clean_record({
        "advertiser_id": advertiser_id,
        "name": name,
        "budget": budget,
        "budget_type": budget_type,
        "start_date": start_date,
        "end_date": end_date,
    })
    body["active"] = active

    if dry_run:
        console.print("[yellow]DRY RUN:[/yellow] Would create campaign:")
        print_output(body, output, title="Campaign [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.campaigns.create(body))
        ok = print_response(response, output, columns=_columns(response.payload), title="Campaign Created")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("update")
def update_campaign(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Campaign ID to update")] = ...,
    name: Annotated[str | None, typer.Option("--name", "-n", help="New name")] = None,
    budget: Annotated[float | None, typer.Option("--budget", "-b", help="New budget")] = None,
    start_date: Annotated[str | None, typer.Option("--start-date")] = None,
    end_date: Annotated[str | None, typer.Option("--end-date")] = None,
    active: Annotated[bool | None, typer.Option("--active/--inactive", help="Resume or pause")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Update a campaign's name, budget, dates or status."""
    changes = clean_record({
        "name": name,
        "budget": budget,
        "start_date": start_date,
        "end_date": end_date,
        "active": active,
    })
    if not changes:
        console.print("[yellow]Nothing to update.[/yellow]")
        raise typer.Exit(1)

    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would update campaign {campaign_id}:")
        print_output(changes, output, title="Campaign Update [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.campaigns.edit(campaign_id, changes))
        ok = print_response(response, output, columns=_columns(response.payload), title="Campaign Updated")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("delete")
def delete_campaign(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Campaign ID to delete")] = ...,
    tree: Annotated[bool, typer.Option("--tree", help="Also delete its line items and creative associations")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be deleted without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Delete a campaign (optionally with everything under it)."""
    if dry_run:
        scope = "with its line items and associations" if tree else "only"
        console.print(f"[yellow]DRY RUN:[/yellow] Would delete campaign {campaign_id} {scope}")
        return

    try:
        if tree:
            response = _run(verbose, lambda c: c.delete_campaign_tree(campaign_id))
        else:
            response = _run(verbose, lambda c: c.campaigns.delete(campaign_id))
        ok = print_response(response, output, title="Campaign Deleted")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("clone")
def clone_campaign(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Campaign to copy")] = ...,
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the copy")] = ...,
    start_date: Annotated[str | None, typer.Option("--start-date")] = None,
    end_date: Annotated[str | None, typer.Option("--end-date")] = None,
    budget_multiplier: Annotated[float | None, typer.Option("--budget-multiplier", "-m", help="Scale every budget")] = None,
    creatives: Annotated[bool, typer.Option("--creatives/--no-creatives", help="Copy creative associations")] = True,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show the clone options without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Copy a campaign with its line items and creative associations."""
    options = CloneOptions(
        start_date=start_date,
        end_date=end_date,
        budget_multiplier=budget_multiplier,
        clone_creatives=creatives,
    )
    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would clone campaign {campaign_id} as '{name}':")
        print_output(options, output, title="Clone [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.macros.clone_campaign(campaign_id, name, options))
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not print_campaign_result(response, output, title="Campaign Cloned"):
        raise typer.Exit(1)


@app.command("bulk-status")
def bulk_status(
    campaign_ids: Annotated[list[int], typer.Option("--campaign-id", "-c", help="Campaign ID (repeatable)")] = ...,
    active: Annotated[bool, typer.Option("--active/--inactive", help="Resume or pause")] = ...,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would change without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Pause or resume several campaigns."""
    if dry_run:
        state = "resume" if active else "pause"
        console.print(f"[yellow]DRY RUN:[/yellow] Would {state} {len(campaign_ids)} campaign(s): {campaign_ids}")
        return

    try:
        response = _run(verbose, lambda c: c.macros.bulk_update_campaign_status(campaign_ids, active))
        ok = print_response(response, output, title="Bulk Status")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("performance")
def performance(
    campaign_id: Annotated[int, typer.Option("--campaign-id", "-c", help="Campaign ID")] = ...,
    start_date: Annotated[str, typer.Option("--start-date", help="YYYY-MM-DD")] = ...,
    end_date: Annotated[str, typer.Option("--end-date", help="YYYY-MM-DD")] = ...,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Request a performance report for a campaign."""
    try:
        response = _run(
            verbose, lambda c: c.macros.get_campaign_performance(campaign_id, start_date, end_date)
        )
        ok = print_response(response, output, title=f"Campaign {campaign_id} Performance")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)
