"""CLI commands for creatives and creative assets."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import get_config
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.requests import UploadCreativeAssetParams
from beeswax_client.utils.errors import handle_error
from beeswax_client.utils.output import OutputFormat, print_output, print_response
from beeswax_client.utils.records import clean_record

console = Console(stderr=True)
app = typer.Typer(name="creatives", help="Manage creatives and creative assets.")

COLUMNS = ["creative_id", "advertiser_id", "creative_name", "name", "creative_type", "type", "width", "height", "active"]


def _build_client(verbose: bool = False) -> BeeswaxClient:
    return BeeswaxClient(get_config().client_options(), verbose=verbose)


async def _call(client: BeeswaxClient, action):
    async with client:
        return await action(client)


def _run(verbose: bool, action):
    return asyncio.run(_call(_build_client(verbose), action))


@app.command("list")
def list_creatives(
    advertiser_id: Annotated[int | None, typer.Option("--advertiser-id", "-a", help="Filter by advertiser")] = None,
    all_pages: Annotated[bool, typer.Option("--all", help="Fetch every page, not just the first")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """List creatives."""
    filters = {"advertiser_id": advertiser_id} if advertiser_id is not None else {}
    try:
        if all_pages:
            response = _run(verbose, lambda c: c.creatives.query_all(filters))
        else:
            response = _run(verbose, lambda c: c.creatives.query(filters))
        creatives = response.payload or []
        console.print(f"[dim]Found {len(creatives)} creatives[/dim]")
        columns = [col for col in COLUMNS if any(col in r for r in creatives)] or None
        ok = print_response(response, output, columns=columns, title="Creatives")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("create")
def create_creative(
    advertiser_id: Annotated[int, typer.Option("--advertiser-id", "-a", help="Owning advertiser")] = ...,
    name: Annotated[str, typer.Option("--name", "-n", help="Creative name")] = ...,
    creative_type: Annotated[str, typer.Option("--type", "-t", help="display, video or native")] = "display",
    template_id: Annotated[int, typer.Option("--template-id", help="Creative template ID")] = 1,
    width: Annotated[int | None, typer.Option("--width")] = None,
    height: Annotated[int | None, typer.Option("--height")] = None,
    click_url: Annotated[str | None, typer.Option("--click-url")] = None,
    asset_id: Annotated[int | None, typer.Option("--asset-id", help="Existing creative asset")] = None,
    active: Annotated[bool, typer.Option("--active", help="Create the creative active")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be sent without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create a creative."""
    body = clean_record({
        "advertiser_id": advertiser_id,
        "name": name,
        "type": creative_type,
        "creative_template_id": template_id,
        "width": width,
        "height": height,
        "click_url": click_url,
        "creative_asset_id": asset_id,
    })
    body["active"] = active

    if dry_run:
        console.print("[yellow]DRY RUN:[/yellow] Would create creative:")
        print_output(body, output, title="Creative [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.creatives.create(body))
        ok = print_response(response, output, title="Creative Created")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not ok:
        raise typer.Exit(1)


@app.command("upload-asset")
def upload_asset(
    advertiser_id: Annotated[int, typer.Option("--advertiser-id", "-a", help="Owning advertiser")] = ...,
    url: Annotated[str | None, typer.Option("--url", "-u", help="Source URL of the asset")] = None,
    file: Annotated[Path | None, typer.Option("--file", "-f", help="Local file to upload instead of a URL")] = None,
    name: Annotated[str | None, typer.Option("--name", "-n", help="Asset name (defaults to the file name)")] = None,
    notes: Annotated[str | None, typer.Option("--notes")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be uploaded without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create a creative asset and upload its content."""
    try:
        content = file.read_bytes() if file else None
        params = UploadCreativeAssetParams(
            advertiser_id=advertiser_id,
            source_url=url,
            content=content,
            creative_asset_name=name or (file.name if file else None),
            notes=notes,
        )
    except (OSError, ValueError) as e:
        handle_error(RuntimeError(str(e)))
        raise typer.Exit(1)

    if dry_run:
        console.print(f"[yellow]DRY RUN:[/yellow] Would upload asset '{params.resolved_name}'")
        print_output(params.model_dump(exclude={"content"}, exclude_none=True), output, title="Asset [DRY RUN]")
        return

    try:
        asset = _run(verbose, lambda c: c.upload_creative_asset(params))
        print_output(asset, output, title="Creative Asset Uploaded")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
