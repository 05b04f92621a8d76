"""CLI commands for multi-entity campaign workflows."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import get_config
from beeswax_client.models.envelope import BeeswaxResponse
from beeswax_client.models.macros import CampaignCreationOptions, FullCampaignResult
from beeswax_client.utils.errors import handle_error
from beeswax_client.utils.output import OutputFormat, print_output, print_response

console = Console(stderr=True)
app = typer.Typer(name="macros", help="Create whole campaign structures in one go.")


def _build_client(verbose: bool = False) -> BeeswaxClient:
    return BeeswaxClient(get_config().client_options(), verbose=verbose)


async def _call(client: BeeswaxClient, action) -> BeeswaxResponse:
    async with client:
        return await action(client)


def _run(verbose: bool, action) -> BeeswaxResponse:
    return asyncio.run(_call(_build_client(verbose), action))


def print_campaign_result(
    response: BeeswaxResponse,
    fmt: OutputFormat = OutputFormat.TABLE,
    title: str | None = None,
) -> bool:
    """Print a FullCampaignResult: everything in JSON, a count summary otherwise."""
    result = response.payload
    if not response.success or not isinstance(result, FullCampaignResult):
        return print_response(response, fmt, title=title)

    for skipped in result.skipped:
        console.print(f"[yellow]Skipped:[/yellow] {skipped}")

    if fmt == OutputFormat.JSON:
        print_output(result, fmt)
    else:
        summary = {
            "campaign_id": result.campaign.get("campaign_id"),
            "targeting_templates": len(result.targeting_templates),
            "line_items": len(result.line_items),
            "creatives": len(result.creatives),
            "creative_line_items": len(result.creative_line_items),
            "skipped": len(result.skipped),
        }
        print_output(summary, fmt, title=title)
    return True


def _load_options(spec_file: str) -> dict[str, Any]:
    """Read campaign options from a YAML or JSON file, or '-' for stdin."""
    if spec_file == "-":
        text = sys.stdin.read()
        suffix = ""
    else:
        path = Path(spec_file)
        text = path.read_text()
        suffix = path.suffix.lower()

    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text) or {}


@app.callback()
def macros() -> None:
    """Create whole campaign structures in one go."""


@app.command("full-campaign")
def full_campaign(
    spec_file: Annotated[str, typer.Option("--spec", "-s", help="YAML/JSON campaign options file ('-' for stdin)")] = ...,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Validate and show the plan without executing")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Create a campaign with its targeting templates, line items and creatives.

    Everything is created inactive except the creative/line item associations.
    Line items and creatives that fail are skipped and reported.

    Example:

        beeswax macros full-campaign --spec campaign.yaml
    """
    try:
        options = CampaignCreationOptions.model_validate(_load_options(spec_file))
    except (OSError, ValueError, yaml.YAMLError) as e:
        message = str(e) if not isinstance(e, ValidationError) else f"Invalid campaign options: {e}"
        handle_error(RuntimeError(message))
        raise typer.Exit(1)

    if dry_run:
        creatives = sum(len(li.creatives) for li in options.line_items)
        console.print(
            f"[yellow]DRY RUN:[/yellow] Would create campaign "
            f"'{options.name or options.campaign_name}' for advertiser {options.advertiser_id}"
        )
        console.print(f"  Targeting templates: {len(options.targeting_templates)}")
        console.print(f"  Line items: {len(options.line_items)}")
        console.print(f"  Creatives: {creatives}")
        print_output(options.model_dump(exclude_none=True), output, title="Full Campaign [DRY RUN]")
        return

    try:
        response = _run(verbose, lambda c: c.macros.create_full_campaign(options))
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)
    if not print_campaign_result(response, output, title="Campaign Created"):
        raise typer.Exit(1)
