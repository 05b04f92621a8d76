"""Beeswax CLI — entry point.

Command line front end over the async Beeswax API client.
"""

from __future__ import annotations

import logging

import typer

from beeswax_client.commands.auth_cmd import app as auth_app
from beeswax_client.commands.campaigns_cmd import app as campaigns_app
from beeswax_client.commands.line_items_cmd import app as line_items_app
from beeswax_client.commands.creatives_cmd import app as creatives_app
from beeswax_client.commands.macros_cmd import app as macros_app

app = typer.Typer(
    name="beeswax",
    help="CLI tool for managing Beeswax campaigns, line items and creatives.",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(campaigns_app, name="campaigns")
app.add_typer(line_items_app, name="line-items")
app.add_typer(creatives_app, name="creatives")
app.add_typer(macros_app, name="macros")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Beeswax CLI — manage campaigns, line items, creatives and reports."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


if __name__ == "__main__":
    app()
