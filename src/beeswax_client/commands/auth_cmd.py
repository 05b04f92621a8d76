"""CLI commands for session management."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

import typer
from rich.console import Console

from beeswax_client.client import BeeswaxClient
from beeswax_client.config import get_config
from beeswax_client.utils.errors import handle_error
from beeswax_client.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Log in and inspect the API session.")


def _build_client(profile: str | None = None, verbose: bool = False) -> BeeswaxClient:
    return BeeswaxClient(get_config().client_options(profile), verbose=verbose)


async def _login(client: BeeswaxClient) -> dict[str, Any]:
    async with client:
        await client.authenticate()
        user = await client.get_current_user()
        status = client.session.status()
        return {
            "status": "authenticated",
            "api_root": client.options.api_root,
            "schema_mode": client.options.schema_mode,
            "cookies": ", ".join(status.cookie_names),
            "authenticated_at": str(status.authenticated_at),
            "user": user.payload,
        }


@app.command()
def login(
    profile: Annotated[str | None, typer.Option("--profile", "-p", help="Profile from config/profiles.yaml")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Authenticate against the API and show the session."""
    try:
        client = _build_client(profile, verbose)
        console.print(f"Authenticating against [bold]{client.options.api_root}[/bold]...", style="yellow")
        result = asyncio.run(_login(client))
        print_output(result, output, title="Authentication")
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)


@app.command()
def status(
    profile: Annotated[str | None, typer.Option("--profile", "-p", help="Profile from config/profiles.yaml")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show the resolved configuration (sessions are never persisted)."""
    config = get_config()
    try:
        options = config.client_options(profile)
    except RuntimeError as e:
        handle_error(e)
        raise typer.Exit(1)

    result = {
        "profile": profile or config.settings.profile,
        "api_root": options.api_root or "N/A",
        "email": options.creds.email or "N/A",
        "has_password": bool(options.creds.password),
        "schema_mode": options.schema_mode,
        "timeout": options.timeout,
        "retries": options.retry.retries if options.retry else 0,
        "profiles": ", ".join(config.all_profiles) or "N/A",
    }
    print_output(result, output, title="Session Configuration")
