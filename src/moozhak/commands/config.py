"""
Configuration commands for moozhak (`moozhak config`).

- Show the effective settings and which credentials are present
- Store the Discogs token or GetSongBPM API key
- Clear stored credentials for a service
"""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from ..core.auth import SERVICE_KEYS, clear_credentials, get_credentials, store_credentials
from ..core.config import get_settings, reset_settings

console = Console()
app = typer.Typer(
    no_args_is_help=True,
    help="Manage credentials and view settings.",
)

# CLI service names mapped to the (service, key) pair they store
_TOKEN_TARGETS = {
    "discogs": ("discogs", "token"),
    "getsongbpm": ("getsongbpm", "api_key"),
}


def _status(value) -> str:
    return "[green]Set[/green]" if value else "[yellow]Not Set[/yellow]"


@app.command("show")
def config_show(
    json_raw: bool = typer.Option(False, "--json", help="Output raw JSON to stdout"),
):
    """
    Display the effective settings and stored credential status.

    Secrets are never printed, only whether they are present.
    """
    settings = get_settings()
    data = {
        "settings": {
            "default_type": settings.default_type,
            "per_page": settings.per_page,
            "verbose": settings.verbose,
            "default_tracks_type": settings.default_tracks_type,
            "default_tracks_output": settings.default_tracks_output,
            "always_clean": settings.always_clean,
            "output_dir": str(settings.output_dir),
        },
        "credentials": {
            "discogs_token": bool(get_credentials("discogs", "token", settings=settings)),
            "getbpm_api_key": bool(get_credentials("getsongbpm", "api_key", settings=settings)),
        },
    }

    if json_raw:
        typer.echo(json.dumps(data))
        return

    console.print("[bold]Current Configuration[/bold]")
    console.print("\n[bold]Settings:[/bold]")
    for key, value in data["settings"].items():
        console.print(f"  {key:<22} [blue]{value if value is not None else 'none'}[/blue]")

    console.print("\n[bold]Credentials:[/bold]")
    console.print(f"  Discogs token:      {_status(data['credentials']['discogs_token'])}")
    console.print(f"  GetSongBPM API key: {_status(data['credentials']['getbpm_api_key'])}")


@app.command("token")
def config_token(
    service: str = typer.Argument("discogs", help="Service: 'discogs' or 'getsongbpm'."),
    value: Optional[str] = typer.Option(None, "--value", help="Secret value (prompted when omitted)."),
):
    """Store an API token in the system keyring (or .secrets.toml as a fallback)."""
    target = _TOKEN_TARGETS.get(service.lower())
    if target is None:
        console.print(f"[red]Error:[/red] Invalid service '{service}'. Must be one of: {', '.join(_TOKEN_TARGETS)}.")
        raise typer.Exit(1)

    secret = value or Prompt.ask(f"Enter your {service} token", password=True)
    if not secret:
        console.print("[red]Error:[/red] No value given.")
        raise typer.Exit(1)

    where = store_credentials(*target, secret)
    reset_settings()
    console.print(f"[green]Saved {service} credential to {where}.[/green]")


@app.command("clear")
def config_clear(
    service: str = typer.Argument(..., help="Service to clear credentials for."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """
    Permanently delete all stored credentials for a specific service.
    """
    service = service.lower()
    if service not in SERVICE_KEYS:
        console.print(f"[red]Error:[/red] Invalid service '{service}'. Must be one of: {', '.join(SERVICE_KEYS)}.")
        raise typer.Exit(1)

    if yes or Confirm.ask(
        f"[bold red]Delete all stored credentials for {service}?[/bold red]",
        default=False,
    ):
        cleared = clear_credentials(service)
        reset_settings()
        console.print(f"[green]Credentials for {service} have been cleared ({len(cleared)} keyring entr{'y' if len(cleared) == 1 else 'ies'}).[/green]")
    else:
        console.print("Operation cancelled.")
