"""
moozhak CLI - Main entry point using Typer.

Running `moozhak` without a command starts the interactive session. The
`search` and `tracks` commands run a single query non-interactively; the
`lookup` and `config` groups are mounted from moozhak.commands.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.traceback import install

from .commands import config, lookup
from .core.api_config import OUTPUT_FORMATS, SEARCH_TYPES, TRACKS_TYPES
from .core.logging_util import setup_logging
from .session import run_search, run_tracks, start_session

# Install a rich traceback handler for readable exceptions
install(show_locals=False)

console = Console()

app = typer.Typer(
    name="moozhak",
    help="Search Discogs for releases and tracklists, with BPM, ISRC and audio feature lookups.",
    epilog="Run without a command to start an interactive session. Use `moozhak [COMMAND] --help` for more info.",
    invoke_without_command=True,
    pretty_exceptions_enable=False,  # Rich's handler is installed instead
)

app.add_typer(lookup.app, name="lookup", help="Look up BPM, ISRCs and audio features.")
app.add_typer(config.app, name="config", help="Manage credentials and view settings.")


def _choice(value: Optional[str], allowed: tuple[str, ...], what: str) -> Optional[str]:
    if value is None:
        return None
    value = value.lower()
    if value not in allowed:
        raise typer.BadParameter(f"Valid {what}: {', '.join(allowed)}")
    return value


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show the application version and exit.",
        is_eager=True,
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Discogs personal access token (or set DISCOGS_TOKEN)."
    ),
    verbose: bool = typer.Option(None, "--verbose", help="Enable DEBUG-level logging."),
    quiet: bool = typer.Option(None, "--quiet", help="Reduce logging to errors only."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit diagnostic logs as JSON lines."),
):
    """
    moozhak - Discogs search and tracklist toolkit.
    """
    if version:
        from . import __version__

        console.print(f"moozhak v{__version__}")
        raise typer.Exit()

    setup_logging(json_logs=json_logs, verbose=bool(verbose), quiet=bool(quiet))
    ctx.obj = {"token": token}

    if ctx.invoked_subcommand is None:
        raise typer.Exit(start_session(token=token))


@app.command("search")
def search(
    ctx: typer.Context,
    query: list[str] = typer.Argument(..., help="Search text"),
    search_type: Optional[str] = typer.Option(
        None, "--type", "-T", help="Filter: artist|release|master|label"
    ),
    limit: int = typer.Option(5, "--limit", "-l", min=1, help="Results per page"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo HTTP requests and responses"),
):
    """Search Discogs once and save the results as JSON."""
    search_type = _choice(search_type, SEARCH_TYPES, "types")
    token = (ctx.obj or {}).get("token")
    run_search(" ".join(query), search_type=search_type, limit=limit, verbose=verbose, token=token)


@app.command("tracks")
def tracks(
    ctx: typer.Context,
    release_id: str = typer.Argument(..., help="Master or release ID"),
    source_type: str = typer.Option("master", "--type", "-T", help="master|release"),
    output_format: str = typer.Option("human", "--format", "-f", help="human|csv|pipe|markdown"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo HTTP requests and responses"),
):
    """Fetch the tracklist of a master or release and save it."""
    source_type = _choice(source_type, TRACKS_TYPES, "types")
    output_format = _choice(output_format, OUTPUT_FORMATS, "formats")
    token = (ctx.obj or {}).get("token")
    run_tracks(release_id, source_type=source_type, output_format=output_format, verbose=verbose, token=token)


def cli():
    """Console-script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise SystemExit(130)


if __name__ == "__main__":
    cli()
