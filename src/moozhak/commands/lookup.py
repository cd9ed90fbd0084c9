"""
Lookup commands for moozhak (`moozhak lookup`).

One-shot queries against the auxiliary services: tempo and key from
GetSongBPM, ISRCs from MusicBrainz and audio features from ReccoBeats.
"""

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

from ..core.api_config import OUTPUT_FORMATS
from ..core.auth import get_credentials
from ..plugins.base import error_of
from ..plugins.getsongbpm import GetSongBPMPlugin, format_bpm_result
from ..plugins.musicbrainz import MusicBrainzPlugin
from ..plugins.reccobeats import ReccoBeatsPlugin, format_audio_features, is_valid_reccobeats_id

console = Console()
app = typer.Typer(no_args_is_help=True, help="Look up BPM, ISRCs and audio features.")


def _print_table(rows, columns):
    table = Table(show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for r in rows:
        table.add_row(*[str(r.get(c) or "") for c in columns])
    console.print(table)


def _check_format(fmt: str) -> str:
    fmt = fmt.lower()
    if fmt not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Valid formats: {', '.join(OUTPUT_FORMATS)}")
    return fmt


@app.command("bpm")
def lookup_bpm(
    artist: str = typer.Argument(..., help="Artist name"),
    title: str = typer.Argument(..., help="Song title"),
    fmt: str = typer.Option("human", "--format", "-f", help="human|csv|pipe|markdown"),
    api_key: str = typer.Option(None, "--api-key", help="GetSongBPM API key"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo request details"),
):
    """Find the tempo, key and time signature of a song."""
    fmt = _check_format(fmt)
    key = get_credentials("getsongbpm", "api_key", explicit=api_key)

    async def _run():
        async with GetSongBPMPlugin(api_key=key) as plugin:
            return await plugin.find_bpm(artist, title, verbose=verbose)

    result = asyncio.run(_run())
    if result.get("found"):
        song = result["song"]
        console.print(f"{song.get('artist')} - {song.get('title')}", style="green", markup=False, highlight=False)
    console.print(format_bpm_result(result, fmt), markup=False, highlight=False)


@app.command("isrc")
def lookup_isrc(
    release_id: int = typer.Argument(..., help="Discogs release ID"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo request details"),
):
    """List per-track ISRCs of a Discogs release via MusicBrainz."""

    async def _run():
        async with MusicBrainzPlugin() as plugin:
            return await plugin.get_isrcs_for_discogs_release(release_id, verbose=verbose)

    result = asyncio.run(_run())
    if json_output:
        typer.echo(json.dumps(result))
        return
    if not result.get("found"):
        console.print(f"[yellow]No MusicBrainz release linked ({result.get('error')}).[/yellow]")
        raise typer.Exit(1)

    console.print(f"[bold]{result.get('release_title')}[/bold] ({result.get('mb_release_id')})")
    rows = [
        {
            "position": t.get("position"),
            "title": t.get("title"),
            "isrcs": ", ".join(t.get("isrcs") or []),
        }
        for t in result.get("tracks") or []
    ]
    _print_table(rows, ["position", "title", "isrcs"])


@app.command("recording")
def lookup_recording(
    artist: str = typer.Argument(..., help="Artist name"),
    title: str = typer.Argument(..., help="Recording title"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo request details"),
):
    """Search MusicBrainz for a recording and print its ISRCs."""

    async def _run():
        async with MusicBrainzPlugin() as plugin:
            return await plugin.find_track_isrcs(artist, title, verbose=verbose)

    result = asyncio.run(_run())
    if not result.get("found"):
        console.print(f"[yellow]No recording found ({result.get('error')}).[/yellow]")
        raise typer.Exit(1)

    recording = result.get("recording") or {}
    _print_table(
        [
            {
                "id": recording.get("id"),
                "title": recording.get("title"),
                "artist": recording.get("artist"),
                "isrcs": ", ".join(result.get("isrcs") or []),
            }
        ],
        ["id", "title", "artist", "isrcs"],
    )


@app.command("features")
def lookup_features(
    track_id: str = typer.Argument(..., help="ReccoBeats track UUID"),
    fmt: str = typer.Option("human", "--format", "-f", help="human|csv|pipe|markdown"),
    verbose: bool = typer.Option(False, "--verbose", help="Echo request details"),
):
    """Print tempo, energy, danceability and mood of a ReccoBeats track."""
    fmt = _check_format(fmt)
    if not is_valid_reccobeats_id(track_id):
        console.print("[red]Invalid ReccoBeats ID (expected a UUID).[/red]")
        raise typer.Exit(1)

    async def _run():
        async with ReccoBeatsPlugin() as plugin:
            return await plugin.get_track_with_features(track_id, verbose=verbose)

    track = asyncio.run(_run())
    if not track or error_of(track):
        console.print(f"[yellow]Could not fetch track {track_id}.[/yellow]")
        raise typer.Exit(1)

    console.print(track.get("trackTitle") or track_id, style="green", markup=False, highlight=False)
    console.print(format_audio_features(track.get("audio_features"), fmt), markup=False, highlight=False)
