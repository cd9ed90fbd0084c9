"""
The `tracks` command: fetch a master or release and print/save its tracklist.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from ..core import ui
from ..core.api_config import TRACKS_TYPES
from ..core.parse import parse_leading_int
from ..plugins.base import error_of
from ..plugins.discogs import build_discogs_url, format_track
from .registry import CommandDescriptor

if TYPE_CHECKING:
    from ..session import ExecutionContext

# Static header lines per format; human output gets a dynamic count header instead
FORMAT_HEADERS: dict[str, list[str]] = {
    "csv": ["position,title,duration"],
    "markdown": [
        "| Position | Title | Duration |",
        "|----------|-------|----------|",
    ],
}


@dataclass
class ReleaseInfo:
    artists: str
    title: str
    year: Optional[int]
    url: str
    tracklist: list[dict] = field(default_factory=list)


@dataclass
class TracksArgs:
    source_type: Optional[str] = None
    id: Optional[str] = None
    error: Optional[str] = None
    hint: Optional[str] = None


def extract_release_info(data: dict, source_type: str, release_id: int) -> ReleaseInfo:
    artists = ", ".join(a.get("name", "") for a in data.get("artists") or [])
    return ReleaseInfo(
        artists=artists or "Unknown Artist",
        title=data.get("title") or "Untitled",
        year=data.get("year") or None,
        url=build_discogs_url(source_type, release_id),
        tracklist=data.get("tracklist") or [],
    )


def build_tracks_output(source_type: str, release_id: int, info: ReleaseInfo) -> dict[str, Any]:
    return {
        "type": "tracks",
        "params": {"sourceType": source_type, "id": release_id},
        "result": {
            "artist": info.artists,
            "title": info.title,
            "year": info.year,
            "url": info.url,
            "tracks": [
                {
                    "position": track.get("position") or str(idx + 1),
                    "title": track.get("title") or "",
                    "duration": track.get("duration") or "",
                    "type_": track.get("type_") or "track",
                }
                for idx, track in enumerate(info.tracklist)
            ],
        },
    }


def parse_tracks_args(args: list[str], default_type: str) -> TracksArgs:
    """Accept ``<id>`` or ``<master|release> <id>``.

    A single argument, or a first argument with a leading integer, is an ID
    using the session default type.
    """
    if not args:
        return TracksArgs(error="Please provide an ID", hint="Usage: tracks <id> or tracks <master|release> <id>")

    if len(args) == 1 or parse_leading_int(args[0]) is not None:
        return TracksArgs(source_type=default_type, id=args[0])

    source_type = args[0].lower()
    if source_type not in TRACKS_TYPES:
        return TracksArgs(error=f"Invalid type '{args[0]}'", hint=f"Valid types: {', '.join(TRACKS_TYPES)}")
    return TracksArgs(source_type=source_type, id=args[1])


def format_tracklist(tracklist: list[dict], fmt: str) -> list[str]:
    lines = list(FORMAT_HEADERS.get(fmt, []))
    lines.extend(format_track(track, idx, fmt) for idx, track in enumerate(tracklist))
    return lines


def _display_tracklist(tracklist: list[dict], fmt: str) -> None:
    ui.divider(heavy=True)
    if fmt == "human":
        ui.header(f"Tracklist ({len(tracklist)} tracks):\n")
    for line in format_tracklist(tracklist, fmt):
        ui.plain(line)
    ui.plain("")
    ui.divider()
    ui.plain("")


def _report_fetch_error(result: Any, source_type: str, release_id: int) -> None:
    error = error_of(result)
    if error == "rate_limited":
        ui.warn(f"Rate limited by Discogs. Try again in {result.get('retry_after')}s.")
    elif error == "auth_required":
        ui.error("Discogs rejected the request. Check your DISCOGS_TOKEN.")
    else:
        ui.warn(f"Could not fetch {source_type} #{release_id}.")


async def handle_tracks(source_type: str, raw_id: str, ctx: "ExecutionContext") -> None:
    release_id = parse_leading_int(raw_id)
    if release_id is None:
        ui.error("Invalid ID. Please provide a numeric ID.")
        return

    fmt = ctx.flags.tracks_output or "human"
    ui.plain("")
    ui.info(f"tracks search type: {source_type}")
    ui.info(f"output format: {fmt}")
    ui.info(f"Fetching {source_type} #{release_id} from Discogs...")

    if source_type == "master":
        data = await ctx.discogs.get_master(release_id, ctx.flags.verbose)
    else:
        data = await ctx.discogs.get_release(release_id, ctx.flags.verbose)

    if not data or error_of(data):
        _report_fetch_error(data, source_type, release_id)
        return

    info = extract_release_info(data, source_type, release_id)
    year = f" ({info.year})" if info.year else ""
    ui.success(f"Found: {source_type} #{release_id} - {info.artists} - {info.title}{year}")
    ui.info(f"See: {info.url}")

    if not info.tracklist:
        ui.warn("No tracks found.")
    else:
        _display_tracklist(info.tracklist, fmt)
        ctx.output.write_tracks(
            "\n".join(format_tracklist(info.tracklist, fmt)), release_id, fmt, info.artists, info.title
        )

    ctx.output.write_json(build_tracks_output(source_type, release_id, info))


async def _tracks_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    parsed = parse_tracks_args(args, ctx.flags.tracks_type)
    if parsed.error:
        ui.error(parsed.error)
        if parsed.hint:
            ui.info(parsed.hint)
        return True
    await handle_tracks(parsed.source_type, parsed.id, ctx)
    return True


TRACKS_COMMAND = CommandDescriptor(
    name="tracks",
    handler=_tracks_handler,
    aliases=("t",),
    min_args=1,
    usage="tracks [type] <id>",
    description="Get tracklist from a master or release",
)
