"""
The `search` command: free-text Discogs database search.
"""

from typing import TYPE_CHECKING, Any, Optional

from ..core import ui
from ..plugins.base import error_of
from ..plugins.discogs import build_discogs_url_from_uri, format_result
from .registry import CommandDescriptor

if TYPE_CHECKING:
    from ..session import ExecutionContext


def build_search_output(
    query: str, search_type: Optional[str], per_page: int, results: list[dict]
) -> dict[str, Any]:
    """Normalize search hits into the JSON document written to disk."""
    tracks = []
    for result in results:
        title = result.get("title") or ""
        tracks.append(
            {
                "title": title,
                "artist": title.split(" - ")[0] if title else "",
                "album": "",
                "isrc": "",
                "match": {
                    "type": result.get("type") or "unknown",
                    "year": result.get("year") or None,
                    "url": build_discogs_url_from_uri(result.get("uri") or ""),
                    "id": result.get("id"),
                },
            }
        )
    return {
        "type": "search",
        "params": {"query": query, "searchType": search_type, "per_page": per_page},
        "result": {"tracks": tracks},
    }


async def handle_search(query: str, ctx: "ExecutionContext") -> None:
    flags = ctx.flags
    type_note = f" (type: {flags.search_type})" if flags.search_type else ""
    ui.info(f'Searching Discogs for: "{query}"{type_note}...\n')

    results = await ctx.discogs.search(query, flags.search_type, flags.per_page, flags.verbose)

    error = error_of(results)
    if error == "rate_limited":
        ui.warn(f"Rate limited by Discogs. Try again in {results.get('retry_after')}s.")
        return
    if error == "auth_required":
        ui.error("Discogs requires a valid token for search. Set DISCOGS_TOKEN in .mzkconfig.")
        return
    if results is None or error:
        ui.warn("Search failed.")
        return

    if not results:
        ui.warn("No results found :(")
        return

    ui.success(f"Found {len(results)} result(s):\n")
    for result in results:
        ui.plain(format_result(result))
        ui.plain("")

    ctx.output.write_json(build_search_output(query, flags.search_type, flags.per_page, results))


def show_search_settings(ctx: "ExecutionContext") -> None:
    ui.info("Search Discogs with current settings\n")
    ui.plain(f"  search type: {ctx.flags.search_type or 'all'}")
    ui.plain(f"  results per page: {ctx.flags.per_page}")
    ui.plain("")
    ui.plain("  usage: search <query>")
    ui.plain("  example: search Daft Punk")


async def _search_handler(args: list[str], ctx: "ExecutionContext") -> bool:
    if not args:
        show_search_settings(ctx)
    else:
        await handle_search(" ".join(args), ctx)
    return True


SEARCH_COMMAND = CommandDescriptor(
    name="search",
    handler=_search_handler,
    aliases=("s",),
    usage="search <query>",
    description="Search Discogs for releases or artists",
)
