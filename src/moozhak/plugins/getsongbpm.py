"""
GetSongBPM plugin: tempo, key and time signature lookups.

Requires an API key (``GETBPM_API_KEY``); the free tier allows 3,000
requests per hour. The key travels as the ``api_key`` query parameter.
"""

from typing import Any, Optional

import aiohttp

from ..core import ui
from ..core.api_config import GETSONGBPM_API_URL
from .base import ApiResult, BasePlugin, is_error


def format_bpm_result(result: dict, fmt: str = "human") -> str:
    """Render a `find_bpm` result in one of the tracklist output formats."""
    if not result.get("found"):
        return ",,," if fmt == "csv" else "BPM not found"

    song = result.get("song") or {}
    bpm = song.get("tempo") or "N/A"
    key = song.get("key") or "N/A"
    time_sig = song.get("time_signature") or "N/A"

    if fmt == "csv":
        return f"{bpm},{key},{time_sig}"
    if fmt == "pipe":
        return f"{bpm} BPM | Key: {key} | Time: {time_sig}"
    if fmt == "markdown":
        return f"| {bpm} | {key} | {time_sig} |"
    return f"{bpm} BPM  Key: {key}  Time: {time_sig}"


class GetSongBPMPlugin(BasePlugin):
    """Song and artist search against GetSongBPM."""

    name = "GetSongBPM"
    base_url = GETSONGBPM_API_URL

    def __init__(self, api_key: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(session)
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _interpret_status(self, response: aiohttp.ClientResponse) -> ApiResult:
        if response.status == 401:
            ui.error("GetSongBPM: Invalid API key")
            return {"error": "invalid_api_key"}
        if response.status == 429:
            ui.warn("GetSongBPM: Rate limit exceeded (3,000/hour). Try again later.")
            return {"error": "rate_limited"}
        return None

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> ApiResult:
        if not self.api_key:
            ui.error("GetSongBPM: No API key configured. Set GETBPM_API_KEY in .mzkconfig")
            return {"error": "no_api_key"}
        return await self._get_json(endpoint, {"api_key": self.api_key, **(params or {})})

    async def _search(self, search_type: str, lookup: str, limit: Optional[int]) -> ApiResult:
        params: dict[str, Any] = {"type": search_type, "lookup": lookup}
        if limit:
            params["limit"] = limit
        return await self._request("/search/", params)

    async def search_song(
        self, artist: str, title: str, limit: Optional[int] = None, verbose: bool = False
    ) -> ApiResult:
        if verbose:
            ui.debug(f'GetSongBPM: Searching for "{artist}" - "{title}"')
        data = await self._search("both", f"song:{title} artist:{artist}", limit)
        if verbose and data and not is_error(data):
            ui.debug(f"GetSongBPM: Found {len(data.get('search') or [])} result(s)")
        return data

    async def search_by_title(self, title: str, limit: Optional[int] = None, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f'GetSongBPM: Searching for song "{title}"')
        return await self._search("song", title, limit)

    async def search_artist(self, name: str, limit: Optional[int] = None, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f'GetSongBPM: Searching for artist "{name}"')
        return await self._search("artist", name, limit)

    async def get_song(self, song_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"GetSongBPM: Fetching song {song_id}")
        data = await self._request("/song/", {"id": song_id})
        if verbose and data and isinstance(data.get("song"), dict):
            song = data["song"]
            ui.debug(f'GetSongBPM: Found "{song.get("title")}" - {song.get("tempo")} BPM')
        return data

    async def get_artist(self, artist_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"GetSongBPM: Fetching artist {artist_id}")
        data = await self._request("/artist/", {"id": artist_id})
        if verbose and data and isinstance(data.get("artist"), dict):
            ui.debug(f'GetSongBPM: Found artist "{data["artist"].get("name")}"')
        return data

    async def find_bpm(self, artist: str, title: str, verbose: bool = False) -> dict[str, Any]:
        """Search and return the best match with its tempo.

        Prefers a song whose artist name equals or contains `artist`, falling
        back to the first hit.
        """
        found = await self.search_song(artist, title, verbose=verbose)
        if not found or is_error(found):
            return {"found": False, "error": (found or {}).get("error") or "search_failed", "bpm": None}

        songs = found.get("search") or []
        # The API answers {"search": {"error": "no result"}} when nothing matches
        if not isinstance(songs, list) or not songs:
            return {"found": False, "error": "no_results", "bpm": None}

        artist_lower = artist.lower()

        def _song_artist(song: dict) -> str:
            return ((song.get("artist") or {}).get("name") or "").lower()

        best = next(
            (s for s in songs if _song_artist(s) and (_song_artist(s) == artist_lower or artist_lower in _song_artist(s))),
            songs[0],
        )

        tempo = best.get("tempo")
        try:
            bpm = int(float(tempo)) if tempo else None
        except (TypeError, ValueError):
            bpm = None

        album = best.get("album") or {}
        return {
            "found": True,
            "bpm": bpm,
            "song": {
                "id": best.get("id"),
                "title": best.get("title"),
                "artist": (best.get("artist") or {}).get("name"),
                "tempo": tempo,
                "key": best.get("key_of"),
                "time_signature": best.get("time_sig"),
                "open_key": best.get("open_key"),
                "danceability": best.get("danceability"),
                "acousticness": best.get("acousticness"),
                "uri": best.get("uri"),
                "album": album.get("title"),
                "year": album.get("year"),
            },
        }
