"""
MusicBrainz plugin.

Free API, no authentication. Used to bridge Discogs releases to ISRCs and
MusicBrainz IDs through URL relationship lookups.

MusicBrainz asks clients for at most one request per second; all requests
from this process share a single gate enforcing a 1.1 second spacing.
"""

import re
from typing import Any, Optional, Union

import aiohttp

from ..core import ui
from ..core.api_config import DISCOGS_WEB_URL, MUSICBRAINZ_API_URL, MUSICBRAINZ_USER_AGENT
from ..core.ratelimit import MinIntervalGate
from .base import ApiResult, BasePlugin, is_error

MIN_REQUEST_INTERVAL = 1.1

# Process-wide: shared by every MusicBrainzPlugin instance
RATE_GATE = MinIntervalGate(MIN_REQUEST_INTERVAL)

_MBID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I)


def is_valid_mbid(value: str) -> bool:
    return bool(value) and bool(_MBID_RE.match(value))


def _credit_name(recording: dict) -> str:
    credits = recording.get("artist-credit") or []
    if credits and isinstance(credits[0], dict):
        return (credits[0].get("artist") or {}).get("name") or ""
    return ""


class MusicBrainzPlugin(BasePlugin):
    """Recording, release and URL-relationship lookups."""

    name = "MusicBrainz"
    base_url = MUSICBRAINZ_API_URL

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, gate: MinIntervalGate = RATE_GATE):
        super().__init__(session)
        self.gate = gate

    def is_configured(self) -> bool:
        return True

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "User-Agent": MUSICBRAINZ_USER_AGENT}

    def _interpret_status(self, response: aiohttp.ClientResponse) -> ApiResult:
        if response.status == 503:
            ui.warn("MusicBrainz: Rate limit exceeded, please wait")
            return {"error": "rate_limited"}
        return None

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> ApiResult:
        await self.gate.wait()
        try:
            return await self._get_json(endpoint, {"fmt": "json", **(params or {})})
        finally:
            self.gate.mark()

    async def lookup_by_url(self, resource_url: str, verbose: bool = False) -> ApiResult:
        """Resolve an external URL to its MusicBrainz URL entity with release relations."""
        if verbose:
            ui.debug(f"MusicBrainz: Looking up URL {resource_url}")

        data = await self._request("/url", {"resource": resource_url})
        if not data or is_error(data):
            return data

        url_id = data.get("id")
        if not url_id:
            return None

        url_data = await self._request(f"/url/{url_id}", {"inc": "release-rels"})
        if verbose and url_data and not is_error(url_data):
            releases = [r for r in url_data.get("relations") or [] if r.get("release")]
            ui.debug(f"MusicBrainz: Found {len(releases)} linked release(s)")
        return url_data

    async def lookup_by_discogs_release(self, discogs_release_id: Union[int, str], verbose: bool = False) -> ApiResult:
        return await self.lookup_by_url(f"{DISCOGS_WEB_URL}/release/{discogs_release_id}", verbose)

    async def get_release(self, release_id: str, verbose: bool = False) -> ApiResult:
        """Fetch a release including its recordings and their ISRCs."""
        if verbose:
            ui.debug(f"MusicBrainz: Fetching release {release_id}")
        data = await self._request(f"/release/{release_id}", {"inc": "recordings+isrcs"})
        if verbose and data and not is_error(data):
            ui.debug(f'MusicBrainz: Found release "{data.get("title")}"')
        return data

    async def get_recording(self, recording_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"MusicBrainz: Fetching recording {recording_id}")
        data = await self._request(f"/recording/{recording_id}", {"inc": "isrcs"})
        if verbose and data and not is_error(data):
            ui.debug(
                f'MusicBrainz: Found recording "{data.get("title")}" '
                f"with {len(data.get('isrcs') or [])} ISRC(s)"
            )
        return data

    async def search_recordings(
        self, artist: str, title: str, limit: int = 5, verbose: bool = False
    ) -> ApiResult:
        """Lucene search on recording title and artist name."""
        if verbose:
            ui.debug(f'MusicBrainz: Searching for "{artist}" - "{title}"')
        query = f'recording:"{title}" AND artistname:"{artist}"'
        data = await self._request("/recording", {"query": query, "limit": limit})
        if verbose and data and not is_error(data):
            ui.debug(f"MusicBrainz: Found {data.get('count') or 0} recording(s)")
        return data

    async def get_isrcs_for_discogs_release(
        self, discogs_release_id: Union[int, str], verbose: bool = False
    ) -> dict[str, Any]:
        """Collect per-track ISRCs for a Discogs release.

        Walks Discogs URL -> linked MusicBrainz release -> recordings. The
        result always carries ``found`` and ``tracks``; failures add an
        ``error`` discriminator instead of raising.
        """
        url_data = await self.lookup_by_discogs_release(discogs_release_id, verbose)
        if not url_data or is_error(url_data):
            return {
                "found": False,
                "error": (url_data or {}).get("error") or "not_found",
                "tracks": [],
            }

        relation = next((r for r in url_data.get("relations") or [] if r.get("release")), None)
        if relation is None:
            return {"found": False, "error": "no_release_linked", "tracks": []}

        mb_release_id = relation["release"].get("id")
        release_title = relation["release"].get("title")

        release = await self.get_release(mb_release_id, verbose)
        if not release or is_error(release):
            return {
                "found": False,
                "error": (release or {}).get("error") or "release_fetch_failed",
                "release_title": release_title,
                "tracks": [],
            }

        tracks = []
        for medium in release.get("media") or []:
            for track in medium.get("tracks") or []:
                recording = track.get("recording") or {}
                tracks.append(
                    {
                        "position": track.get("number") or track.get("position"),
                        "title": track.get("title") or recording.get("title"),
                        "duration": track.get("length") or recording.get("length"),
                        "recording_id": recording.get("id"),
                        "isrcs": recording.get("isrcs") or [],
                    }
                )

        return {
            "found": True,
            "release_title": release.get("title"),
            "mb_release_id": mb_release_id,
            "tracks": tracks,
        }

    async def find_track_isrcs(self, artist: str, title: str, verbose: bool = False) -> dict[str, Any]:
        """Search a recording by artist/title and return the best match's ISRCs."""
        results = await self.search_recordings(artist, title, limit=5, verbose=verbose)
        recordings = [] if is_error(results) else (results or {}).get("recordings") or []
        if not recordings:
            return {
                "found": False,
                "error": (results or {}).get("error") or "no_results",
                "isrcs": [],
            }

        artist_lower = artist.lower()

        def _matches(rec: dict) -> bool:
            name = _credit_name(rec).lower()
            return bool(name) and (artist_lower in name or name in artist_lower)

        best = next((rec for rec in recordings if _matches(rec)), recordings[0])

        recording = await self.get_recording(best["id"], verbose)
        if not recording or is_error(recording):
            return {"found": True, "recording": best, "isrcs": [], "error": "isrc_fetch_failed"}

        return {
            "found": True,
            "recording": {
                "id": recording.get("id"),
                "title": recording.get("title"),
                "artist": _credit_name(best) or None,
                "length": recording.get("length"),
            },
            "isrcs": recording.get("isrcs") or [],
        }
