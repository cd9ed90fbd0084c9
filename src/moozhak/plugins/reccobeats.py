"""
ReccoBeats plugin: track details and audio features (tempo, energy, mood).

Only the free, unauthenticated endpoints are used.
"""

import asyncio
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

import aiohttp

from ..core import ui
from ..core.api_config import RECCOBEATS_API_URL
from .base import ApiResult, BasePlugin, is_error, retry_after_seconds

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I)


def is_valid_reccobeats_id(value: str) -> bool:
    return bool(value) and bool(_UUID_RE.match(value))


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_bpm(tempo: Optional[float]) -> str:
    if tempo is None:
        return "N/A"
    return str(_round_half_up(tempo))


def _percent(features: dict, key: str) -> Any:
    value = features.get(key)
    return "N/A" if value is None else _round_half_up(value * 100)


def format_audio_features(features: Optional[dict], fmt: str = "human") -> str:
    """Render tempo plus energy/danceability/valence percentages."""
    if not features or is_error(features):
        return ",,,," if fmt == "csv" else "Audio features unavailable"

    bpm = format_bpm(features.get("tempo"))
    energy = _percent(features, "energy")
    dance = _percent(features, "danceability")
    valence = _percent(features, "valence")

    if fmt == "csv":
        return f"{bpm},{energy},{dance},{valence}"
    if fmt == "pipe":
        return f"{bpm} | {energy}% | {dance}% | {valence}%"
    if fmt == "markdown":
        return f"| {bpm} | {energy}% | {dance}% | {valence}% |"
    return f"BPM: {bpm}  Energy: {energy}%  Danceability: {dance}%  Mood: {valence}%"


class ReccoBeatsPlugin(BasePlugin):
    name = "ReccoBeats"
    base_url = RECCOBEATS_API_URL

    def is_configured(self) -> bool:
        return True

    def _interpret_status(self, response: aiohttp.ClientResponse) -> ApiResult:
        if response.status == 429:
            retry_after = retry_after_seconds(response)
            ui.warn(f"ReccoBeats rate limit exceeded. Retry after {retry_after}s")
            return {"error": "rate_limited", "retry_after": retry_after}
        if response.status == 401:
            ui.error("ReccoBeats: This endpoint requires authentication")
            return {"error": "auth_required"}
        return None

    async def get_track(self, track_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"ReccoBeats: Fetching track {track_id}")
        data = await self._get_json(f"/track/{track_id}")
        if verbose and data and not is_error(data):
            ui.debug(f'ReccoBeats: Found track "{data.get("trackTitle")}"')
        return data

    async def get_tracks(self, track_ids: Iterable[str], verbose: bool = False) -> ApiResult:
        ids = list(track_ids or [])
        if not ids:
            return {"content": []}
        if verbose:
            ui.debug(f"ReccoBeats: Fetching {len(ids)} tracks")
        data = await self._get_json("/track", {"ids": ",".join(ids)})
        if verbose and data and not is_error(data):
            ui.debug(f"ReccoBeats: Found {len(data.get('content') or [])} tracks")
        return data

    async def get_audio_features(self, track_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"ReccoBeats: Fetching audio features for {track_id}")
        data = await self._get_json(f"/track/{track_id}/audio-features")
        if verbose and data and not is_error(data):
            ui.debug(f"ReccoBeats: BPM = {data.get('tempo')}")
        return data

    async def get_artist(self, artist_id: str, verbose: bool = False) -> ApiResult:
        if verbose:
            ui.debug(f"ReccoBeats: Fetching artist {artist_id}")
        data = await self._get_json(f"/artist/{artist_id}")
        if verbose and data and not is_error(data):
            ui.debug(f'ReccoBeats: Found artist "{data.get("name")}"')
        return data

    async def get_track_with_features(self, track_id: str, verbose: bool = False) -> ApiResult:
        """Fetch track and audio features concurrently and merge them.

        A failed track lookup is returned as-is. A failed features lookup
        leaves ``audio_features`` set to None.
        """
        track, features = await asyncio.gather(
            self.get_track(track_id, verbose),
            self.get_audio_features(track_id, verbose),
        )
        if not track or is_error(track):
            return track
        return {**track, "audio_features": None if is_error(features) else features}
