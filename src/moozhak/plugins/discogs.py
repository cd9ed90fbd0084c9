"""
Discogs plugin: database search plus master/release lookups.

Requests carry the personal access token as
``Authorization: Discogs token=<token>`` when one is configured. Every call
is dumped to the session log, and in verbose mode the request payload and
response body are echoed to the console.
"""

import json
import logging
from typing import Any, Optional, Union

import aiohttp

from ..core import ui
from ..core.api_config import DISCOGS_API_URL, DISCOGS_WEB_URL
from ..core.logging_util import SessionLog
from .base import ApiResult, BasePlugin, is_error, retry_after_seconds

logger = logging.getLogger(__name__)


def build_discogs_url(resource_type: str, resource_id: Union[int, str]) -> str:
    return f"{DISCOGS_WEB_URL}/{resource_type}/{resource_id}"


def build_discogs_url_from_uri(uri: str) -> str:
    """Join a Discogs resource URI (``/master/123``) onto the web host."""
    return f"{DISCOGS_WEB_URL}{uri}"


def format_result(result: dict) -> str:
    """One-line summary of a search hit: id | title | year | formats | catno.

    Missing (or falsy) fields are skipped.
    """
    formats = result.get("format") or []
    parts = [
        result.get("id"),
        result.get("title") or "Untitled",
        result.get("year"),
        ", ".join(formats) if isinstance(formats, list) else formats,
        result.get("catno"),
    ]
    return "  " + " | ".join(str(p) for p in parts if p)


def _csv_field(value: str) -> str:
    if any(ch in value for ch in (",", '"', "\n")):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_track(track: dict, index: int, fmt: str = "human") -> str:
    """Render one tracklist entry in the given output format."""
    position = track.get("position") or str(index + 1)
    title = track.get("title") or "Untitled"
    duration = track.get("duration") or ""

    if fmt == "csv":
        return f"{position},{_csv_field(title)},{duration}"
    if fmt == "pipe":
        return f"{position} | {title} | {duration}"
    if fmt == "markdown":
        return f"| {position} | {title} | {duration} |"
    return f"  {position} {title}" + (f" ({duration})" if duration else "")


def _boxed_json(data: Any, prefix: str = "") -> list[str]:
    return [f"{prefix}{line}" for line in json.dumps(data, indent=2, default=str).splitlines()]


class DiscogsPlugin(BasePlugin):
    """Implements search and tracklist retrieval against the Discogs API."""

    name = "Discogs"
    base_url = DISCOGS_API_URL

    def __init__(
        self,
        token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        session_log: Optional[SessionLog] = None,
    ):
        super().__init__(session)
        self.token = token
        self.session_log = session_log

    def is_configured(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self.token:
            headers["Authorization"] = f"Discogs token={self.token}"
        return headers

    def _interpret_status(self, response: aiohttp.ClientResponse) -> ApiResult:
        if response.status == 401:
            ui.error("Discogs: authentication required (check your token)")
            return {"error": "auth_required"}
        if response.status == 429:
            retry_after = retry_after_seconds(response)
            ui.warn(f"Discogs rate limit exceeded. Retry after {retry_after}s")
            return {"error": "rate_limited", "retry_after": retry_after}
        return None

    async def _request(
        self, label: str, endpoint: str, params: Optional[dict] = None, verbose: bool = False
    ) -> ApiResult:
        logger.debug("Discogs %s %s", label, params)
        data = await self._get_json(endpoint, params)

        if self.session_log is not None:
            self.session_log.log_api_response(label, params or {}, data)

        if verbose:
            lines = [f"Endpoint: {label}", "Payload:"] + _boxed_json(params or {}, "  ")
            lines.append("── Response ──")
            lines += _boxed_json(data)
            ui.boxed("HTTP Request", lines)
        return data

    async def search(
        self,
        query: str,
        search_type: Optional[str] = None,
        per_page: int = 5,
        verbose: bool = False,
    ) -> Union[list[dict], ApiResult]:
        """Search the database. Returns the result list, an error marker, or None."""
        params: dict[str, Any] = {"q": query, "per_page": per_page}
        if search_type:
            params["type"] = search_type

        data = await self._request("database.search", "/database/search", params, verbose)
        if data is None or is_error(data):
            return data
        return data.get("results") or []

    async def get_master(self, master_id: int, verbose: bool = False) -> ApiResult:
        return await self._request("database.getMaster", f"/masters/{master_id}", verbose=verbose)

    async def get_release(self, release_id: int, verbose: bool = False) -> ApiResult:
        return await self._request("database.getRelease", f"/releases/{release_id}", verbose=verbose)
