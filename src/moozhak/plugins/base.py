"""
Defines the base class shared by every service plugin.

Each plugin wraps one third-party JSON API. `BasePlugin` owns the aiohttp
session (created lazily inside the running event loop, closed by `close()`
or the async context manager) and provides the single request/response
helper the plugins build on.

Expected failures are never raised. A request yields one of three shapes:

- the decoded JSON body
- an error marker, ``{"error": <discriminator>, ...}``
- ``None`` for any other failure
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from ..core import ui
from ..core.api_config import USER_AGENT
from ..core.parse import parse_leading_int

logger = logging.getLogger(__name__)

ApiResult = Optional[dict[str, Any]]


def is_error(result: Any) -> bool:
    """True when `result` is an error marker."""
    return isinstance(result, dict) and bool(result.get("error"))


def error_of(result: Any) -> Optional[str]:
    return result.get("error") if is_error(result) else None


def retry_after_seconds(response: aiohttp.ClientResponse, default: int = 60) -> int:
    seconds = parse_leading_int(response.headers.get("Retry-After", ""))
    return seconds if seconds is not None else default


class BasePlugin(ABC):
    """An abstract base class that all service plugins inherit from."""

    name: str = "service"
    base_url: str = ""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the plugin has every credential it needs."""

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "User-Agent": USER_AGENT}

    def _interpret_status(self, response: aiohttp.ClientResponse) -> ApiResult:
        """Map a non-success status to an error marker, or None if unrecognized."""
        return None

    async def _get_json(self, endpoint: str, params: Optional[dict] = None) -> ApiResult:
        url = f"{self.base_url}{endpoint}"
        try:
            async with self._get_session().get(url, params=params, headers=self._headers()) as response:
                if response.status >= 400:
                    marker = self._interpret_status(response)
                    if marker is None:
                        ui.error(f"{self.name} API error: {response.status}")
                    return marker
                return await response.json()
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.debug("%s request to %s failed", self.name, url, exc_info=True)
            ui.error(f"{self.name} request failed: {e}")
            return None
