"""HTTP client for the GitHub trending page."""

from __future__ import annotations

import logging

import httpx

from .config import SourceSettings

LOGGER = logging.getLogger(__name__)


class TrendingFetchError(RuntimeError):
    """Raised when the trending page cannot be retrieved."""


class TrendingPageClient:
    """Fetches the raw trending page with browser-like headers."""

    def __init__(self, settings: SourceSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._headers = {
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        }
        self._client = client or httpx.AsyncClient(
            headers=self._headers,
            follow_redirects=True,
            max_redirects=5,
        )
        self._owns_client = client is None

    @property
    def settings(self) -> SourceSettings:
        return self._settings

    async def __aenter__(self) -> "TrendingPageClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_page(self) -> str:
        """Return the trending page markup or raise :class:`TrendingFetchError`."""

        url = self._settings.trending_url
        try:
            response = await self._client.get(
                url,
                headers=self._headers,
                timeout=self._settings.request_timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as exc:
            raise TrendingFetchError(f"Timed out fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise TrendingFetchError(f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            LOGGER.warning("Trending page returned HTTP %s", response.status_code)
            raise TrendingFetchError(f"Unexpected HTTP {response.status_code} from {url}")
        return response.text

    async def probe(self) -> None:
        """Issue a lightweight request to the source origin.

        Raises :class:`TrendingFetchError` if the origin is unreachable.
        """

        url = self._settings.base_url
        try:
            response = await self._client.get(
                url,
                headers={"User-Agent": self._settings.user_agent},
                timeout=self._settings.health_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise TrendingFetchError(f"Request to {url} failed: {exc}") from exc
        if not response.is_success:
            raise TrendingFetchError(f"Unexpected HTTP {response.status_code} from {url}")


__all__ = ["TrendingPageClient", "TrendingFetchError"]
