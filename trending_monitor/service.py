"""Cache guard around the trending page scraper."""

from __future__ import annotations

import asyncio
import logging

from .cache import Clock, ProjectCache, utc_now
from .models import CacheStatus, FetchSource, HealthStatus, ProjectRecord, ProjectsResult
from .parser import extract_projects
from .trending_client import TrendingFetchError, TrendingPageClient

LOGGER = logging.getLogger(__name__)


STATIC_FALLBACK_PROJECTS: tuple[ProjectRecord, ...] = (
    ProjectRecord(
        name="microsoft/vscode",
        url="https://github.com/microsoft/vscode",
        description="Visual Studio Code - open source code editor",
        stars=150_000,
        forks=25_000,
        language="TypeScript",
        rank=1,
    ),
    ProjectRecord(
        name="facebook/react",
        url="https://github.com/facebook/react",
        description="The library for web and native user interfaces",
        stars=200_000,
        forks=42_000,
        language="JavaScript",
        rank=2,
    ),
    ProjectRecord(
        name="tensorflow/tensorflow",
        url="https://github.com/tensorflow/tensorflow",
        description="An open source machine learning framework for everyone",
        stars=180_000,
        forks=70_000,
        language="C++",
        rank=3,
    ),
    ProjectRecord(
        name="torvalds/linux",
        url="https://github.com/torvalds/linux",
        description="Linux kernel source tree",
        stars=160_000,
        forks=50_000,
        language="C",
        rank=4,
    ),
    ProjectRecord(
        name="apple/swift",
        url="https://github.com/apple/swift",
        description="The Swift Programming Language",
        stars=65_000,
        forks=10_000,
        language="C++",
        rank=5,
    ),
)


class TrendingService:
    """Serves trending projects from cache, the network, or a fallback.

    ``get_projects`` never raises: a failed refresh returns the previous
    snapshot unchanged, or the static dataset when nothing was ever fetched.
    """

    def __init__(self, client: TrendingPageClient, cache: ProjectCache, *, clock: Clock = utc_now) -> None:
        self._client = client
        self._cache = cache
        self._clock = clock
        self._fetch_lock = asyncio.Lock()

    @property
    def cache(self) -> ProjectCache:
        return self._cache

    async def get_projects(self) -> ProjectsResult:
        if self._cache.is_fresh():
            LOGGER.debug("Serving trending projects from cache")
            return ProjectsResult(FetchSource.CACHED, self._cache.payload or ())

        async with self._fetch_lock:
            # Another caller may have refreshed the slot while we waited.
            if self._cache.is_fresh():
                return ProjectsResult(FetchSource.CACHED, self._cache.payload or ())
            return await self._refresh()

    async def _refresh(self) -> ProjectsResult:
        LOGGER.info("Fetching trending projects from %s", self._client.settings.trending_url)
        try:
            html = await self._client.fetch_page()
        except TrendingFetchError as exc:
            LOGGER.warning("Fetching trending projects failed: %s", exc)
            stale = self._cache.payload
            if stale is not None:
                LOGGER.warning("Serving stale cache fetched at %s", self._cache.fetched_at)
                return ProjectsResult(FetchSource.STALE, stale)
            LOGGER.warning("No cached data available; serving static fallback projects")
            return ProjectsResult(FetchSource.STATIC_FALLBACK, STATIC_FALLBACK_PROJECTS)

        projects = extract_projects(html, base_url=self._client.settings.base_url)
        stored = self._cache.store(projects)
        LOGGER.info("Fetched %s trending projects", len(stored))
        return ProjectsResult(FetchSource.FRESH, stored)

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_status(self) -> CacheStatus:
        return self._cache.status()

    async def health_check(self) -> HealthStatus:
        try:
            await self._client.probe()
        except TrendingFetchError as exc:
            return HealthStatus(healthy=False, timestamp=self._clock(), error=str(exc))
        return HealthStatus(healthy=True, timestamp=self._clock())


__all__ = ["TrendingService", "STATIC_FALLBACK_PROJECTS"]
