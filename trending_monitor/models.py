"""Domain models shared by the scraper, cache and report layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .config import UTC

UPDATED_AT_UNKNOWN = "today"


@dataclass(slots=True, frozen=True)
class ProjectRecord:
    """One repository entry scraped from the trending page."""

    name: str
    url: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    language: str = ""
    updated_at: str = UPDATED_AT_UNKNOWN
    rank: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "description": self.description,
            "stars": self.stars,
            "forks": self.forks,
            "language": self.language,
            "updatedAt": self.updated_at,
            "rank": self.rank,
        }


class FetchSource(str, Enum):
    """Which branch of the cache guard produced a result."""

    CACHED = "cached"
    FRESH = "fresh"
    STALE = "stale"
    STATIC_FALLBACK = "static_fallback"


@dataclass(slots=True, frozen=True)
class ProjectsResult:
    source: FetchSource
    projects: tuple[ProjectRecord, ...] = field(default_factory=tuple)

    def to_list(self) -> list[dict[str, Any]]:
        return [project.to_dict() for project in self.projects]


@dataclass(slots=True, frozen=True)
class CacheStatus:
    """Read-only snapshot of the cache slot."""

    has_cache: bool
    last_fetch: datetime | None
    cache_age_ms: int
    is_expired: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasCache": self.has_cache,
            "lastFetch": self.last_fetch.isoformat() if self.last_fetch else None,
            "cacheAge": self.cache_age_ms,
            "isExpired": self.is_expired,
        }


@dataclass(slots=True, frozen=True)
class HealthStatus:
    healthy: bool
    timestamp: datetime
    error: str | None = None

    @property
    def status(self) -> str:
        return "healthy" if self.healthy else "unhealthy"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status, "timestamp": self.timestamp.isoformat()}
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(slots=True, frozen=True)
class ReportMetadata:
    """Stored report as seen by directory listing."""

    file_name: str
    file_path: Path
    created_at: datetime
    modified_at: datetime
    size: int

    @classmethod
    def from_path(cls, path: Path) -> "ReportMetadata":
        """Build metadata from ``path``'s stat result."""

        stats = path.stat()
        # st_birthtime only exists on some platforms; ctime is the closest substitute.
        created = getattr(stats, "st_birthtime", stats.st_ctime)
        return cls(
            file_name=path.name,
            file_path=path,
            created_at=datetime.fromtimestamp(created, tz=UTC),
            modified_at=datetime.fromtimestamp(stats.st_mtime, tz=UTC),
            size=stats.st_size,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "filePath": str(self.file_path),
            "createdAt": self.created_at.isoformat(),
            "modifiedAt": self.modified_at.isoformat(),
            "size": self.size,
        }


__all__ = [
    "CacheStatus",
    "FetchSource",
    "HealthStatus",
    "ProjectRecord",
    "ProjectsResult",
    "ReportMetadata",
    "UPDATED_AT_UNKNOWN",
]
