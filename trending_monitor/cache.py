"""Single-slot in-memory cache for the latest trending snapshot."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Sequence

from .config import UTC
from .models import CacheStatus, ProjectRecord

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ProjectCache:
    """Holds at most one snapshot together with the time it was fetched.

    Expired snapshots are kept so they can be served as a fallback; only
    :meth:`store` and :meth:`clear` replace them.
    """

    def __init__(self, ttl: timedelta = timedelta(hours=1), *, clock: Clock = utc_now) -> None:
        self._ttl = ttl
        self._clock = clock
        self._payload: tuple[ProjectRecord, ...] | None = None
        self._fetched_at: datetime | None = None

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def fetched_at(self) -> datetime | None:
        return self._fetched_at

    @property
    def payload(self) -> tuple[ProjectRecord, ...] | None:
        return self._payload

    def is_fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self._ttl

    def store(self, projects: Sequence[ProjectRecord]) -> tuple[ProjectRecord, ...]:
        self._payload = tuple(projects)
        self._fetched_at = self._clock()
        return self._payload

    def clear(self) -> None:
        self._payload = None
        self._fetched_at = None

    def status(self) -> CacheStatus:
        if self._fetched_at is None:
            return CacheStatus(has_cache=self._payload is not None, last_fetch=None, cache_age_ms=0, is_expired=True)
        age = self._clock() - self._fetched_at
        return CacheStatus(
            has_cache=self._payload is not None,
            last_fetch=self._fetched_at,
            cache_age_ms=int(age.total_seconds() * 1000),
            is_expired=age > self._ttl,
        )


__all__ = ["ProjectCache", "Clock", "utc_now"]
