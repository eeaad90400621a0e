"""Caching layer for GitHub data and derived analytics.

Provides an async-compatible key/value cache with TTL support. Entries carry
the time they were stored, and every read may ask for a stricter freshness
window than the cache default. The dashboard uses one cache instance with
different windows per kind of data (issues and commits 30 minutes, analytics
15 minutes, developer metrics an hour, manager alerts 10 minutes).

Key Exports:
    AsyncCache: Core async cache with TTL support.
    CacheKeys: Key builders for the data the dashboard caches.
    DashboardCache: Best-effort typed facade used by the dashboard service.

Example:
    >>> from agent_dashboard.utils.caching import AsyncCache
    >>>
    >>> cache = AsyncCache(ttl_seconds=1800, max_size=100)
    >>> await cache.set("github:issues:AIBL", issues)
    >>> fresh = await cache.get("github:issues:AIBL", max_age_seconds=900)

Thread Safety:
    All cache operations use asyncio.Lock for synchronization, making
    them safe for concurrent access from multiple async tasks. The cache
    lives in the dashboard process; restarting the server empties it.
"""

import asyncio
import fnmatch
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

import structlog

from agent_dashboard.config.settings import CacheConfig

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AsyncCache:
    """Async cache with TTL (time-to-live) support.

    Attributes:
        _cache: Internal storage mapping keys to (value, timestamp) tuples.
        _ttl: Default time-to-live as a timedelta.
        _max_size: Maximum number of entries before eviction.
        _clock: Callable returning the current aware datetime.

    Example:
        >>> cache = AsyncCache(ttl_seconds=60, max_size=1000)
        >>> await cache.set("key", {"data": "value"})
        >>> result = await cache.get("key")
        >>> print(result)  # {"data": "value"}
        >>>
        >>> # After 60 seconds...
        >>> result = await cache.get("key")
        >>> print(result)  # None (expired)
    """

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_size: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the async cache.

        Args:
            ttl_seconds: Default time-to-live for entries in seconds.
            max_size: Maximum number of entries to store. When exceeded,
                the oldest entry is evicted to make room.
            clock: Source of the current time. Tests pass a fake clock to
                move time forward without sleeping.
        """
        self._cache: dict[str, tuple[Any, datetime]] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_size = max_size
        self._clock = clock
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str, max_age_seconds: float | None = None) -> Any | None:
        """Get a value from the cache.

        Args:
            key: The cache key to look up.
            max_age_seconds: Freshness window for this read. Defaults to the
                cache TTL. An entry older than the window is a miss; it is
                only removed once it is older than the TTL too.

        Returns:
            The cached value if found and fresh enough, None otherwise.

        Note:
            A return value of None could mean either the key doesn't
            exist or it has expired. If you need to cache None values,
            wrap them in a container object.
        """
        max_age = self._ttl if max_age_seconds is None else timedelta(seconds=max_age_seconds)

        async with self._lock:
            if key in self._cache:
                value, timestamp = self._cache[key]
                age = self._clock() - timestamp
                if age < max_age:
                    self._hits += 1
                    log.debug("cache_hit", key=key, age_seconds=int(age.total_seconds()))
                    return value
                if age >= self._ttl:
                    del self._cache[key]
                    log.debug("cache_expired", key=key)

            self._misses += 1
            log.debug("cache_miss", key=key)
            return None

    async def set(self, key: str, value: Any) -> None:
        """Set a value in the cache.

        Setting a key that already exists updates the value and resets its
        age. If the cache is at max capacity, the oldest entry is evicted.
        """
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_size:
                self._evict_oldest()

            self._cache[key] = (value, self._clock())
            log.debug("cache_set", key=key)

    async def delete(self, key: str) -> bool:
        """Delete a value from the cache.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                log.debug("cache_delete", key=key)
                return True
            return False

    async def invalidate(self, pattern: str) -> int:
        """Delete every key matching a glob pattern.

        Args:
            pattern: Shell-style pattern, e.g. ``github:*:AIBL``.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            keys = [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]
            for key in keys:
                del self._cache[key]

        if keys:
            log.info("cache_invalidated", pattern=pattern, count=len(keys))
        return len(keys)

    async def clear(self) -> None:
        """Clear the entire cache and reset statistics."""
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._hits = 0
            self._misses = 0
            log.info("cache_cleared", entries_cleared=count)

    def _evict_oldest(self) -> None:
        """Evict the oldest cache entry. Caller must hold the lock."""
        if not self._cache:
            return

        oldest_key = min(self._cache.items(), key=lambda x: x[1][1])[0]
        del self._cache[oldest_key]
        log.debug("cache_evicted", key=oldest_key)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary containing size, max_size, hits, misses, hit_rate
            and ttl_seconds.
        """
        total_requests = self._hits + self._misses
        hit_rate = self._hits / total_requests if total_requests > 0 else 0.0

        return {
            "size": len(self._cache),
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": hit_rate,
            "ttl_seconds": self._ttl.total_seconds(),
        }


class CacheKeys:
    """Key builders for the data the dashboard caches."""

    @staticmethod
    def issues(project: str) -> str:
        return f"github:issues:{project}"

    @staticmethod
    def commits(project: str) -> str:
        return f"github:commits:{project}"

    @staticmethod
    def analytics(project: str) -> str:
        return f"analytics:{project}"

    @staticmethod
    def developer_metrics(weeks: int) -> str:
        return f"developer:weeks:{weeks}"

    @staticmethod
    def manager_alerts() -> str:
        return "manager:alerts"


class DashboardCache:
    """Best-effort cache facade with one freshness window per kind of data.

    Cache problems never fail a request: a failed read is a miss and a
    failed write is logged and ignored.
    """

    def __init__(self, config: CacheConfig, cache: AsyncCache | None = None) -> None:
        self.config = config
        longest = max(
            config.issues_max_age_minutes,
            config.commits_max_age_minutes,
            config.analytics_max_age_minutes,
            config.developer_max_age_minutes,
            config.alerts_max_age_minutes,
        )
        self.cache = cache or AsyncCache(ttl_seconds=longest * 60, max_size=config.max_size)

    async def get(self, key: str, max_age_minutes: int) -> Any | None:
        try:
            return await self.cache.get(key, max_age_seconds=max_age_minutes * 60)
        except Exception as e:
            log.warning("cache_read_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any) -> None:
        try:
            await self.cache.set(key, value)
        except Exception as e:
            log.warning("cache_write_failed", key=key, error=str(e))

    async def get_or_fetch(self, key: str, max_age_minutes: int, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or fetch, store and return it."""
        cached_value = await self.get(key, max_age_minutes)
        if cached_value is not None:
            log.info("cache_used", key=key)
            return cached_value

        log.info("cache_refresh", key=key)
        value = await fetch()
        await self.set(key, value)
        return value

    async def issues(self, project: str, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.get_or_fetch(CacheKeys.issues(project), self.config.issues_max_age_minutes, fetch)

    async def commits(self, project: str, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.get_or_fetch(CacheKeys.commits(project), self.config.commits_max_age_minutes, fetch)

    async def analytics(self, project: str, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.get_or_fetch(CacheKeys.analytics(project), self.config.analytics_max_age_minutes, fetch)

    async def developer_metrics(self, weeks: int, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.get_or_fetch(
            CacheKeys.developer_metrics(weeks), self.config.developer_max_age_minutes, fetch
        )

    async def manager_alerts(self, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.get_or_fetch(CacheKeys.manager_alerts(), self.config.alerts_max_age_minutes, fetch)

    async def invalidate_project(self, project: str) -> int:
        """Drop every cached entry for a project."""
        removed = 0
        for pattern in (f"github:*:{project}", CacheKeys.analytics(project)):
            removed += await self.cache.invalidate(pattern)
        return removed
