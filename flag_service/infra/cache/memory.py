"""In-process read-through cache of flag record snapshots.

Entries are immutable ``FlagRecord`` values keyed by flag key. Readers load
through the cache on a miss; every write path invalidates the key before it
returns. A generation counter, bumped on each invalidation, stops a load
that started before a write from storing the pre-write record afterwards.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flag_service.infra.logging import get_lazy_logger
from flag_service.infra.metrics import prometheus

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from flag_service.core.settings.cache import FlagCacheSettings
    from flag_service.features.featureflags.evaluation import FlagRecord

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    record: FlagRecord
    expires_at: float | None


class FlagRecordCache:
    """Bounded LRU cache with optional TTL, safe for concurrent coroutines.

    Example:
        cache = FlagRecordCache(max_entries=1000)
        record = await cache.get_or_load("checkout", lambda: repo.load_record(session, "checkout"))
        await cache.invalidate("checkout")  # after any write to "checkout"
    """

    def __init__(
        self,
        max_entries: int = 10_000,
        ttl_seconds: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity; the least recently used entry is evicted beyond it.
            ttl_seconds: Entry lifetime, or None to keep entries until invalidated.
            clock: Monotonic time source, injectable for tests.
        """
        if max_entries < 1:
            msg = "max_entries must be at least 1"
            raise ValueError(msg)
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._generation = 0

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[FlagRecord | None]],
    ) -> FlagRecord | None:
        """Return the cached record, loading and caching it on a miss.

        The loader runs outside the lock. Missing flags (loader returns None)
        are not cached, so a flag created later is visible immediately.

        Args:
            key: Flag key.
            loader: Coroutine factory reading the record from storage.

        Returns:
            The record, or None if the flag does not exist.
        """
        async with self._lock:
            record = self._lookup(key)
            generation = self._generation

        if record is not None:
            prometheus.flag_cache_hits_total.inc()
            _lazy.debug(lambda: f"flag cache hit: {key}")
            return record

        prometheus.flag_cache_misses_total.inc()
        _lazy.debug(lambda: f"flag cache miss: {key}")

        record = await loader()
        if record is None:
            return None

        async with self._lock:
            if generation == self._generation:
                self._store(key, record)
            else:
                _lazy.debug(lambda: f"flag cache skipped stale load: {key}")
        return record

    async def invalidate(self, key: str) -> None:
        """Drop ``key`` and fence off loads that started before this call."""
        async with self._lock:
            self._generation += 1
            self._entries.pop(key, None)
            prometheus.flag_cache_entries.set(len(self._entries))
        prometheus.flag_cache_invalidations_total.labels(scope="key").inc()
        _lazy.debug(lambda: f"flag cache invalidated: {key}")

    async def clear(self) -> None:
        """Drop every entry."""
        async with self._lock:
            self._generation += 1
            self._entries.clear()
            prometheus.flag_cache_entries.set(0)
        prometheus.flag_cache_invalidations_total.labels(scope="all").inc()
        logger.debug("Flag cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _lookup(self, key: str) -> FlagRecord | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock() >= entry.expires_at:
            del self._entries[key]
            prometheus.flag_cache_entries.set(len(self._entries))
            return None
        self._entries.move_to_end(key)
        return entry.record

    def _store(self, key: str, record: FlagRecord) -> None:
        expires_at = None if self.ttl_seconds is None else self._clock() + self.ttl_seconds
        self._entries[key] = _Entry(record=record, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        prometheus.flag_cache_entries.set(len(self._entries))


_flag_cache: FlagRecordCache | None = None


def create_flag_cache(settings: FlagCacheSettings) -> FlagRecordCache | None:
    """Build a cache from settings, or None when caching is disabled."""
    if not settings.enabled:
        return None
    return FlagRecordCache(max_entries=settings.max_entries, ttl_seconds=settings.ttl_seconds)


def get_flag_cache() -> FlagRecordCache | None:
    """Get the process-wide flag cache, created from CACHE_* settings on first use."""
    global _flag_cache
    if _flag_cache is None:
        from flag_service.core.settings import get_cache_settings

        _flag_cache = create_flag_cache(get_cache_settings())
    return _flag_cache


def set_flag_cache(cache: FlagRecordCache | None) -> None:
    """Replace the process-wide flag cache (None re-reads settings on next use)."""
    global _flag_cache
    _flag_cache = cache


__all__ = [
    "FlagRecordCache",
    "create_flag_cache",
    "get_flag_cache",
    "set_flag_cache",
]
