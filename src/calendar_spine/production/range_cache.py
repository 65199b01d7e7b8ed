"""
RangeCache - time-bounded memoisation of task range queries.

Revisiting a window (navigating back and forth, toggling detail) must not
hit the remote store again for five minutes. Results are kept per
``(start ISO, end ISO)`` pair with the time they were fetched; an entry
older than the TTL is a miss and is refetched.

Manifesto:
    - **Never stale:** an expired entry is never returned
    - **No partial writes:** a failed fetch stores nothing
    - **No hidden retry:** fetch errors propagate unchanged
    - **No resurrection:** a fetch that started before clear() or
      invalidate() returns its data but does not store it

Architecture:
    ::

        get_or_fetch(range, fetch_fn)
             │
             ├── key = "<startISO>-<endISO>"
             ├── entry valid (now - timestamp < ttl) ──▶ return entry.data
             └── miss ──▶ await fetch_fn(range) ──▶ store {data, timestamp}
                                   │
                                   ├── cleared meanwhile ──▶ returned, not stored
                                   └── raises ──▶ nothing stored, re-raised

Examples:
    >>> cache = RangeCache(ttl_seconds=300)
    >>> tasks = await cache.get_or_fetch(date_range, service_fetch)   # miss
    >>> tasks = await cache.get_or_fetch(date_range, service_fetch)   # hit

Tags:
    cache, ttl, memoisation, async, calendar-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calendar_spine.core.cache import Clock
from calendar_spine.core.logging import get_logger
from calendar_spine.production.models import DateRange, Task

logger = get_logger(__name__)

FetchFn = Callable[[DateRange], Awaitable[list[Task]]]


@dataclass(frozen=True)
class CacheEntry:
    data: list[Task]
    timestamp: float


def range_key(date_range: DateRange) -> str:
    """Cache key for a range: ``"<startISO>-<endISO>"``."""
    return f"{date_range.start_iso}-{date_range.end_iso}"


class RangeCache:
    """Per-range task cache with a fixed time-to-live."""

    def __init__(self, *, ttl_seconds: float = 300, clock: Clock = time.time):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0
        self._generation = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _valid(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self._ttl

    def peek(self, date_range: DateRange) -> list[Task] | None:
        """Return the cached tasks for a range without fetching or counting."""
        entry = self._entries.get(range_key(date_range))
        if entry is None or not self._valid(entry):
            return None
        return entry.data

    async def get_or_fetch(self, date_range: DateRange, fetch_fn: FetchFn) -> list[Task]:
        key = range_key(date_range)
        entry = self._entries.get(key)
        if entry is not None and self._valid(entry):
            self.hits += 1
            logger.debug("range_cache.hit", key=key, count=len(entry.data))
            return entry.data

        if entry is not None:
            del self._entries[key]

        self.misses += 1
        logger.debug("range_cache.miss", key=key)
        generation = self._generation
        data = list(await fetch_fn(date_range))
        if generation != self._generation:
            logger.debug("range_cache.discarded", key=key)
            return data
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
        return data

    def invalidate(self, date_range: DateRange) -> bool:
        """Drop the entry for one range. Returns True if one existed."""
        self._generation += 1
        return self._entries.pop(range_key(date_range), None) is not None

    def clear(self) -> None:
        count = len(self._entries)
        self._generation += 1
        self._entries.clear()
        logger.info("range_cache.cleared", entries=count)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["CacheEntry", "FetchFn", "RangeCache", "range_key"]
