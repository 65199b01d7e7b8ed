"""
Local key-value store abstraction with in-memory and JSON-file backends.

The calendar persists one small piece of local state, the last applied
custom date range, so a user returning within the hour lands on the
window they left. ``CacheBackend`` is the contract; ``FileCache`` keeps
the values in a JSON document under the data directory and
``InMemoryCache`` serves tests and throwaway sessions.

Manifesto:
    - **Protocol-based:** CacheBackend defines the contract
    - **TTL support:** Time-based expiration for all backends
    - **Injectable clock:** Expiry is testable without sleeping
    - **Zero config:** InMemoryCache works out of the box

Architecture:
    ::

        CacheBackend (Protocol)
        ├── InMemoryCache  — single-process, bounded LRU
        └── FileCache      — JSON document on disk, survives restarts

        API: get(key) → value | None
             set(key, value, ttl_seconds=None)
             delete(key)
             exists(key) → bool
             clear()

Examples:
    >>> from calendar_spine.core.cache import InMemoryCache
    >>> cache = InMemoryCache(max_size=100, default_ttl_seconds=3600)
    >>> cache.set("production-calendar-date-range", {"start": "2024-03-01"})
    >>> cache.get("production-calendar-date-range")
    {'start': '2024-03-01'}

Guardrails:
    ❌ DON'T: Store task snapshots here (RangeCache owns query results)
    ✅ DO: Keep values small and JSON-serializable

Tags:
    cache, key-value, ttl, in-memory, json-file, calendar-spine

Doc-Types:
    - API Reference
    - Infrastructure Guide
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from calendar_spine.core.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]


class CacheBackend(Protocol):
    """Protocol for key-value backends.

    Keys are strings, values are JSON-serializable.

    Implementations:
        - :class:`InMemoryCache` — single-process, bounded LRU cache
        - :class:`FileCache` — JSON document in the data directory
    """

    def get(self, key: str) -> Any | None:
        """Return the value, or ``None`` if missing or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value. ``ttl_seconds=None`` uses the backend default."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. No-op if it does not exist."""
        ...

    def exists(self, key: str) -> bool:
        ...

    def clear(self) -> None:
        ...


# ------------------------------------------------------------------ #
# In-Memory Cache
# ------------------------------------------------------------------ #


class InMemoryCache:
    """Bounded in-memory cache with TTL support.

    Uses LRU eviction when ``max_size`` is reached.

    Example:
        cache = InMemoryCache(max_size=50, default_ttl_seconds=3600)
        cache.set("range", {"start": "2024-03-01T00:00:00+00:00"})
    """

    def __init__(
        self,
        *,
        max_size: int = 1_000,
        default_ttl_seconds: int | None = 3600,
        clock: Clock = time.time,
    ):
        self._store: dict[str, tuple[Any, float | None]] = {}
        self._access_order: list[str] = []
        self._max_size = max_size
        self._default_ttl = default_ttl_seconds
        self._clock = clock

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    def _touch(self, key: str) -> None:
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)

    def get(self, key: str) -> Any | None:
        if key not in self._store:
            return None

        value, expires_at = self._store[key]
        if self._expired(expires_at):
            self.delete(key)
            return None

        self._touch(key)
        return value

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = (self._clock() + ttl) if ttl else None

        # Evict LRU if at capacity
        if key not in self._store and len(self._store) >= self._max_size:
            if self._access_order:
                lru_key = self._access_order.pop(0)
                self._store.pop(lru_key, None)

        self._store[key] = (value, expires_at)
        self._touch(key)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
        if key in self._access_order:
            self._access_order.remove(key)

    def exists(self, key: str) -> bool:
        if key not in self._store:
            return False

        _, expires_at = self._store[key]
        if self._expired(expires_at):
            self.delete(key)
            return False

        return True

    def clear(self) -> None:
        self._store.clear()
        self._access_order.clear()

    def size(self) -> int:
        """Return current number of cached keys."""
        return len(self._store)


# ------------------------------------------------------------------ #
# JSON File Cache
# ------------------------------------------------------------------ #


class FileCache:
    """JSON-file backed cache.

    The whole store is one JSON object ``{key: {"value": ..., "expires_at": ...}}``.
    Every write rewrites the file; the calendar stores a handful of keys
    at most. A corrupt or unreadable file is treated as empty.

    Example:
        cache = FileCache(Path("~/.calendar-spine/calendar-store.json").expanduser())
        cache.set("production-calendar-date-range", {...}, ttl_seconds=3600)
    """

    def __init__(
        self,
        path: Path,
        *,
        default_ttl_seconds: int | None = None,
        clock: Clock = time.time,
    ):
        self._path = Path(path)
        self._default_ttl = default_ttl_seconds
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("file_cache.unreadable", path=str(self._path), error=str(exc))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")

    def _live_entry(self, data: dict[str, dict[str, Any]], key: str) -> dict[str, Any] | None:
        entry = data.get(key)
        if not isinstance(entry, dict):
            return None
        expires_at = entry.get("expires_at")
        if expires_at is not None and self._clock() >= expires_at:
            return None
        return entry

    def get(self, key: str) -> Any | None:
        data = self._load()
        entry = self._live_entry(data, key)
        if entry is None:
            if key in data:
                self.delete(key)
            return None
        return entry.get("value")

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        data = self._load()
        data[key] = {
            "value": value,
            "expires_at": (self._clock() + ttl) if ttl else None,
        }
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def exists(self, key: str) -> bool:
        return self._live_entry(self._load(), key) is not None

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()


__all__ = [
    "CacheBackend",
    "Clock",
    "FileCache",
    "InMemoryCache",
]
