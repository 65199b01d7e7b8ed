"""Persisted custom date range.

The last applied custom range is stored under one key with a freshness
window (one hour by default). It is a convenience: an unreadable, stale or
malformed record is treated as absent and never raises.
"""

from __future__ import annotations

import time
from typing import Any

from calendar_spine.core.cache import CacheBackend, Clock
from calendar_spine.core.logging import get_logger
from calendar_spine.core.timestamps import to_instant
from calendar_spine.production.models import DateRange

logger = get_logger(__name__)


class DateRangeStore:
    """Save and restore the custom range through a :class:`CacheBackend`."""

    def __init__(
        self,
        backend: CacheBackend,
        *,
        key: str = "production-calendar-date-range",
        ttl_seconds: int = 3600,
        clock: Clock = time.time,
    ):
        self._backend = backend
        self._key = key
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    def save(self, date_range: DateRange) -> None:
        self._backend.set(
            self._key,
            {
                "start": date_range.start_iso,
                "end": date_range.end_iso,
                "saved_at": self._clock(),
            },
            ttl_seconds=self._ttl,
        )
        logger.debug("range_store.saved", start=date_range.start_iso, end=date_range.end_iso)

    def load(self) -> DateRange | None:
        """Return the saved range if it is still fresh, else None."""
        record: Any = self._backend.get(self._key)
        if not isinstance(record, dict):
            return None

        saved_at = record.get("saved_at")
        if not isinstance(saved_at, (int, float)) or self._clock() - saved_at >= self._ttl:
            logger.debug("range_store.expired", key=self._key)
            self.clear()
            return None

        start, end = to_instant(record.get("start")), to_instant(record.get("end"))
        if start is None or end is None or start > end:
            logger.warning("range_store.malformed", key=self._key, record=record)
            self.clear()
            return None
        return DateRange(start, end)

    def clear(self) -> None:
        self._backend.delete(self._key)


__all__ = ["DateRangeStore"]
