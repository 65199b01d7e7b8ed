"""Tests for DateRangeStore."""

from datetime import UTC, datetime

import pytest

from calendar_spine.core.cache import FileCache, InMemoryCache
from calendar_spine.production.models import DateRange
from calendar_spine.production.persistence import DateRangeStore

RANGE = DateRange(
    datetime(2024, 3, 1, tzinfo=UTC),
    datetime(2024, 3, 7, 23, 59, 59, 999000, tzinfo=UTC),
)


@pytest.fixture
def backend(timer):
    return InMemoryCache(default_ttl_seconds=None, clock=timer)


class TestDateRangeStore:
    def test_save_and_load(self, backend, timer):
        store = DateRangeStore(backend, clock=timer)
        store.save(RANGE)
        assert store.load() == RANGE

    def test_stale_record_discarded(self, backend, timer):
        store = DateRangeStore(backend, ttl_seconds=3600, clock=timer)
        store.save(RANGE)
        timer.advance(3599)
        assert store.load() == RANGE
        timer.advance(1)
        assert store.load() is None
        assert not backend.exists(store.key)

    def test_malformed_record_discarded(self, backend, timer):
        store = DateRangeStore(backend, clock=timer)
        backend.set(store.key, {"start": "2024-03-07", "end": "2024-03-01", "saved_at": timer()})
        assert store.load() is None
        assert not backend.exists(store.key)

    def test_non_mapping_record_ignored(self, backend, timer):
        store = DateRangeStore(backend, clock=timer)
        backend.set(store.key, "2024-03-01")
        assert store.load() is None

    def test_clear(self, backend, timer):
        store = DateRangeStore(backend, key="custom-key", clock=timer)
        store.save(RANGE)
        store.clear()
        assert store.load() is None

    def test_file_backend(self, tmp_path, timer):
        path = tmp_path / "store.json"
        DateRangeStore(FileCache(path, clock=timer), clock=timer).save(RANGE)
        assert DateRangeStore(FileCache(path, clock=timer), clock=timer).load() == RANGE
