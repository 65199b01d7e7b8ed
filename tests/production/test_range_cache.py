"""Tests for RangeCache."""

from datetime import UTC, datetime

import pytest

from calendar_spine.production.models import DateRange, Task
from calendar_spine.production.range_cache import RangeCache, range_key

MARCH = DateRange(datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 3, 31, tzinfo=UTC))
APRIL = DateRange(datetime(2024, 4, 1, tzinfo=UTC), datetime(2024, 4, 30, tzinfo=UTC))


class CountingFetch:
    def __init__(self, error: Exception | None = None):
        self.calls: list[DateRange] = []
        self.error = error

    async def __call__(self, date_range: DateRange) -> list[Task]:
        self.calls.append(date_range)
        if self.error is not None:
            raise self.error
        return [Task(id=f"T{len(self.calls)}")]


def test_range_key_format():
    assert range_key(MARCH) == "2024-03-01T00:00:00+00:00-2024-03-31T00:00:00+00:00"


class TestGetOrFetch:
    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_a_hit(self, timer):
        cache = RangeCache(ttl_seconds=300, clock=timer)
        fetch = CountingFetch()

        first = await cache.get_or_fetch(MARCH, fetch)
        timer.advance(299)
        second = await cache.get_or_fetch(MARCH, fetch)

        assert len(fetch.calls) == 1
        assert first == second
        assert (cache.hits, cache.misses) == (1, 1)

    @pytest.mark.asyncio
    async def test_expired_entry_is_refetched(self, timer):
        cache = RangeCache(ttl_seconds=300, clock=timer)
        fetch = CountingFetch()

        await cache.get_or_fetch(MARCH, fetch)
        timer.advance(300)
        result = await cache.get_or_fetch(MARCH, fetch)

        assert len(fetch.calls) == 2
        assert result[0].id == "T2"

    @pytest.mark.asyncio
    async def test_ranges_are_independent(self, timer):
        cache = RangeCache(clock=timer)
        fetch = CountingFetch()
        await cache.get_or_fetch(MARCH, fetch)
        await cache.get_or_fetch(APRIL, fetch)
        assert fetch.calls == [MARCH, APRIL]
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_failed_fetch_stores_nothing(self, timer):
        cache = RangeCache(clock=timer)
        fetch = CountingFetch(error=ConnectionError("store down"))

        with pytest.raises(ConnectionError):
            await cache.get_or_fetch(MARCH, fetch)

        assert len(cache) == 0
        assert cache.peek(MARCH) is None

    @pytest.mark.asyncio
    async def test_fetch_overlapping_clear_is_not_stored(self, timer):
        cache = RangeCache(clock=timer)
        fetch = CountingFetch()

        async def fetch_then_clear(date_range):
            data = await fetch(date_range)
            cache.clear()
            return data

        result = await cache.get_or_fetch(MARCH, fetch_then_clear)

        assert result[0].id == "T1"
        assert len(cache) == 0
        await cache.get_or_fetch(MARCH, fetch)
        assert len(fetch.calls) == 2

    @pytest.mark.asyncio
    async def test_fetch_overlapping_invalidate_is_not_stored(self, timer):
        cache = RangeCache(clock=timer)
        fetch = CountingFetch()

        async def fetch_then_invalidate(date_range):
            data = await fetch(date_range)
            cache.invalidate(APRIL)
            return data

        await cache.get_or_fetch(MARCH, fetch_then_invalidate)

        assert cache.peek(MARCH) is None


class TestInspection:
    @pytest.mark.asyncio
    async def test_peek_does_not_count(self, timer):
        cache = RangeCache(clock=timer)
        await cache.get_or_fetch(MARCH, CountingFetch())
        assert cache.peek(MARCH)[0].id == "T1"
        assert cache.hits == 0
        timer.advance(301)
        assert cache.peek(MARCH) is None

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self, timer):
        cache = RangeCache(clock=timer)
        fetch = CountingFetch()
        await cache.get_or_fetch(MARCH, fetch)
        await cache.get_or_fetch(APRIL, fetch)

        assert cache.invalidate(MARCH) is True
        assert cache.invalidate(MARCH) is False
        cache.clear()
        assert len(cache) == 0
