"""Tests for calendar_spine.core.logging."""

import pytest
import structlog

from calendar_spine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestContext:
    def test_bind_and_unbind(self):
        bind_context(view="resourceTimelineWeek", detail="day")
        assert structlog.contextvars.get_contextvars() == {
            "view": "resourceTimelineWeek",
            "detail": "day",
        }
        unbind_context("view")
        assert structlog.contextvars.get_contextvars() == {"detail": "day"}

    def test_sync_log_context(self):
        with LogContext(action="navigate"):
            assert structlog.contextvars.get_contextvars()["action"] == "navigate"
        assert "action" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_async_log_context(self):
        async with LogContext(request_seq=3):
            assert structlog.contextvars.get_contextvars()["request_seq"] == 3
        assert structlog.contextvars.get_contextvars() == {}


class TestConfigure:
    def test_json_logging_emits_events(self):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        with structlog.testing.capture_logs() as logs:
            get_logger("tests").info("range_cache.cleared", entries=2)
        assert logs == [{"event": "range_cache.cleared", "entries": 2, "log_level": "info"}]

    def test_level_filtering(self):
        configure_logging(level="WARNING", json_format=False)
        with structlog.testing.capture_logs() as logs:
            get_logger("tests").warning("orchestrator.error", message="boom")
        assert logs[0]["log_level"] == "warning"
