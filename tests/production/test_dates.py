"""Tests for TaskDateResolver."""

from datetime import UTC, datetime

from calendar_spine.core.enums import TaskStatus
from calendar_spine.production.dates import TaskDateResolver
from calendar_spine.production.models import ProductionSession, Task


def _utc(*args):
    return datetime(*args, tzinfo=UTC)


class TestPlannedWindow:
    def test_explicit_end(self, make_task):
        resolved = TaskDateResolver().resolve(make_task())
        assert resolved.start == _utc(2024, 3, 4, 8)
        assert resolved.end == _utc(2024, 3, 4, 12)
        assert resolved.unparsable_fields == ()

    def test_estimated_end_used_without_end(self, make_task):
        task = make_task(endDate=None, estimatedEndDate="2024-03-04T10:00:00Z", estimatedDuration=600)
        assert TaskDateResolver().resolve(task).end == _utc(2024, 3, 4, 10)

    def test_end_from_duration(self, make_task):
        task = make_task(endDate=None, estimatedDuration=90)
        assert TaskDateResolver().resolve(task).end == _utc(2024, 3, 4, 9, 30)

    def test_duration_rounds_half_up(self, make_task):
        task = make_task(endDate=None, estimatedDuration=30.5)
        assert TaskDateResolver().resolve(task).end == _utc(2024, 3, 4, 8, 31)

    def test_no_end_information(self, make_task):
        resolved = TaskDateResolver().resolve(make_task(endDate=None))
        assert resolved.start is not None
        assert resolved.end is None

    def test_unparsable_fields_reported(self, make_task):
        task = make_task(scheduledDate="not a date", endDate="2024-02-31")
        resolved = TaskDateResolver().resolve(task)
        assert resolved.start is None
        assert resolved.end is None
        assert resolved.unparsable_fields == ("scheduled_date", "end_date")

    def test_not_completed_ignores_sessions(self, make_task):
        task = make_task(
            productionSessions=[{"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-02T00:00:00Z"}]
        )
        assert TaskDateResolver().resolve(task).start == _utc(2024, 3, 4, 8)


class TestCompletedSessions:
    def test_window_spans_all_sessions(self):
        task = Task(
            id="T1",
            status=TaskStatus.COMPLETED,
            scheduled_date="2024-03-04T08:00:00Z",
            end_date="2024-03-04T12:00:00Z",
            production_sessions=[
                ProductionSession("2024-01-01T10:00:00Z", "2024-01-01T16:00:00Z"),
                ProductionSession("2024-01-01T08:00:00Z", "2024-01-01T12:00:00Z"),
            ],
        )
        resolved = TaskDateResolver().resolve(task)
        assert resolved.start == _utc(2024, 1, 1, 8)
        assert resolved.end == _utc(2024, 1, 1, 16)

    def test_missing_session_ends_fall_back_to_planned_end(self):
        task = Task(
            id="T1",
            status=TaskStatus.COMPLETED,
            scheduled_date="2024-03-04T08:00:00Z",
            end_date="2024-03-04T12:00:00Z",
            production_sessions=[ProductionSession("2024-03-04T09:00:00Z", None)],
        )
        resolved = TaskDateResolver().resolve(task)
        assert resolved.start == _utc(2024, 3, 4, 9)
        assert resolved.end == _utc(2024, 3, 4, 12)

    def test_completed_without_sessions_uses_plan(self):
        task = Task(id="T1", status=TaskStatus.COMPLETED, scheduled_date="2024-03-04T08:00:00Z")
        assert TaskDateResolver().resolve(task).start == _utc(2024, 3, 4, 8)

    def test_bad_session_value_reported(self):
        task = Task(
            id="T1",
            status=TaskStatus.COMPLETED,
            production_sessions=[ProductionSession("garbage", "2024-01-01T16:00:00Z")],
        )
        resolved = TaskDateResolver().resolve(task)
        assert resolved.start is None
        assert resolved.end == _utc(2024, 1, 1, 16)
        assert "production_sessions.start_date" in resolved.unparsable_fields
