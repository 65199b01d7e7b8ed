"""
TaskDateResolver - effective display window of a task.

A completed task is shown where the work actually happened: the earliest
production-session start to the latest production-session end. Every
other task is shown at its planned window, with the end derived from the
estimated duration when the store has no explicit end.

Resolution order::

    Completed and sessions present
        start = min(session.start_date)   else planned start
        end   = max(session.end_date)     else planned end
    otherwise (planned)
        start = scheduled_date
        end   = end_date
              → estimated_end_date
              → start + estimated_duration minutes
              → None

Malformed values never raise. They resolve to ``None`` and the field name
is listed in :attr:`ResolvedDates.unparsable_fields` for the caller to log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from calendar_spine.core.timestamps import add_minutes, round_half_up, to_instant
from calendar_spine.production.models import Task


@dataclass(frozen=True)
class ResolvedDates:
    start: datetime | None
    end: datetime | None
    unparsable_fields: tuple[str, ...] = field(default=())


class _Reader:
    """Collects the names of fields whose values could not be normalised."""

    def __init__(self) -> None:
        self.unparsable: list[str] = []

    def instant(self, value: Any, name: str) -> datetime | None:
        result = to_instant(value)
        if result is None and value not in (None, "") and name not in self.unparsable:
            self.unparsable.append(name)
        return result


class TaskDateResolver:
    """Computes :class:`ResolvedDates` for a task. Stateless."""

    def resolve(self, task: Task) -> ResolvedDates:
        reader = _Reader()
        if task.is_completed and task.production_sessions:
            start, end = self._from_sessions(task, reader)
        else:
            start, end = self._planned(task, reader)
        return ResolvedDates(start=start, end=end, unparsable_fields=tuple(reader.unparsable))

    def _planned(self, task: Task, reader: _Reader) -> tuple[datetime | None, datetime | None]:
        start = reader.instant(task.scheduled_date, "scheduled_date")
        return start, self._planned_end(task, start, reader)

    def _planned_end(
        self, task: Task, start: datetime | None, reader: _Reader
    ) -> datetime | None:
        end = reader.instant(task.end_date, "end_date")
        if end is not None:
            return end
        end = reader.instant(task.estimated_end_date, "estimated_end_date")
        if end is not None:
            return end
        if start is not None and task.estimated_duration:
            return add_minutes(start, round_half_up(task.estimated_duration))
        return None

    def _from_sessions(
        self, task: Task, reader: _Reader
    ) -> tuple[datetime | None, datetime | None]:
        starts = [
            instant
            for session in task.production_sessions
            if (instant := reader.instant(session.start_date, "production_sessions.start_date"))
        ]
        ends = [
            instant
            for session in task.production_sessions
            if (instant := reader.instant(session.end_date, "production_sessions.end_date"))
        ]

        if starts and ends:
            return min(starts), max(ends)

        # A side with no session value falls back to the planned window.
        planned_start, planned_end = self._planned(task, reader)
        start = min(starts) if starts else planned_start
        end = max(ends) if ends else planned_end
        return start, end


__all__ = ["ResolvedDates", "TaskDateResolver"]
