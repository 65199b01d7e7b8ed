"""
Shared enums for the calendar engine.

Used by settings, the production models, the view resolver and the CLI.
Import from here so that configuration does not depend on the
production package.

STDLIB ONLY - NO PYDANTIC.
"""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle status of a production task."""

    SCHEDULED = "Scheduled"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    ON_HOLD = "OnHold"

    @classmethod
    def parse(cls, value: object) -> TaskStatus | None:
        """Match a raw status string by value or member name, ignoring case,
        spaces and underscores. Unknown values return ``None``."""
        if isinstance(value, TaskStatus):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.replace(" ", "").replace("_", "").lower()
        for member in cls:
            if wanted in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return None


class Detail(str, Enum):
    """Time granularity of timeline slots."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


class GroupBy(str, Enum):
    """Timeline row grouping mode."""

    WORKSTATION = "workstation"
    ORDER = "order"


class ViewId(str, Enum):
    """Calendar views understood by the widget."""

    DAY_GRID_MONTH = "dayGridMonth"
    TIME_GRID_WEEK = "timeGridWeek"
    TIME_GRID_DAY = "timeGridDay"
    TIMELINE_DAY = "resourceTimelineDay"
    TIMELINE_WEEK = "resourceTimelineWeek"
    TIMELINE_MONTH = "resourceTimelineMonth"
    TIMELINE_YEAR = "resourceTimelineYear"

    @property
    def is_resource_view(self) -> bool:
        return self.value.startswith("resourceTimeline")


class NavigationAction(str, Enum):
    """Toolbar navigation buttons."""

    PREV = "prev"
    NEXT = "next"
    TODAY = "today"


class NoticeLevel(str, Enum):
    """Severity of a user-visible notice."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


__all__ = [
    "Detail",
    "GroupBy",
    "NavigationAction",
    "NoticeLevel",
    "TaskStatus",
    "ViewId",
]
