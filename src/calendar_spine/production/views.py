"""
ViewResolver - view and slot selection for a range and detail level.

Manifesto:
    The widget offers day, week, month and year timelines; the user picks a
    date range and a detail level (hour, day, week). Which timeline to show
    and how wide a slot is follow from those two inputs alone, so the
    decision lives in one small state machine instead of being re-derived
    in every handler.

Architecture:
    ::

        detail   range_days      view                     slot
        ───────  ──────────────  ───────────────────────  ──────
        hour     <= 1            resourceTimelineDay      1 hour
        hour     2 .. 30         resourceTimelineWeek     1 hour
        hour     > 30            downgrade to day (or clamp end to start + 30 days)
        day      <= 7            resourceTimelineWeek     1 day
        day      > 7             resourceTimelineMonth    1 day
        week     any             resourceTimelineYear     1 week

        range_days = ceil((end - start) / 1 day)

    Direct view selection adjusts the detail instead:

        resourceTimelineDay   → hour
        resourceTimelineWeek  → day   (only when detail was week)
        resourceTimelineMonth → day   (only when detail was hour)
        resourceTimelineYear  → week

Examples:
    >>> resolver = ViewResolver(max_days_for_hourly_view=30)
    >>> resolver.resolve(start, start + timedelta(days=45), Detail.HOUR).detail
    <Detail.DAY: 'day'>

Guardrails:
    ❌ DON'T: Raise for an oversized hourly range
    ✅ DO: Return a resolution with ``downgraded`` or ``clamped`` set

Tags:
    view-resolution, state-machine, detail, calendar-spine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from calendar_spine.core.enums import Detail, ViewId
from calendar_spine.core.errors import HourlyRangeTooLarge, InvalidDateRange
from calendar_spine.core.timestamps import MS_PER_DAY, days_between
from calendar_spine.production.models import DateRange, ViewConfig

SLOT_DURATIONS: dict[Detail, timedelta] = {
    Detail.HOUR: timedelta(hours=1),
    Detail.DAY: timedelta(days=1),
    Detail.WEEK: timedelta(weeks=1),
}

DATE_LABEL = "%a %d %b"
HOUR_LABEL = "%H:%M"
WEEK_LABEL = "W%V"


@dataclass(frozen=True)
class ViewResolution:
    view: ViewId
    detail: Detail
    slot_duration: timedelta
    visible_start: datetime
    visible_end: datetime
    range_days: int
    downgraded: bool = False
    clamped: bool = False
    requested_days: int | None = None

    @property
    def adjusted(self) -> bool:
        return self.downgraded or self.clamped


def view_for_span(days: float) -> ViewId:
    """Timeline that best fits a range of ``days`` days."""
    if days <= 1:
        return ViewId.TIMELINE_DAY
    if days <= 7:
        return ViewId.TIMELINE_WEEK
    if days <= 31:
        return ViewId.TIMELINE_MONTH
    return ViewId.TIMELINE_YEAR


def is_genuine_user_navigation(
    old: DateRange, new: DateRange, threshold_days: float = 1.0
) -> bool:
    """True when either bound moved by more than ``threshold_days``.

    The widget re-reports its visible range on every re-render; shifts of
    up to the threshold are its own rounding, larger ones come from the
    user's prev/next controls.
    """
    threshold = timedelta(milliseconds=threshold_days * MS_PER_DAY)
    return abs(new.start - old.start) > threshold or abs(new.end - old.end) > threshold


class ViewResolver:
    """Resolves (range, detail) to a concrete view and slot configuration."""

    def __init__(self, *, max_days_for_hourly_view: int = 30):
        self.max_days_for_hourly_view = max_days_for_hourly_view

    def check_hourly_range(self, start: datetime, end: datetime) -> None:
        """Raise :class:`HourlyRangeTooLarge` if ``start..end`` is too long for hourly slots."""
        range_days = days_between(start, end)
        if range_days > self.max_days_for_hourly_view:
            raise HourlyRangeTooLarge(range_days, self.max_days_for_hourly_view)

    def resolve(
        self,
        start: datetime,
        end: datetime,
        detail: Detail,
        *,
        clamp: bool = False,
    ) -> ViewResolution:
        if start is None or end is None:
            raise InvalidDateRange("Both range bounds are required", start=start, end=end)
        if start > end:
            raise InvalidDateRange("Range start is after its end", start=start, end=end)

        detail = Detail(detail)
        requested_days = days_between(start, end)
        downgraded = clamped = False
        if detail == Detail.HOUR:
            try:
                self.check_hourly_range(start, end)
            except HourlyRangeTooLarge:
                if clamp:
                    end = start + timedelta(days=self.max_days_for_hourly_view)
                    clamped = True
                else:
                    detail = Detail.DAY
                    downgraded = True

        range_days = days_between(start, end)
        return ViewResolution(
            view=self._view_for(detail, range_days),
            detail=detail,
            slot_duration=SLOT_DURATIONS[detail],
            visible_start=start,
            visible_end=end,
            range_days=range_days,
            downgraded=downgraded,
            clamped=clamped,
            requested_days=requested_days,
        )

    @staticmethod
    def _view_for(detail: Detail, range_days: int) -> ViewId:
        if detail == Detail.HOUR:
            return ViewId.TIMELINE_DAY if range_days <= 1 else ViewId.TIMELINE_WEEK
        if detail == Detail.DAY:
            return ViewId.TIMELINE_WEEK if range_days <= 7 else ViewId.TIMELINE_MONTH
        return ViewId.TIMELINE_YEAR

    @staticmethod
    def select_view(view: ViewId, detail: Detail) -> Detail:
        """Detail to use after the user picks ``view`` directly."""
        view = ViewId(view)
        if view == ViewId.TIMELINE_DAY:
            return Detail.HOUR
        if view == ViewId.TIMELINE_WEEK and detail == Detail.WEEK:
            return Detail.DAY
        if view == ViewId.TIMELINE_MONTH and detail == Detail.HOUR:
            return Detail.DAY
        if view == ViewId.TIMELINE_YEAR:
            return Detail.WEEK
        return detail

    @staticmethod
    def slot_label_format(detail: Detail, range_days: int) -> tuple[str, ...]:
        """strftime patterns per header level; hourly multi-day ranges get two levels."""
        if detail == Detail.HOUR:
            return (DATE_LABEL, HOUR_LABEL) if range_days > 1 else (HOUR_LABEL,)
        if detail == Detail.WEEK:
            return (WEEK_LABEL,)
        return (DATE_LABEL,)

    def view_config(self, resolution: ViewResolution, view: ViewId | None = None) -> ViewConfig:
        """Widget configuration for a resolution (optionally overriding the view)."""
        start, end = resolution.visible_start, resolution.visible_end
        if start.date() == end.date():
            title = f"{start:%d %b %Y}"
        else:
            title = f"{start:%d %b %Y} - {end:%d %b %Y}"
        return ViewConfig(
            view=view or resolution.view,
            detail=resolution.detail,
            slot_duration=resolution.slot_duration,
            visible_start=start,
            visible_end=end,
            title=title,
            slot_label_format=self.slot_label_format(resolution.detail, resolution.range_days),
        )


__all__ = [
    "SLOT_DURATIONS",
    "ViewResolution",
    "ViewResolver",
    "is_genuine_user_navigation",
    "view_for_span",
]
