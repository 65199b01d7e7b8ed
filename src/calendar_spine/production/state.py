"""
Calendar state and pure transition functions.

Manifesto:
    Everything the calendar remembers between user actions (range,
    detail, grouping, view, toggles, filter selections) lives in one
    immutable :class:`RangeOrchestratorState`. Each user action is a
    reducer ``(state, input) -> Transition(state, effects)``; reducers
    never perform I/O. They *declare* what should happen next (fetch,
    persist, notify) and the orchestrator carries it out.

Architecture:
    ::

        action ──▶ reducer(state, ...) ──▶ Transition
                                            ├── state    (new, frozen)
                                            └── effects  (FetchTasks | PersistRange | Notify)

        Range modes:
          periodic     range = the day / Monday-week / month / year of the
                       current view containing an anchor date
          custom       range chosen by the user; end extended to 23:59:59.999;
                       widget-reported ranges ignored unless the user
                       genuinely navigated

Guardrails:
    ❌ DON'T: Call the task service from a reducer
    ✅ DO: Return FetchTasks and let the orchestrator fetch

    ❌ DON'T: Mutate a state instance
    ✅ DO: dataclasses.replace() and return the new one

Tags:
    state-machine, reducers, effects, immutable, calendar-spine

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Union

from calendar_spine.core.enums import Detail, GroupBy, NavigationAction, NoticeLevel, ViewId
from calendar_spine.core.errors import HourlyRangeTooLarge, InvalidDateRange
from calendar_spine.core.timestamps import days_between, end_of_day, start_of_day, to_instant
from calendar_spine.production.models import CalendarFilters, DateRange, Notice
from calendar_spine.production.views import ViewResolution, ViewResolver, is_genuine_user_navigation

# ---------------------------------------------------------------------------
# State and effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeOrchestratorState:
    custom_range_active: bool
    start: datetime
    end: datetime
    detail: Detail
    group_by: GroupBy
    view: ViewId
    editable: bool = True
    use_workstation_colors: bool = False
    filters: CalendarFilters = field(default_factory=CalendarFilters)

    @property
    def range(self) -> DateRange:
        return DateRange(self.start, self.end)


@dataclass(frozen=True)
class FetchTasks:
    range: DateRange


@dataclass(frozen=True)
class PersistRange:
    """Persist the custom range, or forget it when ``range`` is None."""

    range: DateRange | None


@dataclass(frozen=True)
class Notify:
    notice: Notice


Effect = Union[FetchTasks, PersistRange, Notify]


@dataclass(frozen=True)
class Transition:
    state: RangeOrchestratorState
    effects: tuple[Effect, ...] = ()


# ---------------------------------------------------------------------------
# Calendar periods
# ---------------------------------------------------------------------------


def add_months(dt: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    index = dt.month - 1 + months
    year, month = dt.year + index // 12, index % 12 + 1
    next_month = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=dt.tzinfo)
    last_day = (next_month - timedelta(days=1)).day
    return dt.replace(year=year, month=month, day=min(dt.day, last_day))


def period_for(view: ViewId, anchor: datetime) -> DateRange:
    """The day, Monday-based week, month or year of ``view`` containing ``anchor``."""
    day = start_of_day(anchor)
    if view in (ViewId.TIMELINE_DAY, ViewId.TIME_GRID_DAY):
        return DateRange(day, end_of_day(day))
    if view in (ViewId.TIMELINE_WEEK, ViewId.TIME_GRID_WEEK):
        monday = day - timedelta(days=day.weekday())
        return DateRange(monday, end_of_day(monday + timedelta(days=6)))
    if view == ViewId.TIMELINE_YEAR:
        first = day.replace(month=1, day=1)
        return DateRange(first, end_of_day(first.replace(month=12, day=31)))
    first = day.replace(day=1)
    return DateRange(first, end_of_day(add_months(first, 1) - timedelta(days=1)))


def _shift_period(view: ViewId, anchor: datetime, steps: int) -> datetime:
    if view in (ViewId.TIMELINE_DAY, ViewId.TIME_GRID_DAY):
        return anchor + timedelta(days=steps)
    if view in (ViewId.TIMELINE_WEEK, ViewId.TIME_GRID_WEEK):
        return anchor + timedelta(weeks=steps)
    if view == ViewId.TIMELINE_YEAR:
        return add_months(anchor, 12 * steps)
    return add_months(anchor, steps)


def _periodic_view(detail: Detail, current_view: ViewId, range_days: int) -> ViewId:
    if detail == Detail.HOUR:
        return ViewId.TIMELINE_DAY if current_view == ViewId.TIMELINE_DAY else ViewId.TIMELINE_WEEK
    if detail == Detail.DAY:
        return ViewId.TIMELINE_WEEK if range_days <= 7 else ViewId.TIMELINE_MONTH
    return ViewId.TIMELINE_YEAR


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _adjustment_notice(resolution: ViewResolution, resolver: ViewResolver) -> Notify | None:
    if not resolution.adjusted:
        return None
    limit = resolver.max_days_for_hourly_view
    error = HourlyRangeTooLarge(resolution.requested_days or resolution.range_days, limit)
    if resolution.clamped:
        message = f"{error.message}. The range was shortened to {limit} days."
    else:
        message = f"{error.message}. Switched to daily detail."
    return Notify(Notice(NoticeLevel.WARNING, message, error_type=type(error).__name__))


def _apply_resolution(
    state: RangeOrchestratorState,
    resolution: ViewResolution,
    view: ViewId | None = None,
    **changes: Any,
) -> RangeOrchestratorState:
    return replace(
        state,
        start=resolution.visible_start,
        end=resolution.visible_end,
        detail=resolution.detail,
        view=view or resolution.view,
        **changes,
    )


def _enter_period(
    state: RangeOrchestratorState,
    view: ViewId,
    anchor: datetime,
    detail: Detail,
    resolver: ViewResolver,
    **changes: Any,
) -> Transition:
    period = period_for(view, anchor)
    resolution = resolver.resolve(period.start, period.end, detail)
    new_state = _apply_resolution(state, resolution, view=view, **changes)
    return Transition(new_state, (FetchTasks(new_state.range),))


def _parse_range(start: Any, end: Any) -> tuple[datetime, datetime]:
    start_at, end_at = to_instant(start), to_instant(end)
    if start_at is None or end_at is None:
        raise InvalidDateRange("Both range bounds must be valid dates", start=start, end=end)
    if start_at > end_at:
        raise InvalidDateRange("Range start is after its end", start=start_at, end=end_at)
    return start_at, end_at


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def initial_state(
    now: datetime,
    resolver: ViewResolver,
    *,
    detail: Detail = Detail.DAY,
    group_by: GroupBy = GroupBy.WORKSTATION,
    editable: bool = True,
    use_workstation_colors: bool = False,
    filters: CalendarFilters | None = None,
) -> RangeOrchestratorState:
    """Periodic state around ``now``; with day detail that is the current month."""
    month = period_for(ViewId.TIMELINE_MONTH, now)
    view = _periodic_view(Detail(detail), ViewId.TIMELINE_MONTH, days_between(month.start, month.end))
    period = period_for(view, now)
    resolution = resolver.resolve(period.start, period.end, Detail(detail))
    return RangeOrchestratorState(
        custom_range_active=False,
        start=resolution.visible_start,
        end=resolution.visible_end,
        detail=resolution.detail,
        group_by=GroupBy(group_by),
        view=view,
        editable=editable,
        use_workstation_colors=use_workstation_colors,
        filters=filters or CalendarFilters(),
    )


def navigate(
    state: RangeOrchestratorState,
    action: NavigationAction | str,
    now: datetime,
    resolver: ViewResolver,
) -> Transition:
    """prev / next move one view period (or one range length for a custom
    range); today returns to the periodic range containing ``now``."""
    action = NavigationAction(action)
    if action == NavigationAction.TODAY:
        transition = _enter_period(
            state, state.view, now, state.detail, resolver, custom_range_active=False
        )
        return Transition(transition.state, (PersistRange(None),) + transition.effects)

    steps = 1 if action == NavigationAction.NEXT else -1
    if state.custom_range_active:
        shift = timedelta(days=max(days_between(state.start, state.end), 1) * steps)
        resolution = resolver.resolve(state.start + shift, state.end + shift, state.detail)
        new_state = _apply_resolution(state, resolution, view=state.view)
        return Transition(new_state, (FetchTasks(new_state.range), PersistRange(new_state.range)))

    anchor = _shift_period(state.view, period_for(state.view, state.start).start, steps)
    return _enter_period(state, state.view, anchor, state.detail, resolver)


def apply_custom_range(
    state: RangeOrchestratorState,
    start: Any,
    end: Any,
    resolver: ViewResolver,
) -> Transition:
    """Activate a user-chosen range. Raises :class:`InvalidDateRange` before
    touching anything when a bound is missing or start is after end."""
    start_at, end_at = _parse_range(start, end)
    end_at = end_of_day(end_at)
    resolution = resolver.resolve(start_at, end_at, state.detail)
    new_state = _apply_resolution(state, resolution, custom_range_active=True)

    effects: list[Effect] = [FetchTasks(new_state.range), PersistRange(new_state.range)]
    notice = _adjustment_notice(resolution, resolver)
    if notice is not None:
        effects.append(notice)
    return Transition(new_state, tuple(effects))


def change_detail(
    state: RangeOrchestratorState, detail: Detail | str, resolver: ViewResolver
) -> Transition:
    """Switch granularity. An oversized custom range is clamped for hourly
    detail; a periodic range moves to the view that fits the detail."""
    detail = Detail(detail)
    if state.custom_range_active:
        resolution = resolver.resolve(state.start, state.end, detail, clamp=True)
        new_state = _apply_resolution(state, resolution)
        effects: list[Effect] = [FetchTasks(new_state.range)]
        notice = _adjustment_notice(resolution, resolver)
        if notice is not None:
            effects.insert(0, notice)
            effects.append(PersistRange(new_state.range))
        return Transition(new_state, tuple(effects))

    view = _periodic_view(detail, state.view, days_between(state.start, state.end))
    return _enter_period(state, view, state.start, detail, resolver)


def select_view(state: RangeOrchestratorState, view: ViewId | str, resolver: ViewResolver) -> Transition:
    """Direct view choice; the detail follows the view."""
    view = ViewId(view)
    detail = resolver.select_view(view, state.detail)
    if not view.is_resource_view:
        transition = _enter_period(
            state, view, state.start, detail, resolver, custom_range_active=False
        )
        if state.custom_range_active:
            return Transition(transition.state, (PersistRange(None),) + transition.effects)
        return transition

    if state.custom_range_active:
        resolution = resolver.resolve(state.start, state.end, detail, clamp=True)
        new_state = _apply_resolution(state, resolution, view=view)
        effects: list[Effect] = [FetchTasks(new_state.range)]
        notice = _adjustment_notice(resolution, resolver)
        if notice is not None:
            effects.insert(0, notice)
        return Transition(new_state, tuple(effects))

    return _enter_period(state, view, state.start, detail, resolver)


def dates_set(
    state: RangeOrchestratorState,
    start: Any,
    end: Any,
    resolver: ViewResolver,
    *,
    threshold_days: float = 1.0,
) -> Transition:
    """The widget reported its visible range.

    Periodic mode adopts it. Custom mode ignores it unless a bound moved by
    more than ``threshold_days``, which means the user navigated.
    """
    start_at, end_at = to_instant(start), to_instant(end)
    if start_at is None or end_at is None or start_at > end_at:
        return Transition(state)

    reported = DateRange(start_at, end_at)
    if reported == state.range:
        return Transition(state)

    if state.custom_range_active:
        if not is_genuine_user_navigation(state.range, reported, threshold_days):
            return Transition(state)
        resolution = resolver.resolve(start_at, end_at, state.detail)
        new_state = _apply_resolution(state, resolution, view=state.view)
        effects: list[Effect] = [FetchTasks(new_state.range), PersistRange(new_state.range)]
        notice = _adjustment_notice(resolution, resolver)
        if notice is not None:
            effects.append(notice)
        return Transition(new_state, tuple(effects))

    resolution = resolver.resolve(start_at, end_at, state.detail)
    new_state = _apply_resolution(state, resolution, view=state.view)
    effects = [FetchTasks(new_state.range)]
    notice = _adjustment_notice(resolution, resolver)
    if notice is not None:
        effects.append(notice)
    return Transition(new_state, tuple(effects))


def change_group_by(state: RangeOrchestratorState, group_by: GroupBy | str | None = None) -> Transition:
    """Set the grouping mode; ``None`` toggles between workstation and order."""
    if group_by is None:
        group_by = GroupBy.ORDER if state.group_by == GroupBy.WORKSTATION else GroupBy.WORKSTATION
    return Transition(replace(state, group_by=GroupBy(group_by)))


def toggle_customer(state: RangeOrchestratorState, customer_id: str) -> Transition:
    selected = dict(state.filters.selected_customers)
    selected[customer_id] = not selected.get(customer_id, False)
    return Transition(replace(state, filters=replace(state.filters, selected_customers=selected)))


def select_all_customers(state: RangeOrchestratorState, selected: bool = True) -> Transition:
    customers = {key: selected for key in state.filters.selected_customers}
    return Transition(replace(state, filters=replace(state.filters, selected_customers=customers)))


def toggle_workstation(state: RangeOrchestratorState, workstation_id: str) -> Transition:
    selected = dict(state.filters.selected_workstations)
    selected[workstation_id] = not selected.get(workstation_id, False)
    return Transition(replace(state, filters=replace(state.filters, selected_workstations=selected)))


def select_all_workstations(state: RangeOrchestratorState, selected: bool = True) -> Transition:
    workstations = {key: selected for key in state.filters.selected_workstations}
    return Transition(
        replace(state, filters=replace(state.filters, selected_workstations=workstations))
    )


def set_editable(state: RangeOrchestratorState, editable: bool) -> Transition:
    return Transition(replace(state, editable=editable))


def set_workstation_colors(state: RangeOrchestratorState, enabled: bool) -> Transition:
    return Transition(replace(state, use_workstation_colors=enabled))


def reset(
    state: RangeOrchestratorState,
    now: datetime,
    resolver: ViewResolver,
    *,
    detail: Detail = Detail.DAY,
    group_by: GroupBy = GroupBy.WORKSTATION,
) -> Transition:
    """Back to the default periodic range, keeping toggles and filters."""
    fresh = initial_state(
        now,
        resolver,
        detail=detail,
        group_by=group_by,
        editable=state.editable,
        use_workstation_colors=state.use_workstation_colors,
        filters=state.filters,
    )
    return Transition(fresh, (PersistRange(None), FetchTasks(fresh.range)))


__all__ = [
    "Effect",
    "FetchTasks",
    "Notify",
    "PersistRange",
    "RangeOrchestratorState",
    "Transition",
    "add_months",
    "apply_custom_range",
    "change_detail",
    "change_group_by",
    "dates_set",
    "initial_state",
    "navigate",
    "period_for",
    "reset",
    "select_all_customers",
    "select_all_workstations",
    "select_view",
    "set_editable",
    "set_workstation_colors",
    "toggle_customer",
    "toggle_workstation",
]
