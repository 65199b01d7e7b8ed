"""RangeOrchestrator - async top-level controller of the production calendar.

Manifesto:
    The orchestrator is the only component with side effects. It owns the
    current :class:`RangeOrchestratorState`, the fetched task snapshot, the
    pending edits and the notice queue; it runs the pure reducers from
    :mod:`calendar_spine.production.state` and carries out the effects
    they declare. It is also the single place where errors become
    user-visible notices: nothing below it talks to the UI, and no
    collaborator failure escapes it.

Tags:
    calendar-spine, orchestrator, async, concurrency, pending-edits

Doc-Types:
    api-reference, architecture-diagram


┌──────────────────────────────────────────────────────────────────────────────┐
│  RANGE ORCHESTRATOR                                                           │
│                                                                               │
│   action ──▶ reducer ──▶ Transition(state, effects)                          │
│                              │                                                │
│                 ┌────────────┼──────────────┐                                 │
│                 ▼            ▼              ▼                                 │
│              Notify     PersistRange    FetchTasks                            │
│            (notices)   (DateRangeStore)     │                                 │
│                                             ▼                                 │
│                               _request_fetch()  seq += 1                      │
│                                ├── fetch in flight? ──▶ mark follow-up        │
│                                └── loop:                                      │
│                                     RangeCache.get_or_fetch(state.range)      │
│                                     seq still latest? apply : discard         │
│                                     follow-up marked? fetch again : stop      │
│                                             │                                 │
│                                             ▼                                 │
│             expire pending edits ──▶ EventProjector + ResourceAssigner        │
│                                             │                                 │
│                                             ▼                                 │
│                         events / resources / view_config / notices            │
│                                                                               │
│  Direct manipulation (move / resize / edit dates):                            │
│   record PendingEdit ──▶ re-project ──▶ await update_task()                   │
│     ├── fails:    restore previous edit, re-project, error notice             │
│     └── succeeds: committed_at = now, clear cache, refetch                    │
│                                                                               │
│  Pending edits are dropped when a fetch returns the task with a newer         │
│  updated_at, when the edit was committed before the fetch was issued, or      │
│  after pending_edit_ttl_seconds.                                              │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

from calendar_spine.core.enums import Detail, GroupBy, NavigationAction, NoticeLevel, TaskStatus, ViewId
from calendar_spine.core.errors import CalendarError, FetchFailure, InvalidDateRange, UpdateFailure
from calendar_spine.core.logging import LogContext, get_logger
from calendar_spine.core.settings import CalendarSettings, get_settings
from calendar_spine.core.timestamps import minutes_between, to_instant, utc_now
from calendar_spine.production import state as reducers
from calendar_spine.production.dates import TaskDateResolver
from calendar_spine.production.models import (
    LOCKED_STATUSES,
    CalendarEvent,
    CalendarFilters,
    Customer,
    DateRange,
    Notice,
    PendingEdit,
    Resource,
    Task,
    ViewConfig,
    Workstation,
)
from calendar_spine.production.persistence import DateRangeStore
from calendar_spine.production.projector import EventProjector
from calendar_spine.production.protocol import TaskService
from calendar_spine.production.range_cache import RangeCache
from calendar_spine.production.resources import ResourceAssigner
from calendar_spine.production.state import (
    FetchTasks,
    Notify,
    PersistRange,
    RangeOrchestratorState,
    Transition,
)
from calendar_spine.production.views import ViewResolver

logger = get_logger(__name__)


@dataclass
class FetchStats:
    """Counters describing the orchestrator's fetch activity."""

    fetches: int = 0
    failed_fetches: int = 0
    deferred_requests: int = 0
    stale_results: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    task_count: int = 0
    last_load_ms: float | None = None
    last_fetch_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fetches": self.fetches,
            "failed_fetches": self.failed_fetches,
            "deferred_requests": self.deferred_requests,
            "stale_results": self.stale_results,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "task_count": self.task_count,
            "last_load_ms": self.last_load_ms,
            "last_fetch_at": self.last_fetch_at.isoformat() if self.last_fetch_at else None,
        }


@dataclass
class _FetchBook:
    """Bookkeeping for the in-flight guard and request sequence numbers."""

    in_progress: bool = False
    issued: int = 0
    follow_up: bool = False


class RangeOrchestrator:
    """Owns calendar state and drives fetch, projection and edits.

    Example:
        >>> orchestrator = RangeOrchestrator(service, store=store)
        >>> await orchestrator.start()
        >>> await orchestrator.change_detail("hour")
        >>> orchestrator.view_config.view
        <ViewId.TIMELINE_WEEK: 'resourceTimelineWeek'>
        >>> for notice in orchestrator.drain_notices():
        ...     print(notice.level, notice.message)
    """

    def __init__(
        self,
        service: TaskService,
        *,
        settings: CalendarSettings | None = None,
        cache: RangeCache | None = None,
        store: DateRangeStore | None = None,
        resolver: ViewResolver | None = None,
        projector: EventProjector | None = None,
        assigner: ResourceAssigner | None = None,
        clock: Callable[[], datetime] = utc_now,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._settings = settings or get_settings()
        self._service = service
        self._cache = cache or RangeCache(ttl_seconds=self._settings.cache_ttl_seconds)
        self._store = store
        self._resolver = resolver or ViewResolver(
            max_days_for_hourly_view=self._settings.max_days_for_hourly_view
        )
        self._date_resolver = TaskDateResolver()
        self._assigner = assigner or ResourceAssigner()
        self._projector = projector or EventProjector(self._date_resolver, self._assigner)
        self._clock = clock
        self._timer = timer

        self._state = self._default_state()
        self._tasks: list[Task] = []
        self._workstations: list[Workstation] = []
        self._customers: list[Customer] = []
        self._pending: dict[str, PendingEdit] = {}
        self._notices: list[Notice] = []
        self._events: list[CalendarEvent] = []
        self._resources: list[Resource] = []
        self._fetch = _FetchBook()
        self.stats = FetchStats()

    # === Outputs ===

    @property
    def state(self) -> RangeOrchestratorState:
        return self._state

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def workstations(self) -> list[Workstation]:
        return list(self._workstations)

    @property
    def customers(self) -> list[Customer]:
        return list(self._customers)

    @property
    def pending_edits(self) -> dict[str, PendingEdit]:
        return dict(self._pending)

    @property
    def events(self) -> list[CalendarEvent]:
        return list(self._events)

    @property
    def resources(self) -> list[Resource]:
        return list(self._resources)

    @property
    def view_config(self) -> ViewConfig:
        resolution = self._resolver.resolve(self._state.start, self._state.end, self._state.detail)
        return self._resolver.view_config(resolution, view=self._state.view)

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    @property
    def loading(self) -> bool:
        return self._fetch.in_progress

    def drain_notices(self) -> list[Notice]:
        """Return and forget all queued notices."""
        notices, self._notices = self._notices, []
        return notices

    # === Lifecycle ===

    async def start(self) -> None:
        """Load workstations and customers, restore a fresh persisted range,
        and run the initial fetch."""
        async with LogContext(action="start"):
            try:
                self._workstations = list(await self._service.fetch_workstations())
                self._customers = list(await self._service.fetch_customers())
            except Exception as exc:
                self._fail(
                    FetchFailure("Could not load workstations and customers", cause=exc)
                )

            filters = CalendarFilters.all_selected(self._customers, self._workstations)
            self._state = replace(self._state, filters=filters)

            saved = self._store.load() if self._store is not None else None
            if saved is not None:
                logger.info("orchestrator.range_restored", start=saved.start_iso, end=saved.end_iso)
                transition = self._reduce(
                    reducers.apply_custom_range, self._state, saved.start, saved.end, self._resolver
                )
                if transition is not None:
                    kept = tuple(e for e in transition.effects if not isinstance(e, PersistRange))
                    await self._run(Transition(transition.state, kept))
                    return

            await self._run(Transition(self._state, (FetchTasks(self._state.range),)))

    async def refresh(self) -> None:
        """Drop every cached range and refetch the current one."""
        async with LogContext(action="refresh"):
            self._cache.clear()
            self._notify(NoticeLevel.INFO, "Calendar data refreshed")
            await self._request_fetch()

    async def reset(self) -> None:
        """Return to the default range, detail and grouping."""
        async with LogContext(action="reset"):
            self._cache.clear()
            transition = reducers.reset(
                self._state,
                self._clock(),
                self._resolver,
                detail=self._settings.default_detail,
                group_by=self._settings.default_group_by,
            )
            await self._run(transition)

    # === Range actions ===

    async def navigate(self, action: NavigationAction | str) -> None:
        async with LogContext(action=f"navigate:{NavigationAction(action).value}"):
            await self._dispatch(
                reducers.navigate, self._state, action, self._clock(), self._resolver
            )

    async def apply_custom_range(self, start: Any, end: Any) -> None:
        async with LogContext(action="apply_custom_range"):
            await self._dispatch(reducers.apply_custom_range, self._state, start, end, self._resolver)

    async def change_detail(self, detail: Detail | str) -> None:
        async with LogContext(action="change_detail", detail=Detail(detail).value):
            await self._dispatch(reducers.change_detail, self._state, detail, self._resolver)

    async def select_view(self, view: ViewId | str) -> None:
        async with LogContext(action="select_view", view=ViewId(view).value):
            await self._dispatch(reducers.select_view, self._state, view, self._resolver)

    async def on_dates_set(self, start: Any, end: Any) -> None:
        """Widget callback reporting its visible range."""
        await self._dispatch(
            reducers.dates_set,
            self._state,
            start,
            end,
            self._resolver,
            threshold_days=self._settings.navigation_threshold_days,
        )

    async def change_group_by(self, group_by: GroupBy | str | None = None) -> None:
        await self._dispatch(reducers.change_group_by, self._state, group_by)

    # === Filters and toggles ===

    async def toggle_customer(self, customer_id: str) -> None:
        await self._dispatch(reducers.toggle_customer, self._state, customer_id)

    async def select_all_customers(self, selected: bool = True) -> None:
        await self._dispatch(reducers.select_all_customers, self._state, selected)

    async def toggle_workstation(self, workstation_id: str) -> None:
        await self._dispatch(reducers.toggle_workstation, self._state, workstation_id)

    async def select_all_workstations(self, selected: bool = True) -> None:
        await self._dispatch(reducers.select_all_workstations, self._state, selected)

    async def set_editable(self, editable: bool) -> None:
        await self._dispatch(reducers.set_editable, self._state, editable)

    async def set_workstation_colors(self, enabled: bool) -> None:
        await self._dispatch(reducers.set_workstation_colors, self._state, enabled)

    # === Direct manipulation ===

    async def move_task(self, task_id: str, start: Any, end: Any = None) -> bool:
        """Drag: new start, end shifted to keep the displayed length unless given."""
        new_start = to_instant(start)
        if end is None and new_start is not None:
            current_start, current_end = self._current_dates(task_id)
            if current_start is not None and current_end is not None:
                end = new_start + (current_end - current_start)
        async with LogContext(action="move_task", task_id=task_id):
            return await self._commit_edit(task_id, new_start, to_instant(end))

    async def resize_task(self, task_id: str, end: Any) -> bool:
        """Resize: keep the displayed start, move the end."""
        current_start, _ = self._current_dates(task_id)
        async with LogContext(action="resize_task", task_id=task_id):
            return await self._commit_edit(task_id, current_start, to_instant(end))

    async def edit_task_dates(self, task_id: str, start: Any, end: Any) -> bool:
        async with LogContext(action="edit_task_dates", task_id=task_id):
            return await self._commit_edit(task_id, to_instant(start), to_instant(end))

    # === Internals: state machine ===

    def _default_state(self) -> RangeOrchestratorState:
        return reducers.initial_state(
            self._clock(),
            self._resolver,
            detail=self._settings.default_detail,
            group_by=self._settings.default_group_by,
            editable=self._settings.editable,
            use_workstation_colors=self._settings.use_workstation_colors,
        )

    def _reduce(self, reducer: Callable[..., Transition], *args: Any, **kwargs: Any) -> Transition | None:
        try:
            return reducer(*args, **kwargs)
        except InvalidDateRange as exc:
            self._fail(exc, level=NoticeLevel.ERROR)
            return None

    async def _dispatch(self, reducer: Callable[..., Transition], *args: Any, **kwargs: Any) -> None:
        transition = self._reduce(reducer, *args, **kwargs)
        if transition is not None:
            await self._run(transition)

    async def _run(self, transition: Transition) -> None:
        self._state = transition.state
        fetch = False
        for effect in transition.effects:
            if isinstance(effect, Notify):
                self._notices.append(effect.notice)
            elif isinstance(effect, PersistRange):
                self._persist(effect.range)
            elif isinstance(effect, FetchTasks):
                fetch = True

        self._reproject()
        if fetch:
            await self._request_fetch()

    def _persist(self, date_range: DateRange | None) -> None:
        if self._store is None:
            return
        try:
            if date_range is None:
                self._store.clear()
            else:
                self._store.save(date_range)
        except OSError as exc:
            logger.warning("orchestrator.persist_failed", error=str(exc))

    # === Internals: fetching ===

    async def _fetch_from_service(self, date_range: DateRange) -> list[Task]:
        return list(await self._service.fetch_tasks_by_range(date_range.start_iso, date_range.end_iso))

    async def _request_fetch(self) -> None:
        book = self._fetch
        book.issued += 1
        if book.in_progress:
            book.follow_up = True
            self.stats.deferred_requests += 1
            logger.info("orchestrator.fetch_deferred", request_seq=book.issued)
            return

        book.in_progress = True
        try:
            while True:
                book.follow_up = False
                await self._fetch_once(book.issued, self._state.range)
                if not book.follow_up:
                    break
        finally:
            book.in_progress = False

    async def _fetch_once(self, seq: int, date_range: DateRange) -> None:
        issued_at = self._clock()
        started = self._timer()
        hits_before, misses_before = self._cache.hits, self._cache.misses
        self.stats.fetches += 1

        async with LogContext(request_seq=seq):
            try:
                tasks = await self._cache.get_or_fetch(date_range, self._fetch_from_service)
            except Exception as exc:
                self.stats.failed_fetches += 1
                if seq != self._fetch.issued:
                    logger.info("orchestrator.stale_failure_ignored", error=str(exc))
                    return
                error = exc if isinstance(exc, FetchFailure) else FetchFailure(
                    "Could not load production tasks", cause=exc
                )
                self._fail(
                    error.with_context(range_start=date_range.start_iso, range_end=date_range.end_iso)
                )
                return
            finally:
                self.stats.cache_hits += self._cache.hits - hits_before
                self.stats.cache_misses += self._cache.misses - misses_before

            if seq != self._fetch.issued:
                self.stats.stale_results += 1
                logger.info("orchestrator.fetch_dropped", latest_seq=self._fetch.issued)
                return

            self._tasks = list(tasks)
            self._expire_pending_edits(issued_at)
            self._reproject()

            self.stats.task_count = len(self._tasks)
            self.stats.last_load_ms = round((self._timer() - started) * 1000, 3)
            self.stats.last_fetch_at = issued_at
            logger.info(
                "orchestrator.fetch_applied",
                start=date_range.start_iso,
                end=date_range.end_iso,
                tasks=len(self._tasks),
                events=len(self._events),
                load_ms=self.stats.last_load_ms,
            )

    # === Internals: pending edits ===

    def _expire_pending_edits(self, fetch_issued_at: datetime) -> None:
        if not self._pending:
            return
        ttl = timedelta(seconds=self._settings.pending_edit_ttl_seconds)
        now = self._clock()
        by_id = {task.id: task for task in self._tasks}

        for task_id, edit in list(self._pending.items()):
            reason = None
            task = by_id.get(task_id)
            updated_at = to_instant(task.updated_at) if task is not None else None
            if updated_at is not None and updated_at > edit.last_modified:
                reason = "newer_server_version"
            elif (
                task is not None
                and edit.committed_at is not None
                and edit.committed_at <= fetch_issued_at
            ):
                reason = "committed_before_fetch"
            elif now - edit.last_modified > ttl:
                reason = "expired"

            if reason is not None:
                del self._pending[task_id]
                logger.debug("orchestrator.pending_edit_dropped", task_id=task_id, reason=reason)

    def _current_dates(self, task_id: str) -> tuple[datetime | None, datetime | None]:
        edit = self._pending.get(task_id)
        if edit is not None:
            return edit.scheduled_date, edit.end_date
        task = self._task(task_id)
        if task is None:
            return None, None
        resolved = self._date_resolver.resolve(task)
        return resolved.start, resolved.end

    def _task(self, task_id: str) -> Task | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    async def _commit_edit(
        self, task_id: str, start: datetime | None, end: datetime | None
    ) -> bool:
        task = self._task(task_id)
        if task is None:
            self._notify(NoticeLevel.ERROR, f"Task {task_id} is not loaded", "UpdateFailure")
            return False
        if not self._state.editable or TaskStatus.parse(task.status) in LOCKED_STATUSES:
            self._notify(NoticeLevel.WARNING, f"Task {task_id} cannot be edited", "UpdateFailure")
            return False
        if start is None or end is None or start > end:
            self._fail(
                InvalidDateRange("Task dates are invalid", start=start, end=end).with_context(
                    task_id=task_id
                ),
                level=NoticeLevel.ERROR,
            )
            return False

        previous = self._pending.get(task_id)
        edit = PendingEdit(
            task_id=task_id,
            scheduled_date=start,
            end_date=end,
            estimated_duration=minutes_between(start, end),
            last_modified=self._clock(),
        )
        self._pending[task_id] = edit
        self._reproject()

        fields = {
            "scheduled_date": start,
            "end_date": end,
            "estimated_duration": edit.estimated_duration,
        }
        try:
            await self._service.update_task(task_id, fields, self._settings.actor_id)
        except Exception as exc:
            if self._pending.get(task_id) is edit:
                if previous is None:
                    self._pending.pop(task_id, None)
                else:
                    self._pending[task_id] = previous
            self._reproject()
            self._fail(UpdateFailure(f"Could not update task {task_id}", task_id=task_id, cause=exc))
            return False

        if self._pending.get(task_id) is edit:
            self._pending[task_id] = replace(edit, committed_at=self._clock())
        logger.info("orchestrator.task_updated", duration_minutes=edit.estimated_duration)
        self._notify(NoticeLevel.SUCCESS, "Task dates updated")
        self._cache.clear()
        await self._request_fetch()
        return True

    # === Internals: projection and notices ===

    def _reproject(self) -> None:
        state = self._state
        self._events = self._projector.project(
            self._tasks,
            self._pending,
            state.filters,
            state.group_by,
            resource_view=state.view.is_resource_view,
            editable=state.editable,
            use_workstation_colors=state.use_workstation_colors,
            workstations=self._workstations,
        )
        self._resources = self._assigner.resources(
            self._workstations,
            state.filters.selected_workstations,
            self._tasks,
            state.group_by,
        )

    def _notify(self, level: NoticeLevel, message: str, error_type: str | None = None) -> None:
        self._notices.append(Notice(level, message, error_type))

    def _fail(self, error: CalendarError, level: NoticeLevel = NoticeLevel.ERROR) -> None:
        logger.warning("orchestrator.error", **error.to_dict())
        self._notify(level, error.message, type(error).__name__)


__all__ = ["FetchStats", "RangeOrchestrator"]
