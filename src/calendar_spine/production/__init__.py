"""Production calendar engine.

Architecture::

    models.py         Task, PendingEdit, Resource, CalendarEvent, ViewConfig, ...
    protocol.py       TaskService collaborator contract
    file_service.py   JsonFileTaskService (JSON document backend)
    range_cache.py    RangeCache (per-range TTL memoisation)
    dates.py          TaskDateResolver (session-aware effective dates)
    colors.py         Status palette, workstation colours, YIQ contrast
    projector.py      EventProjector (tasks -> events)
    resources.py      ResourceAssigner (timeline rows)
    views.py          ViewResolver (view/detail state machine)
    state.py          RangeOrchestratorState + pure reducers
    persistence.py    DateRangeStore (persisted custom range)
    orchestrator.py   RangeOrchestrator (async controller)
"""

from calendar_spine.production.dates import ResolvedDates, TaskDateResolver
from calendar_spine.production.file_service import JsonFileTaskService
from calendar_spine.production.models import (
    NO_CUSTOMER,
    NO_ORDER,
    UNASSIGNED,
    BusinessHours,
    CalendarEvent,
    CalendarFilters,
    Customer,
    DateRange,
    Notice,
    PendingEdit,
    ProductionSession,
    Resource,
    Task,
    ViewConfig,
    Workstation,
)
from calendar_spine.production.orchestrator import FetchStats, RangeOrchestrator
from calendar_spine.production.persistence import DateRangeStore
from calendar_spine.production.projector import EventProjector
from calendar_spine.production.protocol import TaskService
from calendar_spine.production.range_cache import RangeCache
from calendar_spine.production.resources import ResourceAssigner
from calendar_spine.production.state import RangeOrchestratorState, Transition
from calendar_spine.production.views import (
    ViewResolution,
    ViewResolver,
    is_genuine_user_navigation,
    view_for_span,
)

__all__ = [
    "NO_CUSTOMER",
    "NO_ORDER",
    "UNASSIGNED",
    "BusinessHours",
    "CalendarEvent",
    "CalendarFilters",
    "Customer",
    "DateRange",
    "DateRangeStore",
    "EventProjector",
    "FetchStats",
    "JsonFileTaskService",
    "Notice",
    "PendingEdit",
    "ProductionSession",
    "RangeCache",
    "RangeOrchestrator",
    "RangeOrchestratorState",
    "ResolvedDates",
    "Resource",
    "ResourceAssigner",
    "Task",
    "TaskDateResolver",
    "TaskService",
    "Transition",
    "ViewConfig",
    "ViewResolution",
    "ViewResolver",
    "Workstation",
    "is_genuine_user_navigation",
    "view_for_span",
]
