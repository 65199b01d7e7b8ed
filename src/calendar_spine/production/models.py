"""Data models for the production calendar.

Manifesto:
    Tasks arrive from the remote document store as camelCase mappings with
    loosely typed date fields. They are wrapped in plain dataclasses once,
    at the service boundary, so the resolver, projector and orchestrator
    work with attributes instead of dict lookups. Date fields stay raw;
    only :func:`calendar_spine.core.timestamps.to_instant` interprets them.

Models:
    Inputs      Task, ProductionSession, Workstation, Customer, BusinessHours
    Local state PendingEdit, CalendarFilters, DateRange
    Outputs     CalendarEvent, Resource, ViewConfig, Notice

Tags:
    calendar-spine, models, dataclasses, production, scheduling

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from calendar_spine.core.enums import Detail, NoticeLevel, TaskStatus, ViewId
from calendar_spine.core.timestamps import to_iso8601

NO_CUSTOMER = "no-customer"
NO_ORDER = "no-order"
UNASSIGNED = "unassigned"

# Tasks in these states can no longer be moved or resized.
LOCKED_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


def _pick(data: dict[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProductionSession:
    """An actual work interval recorded against a task."""

    start_date: Any = None
    end_date: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProductionSession:
        return cls(
            start_date=_pick(data, "start_date", "startDate"),
            end_date=_pick(data, "end_date", "endDate"),
        )


@dataclass
class Task:
    """A schedulable unit of production work.

    ``status`` is a :class:`TaskStatus` when recognised; unknown strings are
    kept as-is and coloured neutral grey by the projector.
    """

    id: str
    name: str | None = None
    product_name: str | None = None
    mo_number: str | None = None
    quantity: float | None = None
    unit: str | None = None
    status: TaskStatus | str | None = TaskStatus.SCHEDULED
    scheduled_date: Any = None
    end_date: Any = None
    estimated_end_date: Any = None
    estimated_duration: float | None = None  # minutes
    workstation_id: str | None = None
    order_id: str | None = None
    order_number: str | None = None
    customer_id: str | None = None
    customer: dict[str, Any] | None = None
    production_sessions: list[ProductionSession] = field(default_factory=list)
    updated_at: Any = None

    @property
    def effective_customer_id(self) -> str | None:
        """``customer.id`` when present, else ``customer_id``."""
        if self.customer and self.customer.get("id"):
            return self.customer["id"]
        return self.customer_id or None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Build a task from a store document (camelCase or snake_case keys)."""
        raw_status = _pick(data, "status")
        status = TaskStatus.parse(raw_status) or raw_status
        sessions = _pick(data, "production_sessions", "productionSessions", default=[]) or []
        duration = _pick(data, "estimated_duration", "estimatedDuration")
        return cls(
            id=str(data["id"]),
            name=_pick(data, "name"),
            product_name=_pick(data, "product_name", "productName"),
            mo_number=_pick(data, "mo_number", "moNumber"),
            quantity=_pick(data, "quantity"),
            unit=_pick(data, "unit"),
            status=status,
            scheduled_date=_pick(data, "scheduled_date", "scheduledDate"),
            end_date=_pick(data, "end_date", "endDate"),
            estimated_end_date=_pick(data, "estimated_end_date", "estimatedEndDate"),
            estimated_duration=float(duration) if duration not in (None, "") else None,
            workstation_id=_pick(data, "workstation_id", "workstationId"),
            order_id=_pick(data, "order_id", "orderId"),
            order_number=_pick(data, "order_number", "orderNumber"),
            customer_id=_pick(data, "customer_id", "customerId"),
            customer=_pick(data, "customer"),
            production_sessions=[
                s if isinstance(s, ProductionSession) else ProductionSession.from_dict(s)
                for s in sessions
            ],
            updated_at=_pick(data, "updated_at", "updatedAt"),
        )


@dataclass(frozen=True)
class BusinessHours:
    """Working hours shown on a timeline row (ISO weekdays, 1 = Monday)."""

    days_of_week: tuple[int, ...] = (1, 2, 3, 4, 5)
    start_time: str = "08:00"
    end_time: str = "16:00"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BusinessHours:
        return cls(
            days_of_week=tuple(_pick(data, "days_of_week", "daysOfWeek", default=(1, 2, 3, 4, 5))),
            start_time=_pick(data, "start_time", "startTime", default="08:00"),
            end_time=_pick(data, "end_time", "endTime", default="16:00"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "days_of_week": list(self.days_of_week),
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


DEFAULT_BUSINESS_HOURS = BusinessHours()


@dataclass(frozen=True)
class Workstation:
    id: str
    name: str
    color: str | None = None
    business_hours: BusinessHours | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Workstation:
        hours = _pick(data, "business_hours", "businessHours")
        return cls(
            id=str(data["id"]),
            name=_pick(data, "name", default=str(data["id"])),
            color=_pick(data, "color"),
            business_hours=BusinessHours.from_dict(hours) if isinstance(hours, dict) else None,
        )


@dataclass(frozen=True)
class Customer:
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Customer:
        return cls(id=str(data["id"]), name=_pick(data, "name", default=str(data["id"])))


# ---------------------------------------------------------------------------
# Local state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PendingEdit:
    """A locally held override of a task's dates produced by direct manipulation.

    ``committed_at`` is set once the remote update succeeded; the edit then
    only lives until a fetch issued after that moment returns.
    """

    task_id: str
    scheduled_date: datetime
    end_date: datetime
    estimated_duration: int
    last_modified: datetime
    committed_at: datetime | None = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``start..end`` window."""

    start: datetime
    end: datetime

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()

    @property
    def span(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class CalendarFilters:
    """Customer and workstation selection sets (id -> selected)."""

    selected_customers: dict[str, bool] = field(default_factory=dict)
    selected_workstations: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def all_selected(
        cls, customers: list[Customer], workstations: list[Workstation]
    ) -> CalendarFilters:
        selected = {c.id: True for c in customers}
        selected[NO_CUSTOMER] = True
        return cls(
            selected_customers=selected,
            selected_workstations={w.id: True for w in workstations},
        )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Resource:
    """A timeline row."""

    id: str
    title: str
    business_hours: BusinessHours | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.business_hours is not None:
            result["business_hours"] = self.business_hours.to_dict()
        return result


@dataclass(frozen=True)
class CalendarEvent:
    """A renderable calendar event derived from one task."""

    id: str
    title: str
    start: datetime | None
    end: datetime | None
    color: str
    text_color: str
    resource_id: str | None
    editable: bool
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": to_iso8601(self.start),
            "end": to_iso8601(self.end),
            "color": self.color,
            "text_color": self.text_color,
            "resource_id": self.resource_id,
            "editable": self.editable,
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class ViewConfig:
    """What the widget should show: view, slot granularity and visible range."""

    view: ViewId
    detail: Detail
    slot_duration: timedelta
    visible_start: datetime
    visible_end: datetime
    title: str
    slot_label_format: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "view": self.view.value,
            "detail": self.detail.value,
            "slot_duration": str(self.slot_duration),
            "visible_start": to_iso8601(self.visible_start),
            "visible_end": to_iso8601(self.visible_end),
            "title": self.title,
            "slot_label_format": list(self.slot_label_format),
        }


@dataclass(frozen=True)
class Notice:
    """A user-visible message raised by the orchestrator."""

    level: NoticeLevel
    message: str
    error_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level.value, "message": self.message, "error_type": self.error_type}


__all__ = [
    "DEFAULT_BUSINESS_HOURS",
    "LOCKED_STATUSES",
    "NO_CUSTOMER",
    "NO_ORDER",
    "UNASSIGNED",
    "BusinessHours",
    "CalendarEvent",
    "CalendarFilters",
    "Customer",
    "DateRange",
    "Notice",
    "PendingEdit",
    "ProductionSession",
    "Resource",
    "Task",
    "ViewConfig",
    "Workstation",
]
