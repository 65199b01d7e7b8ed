"""
EventProjector - tasks to renderable calendar events.

Manifesto:
    Projection is a pure function of its inputs. The same tasks, edits,
    filters and flags always produce the same events, and the task objects
    are never modified, so the orchestrator can re-project freely whenever
    anything changes.

Pipeline (per task)::

    customer filter ──▶ resolve dates ──▶ pending edit override
         ──▶ colour + text colour ──▶ resource id ──▶ editable flag
         ──▶ CalendarEvent ──▶ (resource views) drop rows-less events

Guardrails:
    ❌ DON'T: Raise on a malformed task date
    ✅ DO: Project with the endpoint as None and log a warning

    ❌ DON'T: Compute resource ids here
    ✅ DO: Use ResourceAssigner.resource_id_for so rows and events agree

Tags:
    projection, events, filters, pending-edits, calendar-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from calendar_spine.core.enums import GroupBy, TaskStatus
from calendar_spine.core.errors import UnparsableTaskDate
from calendar_spine.core.logging import get_logger
from calendar_spine.production.colors import contrast_text_color, task_color
from calendar_spine.production.dates import TaskDateResolver
from calendar_spine.production.models import (
    LOCKED_STATUSES,
    NO_CUSTOMER,
    UNASSIGNED,
    CalendarEvent,
    CalendarFilters,
    PendingEdit,
    Task,
    Workstation,
)
from calendar_spine.production.resources import ResourceAssigner

logger = get_logger(__name__)


def passes_customer_filter(task: Task, selected_customers: Mapping[str, bool]) -> bool:
    """A task with a customer passes iff that customer is selected; a task
    without one passes iff the ``no-customer`` option is selected."""
    customer_id = task.effective_customer_id
    if customer_id:
        return selected_customers.get(customer_id) is True
    return selected_customers.get(NO_CUSTOMER) is True


def event_title(task: Task) -> str:
    if task.name:
        return task.name
    if task.product_name and task.mo_number:
        return f"{task.product_name} ({task.mo_number})"
    if task.product_name or task.mo_number:
        return task.product_name or f"({task.mo_number})"
    return task.id


class EventProjector:
    """Converts tasks into :class:`CalendarEvent` records."""

    def __init__(
        self,
        resolver: TaskDateResolver | None = None,
        assigner: ResourceAssigner | None = None,
    ):
        self._resolver = resolver or TaskDateResolver()
        self._assigner = assigner or ResourceAssigner()

    def project(
        self,
        tasks: Iterable[Task],
        pending_edits: Mapping[str, PendingEdit],
        filters: CalendarFilters,
        group_by: GroupBy,
        *,
        resource_view: bool = True,
        editable: bool = True,
        use_workstation_colors: bool = False,
        workstations: Iterable[Workstation] = (),
    ) -> list[CalendarEvent]:
        by_id = {w.id: w for w in workstations}
        events = []
        for task in tasks:
            if not passes_customer_filter(task, filters.selected_customers):
                continue

            event = self._project_one(
                task,
                pending_edits.get(task.id),
                group_by,
                editable=editable,
                use_workstation_colors=use_workstation_colors,
                workstations=by_id,
            )
            if resource_view and not self._has_row(event, group_by, filters):
                continue
            events.append(event)
        return events

    def _project_one(
        self,
        task: Task,
        edit: PendingEdit | None,
        group_by: GroupBy,
        *,
        editable: bool,
        use_workstation_colors: bool,
        workstations: dict[str, Workstation],
    ) -> CalendarEvent:
        resolved = self._resolver.resolve(task)
        for field_name in resolved.unparsable_fields:
            error = UnparsableTaskDate(task.id, field_name, _raw_value(task, field_name))
            logger.warning("projector.unparsable_date", **error.to_dict())

        start, end = resolved.start, resolved.end
        if edit is not None:
            start, end = edit.scheduled_date, edit.end_date

        color = task_color(task, workstations, use_workstation_colors=use_workstation_colors)
        status = task.status.value if isinstance(task.status, TaskStatus) else task.status
        return CalendarEvent(
            id=task.id,
            title=event_title(task),
            start=start,
            end=end,
            color=color,
            text_color=contrast_text_color(color),
            resource_id=self._assigner.resource_id_for(task, group_by),
            editable=editable and TaskStatus.parse(task.status) not in LOCKED_STATUSES,
            payload={
                "mo_number": task.mo_number,
                "quantity": task.quantity,
                "unit": task.unit,
                "status": status,
                "workstation_id": task.workstation_id,
                "order_id": task.order_id,
                "product_name": task.product_name,
                "estimated_duration": (
                    edit.estimated_duration if edit is not None else task.estimated_duration
                ),
            },
        )

    @staticmethod
    def _has_row(event: CalendarEvent, group_by: GroupBy, filters: CalendarFilters) -> bool:
        if event.resource_id is None:
            return False
        if group_by == GroupBy.WORKSTATION and event.resource_id != UNASSIGNED:
            return filters.selected_workstations.get(event.resource_id) is True
        return True


def _raw_value(task: Task, field_name: str) -> object:
    if field_name.startswith("production_sessions."):
        attr = field_name.split(".", 1)[1]
        return [getattr(s, attr) for s in task.production_sessions]
    return getattr(task, field_name, None)


__all__ = ["EventProjector", "event_title", "passes_customer_filter"]
