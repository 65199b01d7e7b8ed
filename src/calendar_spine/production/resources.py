"""
ResourceAssigner - timeline rows for the Gantt view.

Two grouping modes:

- **workstation**: one row per selected workstation, in workstation list
  order, carrying the workstation's business hours (or the default
  Mon-Fri 08:00-16:00). An ``unassigned`` row is appended when any task
  has no workstation.
- **order**: one row per distinct order id among the current tasks, in
  first-seen order, titled by the human-readable order number. A
  ``no-order`` row is appended when any task lacks an order, or when no
  task has one.

:meth:`ResourceAssigner.resource_id_for` is the single rule mapping a task
to its row; the projector uses it too, so an event's ``resource_id``
always names a row this module can produce.
"""

from __future__ import annotations

from collections.abc import Iterable

from calendar_spine.core.enums import GroupBy
from calendar_spine.production.models import (
    DEFAULT_BUSINESS_HOURS,
    NO_ORDER,
    UNASSIGNED,
    Resource,
    Task,
    Workstation,
)

UNASSIGNED_TITLE = "Unassigned"
NO_ORDER_TITLE = "No order"


class ResourceAssigner:
    """Builds :class:`Resource` rows and per-task resource ids. Stateless."""

    def resource_id_for(self, task: Task, group_by: GroupBy) -> str:
        if group_by == GroupBy.ORDER:
            return task.order_id or NO_ORDER
        return task.workstation_id or UNASSIGNED

    def resources(
        self,
        workstations: Iterable[Workstation],
        selected_workstations: dict[str, bool],
        tasks: Iterable[Task],
        group_by: GroupBy,
    ) -> list[Resource]:
        tasks = list(tasks)
        if group_by == GroupBy.ORDER:
            return self._order_rows(tasks)
        return self._workstation_rows(workstations, selected_workstations, tasks)

    def _workstation_rows(
        self,
        workstations: Iterable[Workstation],
        selected: dict[str, bool],
        tasks: list[Task],
    ) -> list[Resource]:
        rows = [
            Resource(
                id=workstation.id,
                title=workstation.name,
                business_hours=workstation.business_hours or DEFAULT_BUSINESS_HOURS,
            )
            for workstation in workstations
            if selected.get(workstation.id) is True
        ]
        if any(not task.workstation_id for task in tasks):
            rows.append(Resource(id=UNASSIGNED, title=UNASSIGNED_TITLE))
        return rows

    def _order_rows(self, tasks: list[Task]) -> list[Resource]:
        rows: dict[str, Resource] = {}
        for task in tasks:
            if task.order_id and task.order_id not in rows:
                rows[task.order_id] = Resource(
                    id=task.order_id, title=task.order_number or task.order_id
                )

        if not rows or any(not task.order_id for task in tasks):
            rows[NO_ORDER] = Resource(id=NO_ORDER, title=NO_ORDER_TITLE)
        return list(rows.values())


__all__ = ["NO_ORDER_TITLE", "UNASSIGNED_TITLE", "ResourceAssigner"]
