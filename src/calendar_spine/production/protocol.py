"""
Collaborator contract for the remote task store.

The calendar engine never talks to a database itself. Everything it needs
from the outside world goes through :class:`TaskService`: a range query
for tasks, the workstation and customer lists loaded once at startup, and
a partial update committed after a drag, resize or manual date edit.

Architecture:
    ::

        RangeOrchestrator ──▶ TaskService (Protocol)
                               ├── fetch_tasks_by_range(start_iso, end_iso)
                               ├── fetch_workstations()
                               ├── fetch_customers()
                               └── update_task(task_id, fields, actor_id)

        Implementations:
          JsonFileTaskService  — JSON document on disk (CLI, tests)
          (remote store adapter lives with the host application)

Guardrails:
    ❌ DON'T: Catch errors inside an implementation and return []
    ✅ DO: Raise; the orchestrator turns failures into notices

Tags:
    protocol, collaborator, async, calendar-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from calendar_spine.production.models import Customer, Task, Workstation


@runtime_checkable
class TaskService(Protocol):
    """Async access to tasks, workstations and customers."""

    async def fetch_tasks_by_range(self, start_iso: str, end_iso: str) -> list[Task]:
        """Tasks intersecting ``start_iso..end_iso`` (both bounds inclusive).

        May raise; the caller decides how to recover.
        """
        ...

    async def fetch_workstations(self) -> list[Workstation]:
        ...

    async def fetch_customers(self) -> list[Customer]:
        ...

    async def update_task(self, task_id: str, fields: dict[str, Any], actor_id: str) -> None:
        """Apply a partial update. Raising means the update did not happen."""
        ...


__all__ = ["TaskService"]
