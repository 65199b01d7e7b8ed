"""JSON-document implementation of :class:`TaskService`.

Document layout::

    {
      "workstations": [{"id": "W1", "name": "Mixer", "color": "#1e88e5"}],
      "customers":    [{"id": "C1", "name": "Acme"}],
      "tasks":        [{"id": "T1", "scheduledDate": "...", "endDate": "...", ...}]
    }

Used by the ``calendar-spine`` CLI and by tests. Updates are written back to
the file so a later range query sees them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from calendar_spine.core.logging import get_logger
from calendar_spine.core.timestamps import to_instant, to_iso8601, utc_now
from calendar_spine.production.dates import TaskDateResolver
from calendar_spine.production.models import Customer, Task, Workstation

logger = get_logger(__name__)

_FIELD_ALIASES = {
    "scheduled_date": "scheduledDate",
    "end_date": "endDate",
    "estimated_duration": "estimatedDuration",
}


class JsonFileTaskService:
    """Serve tasks from a JSON document.

    A task matches ``start..end`` when its resolved display window overlaps
    the range; tasks without a resolvable start are never returned.
    """

    def __init__(self, path: Path, *, resolver: TaskDateResolver | None = None):
        self._path = Path(path)
        self._resolver = resolver or TaskDateResolver()
        self.update_calls: list[tuple[str, dict[str, Any], str]] = []

    def _load(self) -> dict[str, Any]:
        return json.loads(self._path.read_text(encoding="utf-8"))

    def _save(self, document: dict[str, Any]) -> None:
        self._path.write_text(json.dumps(document, indent=2, default=str), encoding="utf-8")

    async def fetch_tasks_by_range(self, start_iso: str, end_iso: str) -> list[Task]:
        start = to_instant(start_iso)
        end = to_instant(end_iso)
        if start is None or end is None:
            raise ValueError(f"Invalid range bounds: {start_iso!r} .. {end_iso!r}")

        matched = []
        for raw in self._load().get("tasks", []):
            task = Task.from_dict(raw)
            resolved = self._resolver.resolve(task)
            if resolved.start is None:
                continue
            task_end = resolved.end or resolved.start
            if resolved.start <= end and task_end >= start:
                matched.append(task)

        logger.debug("file_service.fetch", start=start_iso, end=end_iso, count=len(matched))
        return matched

    async def fetch_workstations(self) -> list[Workstation]:
        return [Workstation.from_dict(w) for w in self._load().get("workstations", [])]

    async def fetch_customers(self) -> list[Customer]:
        return [Customer.from_dict(c) for c in self._load().get("customers", [])]

    async def update_task(self, task_id: str, fields: dict[str, Any], actor_id: str) -> None:
        document = self._load()
        for raw in document.get("tasks", []):
            if str(raw.get("id")) == task_id:
                break
        else:
            raise KeyError(f"Task not found: {task_id}")

        for key, value in fields.items():
            raw[_FIELD_ALIASES.get(key, key)] = to_iso8601(value) if hasattr(value, "isoformat") else value
        raw["updatedAt"] = to_iso8601(utc_now())
        raw["updatedBy"] = actor_id
        self._save(document)
        self.update_calls.append((task_id, dict(fields), actor_id))
        logger.info("file_service.task_updated", task_id=task_id, fields=sorted(fields))


__all__ = ["JsonFileTaskService"]
