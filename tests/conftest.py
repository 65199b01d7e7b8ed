"""
Shared pytest fixtures for calendar-spine tests.

This module provides:
- Settings isolation (cache cleared, data dir under tmp_path)
- Deterministic clocks (datetime and epoch-seconds flavours)
- A task factory and an in-memory fake TaskService
- The three-task, two-workstation scenario used across production tests
"""

import asyncio
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

# Ensure calendar_spine is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from calendar_spine.core.settings import CalendarSettings, clear_settings_cache
from calendar_spine.production.models import Customer, Task, Workstation


# =============================================================================
# Clocks
# =============================================================================


class FakeClock:
    """Callable returning a controllable aware datetime."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeTimer:
    """Callable returning controllable epoch seconds (for TTL clocks)."""

    def __init__(self, start: float = 1_000_000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


# =============================================================================
# Fake collaborator
# =============================================================================


class FakeTaskService:
    """In-memory TaskService.

    Stores raw task documents and rebuilds Task objects on every fetch, so
    updates are visible to later fetches the way a remote store behaves.
    Set ``fetch_error`` / ``update_error`` to make calls fail, and
    ``fetch_gate`` / ``update_gate`` to an ``asyncio.Event`` to hold calls
    open until the test releases them. A held fetch returns the documents as
    they were when the call started.
    """

    def __init__(
        self,
        tasks: list[dict[str, Any]] | None = None,
        workstations: list[Workstation] | None = None,
        customers: list[Customer] | None = None,
    ):
        self.documents = [dict(t) for t in tasks or []]
        self.workstation_list = list(workstations or [])
        self.customer_list = list(customers or [])
        self.fetch_calls: list[tuple[str, str]] = []
        self.update_calls: list[tuple[str, dict[str, Any], str]] = []
        self.fetch_error: Exception | None = None
        self.update_error: Exception | None = None
        self.fetch_gate: asyncio.Event | None = None
        self.update_gate: asyncio.Event | None = None

    async def fetch_tasks_by_range(self, start_iso: str, end_iso: str) -> list[Task]:
        self.fetch_calls.append((start_iso, end_iso))
        snapshot = [Task.from_dict(doc) for doc in self.documents]
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return snapshot

    async def fetch_workstations(self) -> list[Workstation]:
        return list(self.workstation_list)

    async def fetch_customers(self) -> list[Customer]:
        return list(self.customer_list)

    async def update_task(self, task_id: str, fields: dict[str, Any], actor_id: str) -> None:
        self.update_calls.append((task_id, dict(fields), actor_id))
        if self.update_gate is not None:
            await self.update_gate.wait()
        if self.update_error is not None:
            raise self.update_error
        for doc in self.documents:
            if doc["id"] == task_id:
                doc["scheduledDate"] = fields["scheduled_date"].isoformat()
                doc["endDate"] = fields["end_date"].isoformat()
                doc["estimatedDuration"] = fields["estimated_duration"]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Keep settings from leaking between tests or touching the home dir."""
    monkeypatch.setenv("CALENDAR_DATA_DIR", str(tmp_path / "data"))
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings(tmp_path) -> CalendarSettings:
    return CalendarSettings(data_dir=tmp_path / "data")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 10, 0, tzinfo=UTC))


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def make_task():
    """Factory building a Task with sensible scheduled defaults."""

    def _make(task_id: str = "T1", **overrides: Any) -> Task:
        data: dict[str, Any] = {
            "id": task_id,
            "name": f"Task {task_id}",
            "status": "Scheduled",
            "scheduledDate": "2024-03-04T08:00:00Z",
            "endDate": "2024-03-04T12:00:00Z",
            "workstationId": "W1",
        }
        data.update(overrides)
        return Task.from_dict(data)

    return _make


@pytest.fixture
def workstations() -> list[Workstation]:
    return [
        Workstation(id="W1", name="Mixer", color="#1e88e5"),
        Workstation(id="W2", name="Filler"),
    ]


@pytest.fixture
def customers() -> list[Customer]:
    return [Customer(id="C1", name="Acme"), Customer(id="C2", name="Globex")]


@pytest.fixture
def scenario_documents() -> list[dict[str, Any]]:
    """Two tasks on W1 and one on W2, all Scheduled, inside 2024-03-01..07."""
    return [
        {
            "id": "T1",
            "name": "Batch 1",
            "status": "Scheduled",
            "scheduledDate": "2024-03-04T08:00:00Z",
            "endDate": "2024-03-04T12:00:00Z",
            "workstationId": "W1",
            "customerId": "C1",
        },
        {
            "id": "T2",
            "name": "Batch 2",
            "status": "Scheduled",
            "scheduledDate": "2024-03-05T08:00:00Z",
            "estimatedDuration": 90,
            "workstationId": "W1",
        },
        {
            "id": "T3",
            "name": "Batch 3",
            "status": "Scheduled",
            "scheduledDate": "2024-03-06T09:00:00Z",
            "endDate": "2024-03-06T15:00:00Z",
            "workstationId": "W2",
            "customer": {"id": "C2", "name": "Globex"},
        },
    ]


@pytest.fixture
def service(scenario_documents, workstations, customers) -> FakeTaskService:
    return FakeTaskService(scenario_documents, workstations, customers)
