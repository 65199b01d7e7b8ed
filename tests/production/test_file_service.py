"""Tests for JsonFileTaskService."""

import json

import pytest

from calendar_spine.production.file_service import JsonFileTaskService
from calendar_spine.production.protocol import TaskService


@pytest.fixture
def document(tmp_path, scenario_documents):
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            {
                "workstations": [{"id": "W1", "name": "Mixer", "color": "#1e88e5"}, {"id": "W2"}],
                "customers": [{"id": "C1", "name": "Acme"}],
                "tasks": scenario_documents + [{"id": "T4", "name": "Undated"}],
            }
        )
    )
    return path


class TestJsonFileTaskService:
    def test_satisfies_protocol(self, document):
        assert isinstance(JsonFileTaskService(document), TaskService)

    @pytest.mark.asyncio
    async def test_fetch_by_overlap(self, document):
        service = JsonFileTaskService(document)
        tasks = await service.fetch_tasks_by_range("2024-03-05T00:00:00+00:00", "2024-03-05T23:59:59+00:00")
        assert [t.id for t in tasks] == ["T2"]

        tasks = await service.fetch_tasks_by_range("2024-03-01", "2024-03-31")
        assert [t.id for t in tasks] == ["T1", "T2", "T3"]

    @pytest.mark.asyncio
    async def test_bad_bounds(self, document):
        with pytest.raises(ValueError):
            await JsonFileTaskService(document).fetch_tasks_by_range("nope", "2024-03-31")

    @pytest.mark.asyncio
    async def test_reference_data(self, document):
        service = JsonFileTaskService(document)
        workstations = await service.fetch_workstations()
        assert [(w.id, w.name, w.color) for w in workstations] == [
            ("W1", "Mixer", "#1e88e5"),
            ("W2", "W2", None),
        ]
        assert [c.name for c in await service.fetch_customers()] == ["Acme"]

    @pytest.mark.asyncio
    async def test_update_writes_back(self, document, clock):
        service = JsonFileTaskService(document)
        await service.update_task(
            "T1",
            {"scheduled_date": clock(), "end_date": clock(), "estimated_duration": 0},
            "planner",
        )
        raw = json.loads(document.read_text())["tasks"][0]
        assert raw["scheduledDate"] == "2024-03-15T10:00:00+00:00"
        assert raw["estimatedDuration"] == 0
        assert raw["updatedBy"] == "planner"
        assert "updatedAt" in raw
        assert service.update_calls[0][0] == "T1"

    @pytest.mark.asyncio
    async def test_update_unknown_task(self, document):
        with pytest.raises(KeyError):
            await JsonFileTaskService(document).update_task("T9", {}, "planner")
