"""Tests for the calendar-spine CLI."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from calendar_spine import __version__
from calendar_spine.cli.app import app

runner = CliRunner()


@pytest.fixture
def document(tmp_path, scenario_documents):
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            {
                "workstations": [
                    {"id": "W1", "name": "Mixer", "color": "#1e88e5"},
                    {"id": "W2", "name": "Filler"},
                ],
                "customers": [{"id": "C1", "name": "Acme"}, {"id": "C2", "name": "Globex"}],
                "tasks": scenario_documents,
            }
        )
    )
    return path


# ── version ──────────────────────────────────────────────────────────


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("calendar-spine ")
        assert result.output.strip().split()[-1]

    def test_fallback_version_is_semver(self):
        assert __version__.count(".") == 2


# ── resolve-view ─────────────────────────────────────────────────────


class TestResolveView:
    def test_json_output(self):
        result = runner.invoke(
            app, ["resolve-view", "--start", "2024-03-01", "--end", "2024-03-07", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["view"] == "resourceTimelineWeek"
        assert data["detail"] == "day"
        assert data["range_days"] == 6
        assert data["downgraded"] is False

    def test_hourly_downgrade(self):
        result = runner.invoke(
            app,
            ["resolve-view", "-s", "2024-03-01", "-e", "2024-04-15", "-d", "hour", "--json"],
        )
        data = json.loads(result.output)
        assert data["detail"] == "day"
        assert data["downgraded"] is True

    def test_hourly_clamp(self):
        result = runner.invoke(
            app,
            ["resolve-view", "-s", "2024-03-01", "-e", "2024-04-15", "-d", "hour", "--clamp", "--json"],
        )
        data = json.loads(result.output)
        assert data["detail"] == "hour"
        assert data["clamped"] is True
        assert data["range_days"] == 30

    def test_reversed_range_fails(self):
        result = runner.invoke(app, ["resolve-view", "-s", "2024-03-07", "-e", "2024-03-01"])
        assert result.exit_code == 1

    def test_table_output(self):
        result = runner.invoke(app, ["resolve-view", "-s", "2024-03-01", "-e", "2024-03-01"])
        assert result.exit_code == 0
        assert "Resolved view" in result.output


# ── preview ──────────────────────────────────────────────────────────


class TestPreview:
    def test_custom_range_json(self, document):
        result = runner.invoke(
            app,
            ["preview", str(document), "--start", "2024-03-01", "--end", "2024-03-07", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["view_config"]["view"] == "resourceTimelineWeek"
        assert [r["id"] for r in data["resources"]] == ["W1", "W2"]
        assert [e["id"] for e in data["events"]] == ["T1", "T2", "T3"]
        assert {e["color"] for e in data["events"]} == {"#3788d8"}
        assert data["stats"]["task_count"] == 3

    def test_group_by_order_and_read_only(self, document):
        result = runner.invoke(
            app,
            [
                "preview",
                str(document),
                "-s",
                "2024-03-01",
                "-e",
                "2024-03-07",
                "-g",
                "order",
                "--read-only",
                "--json",
            ],
        )
        data = json.loads(result.output)
        assert [r["id"] for r in data["resources"]] == ["no-order"]
        assert not any(e["editable"] for e in data["events"])

    def test_start_without_end(self, document):
        result = runner.invoke(app, ["preview", str(document), "--start", "2024-03-01"])
        assert result.exit_code == 1

    def test_missing_document(self, tmp_path):
        result = runner.invoke(app, ["preview", str(tmp_path / "absent.json")])
        assert result.exit_code != 0

    def test_table_output(self, document):
        result = runner.invoke(
            app, ["preview", str(document), "-s", "2024-03-01", "-e", "2024-03-07"]
        )
        assert result.exit_code == 0
        assert "Mixer" in result.output
