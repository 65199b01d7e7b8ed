"""Tests for event colouring."""

import pytest

from calendar_spine.core.enums import TaskStatus
from calendar_spine.production.colors import (
    STATUS_COLORS,
    UNKNOWN_STATUS_COLOR,
    contrast_text_color,
    status_color,
    task_color,
)
from calendar_spine.production.models import Task, Workstation


class TestStatusColor:
    @pytest.mark.parametrize(
        "status, expected",
        [
            ("Scheduled", "#3788d8"),
            ("InProgress", "#f39c12"),
            ("Completed", "#2ecc71"),
            ("Cancelled", "#e74c3c"),
            ("OnHold", "#757575"),
        ],
    )
    def test_palette(self, status, expected):
        assert status_color(status) == expected

    def test_unknown_status(self):
        assert status_color("Paused") == UNKNOWN_STATUS_COLOR
        assert status_color(None) == UNKNOWN_STATUS_COLOR


class TestTaskColor:
    def test_workstation_colour_when_enabled(self):
        task = Task(id="T", workstation_id="W1")
        ws = {"W1": Workstation("W1", "Mixer", color="#1e88e5")}
        assert task_color(task, ws, use_workstation_colors=True) == "#1e88e5"
        assert task_color(task, ws) == STATUS_COLORS[TaskStatus.SCHEDULED]

    def test_falls_back_without_workstation_colour(self):
        task = Task(id="T", workstation_id="W2", status=TaskStatus.ON_HOLD)
        ws = {"W2": Workstation("W2", "Filler")}
        assert task_color(task, ws, use_workstation_colors=True) == "#757575"


class TestContrast:
    def test_light_and_dark(self):
        assert contrast_text_color("#ffffff") == "#000000"
        assert contrast_text_color("#000000") == "#ffffff"
        assert contrast_text_color("#3788d8") == "#ffffff"
        assert contrast_text_color("#f39c12") == "#000000"

    def test_short_hex(self):
        assert contrast_text_color("#fff") == "#000000"

    def test_invalid_hex_defaults_to_white(self):
        assert contrast_text_color("#zzzzzz") == "#ffffff"
