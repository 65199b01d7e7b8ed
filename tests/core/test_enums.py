"""Tests for calendar_spine.core.enums."""

import pytest

from calendar_spine.core.enums import Detail, GroupBy, TaskStatus, ViewId


class TestTaskStatusParse:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Scheduled", TaskStatus.SCHEDULED),
            ("scheduled", TaskStatus.SCHEDULED),
            ("InProgress", TaskStatus.IN_PROGRESS),
            ("in progress", TaskStatus.IN_PROGRESS),
            ("IN_PROGRESS", TaskStatus.IN_PROGRESS),
            ("OnHold", TaskStatus.ON_HOLD),
            (TaskStatus.COMPLETED, TaskStatus.COMPLETED),
        ],
    )
    def test_known(self, raw, expected):
        assert TaskStatus.parse(raw) == expected

    @pytest.mark.parametrize("raw", ["Paused", "", None, 3])
    def test_unknown(self, raw):
        assert TaskStatus.parse(raw) is None


class TestViewId:
    def test_resource_views(self):
        assert ViewId.TIMELINE_WEEK.is_resource_view
        assert not ViewId.DAY_GRID_MONTH.is_resource_view
        assert not ViewId.TIME_GRID_DAY.is_resource_view

    def test_values(self):
        assert ViewId("resourceTimelineYear") == ViewId.TIMELINE_YEAR
        assert Detail("week") == Detail.WEEK
        assert GroupBy("order") == GroupBy.ORDER
