"""Tests for calendar_spine.core.settings.

Covers:
- Defaults matching the calendar's tuning constants
- CALENDAR_* environment overrides
- Validation of TTLs, limits and log format
- Cached factory and cache reset
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from calendar_spine.core.enums import Detail, GroupBy
from calendar_spine.core.settings import CalendarSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_tuning_constants(self):
        s = CalendarSettings()
        assert s.cache_ttl_seconds == 300
        assert s.max_days_for_hourly_view == 30
        assert s.navigation_threshold_days == 1.0
        assert s.range_persistence_key == "production-calendar-date-range"
        assert s.range_persistence_ttl_seconds == 3600
        assert s.pending_edit_ttl_seconds == 600

    def test_view_defaults(self):
        s = CalendarSettings()
        assert s.default_detail == Detail.DAY
        assert s.default_group_by == GroupBy.WORKSTATION
        assert s.editable is True
        assert s.use_workstation_colors is False
        assert s.actor_id == "system"

    def test_store_path_under_data_dir(self, tmp_path):
        s = CalendarSettings(data_dir=tmp_path)
        assert s.store_path == tmp_path / "calendar-store.json"
        assert isinstance(s.data_dir, Path)


class TestEnvOverride:
    def test_ttl_from_env(self, monkeypatch):
        monkeypatch.setenv("CALENDAR_CACHE_TTL_SECONDS", "120")
        assert CalendarSettings().cache_ttl_seconds == 120

    def test_detail_from_env(self, monkeypatch):
        monkeypatch.setenv("CALENDAR_DEFAULT_DETAIL", "hour")
        assert CalendarSettings().default_detail == Detail.HOUR

    def test_threshold_from_env(self, monkeypatch):
        monkeypatch.setenv("CALENDAR_NAVIGATION_THRESHOLD_DAYS", "2.5")
        assert CalendarSettings().navigation_threshold_days == 2.5

    def test_data_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CALENDAR_DATA_DIR", str(tmp_path / "elsewhere"))
        assert CalendarSettings().data_dir == tmp_path / "elsewhere"


class TestValidation:
    @pytest.mark.parametrize(
        "field_name",
        [
            "cache_ttl_seconds",
            "max_days_for_hourly_view",
            "range_persistence_ttl_seconds",
            "pending_edit_ttl_seconds",
        ],
    )
    def test_non_positive_rejected(self, field_name):
        with pytest.raises(ValidationError):
            CalendarSettings(**{field_name: 0})

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            CalendarSettings(navigation_threshold_days=-1)

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ValidationError):
            CalendarSettings(log_format="xml")

    def test_unknown_detail_rejected(self, monkeypatch):
        monkeypatch.setenv("CALENDAR_DEFAULT_DETAIL", "minute")
        with pytest.raises(ValidationError):
            CalendarSettings()


class TestFactory:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CALENDAR_ACTOR_ID", "planner-7")
        assert get_settings().actor_id == first.actor_id
        clear_settings_cache()
        assert get_settings().actor_id == "planner-7"

    def test_force_reload(self, monkeypatch):
        get_settings()
        monkeypatch.setenv("CALENDAR_MAX_DAYS_FOR_HOURLY_VIEW", "14")
        assert get_settings(_force_reload=True).max_days_for_hourly_view == 14
