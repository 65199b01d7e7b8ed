"""
Centralized settings for calendar-spine.

Manifesto:
    The calendar engine has a handful of tuning constants (cache TTL, the
    hourly-view range limit, the navigation heuristic threshold, the
    freshness window of the persisted range). They live in one validated,
    cached settings object instead of module-level constants scattered
    across components.

All fields can be set via ``CALENDAR_*`` environment variables (e.g.
``CALENDAR_CACHE_TTL_SECONDS=120``) or a ``.env`` file.

Examples:
    >>> from calendar_spine.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.max_days_for_hourly_view
    30

Tags:
    calendar-spine, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendar_spine.core.enums import Detail, GroupBy


class CalendarSettings(BaseSettings):
    """Calendar engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Range cache ──────────────────────────────────────────────
    cache_ttl_seconds: int = Field(default=5 * 60, description="Lifetime of a cached range query")

    # ── View resolution ──────────────────────────────────────────
    max_days_for_hourly_view: int = Field(default=30)
    navigation_threshold_days: float = Field(
        default=1.0,
        description="Bound shift above which a widget-reported range counts as user navigation",
    )

    # ── Persisted custom range ───────────────────────────────────
    range_persistence_key: str = Field(default="production-calendar-date-range")
    range_persistence_ttl_seconds: int = Field(default=60 * 60)

    # ── Pending edits ────────────────────────────────────────────
    pending_edit_ttl_seconds: int = Field(default=10 * 60)

    # ── Defaults ─────────────────────────────────────────────────
    default_detail: Detail = Field(default=Detail.DAY)
    default_group_by: GroupBy = Field(default=GroupBy.WORKSTATION)
    editable: bool = Field(default=True)
    use_workstation_colors: bool = Field(default=False)
    actor_id: str = Field(default="system", description="Actor recorded on task updates")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    # ── Paths ────────────────────────────────────────────────────
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".calendar-spine",
        description="Directory holding the local key-value store",
    )

    @field_validator(
        "cache_ttl_seconds",
        "max_days_for_hourly_view",
        "range_persistence_ttl_seconds",
        "pending_edit_ttl_seconds",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number")
        return value

    @field_validator("navigation_threshold_days")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError("must be 'json' or 'console'")
        return value

    @property
    def store_path(self) -> Path:
        """JSON file backing the local key-value store."""
        return self.data_dir / "calendar-store.json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, CalendarSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CalendarSettings:
    """Return the process-wide settings, loading them on first use."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = CalendarSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["CalendarSettings", "clear_settings_cache", "get_settings"]
