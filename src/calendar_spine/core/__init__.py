"""Calendar-Spine Core -- cross-cutting primitives for the calendar engine.

Architecture::

    enums.py        Shared enums (TaskStatus, Detail, GroupBy, ViewId, ...)
    errors.py       CalendarError hierarchy (FetchFailure, InvalidDateRange, ...)
    timestamps.py   to_instant() normaliser + UTC/minute helpers (stdlib-only)
    logging.py      structlog configuration and context binding
    settings.py     CalendarSettings (pydantic-settings, CALENDAR_ prefix)
    cache.py        CacheBackend with InMemory + JSON-file backends
"""

from calendar_spine.core.cache import CacheBackend, FileCache, InMemoryCache
from calendar_spine.core.enums import (
    Detail,
    GroupBy,
    NavigationAction,
    NoticeLevel,
    TaskStatus,
    ViewId,
)
from calendar_spine.core.errors import (
    CalendarError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FetchFailure,
    HourlyRangeTooLarge,
    InvalidConfigError,
    InvalidDateRange,
    UnparsableTaskDate,
    UpdateFailure,
    is_retryable,
)
from calendar_spine.core.logging import configure_logging, get_logger
from calendar_spine.core.settings import CalendarSettings, clear_settings_cache, get_settings
from calendar_spine.core.timestamps import to_instant, utc_now

__all__ = [
    # cache
    "CacheBackend",
    "FileCache",
    "InMemoryCache",
    # enums
    "Detail",
    "GroupBy",
    "NavigationAction",
    "NoticeLevel",
    "TaskStatus",
    "ViewId",
    # errors
    "CalendarError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FetchFailure",
    "HourlyRangeTooLarge",
    "InvalidConfigError",
    "InvalidDateRange",
    "UnparsableTaskDate",
    "UpdateFailure",
    "is_retryable",
    # logging
    "configure_logging",
    "get_logger",
    # settings
    "CalendarSettings",
    "clear_settings_cache",
    "get_settings",
    # timestamps
    "to_instant",
    "utc_now",
]
