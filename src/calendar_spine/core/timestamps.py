"""
Instant normalisation and UTC helpers (stdlib-only).

Task dates reach the calendar as ISO strings, native datetimes, plain
dates, epoch milliseconds, or wrapped timestamp objects from the remote
document store. Everything that reads a date goes through
:func:`to_instant`, which returns a timezone-aware UTC ``datetime`` or
``None``; no other module sniffs date types.

Manifesto:
    - **One normaliser:** ``to_instant()`` is the only place that knows
      about wrapped timestamps and epoch numbers
    - **Never raise on bad input:** Unparsable values become ``None`` and
      the caller decides whether to log
    - **Always aware:** Naive inputs are interpreted as UTC

Features:
    - **utc_now():** Timezone-aware UTC datetime
    - **to_iso8601():** Serialization helper
    - **to_instant():** Duck-typed date normalisation
    - **minutes_between() / add_minutes():** Whole-minute duration math
    - **days_between():** Range length in (ceiled) days

Examples:
    >>> to_instant("2024-03-01T08:00:00Z").isoformat()
    '2024-03-01T08:00:00+00:00'
    >>> to_instant({"seconds": 1709280000, "nanoseconds": 0}).isoformat()
    '2024-03-01T08:00:00+00:00'
    >>> to_instant("not a date") is None
    True

Tags:
    timestamps, utc, datetime, normalisation, calendar-spine, stdlib-only

Doc-Types:
    - API Reference
    - Utility Documentation

STDLIB ONLY - NO PYDANTIC.
"""

import math
from datetime import UTC, date, datetime, timedelta
from typing import Any

MS_PER_MINUTE = 60_000
MS_PER_DAY = 86_400_000


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()


def _aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _from_epoch_ms(value: float) -> datetime | None:
    if math.isnan(value) or math.isinf(value):
        return None
    try:
        return datetime.fromtimestamp(value / 1000, UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _from_string(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _aware(datetime.fromisoformat(text))
    except ValueError:
        return None


def _from_wrapped(value: Any) -> datetime | None:
    # Document-store timestamps: objects exposing to_datetime()/toDate(),
    # or mappings carrying seconds + nanoseconds.
    for method in ("to_datetime", "toDate"):
        converter = getattr(value, method, None)
        if callable(converter):
            return to_instant(converter())

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
            return _from_epoch_ms(seconds * 1000 + nanos / 1_000_000)

    return None


def to_instant(value: Any) -> datetime | None:
    """
    Normalise any supported date representation to an aware UTC datetime.

    Accepted inputs:
        - ``datetime`` (naive values are taken as UTC)
        - ``date`` (midnight UTC)
        - ISO-8601 strings, including a trailing ``Z``
        - ``int``/``float`` epoch milliseconds
        - objects with ``to_datetime()`` or ``toDate()``
        - mappings with ``seconds``/``nanoseconds`` (or ``_seconds``)

    Returns ``None`` for ``None``, empty strings, and anything unparsable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        return _from_string(value)
    if isinstance(value, (int, float)):
        return _from_epoch_ms(float(value))
    return _from_wrapped(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return math.floor(value + 0.5)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, rounded half-up."""
    millis = (end - start) / timedelta(milliseconds=1)
    return round_half_up(millis / MS_PER_MINUTE)


def add_minutes(dt: datetime, minutes: float) -> datetime:
    return dt + timedelta(minutes=minutes)


def days_between(start: datetime, end: datetime) -> int:
    """Length of ``start..end`` in days, partial days counted as whole."""
    millis = (end - start) / timedelta(milliseconds=1)
    return math.ceil(millis / MS_PER_DAY)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    """Last representable millisecond of the day (23:59:59.999)."""
    return dt.replace(hour=23, minute=59, second=59, microsecond=999_000)


__all__ = [
    "MS_PER_DAY",
    "MS_PER_MINUTE",
    "add_minutes",
    "days_between",
    "end_of_day",
    "minutes_between",
    "round_half_up",
    "start_of_day",
    "to_instant",
    "to_iso8601",
    "utc_now",
]
