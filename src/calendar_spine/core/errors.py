"""
Structured error types for the production calendar engine.

Every failure the engine can meet while resolving ranges, fetching tasks,
or committing direct-manipulation edits is represented by a typed error
carrying a category, a retry flag, and structured context. Components
below the orchestrator raise these errors; the orchestrator is the single
place that turns them into user-visible notices.

Manifesto:
    - **Typed taxonomy:** One class per failure kind the calendar knows about
    - **Explicit retry semantics:** Fetch failures are retryable, validation is not
    - **Rich context:** Task id, range bounds and detail travel with the error
    - **Error chaining:** The collaborator's original exception is kept as cause

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       CalendarError                          │
        │        (category, retryable, context, cause)                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  FetchFailure        InvalidDateRange     UpdateFailure      │
        │  (SOURCE, retry)     (VALIDATION)         (SOURCE)           │
        │                            │                                 │
        │  UnparsableTaskDate  HourlyRangeTooLarge  ConfigError        │
        │  (PARSE)             (VALIDATION)         (CONFIG)           │
        │                                               │              │
        │                                       InvalidConfigError     │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = FetchFailure("Task query failed", cause=ConnectionError("reset"))
    >>> error.retryable
    True
    >>> error.with_context(range_start="2024-03-01T00:00:00+00:00").context.range_start
    '2024-03-01T00:00:00+00:00'

Guardrails:
    ❌ DON'T: Show notices from inside the cache or projector
    ✅ DO: Raise a CalendarError and let the orchestrator decide

    ❌ DON'T: Swallow the collaborator's exception
    ✅ DO: Pass it as cause= when wrapping

Tags:
    error-handling, exception-hierarchy, retry-logic, calendar-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and notice routing."""

    SOURCE = "SOURCE"             # Remote task store, collaborator calls
    PARSE = "PARSE"               # Date/field conversion
    VALIDATION = "VALIDATION"     # Date ranges, detail limits
    CONFIG = "CONFIG"             # Invalid settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to calendar errors.

    Attributes:
        task_id: Task the error relates to
        range_start: ISO start of the queried/requested range
        range_end: ISO end of the queried/requested range
        detail: Detail level active when the error happened
        field_name: Task field involved (for parse errors)
        metadata: Additional key-value pairs
    """

    task_id: str | None = None
    range_start: str | None = None
    range_end: str | None = None
    detail: str | None = None
    field_name: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["task_id", "range_start", "range_end", "detail", "field_name"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CalendarError(Exception):
    """
    Base exception for all calendar engine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers rarely need to pass either explicitly.

    Examples:
        >>> error = CalendarError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CalendarError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FetchFailure("Query failed").with_context(
                range_start=start_iso,
                range_end=end_iso,
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class FetchFailure(CalendarError):
    """
    The remote task query failed.

    Recovered by the orchestrator: the previously displayed tasks stay in
    place and the next triggering action retries.
    """

    default_category = ErrorCategory.SOURCE
    default_retryable = True


class UpdateFailure(CalendarError):
    """Committing a drag/resize/manual edit to the remote store failed."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False

    def __init__(self, message: str, *, task_id: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.task_id = task_id
        if task_id is not None:
            self.context.task_id = task_id


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class InvalidDateRange(CalendarError):
    """
    Start after end, or a missing bound.

    Raised before any fetch is attempted; never retryable.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        start: Any = None,
        end: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.start = start
        self.end = end

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.start is not None:
            result["start"] = str(self.start)
        if self.end is not None:
            result["end"] = str(self.end)
        return result


class HourlyRangeTooLarge(CalendarError):
    """Hourly detail requested for a range longer than the allowed maximum."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, range_days: int, max_days: int, message: str | None = None):
        self.range_days = range_days
        self.max_days = max_days
        super().__init__(
            message
            or (
                f"Hourly detail is limited to ranges of {max_days} days; "
                f"the requested range spans {range_days} days"
            ),
            context=ErrorContext(detail="hour", metadata={"range_days": range_days, "max_days": max_days}),
        )


# =============================================================================
# PARSE ERRORS
# =============================================================================


class UnparsableTaskDate(CalendarError):
    """A task's date field cannot be converted to a valid instant."""

    default_category = ErrorCategory.PARSE
    default_retryable = False

    def __init__(self, task_id: str, field_name: str, value: Any):
        self.task_id = task_id
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Task {task_id} has an unparsable {field_name}: {value!r}",
            context=ErrorContext(task_id=task_id, field_name=field_name),
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(CalendarError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, CalendarError):
        return error.retryable
    return False


__all__ = [
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
]
