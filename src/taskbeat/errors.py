"""
Structured error types for taskbeat.

Provides a small hierarchy of typed errors with metadata for error
categorization, logging and root cause analysis through error chaining.

Instead of generic exceptions that lose context, TaskbeatError and its
subclasses carry:
- **Category:** What kind of error (validation, parse, config, orchestration)
- **Retryable:** Whether the operation can be retried as-is
- **Context:** Task name, schedule string and custom fields
- **Cause:** Chained underlying exception for root cause analysis

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       TaskbeatError                              │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ValidationError          SchedulerStateError    ConfigError    │
        │  (VALIDATION)             (ORCHESTRATION)        (CONFIG)       │
        │       │                        │                                 │
        │  InvalidScheduleError     SchedulerAlreadyRunningError          │
        │  ├── InvalidTimeError     SchedulerNotRunningError              │
        │  └── ScheduleFormatError                                        │
        │  TaskBindError                                                   │
        └─────────────────────────────────────────────────────────────────┘

Propagation:
    - Builder and parser errors surface to the caller before a task exists,
      so a malformed schedule is never registered with a fallback schedule.
    - Scheduler state errors are raised from ``start()`` / ``stop()``.
    - Run-guard contention is not an error: ``Task.run()`` returns False.

Examples:
    >>> error = ScheduleFormatError("2 monday")
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> error.retryable
    False
    >>> error.to_dict()["format"]
    '2 monday'

Tags:
    error-handling, exception-hierarchy, error-context, taskbeat
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"
    PARSE = "PARSE"
    CONFIG = "CONFIG"
    ORCHESTRATION = "ORCHESTRATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured context for errors.

    Attributes:
        task: Name of the task the error relates to
        schedule: Schedule format string, if one was being parsed
        metadata: Additional key-value pairs
    """

    task: str | None = None
    schedule: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["task", "schedule"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TaskbeatError(Exception):
    """
    Base exception for all taskbeat errors.

    Subclasses set ``default_category`` and ``default_retryable`` to provide
    sensible defaults for their domain.
    """

    # Default category for this error type
    default_category: ErrorCategory = ErrorCategory.INTERNAL
    # Default retryable setting
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

    def with_context(self, **kwargs: Any) -> TaskbeatError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TaskBindError("bad args").with_context(task="report@jobs.send")
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
# VALIDATION ERRORS
# =============================================================================


class ValidationError(TaskbeatError):
    """
    Invalid input to a builder or to ``Task.do()``.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidScheduleError(ValidationError):
    """Schedule parameters (interval, unit, anchor) are not valid."""

    pass


class InvalidTimeError(InvalidScheduleError):
    """Time of day is malformed or outside 00:00-23:59."""

    pass


class ScheduleFormatError(InvalidScheduleError):
    """Schedule format string could not be parsed."""

    default_category = ErrorCategory.PARSE

    def __init__(self, format: str, message: str | None = None, **kwargs: Any):
        self.format = format
        super().__init__(
            message or f"{format!r} task format not valid",
            field="format",
            value=format,
            **kwargs,
        )
        self.context.schedule = format

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["format"] = self.format
        return result


class TaskBindError(ValidationError):
    """Callback is not callable or the arguments do not match its signature."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TaskbeatError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# SCHEDULER STATE ERRORS
# =============================================================================


class SchedulerStateError(TaskbeatError):
    """Scheduler lifecycle call made in the wrong state."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = False


class SchedulerAlreadyRunningError(SchedulerStateError):
    """``start()`` called on a running scheduler."""

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(message or "the scheduler is already running", **kwargs)


class SchedulerNotRunningError(SchedulerStateError):
    """``stop()`` called on a stopped scheduler."""

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(message or "the scheduler is not running", **kwargs)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TaskbeatError",
    "ValidationError",
    "InvalidScheduleError",
    "InvalidTimeError",
    "ScheduleFormatError",
    "TaskBindError",
    "ConfigError",
    "SchedulerStateError",
    "SchedulerAlreadyRunningError",
    "SchedulerNotRunningError",
]
