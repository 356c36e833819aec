"""taskbeat - in-process periodic task scheduler.

Run Python callables periodically at pre-determined intervals using a
simple, human-friendly syntax.

Quick Start::

    from taskbeat import Scheduler, TimeUnit, Weekday, at_intervals, daily, from_format, on_weekday

    scheduler = Scheduler()

    # Tasks with and without parameters
    scheduler.add(at_intervals(1, TimeUnit.MINUTES).do("greet", greet, 1, "hello"))
    scheduler.add(at_intervals(30, TimeUnit.SECONDS).do("ping", ping))

    # On a specific weekday, or daily
    scheduler.add(on_weekday(Weekday.MONDAY, 23, 59).do("weekly", rollup))
    scheduler.add(daily(10, 30).do("daily", report))

    # Parsed from a schedule string
    scheduler.add(from_format("every day 11:15").do("digest", digest))
    scheduler.add(from_format("Saturday 23:13").do("backup", backup))

    scheduler.start()
    ...
    scheduler.stop()

Schedule grammar examples::

    16:18                every 1 second       every 61 minutes
    every day            every day 11:15      every week 22:11
    Monday               every Tuesday 23:59  Saturday 23:13
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidScheduleError,
    InvalidTimeError,
    ScheduleFormatError,
    SchedulerAlreadyRunningError,
    SchedulerNotRunningError,
    SchedulerStateError,
    TaskbeatError,
    TaskBindError,
    ValidationError,
)
from .parser import ScheduleSpec, parse_task_format, parse_time_format
from .scheduler import Scheduler, SchedulerHealth, SchedulerStats
from .settings import TaskbeatSettings, clear_settings_cache, get_settings
from .task import Task, at_intervals, daily, from_format, on_weekday
from .units import TimeUnit, Weekday, unit_duration

__version__ = "0.1.0"

__all__ = [
    # Scheduling
    "Scheduler",
    "SchedulerStats",
    "SchedulerHealth",
    "Task",
    "at_intervals",
    "on_weekday",
    "daily",
    "from_format",
    # Units
    "TimeUnit",
    "Weekday",
    "unit_duration",
    # Parser
    "ScheduleSpec",
    "parse_task_format",
    "parse_time_format",
    # Settings
    "TaskbeatSettings",
    "get_settings",
    "clear_settings_cache",
    # Errors
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
