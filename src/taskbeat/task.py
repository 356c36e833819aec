"""Schedulable tasks.

A :class:`Task` couples schedule parameters (interval, unit, optional
weekday/time-of-day anchor) with run bookkeeping and a bound callback.

┌──────────────────────────────────────────────────────────────────────────────┐
│  TASK LIFECYCLE                                                               │
│                                                                               │
│   at_intervals / on_weekday / daily / from_format                            │
│      │   (validate, compute anchor -> last_run_at)                           │
│      ▼                                                                        │
│   do(name, callback, *args)                                                  │
│      │   (bind callback, next_run_at = last_run_at + period)                 │
│      ▼                                                                        │
│   Scheduler tick ──► should_run() ──► run()                                  │
│                                        │                                      │
│                     guard busy ◄───────┤ try-acquire run guard (~1ms)       │
│                     return False       │                                      │
│                                        ▼                                      │
│                     last_run_at = now, running = True, run_count += 1        │
│                     callback()                                                │
│                     running = False, next_run_at = last_run_at + period      │
│                     release guard, return True                                │
└──────────────────────────────────────────────────────────────────────────────┘

Time arithmetic:
    SECONDS/MINUTES/HOURS periods advance by elapsed time. DAYS/WEEKS
    periods advance on the wall clock of the configured location, so a task
    at 09:00 stays at 09:00 across daylight-saving changes.
"""

from __future__ import annotations

import functools
import inspect
import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from .errors import InvalidScheduleError, TaskBindError
from .logging import get_logger
from .parser import parse_task_format, validate_time
from .settings import TaskbeatSettings, get_settings
from .timestamps import (
    EPOCH,
    at_time_of_day,
    shift_wall_clock,
    to_iso8601,
    to_location,
    utc_now,
)
from .units import TimeUnit, Weekday, unit_duration

logger = get_logger(__name__)


def _callback_name(callback: Callable[..., Any]) -> str:
    """Resolve ``module.qualname`` for a callback (unwrapping partials)."""
    target = callback
    while isinstance(target, functools.partial):
        target = target.func
    qualname = getattr(target, "__qualname__", None) or type(target).__qualname__
    module = getattr(target, "__module__", None)
    if not module:
        return qualname
    return f"{module.rsplit('.', 1)[-1]}.{qualname}"


class Task:
    """A periodic unit of work.

    Build tasks with the classmethods (or the module-level functions of the
    same names) rather than calling the constructor directly.

    Example:
        >>> task = Task.at_intervals(30, TimeUnit.SECONDS).do("heartbeat", send_heartbeat)
        >>> task = Task.daily(10, 30).do("report", build_report, "sales")
        >>> task = Task.from_format("every Tuesday 23:59").do("cleanup", cleanup)
    """

    def __init__(
        self,
        interval: int,
        unit: TimeUnit,
        *,
        start_day: Weekday = Weekday.SUNDAY,
        settings: TaskbeatSettings | None = None,
    ) -> None:
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            raise InvalidScheduleError(
                f"interval must be a positive integer, got {interval!r}",
                field="interval",
                value=interval,
            )
        try:
            unit = TimeUnit(unit)
            start_day = Weekday(start_day)
        except ValueError as exc:
            raise InvalidScheduleError(str(exc), cause=exc) from exc
        if unit == TimeUnit.NONE:
            raise InvalidScheduleError("a task needs a time unit", field="unit", value=unit)

        settings = settings or get_settings()
        self._location = settings.location
        self._guard_timeout = settings.run_guard_timeout.total_seconds()

        self._interval = interval
        self._unit = unit
        self._start_day = start_day

        self._count = 0
        self._count_lock = threading.Lock()
        self._last_run_at: datetime | None = None
        self._next_run_at: datetime = EPOCH
        self._period: timedelta | None = None

        self._name = ""
        self._callback: Callable[[], Any] | None = None

        self._run_guard = threading.Lock()
        self._running = False

    # === Builders ===

    @classmethod
    def at_intervals(
        cls,
        interval: int,
        unit: TimeUnit,
        *,
        settings: TaskbeatSettings | None = None,
    ) -> Task:
        """Create a task repeating every ``interval`` units.

        Raises:
            InvalidScheduleError: if interval < 1 or unit is NONE
        """
        return cls(interval, unit, settings=settings)

    @classmethod
    def on_weekday(
        cls,
        weekday: Weekday,
        hour: int,
        minute: int,
        *,
        settings: TaskbeatSettings | None = None,
    ) -> Task:
        """Create a weekly task running on ``weekday`` at ``hour:minute``.

        Raises:
            InvalidTimeError: if hour is outside 0-23 or minute outside 0-59
        """
        validate_time(hour, minute)
        task = cls(1, TimeUnit.WEEKS, start_day=weekday, settings=settings)
        return task._at(hour, minute)

    @classmethod
    def daily(
        cls,
        hour: int,
        minute: int,
        *,
        settings: TaskbeatSettings | None = None,
    ) -> Task:
        """Create a task running every day at ``hour:minute``.

        Raises:
            InvalidTimeError: if hour is outside 0-23 or minute outside 0-59
        """
        validate_time(hour, minute)
        task = cls(1, TimeUnit.DAYS, settings=settings)
        return task._at(hour, minute)

    @classmethod
    def from_format(cls, format: str, *, settings: TaskbeatSettings | None = None) -> Task:
        """Create a task from a schedule format string.

        Raises:
            ScheduleFormatError: if the string is malformed
        """
        spec = parse_task_format(format)
        task = cls(spec.interval, spec.unit, start_day=spec.start_day, settings=settings)
        if spec.at is not None:
            task._at(*spec.at)
        return task

    # === Introspection ===

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def unit(self) -> TimeUnit:
        return self._unit

    @property
    def start_day(self) -> Weekday:
        return self._start_day

    @property
    def run_count(self) -> int:
        """Number of times the task has been executed."""
        return self._count

    @property
    def running(self) -> bool:
        """True only while the callback is executing."""
        return self._running

    def next_scheduled_time(self) -> datetime:
        """When the task is due next (epoch until ``do()`` is called)."""
        return to_location(self._next_run_at, self._location)

    def last_run_time(self) -> datetime:
        """When the task last ran (epoch if never)."""
        return to_location(self._last_run_at or EPOCH, self._location)

    def duration(self) -> timedelta:
        """Period between runs; computed once and memoized."""
        if self._period is None:
            self._period = unit_duration(self._interval, self._unit)
        return self._period

    def __repr__(self) -> str:
        return (
            f"Task(name={self._name!r}, interval={self._interval}, "
            f"unit={self._unit.name}, next_run_at={to_iso8601(self._next_run_at)})"
        )

    # === Binding ===

    def do(self, name: str, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> Task:
        """Bind the callback to call every time the task runs.

        The arguments are checked against the callback's signature now, so a
        mismatch fails at registration instead of on the first run.

        Args:
            name: Label for logs; combined with the callback's qualified name
            callback: Function to execute
            *args, **kwargs: Arguments passed to ``callback`` on every run

        Returns:
            The task itself, for chaining

        Raises:
            TaskBindError: if callback is not callable or the arguments don't fit
        """
        if not callable(callback):
            raise TaskBindError(
                "only callables can be scheduled",
                field="callback",
                value=callback,
            ).with_context(task=name)

        try:
            signature = inspect.signature(callback)
        except (TypeError, ValueError):
            # some builtins expose no signature; nothing to validate against
            signature = None
        if signature is not None:
            try:
                signature.bind(*args, **kwargs)
            except TypeError as exc:
                raise TaskBindError(
                    f"the parameters do not match {_callback_name(callback)}: {exc}",
                    field="params",
                    cause=exc,
                ).with_context(task=name) from exc

        self._name = f"{name}@{_callback_name(callback)}"
        self._callback = functools.partial(callback, *args, **kwargs)
        self._schedule_next_run()
        return self

    @property
    def is_bound(self) -> bool:
        return self._callback is not None

    # === Execution ===

    def should_run(self) -> bool:
        """True if the task is not running and its next run time has passed."""
        return not self._running and utc_now() > self._next_run_at

    def run(self) -> bool:
        """Run the task unless another run holds the guard.

        Returns:
            True if the callback was executed; False if an overlapping run is
            in flight (nothing is changed in that case)

        Raises:
            TaskBindError: if no callback was bound with ``do()``
            Exception: whatever the callback raises, after the task has been
                rescheduled and its guard released
        """
        if self._callback is None:
            raise TaskBindError("no callback bound; call do() first")

        if not self._run_guard.acquire(timeout=self._guard_timeout):
            logger.debug(
                "task_already_running",
                task=self._name,
                count=self._count,
                started_at=to_iso8601(self._last_run_at),
            )
            return False

        try:
            self._last_run_at = utc_now()
            self._running = True
            with self._count_lock:
                self._count += 1
                count = self._count

            logger.info(
                "task_run_started",
                task=self._name,
                count=count,
                started_at=to_iso8601(self._last_run_at),
            )
            try:
                self._callback()
            finally:
                self._running = False
                self._schedule_next_run()
        finally:
            self._run_guard.release()
        return True

    # === Scheduling ===

    def _advance(self, instant: datetime) -> datetime:
        period = self.duration()
        if self._unit in (TimeUnit.DAYS, TimeUnit.WEEKS):
            return shift_wall_clock(instant, period, self._location)
        return instant + period

    def _retreat(self, instant: datetime) -> datetime:
        period = self.duration()
        if self._unit in (TimeUnit.DAYS, TimeUnit.WEEKS):
            return shift_wall_clock(instant, -period, self._location)
        return instant - period

    def _at(self, hour: int, minute: int) -> Task:
        """Anchor ``last_run_at`` so the first run lands on the next hour:minute."""
        now = utc_now()
        today = to_location(now, self._location).date()
        anchor = at_time_of_day(today, hour, minute, self._location)

        if self._unit == TimeUnit.DAYS:
            if now > anchor:
                last = anchor
            else:
                last = self._retreat(anchor)
        elif self._unit == TimeUnit.WEEKS:
            if self._start_day != today.weekday() or now > anchor:
                days_back = (today.weekday() - self._start_day) % 7
                last = at_time_of_day(today - timedelta(days=days_back), hour, minute, self._location)
            else:
                last = self._retreat(anchor)
        else:
            raise InvalidScheduleError(
                f"time of day requires a daily or weekly task, got {self._unit.name}",
                field="unit",
                value=self._unit,
            )

        self._last_run_at = last
        return self

    def _schedule_next_run(self) -> datetime:
        """Compute the instant when this task should run next."""
        if self._last_run_at is None:
            now = utc_now()
            if self._unit == TimeUnit.WEEKS:
                # plain weekly tasks start from midnight of the most recent start day
                today = to_location(now, self._location).date()
                days_back = (today.weekday() - self._start_day) % 7
                now = at_time_of_day(today - timedelta(days=days_back), 0, 0, self._location)
            self._last_run_at = now

        self._next_run_at = self._advance(self._last_run_at)
        logger.debug(
            "task_scheduled",
            task=self._name,
            last_run_at=to_iso8601(self._last_run_at),
            next_run_at=to_iso8601(self._next_run_at),
        )
        return self._next_run_at


def at_intervals(interval: int, unit: TimeUnit, *, settings: TaskbeatSettings | None = None) -> Task:
    """Create a task repeating every ``interval`` units."""
    return Task.at_intervals(interval, unit, settings=settings)


def on_weekday(
    weekday: Weekday, hour: int, minute: int, *, settings: TaskbeatSettings | None = None
) -> Task:
    """Create a weekly task running on ``weekday`` at ``hour:minute``."""
    return Task.on_weekday(weekday, hour, minute, settings=settings)


def daily(hour: int, minute: int, *, settings: TaskbeatSettings | None = None) -> Task:
    """Create a task running every day at ``hour:minute``."""
    return Task.daily(hour, minute, settings=settings)


def from_format(format: str, *, settings: TaskbeatSettings | None = None) -> Task:
    """Create a task from a schedule format string."""
    return Task.from_format(format, settings=settings)
