"""Schedule format parser.

Parses the compact, human-friendly schedule grammar into schedule
parameters. Tokens are whitespace separated, case-insensitive and evaluated
left to right::

    every 1 second          every 61 minutes        every day
    every day 11:15         16:18                   every week 22:11
    Monday                  every Tuesday 23:59     Saturday 23:13

The parser only accumulates state; building the task and applying the
time-of-day anchor happen in :func:`taskbeat.task.from_format` once the whole
string has been accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidTimeError, ScheduleFormatError
from .units import TimeUnit, Weekday

_DIGITS = re.compile(r"[0-9]+")

_UNIT_WORDS: dict[str, TimeUnit] = {
    "second": TimeUnit.SECONDS,
    "seconds": TimeUnit.SECONDS,
    "minute": TimeUnit.MINUTES,
    "minutes": TimeUnit.MINUTES,
    "hour": TimeUnit.HOURS,
    "hours": TimeUnit.HOURS,
    "day": TimeUnit.DAYS,
    "days": TimeUnit.DAYS,
    "week": TimeUnit.WEEKS,
    "weeks": TimeUnit.WEEKS,
}

_WEEKDAY_WORDS: dict[str, Weekday] = {day.name.lower(): day for day in Weekday}


@dataclass(frozen=True)
class ScheduleSpec:
    """Accepted schedule parameters."""

    interval: int
    unit: TimeUnit
    start_day: Weekday = Weekday.SUNDAY
    at: tuple[int, int] | None = None


def validate_time(hour: int, minute: int) -> None:
    """Raise :class:`InvalidTimeError` unless ``hour:minute`` is a valid time of day."""
    for name, value in (("hour", hour), ("minute", minute)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidTimeError(
                f"{name} must be an integer, got {value!r}",
                field=name,
                value=value,
            )
    if not 0 <= hour <= 23:
        raise InvalidTimeError(
            f"invalid time value '{hour}:{minute}': hour must be within 0-23",
            field="hour",
            value=hour,
        )
    if not 0 <= minute <= 59:
        raise InvalidTimeError(
            f"invalid time value '{hour}:{minute}': minute must be within 0-59",
            field="minute",
            value=minute,
        )


def parse_time_format(value: str) -> tuple[int, int]:
    """Parse ``hh:mm`` into ``(hour, minute)``.

    Raises:
        InvalidTimeError: if the token is not two colon-separated numbers
            or is outside 00:00-23:59
    """
    parts = value.split(":")
    if len(parts) != 2 or not all(_DIGITS.fullmatch(part) for part in parts):
        raise InvalidTimeError(f"{value!r} time format not valid", field="time", value=value)

    hour, minute = int(parts[0]), int(parts[1])
    validate_time(hour, minute)
    return hour, minute


def parse_task_format(format: str) -> ScheduleSpec:
    """Parse a schedule format string.

    Raises:
        ScheduleFormatError: on any malformed or contradictory token
    """
    if not isinstance(format, str):
        raise ScheduleFormatError(format, f"schedule format must be a string, got {type(format).__name__}")

    interval = 0
    explicit_interval = False
    unit = TimeUnit.NONE
    start_day = Weekday.SUNDAY
    at: tuple[int, int] | None = None

    for token in format.lower().split():
        if token == "every":
            if interval > 0:
                raise ScheduleFormatError(format, f"{format!r}: 'every' must come before the interval")
            interval = 1

        elif token in _UNIT_WORDS:
            unit = _UNIT_WORDS[token]

        elif token in _WEEKDAY_WORDS:
            # "2 monday" or "week monday" make no sense
            if interval > 1 or unit != TimeUnit.NONE:
                raise ScheduleFormatError(format, f"{format!r}: {token!r} conflicts with the interval")
            unit = TimeUnit.WEEKS
            start_day = _WEEKDAY_WORDS[token]

        elif ":" in token:
            if at is not None:
                raise ScheduleFormatError(format, f"{format!r}: time of day given twice")
            try:
                at = parse_time_format(token)
            except InvalidTimeError as exc:
                raise ScheduleFormatError(format, cause=exc) from exc
            if unit == TimeUnit.NONE:
                unit = TimeUnit.DAYS
            elif unit not in (TimeUnit.DAYS, TimeUnit.WEEKS):
                raise ScheduleFormatError(format, f"{format!r}: time of day needs a daily or weekly schedule")

        elif _DIGITS.fullmatch(token):
            if explicit_interval:
                raise ScheduleFormatError(format, f"{format!r}: interval given twice")
            value = int(token)
            if value < 1:
                raise ScheduleFormatError(format, f"{format!r}: interval must be at least 1")
            interval = value
            explicit_interval = True

        else:
            raise ScheduleFormatError(format, f"{format!r}: unexpected token {token!r}")

    if interval == 0:
        interval = 1
    if unit == TimeUnit.NONE:
        raise ScheduleFormatError(format, f"{format!r}: no time unit")
    if at is not None and unit not in (TimeUnit.DAYS, TimeUnit.WEEKS):
        raise ScheduleFormatError(format, f"{format!r}: time of day needs a daily or weekly schedule")

    return ScheduleSpec(interval=interval, unit=unit, start_day=start_day, at=at)
