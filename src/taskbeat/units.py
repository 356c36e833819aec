"""
Time units, weekdays and the duration calculator.

``TimeUnit`` and ``Weekday`` are the vocabulary shared by the task builders
and the schedule-format parser. ``unit_duration`` is the single conversion
from an (interval, unit) pair to a wall-clock ``timedelta``.

Examples:
    >>> unit_duration(2, TimeUnit.HOURS)
    datetime.timedelta(seconds=7200)
    >>> unit_duration(1, TimeUnit.WEEKS).days
    7

STDLIB ONLY - NO PYDANTIC.
"""

from __future__ import annotations

from datetime import timedelta
from enum import IntEnum

from .errors import InvalidScheduleError


class TimeUnit(IntEnum):
    """Ordered time units for interval schedules.

    ``NONE`` only exists as the parser's "no unit seen yet" state; a
    constructed task always carries one of the real units.
    """

    NONE = 0
    SECONDS = 1
    MINUTES = 2
    HOURS = 3
    DAYS = 4
    WEEKS = 5


class Weekday(IntEnum):
    """Day of the week, numbered like ``datetime.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


_UNIT_LENGTH: dict[TimeUnit, timedelta] = {
    TimeUnit.SECONDS: timedelta(seconds=1),
    TimeUnit.MINUTES: timedelta(minutes=1),
    TimeUnit.HOURS: timedelta(hours=1),
    TimeUnit.DAYS: timedelta(hours=24),
    TimeUnit.WEEKS: timedelta(hours=24 * 7),
}


def unit_duration(interval: int, unit: TimeUnit) -> timedelta:
    """Return the period covered by ``interval`` units of ``unit``.

    Raises:
        InvalidScheduleError: if ``unit`` is ``TimeUnit.NONE``
    """
    try:
        length = _UNIT_LENGTH[unit]
    except KeyError:
        raise InvalidScheduleError(
            f"No duration for time unit {unit!r}",
            field="unit",
            value=unit,
        ) from None
    return length * interval
