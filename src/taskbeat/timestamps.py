"""
Clock and time-zone utilities (stdlib-only).

Every scheduling decision in taskbeat reads the clock through ``utc_now()``
so tests can patch a single function. Instants are kept as timezone-aware
UTC datetimes internally and converted to the configured location only for
calendar arithmetic and presentation.

Features:
    - **utc_now():** Timezone-aware UTC datetime
    - **EPOCH:** Sentinel for "never ran" / "not yet scheduled"
    - **at_time_of_day():** Calendar date + hh:mm in a location -> UTC instant
    - **shift_wall_clock():** Add whole days keeping the local time of day
    - **to_location():** UTC instant -> aware datetime in a location

A location of ``None`` means the system local time zone, resolved per
instant so daylight-saving transitions are honoured.

Tags:
    timestamps, utc, timezone, datetime, taskbeat, stdlib-only

STDLIB ONLY - NO PYDANTIC.
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_location(dt: datetime, location: tzinfo | None) -> datetime:
    """Convert an aware datetime to ``location`` (system local if None)."""
    return dt.astimezone(location)


def localize(naive: datetime, location: tzinfo | None) -> datetime:
    """Interpret a naive wall-clock datetime in ``location``; return it in UTC."""
    if location is None:
        local = naive.astimezone()
    else:
        local = naive.replace(tzinfo=location)
    return local.astimezone(UTC)


def at_time_of_day(day: date, hour: int, minute: int, location: tzinfo | None) -> datetime:
    """Return the UTC instant of ``day`` at ``hour:minute`` in ``location``."""
    return localize(datetime.combine(day, time(hour, minute)), location)


def shift_wall_clock(dt: datetime, delta: timedelta, location: tzinfo | None) -> datetime:
    """Add ``delta`` to the local wall-clock reading of ``dt``.

    Across a DST change the result keeps the local time of day instead of
    the elapsed duration.
    """
    naive = dt.astimezone(location).replace(tzinfo=None)
    return localize(naive + delta, location)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()
