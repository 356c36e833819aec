"""Tests for the schedule format parser."""

import pytest
from conftest import noop

from taskbeat import (
    ErrorCategory,
    InvalidTimeError,
    ScheduleFormatError,
    Task,
    TimeUnit,
    Weekday,
    at_intervals,
    daily,
    from_format,
    on_weekday,
    parse_task_format,
    parse_time_format,
)

FORMAT_CASES = [
    ("16:18", lambda s: daily(16, 18, settings=s)),
    ("every 1 second", lambda s: at_intervals(1, TimeUnit.SECONDS, settings=s)),
    ("every 59 seconds", lambda s: at_intervals(59, TimeUnit.SECONDS, settings=s)),
    ("every 1 minute", lambda s: at_intervals(1, TimeUnit.MINUTES, settings=s)),
    ("every 1 hour", lambda s: at_intervals(1, TimeUnit.HOURS, settings=s)),
    ("every 2 hours", lambda s: at_intervals(2, TimeUnit.HOURS, settings=s)),
    ("every 61 minutes", lambda s: at_intervals(61, TimeUnit.MINUTES, settings=s)),
    ("every day", lambda s: at_intervals(1, TimeUnit.DAYS, settings=s)),
    ("every day 11:15", lambda s: daily(11, 15, settings=s)),
    ("every week", lambda s: at_intervals(1, TimeUnit.WEEKS, settings=s)),
    ("every week 22:11", lambda s: on_weekday(Weekday.SUNDAY, 22, 11, settings=s)),
    ("1 hour", lambda s: at_intervals(1, TimeUnit.HOURS, settings=s)),
    ("Monday", lambda s: on_weekday(Weekday.MONDAY, 0, 0, settings=s)),
    ("every Tuesday 23:59", lambda s: on_weekday(Weekday.TUESDAY, 23, 59, settings=s)),
    ("wednesday", lambda s: on_weekday(Weekday.WEDNESDAY, 0, 0, settings=s)),
    ("thursday", lambda s: on_weekday(Weekday.THURSDAY, 0, 0, settings=s)),
    ("friday", lambda s: on_weekday(Weekday.FRIDAY, 0, 0, settings=s)),
    ("Saturday 23:13", lambda s: on_weekday(Weekday.SATURDAY, 23, 13, settings=s)),
    ("Sunday 12:00", lambda s: on_weekday(Weekday.SUNDAY, 12, 0, settings=s)),
]

ERROR_CASES = [
    "",
    "every",
    "every every 1 second",
    "1 second 16:18",
    "24:00",
    "Sunday 23:61",
    "2 monday",
    "3 tuesday",
    "3 wednesday",
    "3 thursday",
    "3 friday",
    "3 saturday",
    "3 sunday",
    "every week monday",
    "monday tuesday",
    "2 3 hours",
    "0 seconds",
    "every fortnight",
    "10:00 11:00",
    "16:18 every 2 seconds",
]


class TestFromFormat:
    """from_format builds the same task as the equivalent builder."""

    @pytest.mark.parametrize(("format", "build"), FORMAT_CASES, ids=[c[0] for c in FORMAT_CASES])
    def test_equivalent_to_builder(self, format, build, clock, utc_settings):
        parsed = from_format(format, settings=utc_settings).do("test", noop)
        expected = build(utc_settings).do("test", noop)

        assert parsed.interval == expected.interval
        assert parsed.unit == expected.unit
        assert parsed.start_day == expected.start_day
        assert parsed.duration() == expected.duration()
        assert parsed.next_scheduled_time() == expected.next_scheduled_time()
        assert parsed.duration().total_seconds() > 0

    def test_tokens_are_case_insensitive(self, clock, utc_settings):
        task = Task.from_format("EVERY 2 Hours", settings=utc_settings)
        assert task.interval == 2
        assert task.unit == TimeUnit.HOURS

    @pytest.mark.parametrize("format", ERROR_CASES)
    def test_rejects_malformed(self, format, utc_settings):
        with pytest.raises(ScheduleFormatError) as exc_info:
            from_format(format, settings=utc_settings)

        assert exc_info.value.format == format
        assert exc_info.value.category == ErrorCategory.PARSE

    @pytest.mark.parametrize("format", [None, 42])
    def test_rejects_non_string(self, format, utc_settings):
        with pytest.raises(ScheduleFormatError) as exc_info:
            from_format(format, settings=utc_settings)
        assert exc_info.value.format == format

    def test_time_error_is_chained(self):
        with pytest.raises(ScheduleFormatError) as exc_info:
            parse_task_format("Sunday 23:61")

        assert isinstance(exc_info.value.__cause__, InvalidTimeError)


class TestParseTaskFormat:
    def test_defaults(self):
        spec = parse_task_format("minutes")
        assert spec.interval == 1
        assert spec.unit == TimeUnit.MINUTES
        assert spec.start_day == Weekday.SUNDAY
        assert spec.at is None

    def test_weekday_with_time(self):
        spec = parse_task_format("every Saturday 23:13")
        assert spec.unit == TimeUnit.WEEKS
        assert spec.start_day == Weekday.SATURDAY
        assert spec.at == (23, 13)

    def test_interval_with_time_of_day(self):
        spec = parse_task_format("every 2 days 10:30")
        assert spec.interval == 2
        assert spec.unit == TimeUnit.DAYS
        assert spec.at == (10, 30)


class TestParseTimeFormat:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("16:18", (16, 18)), ("6:18", (6, 18)), ("00:00", (0, 0)), ("23:59", (23, 59))],
    )
    def test_valid(self, value, expected):
        assert parse_time_format(value) == expected

    @pytest.mark.parametrize("value", ["e:18", "25:18", "19:18:17", "19:1e", "12:60", "-1:10", ":", "12"])
    def test_invalid(self, value):
        with pytest.raises(InvalidTimeError):
            parse_time_format(value)
