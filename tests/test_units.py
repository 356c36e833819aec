"""Tests for time units and the duration calculator."""

from datetime import timedelta

import pytest

from taskbeat import InvalidScheduleError, TimeUnit, Weekday, unit_duration


class TestUnitDuration:
    """Test unit_duration closed-form conversion."""

    @pytest.mark.parametrize(
        ("interval", "unit", "expected"),
        [
            (1, TimeUnit.SECONDS, timedelta(seconds=1)),
            (59, TimeUnit.SECONDS, timedelta(seconds=59)),
            (61, TimeUnit.MINUTES, timedelta(minutes=61)),
            (2, TimeUnit.HOURS, timedelta(hours=2)),
            (3, TimeUnit.DAYS, timedelta(hours=72)),
            (2, TimeUnit.WEEKS, timedelta(days=14)),
        ],
    )
    def test_closed_form(self, interval, unit, expected):
        assert unit_duration(interval, unit) == expected

    def test_none_unit_rejected(self):
        """NONE never reaches a real schedule."""
        with pytest.raises(InvalidScheduleError):
            unit_duration(1, TimeUnit.NONE)


class TestEnums:
    def test_time_units_are_ordered(self):
        assert TimeUnit.NONE < TimeUnit.SECONDS < TimeUnit.MINUTES < TimeUnit.HOURS
        assert TimeUnit.HOURS < TimeUnit.DAYS < TimeUnit.WEEKS

    def test_weekday_matches_datetime_numbering(self):
        assert Weekday.MONDAY == 0
        assert Weekday.SUNDAY == 6
