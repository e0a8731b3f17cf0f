"""Tests for calendar arithmetic used by plan generation."""

from datetime import date

import pytest

from src.bitacora.recurrence.calendar_utils import (
    NoWorkingDayError,
    day_of_week,
    days_in_month,
    first_working_day_of_month,
    is_working_day,
    iter_days,
    month_bounds,
    year_bounds,
)


class TestWorkingDays:
    def test_weekdays_are_working_days(self):
        assert is_working_day(date(2025, 1, 6))  # Monday
        assert is_working_day(date(2025, 1, 10))  # Friday

    def test_weekend_is_not(self):
        assert not is_working_day(date(2025, 1, 4))
        assert not is_working_day(date(2025, 1, 5))

    def test_day_of_week_monday_is_zero(self):
        assert day_of_week(date(2025, 1, 6)) == 0
        assert day_of_week(date(2025, 1, 5)) == 6


class TestBounds:
    def test_month_bounds(self):
        assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_year_bounds(self):
        assert year_bounds(2025) == (date(2025, 1, 1), date(2025, 12, 31))

    def test_days_in_month(self):
        days = days_in_month(2025, 4)
        assert len(days) == 30
        assert days[0] == date(2025, 4, 1)
        assert days == sorted(days)

    def test_iter_days_inclusive(self):
        assert list(iter_days(date(2025, 1, 30), date(2025, 2, 1))) == [
            date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1),
        ]


class TestFirstWorkingDay:
    def test_month_starting_midweek(self):
        assert first_working_day_of_month(2025, 1) == date(2025, 1, 1)

    def test_month_starting_on_weekend(self):
        assert first_working_day_of_month(2025, 2) == date(2025, 2, 3)
        assert first_working_day_of_month(2025, 6) == date(2025, 6, 2)

    def test_no_working_day_raises(self):
        weekend = [date(2025, 2, 1), date(2025, 2, 2)]
        with pytest.raises(NoWorkingDayError):
            first_working_day_of_month(2025, 2, weekend)
