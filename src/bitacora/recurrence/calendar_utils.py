"""Calendar arithmetic for plan generation.

Working days are Monday to Friday; no holiday calendar is applied.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator

MONDAY = 0


class NoWorkingDayError(LookupError):
    """Raised when a month contains no working day."""


def is_working_day(day: date) -> bool:
    """True for Monday through Friday."""
    return day.weekday() < 5


def day_of_week(day: date) -> int:
    """Weekday number, Monday = 0 ... Sunday = 6."""
    return day.weekday()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from ``start`` to ``end`` inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def days_in_month(year: int, month: int) -> list[date]:
    """All days of the month in ascending order."""
    return list(iter_days(*month_bounds(year, month)))


def first_working_day_of_month(year: int, month: int, days: list[date] | None = None) -> date:
    """First Monday-Friday day of the month.

    ``days`` may be passed to search a custom sequence instead of the real
    calendar month.

    Raises:
        NoWorkingDayError: if no day in the sequence is a working day.
    """
    candidates = days if days is not None else days_in_month(year, month)
    for day in candidates:
        if is_working_day(day):
            return day
    raise NoWorkingDayError(f"No working day in {year}-{month:02d}")
