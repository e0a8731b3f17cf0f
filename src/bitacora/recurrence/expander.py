"""Recurrence expansion: activity frequency -> calendar dates.

Two entry points exist and they intentionally differ:

- ``expand_for_year`` steps literally from an explicit anchor date
  (import and manual entry): every day, every 7 days, or every month.
- ``expand_for_month`` builds one month's batch without an anchor:
  working days for DAILY, Mondays for WEEKLY and the first working day
  for MONTHLY.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from src.common.models import Frequency

from .calendar_utils import (
    MONDAY,
    NoWorkingDayError,
    day_of_week,
    days_in_month,
    first_working_day_of_month,
    is_working_day,
    year_bounds,
)

logger = logging.getLogger(__name__)


def expand_for_year(frequency: Frequency | str, anchor: date, year: int) -> list[date]:
    """Dates on which an activity anchored at ``anchor`` occurs in ``year``.

    Args:
        frequency: Frequency or its text; unknown text means one occurrence.
        anchor: First occurrence. It is always the start of the stepping,
            even when it falls before the target year.
        year: Target year. No date after 31 December is produced.

    Returns:
        Ascending, duplicate-free dates inside ``year``. When none fall
        inside the year (anchor after 31 December, or a single occurrence
        in another year) the result is ``[anchor]`` so a manually entered
        task never disappears silently.
    """
    freq = Frequency.parse(frequency)
    start, end = year_bounds(year)

    dates: list[date] = []
    if not freq.is_recurring:
        if start <= anchor <= end:
            dates.append(anchor)
    elif freq is Frequency.MONTHLY:
        # anchor + k months clamps the day (31 Jan -> 28 Feb -> 31 Mar)
        k = 0
        current = anchor
        while current <= end:
            if current >= start:
                dates.append(current)
            k += 1
            current = anchor + relativedelta(months=k)
    else:
        step = timedelta(days=1 if freq is Frequency.DAILY else 7)
        current = anchor
        if current < start:
            # jump to the first step on or after 1 January
            behind = (start - current).days
            steps = -(-behind // step.days)
            current = current + step * steps
        while current <= end:
            dates.append(current)
            current += step

    if not dates:
        logger.info(
            "Anchor %s yields no %s dates in %d; keeping the anchor date",
            anchor, freq.value, year,
        )
        return [anchor]
    return dates


def expand_for_month(frequency: Frequency | str, year: int, month: int) -> list[date]:
    """One month's batch of dates for an activity without an anchor date.

    DAILY gives every working day, WEEKLY every Monday and MONTHLY the first
    working day. Single-occurrence frequencies have nothing to schedule in a
    batch and give an empty list.
    """
    freq = Frequency.parse(frequency)
    days = days_in_month(year, month)

    if freq is Frequency.DAILY:
        return [d for d in days if is_working_day(d)]
    if freq is Frequency.WEEKLY:
        return [d for d in days if day_of_week(d) == MONDAY]
    if freq is Frequency.MONTHLY:
        try:
            return [first_working_day_of_month(year, month, days)]
        except NoWorkingDayError:
            logger.warning("No working day in %d-%02d, MONTHLY skipped", year, month)
            return []
    return []
