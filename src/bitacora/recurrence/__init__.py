"""Recurrence engine: calendar utilities, expander and deduplication guard."""

from .calendar_utils import (
    NoWorkingDayError,
    day_of_week,
    days_in_month,
    first_working_day_of_month,
    is_working_day,
    month_bounds,
    year_bounds,
)
from .dedup import DeduplicationGuard, filter_new, instance_key
from .expander import expand_for_month, expand_for_year

__all__ = [
    "NoWorkingDayError",
    "day_of_week",
    "days_in_month",
    "first_working_day_of_month",
    "is_working_day",
    "month_bounds",
    "year_bounds",
    "DeduplicationGuard",
    "filter_new",
    "instance_key",
    "expand_for_month",
    "expand_for_year",
]
