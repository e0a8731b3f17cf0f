"""Tests for recurrence expansion.

Tests cover:
- Year expansion stepping literally from the anchor
- Anchors before and after the target year
- Monthly day clamping
- Month batches for DAILY / WEEKLY / MONTHLY
"""

from datetime import date, timedelta

from src.bitacora.recurrence.expander import expand_for_month, expand_for_year
from src.common.models import Frequency


class TestExpandForYear:
    def test_daily_covers_whole_year(self):
        dates = expand_for_year(Frequency.DAILY, date(2025, 1, 1), 2025)
        assert len(dates) == 365
        assert dates[0] == date(2025, 1, 1)
        assert dates[-1] == date(2025, 12, 31)

    def test_daily_includes_weekends(self):
        dates = expand_for_year(Frequency.DAILY, date(2025, 1, 1), 2025)
        assert date(2025, 1, 4) in dates

    def test_weekly_steps_seven_days(self):
        dates = expand_for_year(Frequency.WEEKLY, date(2025, 1, 6), 2025)
        assert len(dates) == 52
        assert dates[-1] == date(2025, 12, 29)
        assert all(b - a == timedelta(days=7) for a, b in zip(dates, dates[1:]))

    def test_monthly_keeps_anchor_day(self):
        dates = expand_for_year(Frequency.MONTHLY, date(2025, 1, 15), 2025)
        assert len(dates) == 12
        assert all(d.day == 15 for d in dates)

    def test_monthly_clamps_short_months(self):
        dates = expand_for_year("MENSUAL", date(2025, 1, 31), 2025)
        assert dates[:3] == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]
        assert dates[3] == date(2025, 4, 30)

    def test_results_stay_inside_year_sorted_and_unique(self):
        for freq in (Frequency.DAILY, Frequency.WEEKLY, Frequency.MONTHLY):
            dates = expand_for_year(freq, date(2025, 3, 10), 2025)
            assert dates == sorted(set(dates))
            assert all(d.year == 2025 for d in dates)
            assert dates[0] == date(2025, 3, 10)

    def test_anchor_before_year_keeps_phase(self):
        daily = expand_for_year(Frequency.DAILY, date(2024, 12, 30), 2025)
        assert len(daily) == 365
        assert daily[0] == date(2025, 1, 1)

        weekly = expand_for_year(Frequency.WEEKLY, date(2024, 12, 30), 2025)
        assert weekly[0] == date(2025, 1, 6)
        assert len(weekly) == 52

    def test_monthly_anchor_before_year(self):
        dates = expand_for_year(Frequency.MONTHLY, date(2024, 11, 20), 2025)
        assert dates[0] == date(2025, 1, 20)
        assert len(dates) == 12

    def test_anchor_after_year_returns_anchor(self):
        assert expand_for_year(Frequency.DAILY, date(2026, 2, 1), 2025) == [date(2026, 2, 1)]

    def test_single_occurrence(self):
        assert expand_for_year(Frequency.ONCE, date(2025, 6, 1), 2025) == [date(2025, 6, 1)]

    def test_unknown_text_is_single_occurrence(self):
        assert expand_for_year("TRIMESTRAL", date(2025, 6, 1), 2025) == [date(2025, 6, 1)]

    def test_last_day_of_year(self):
        assert expand_for_year(Frequency.WEEKLY, date(2025, 12, 31), 2025) == [date(2025, 12, 31)]


class TestExpandForMonth:
    def test_daily_is_working_days(self):
        dates = expand_for_month(Frequency.DAILY, 2025, 1)
        assert len(dates) == 23
        assert all(d.weekday() < 5 for d in dates)

    def test_weekly_is_mondays(self):
        dates = expand_for_month(Frequency.WEEKLY, 2025, 1)
        assert dates == [date(2025, 1, 6), date(2025, 1, 13), date(2025, 1, 20), date(2025, 1, 27)]

    def test_monthly_is_first_working_day(self):
        assert expand_for_month(Frequency.MONTHLY, 2025, 1) == [date(2025, 1, 1)]
        assert expand_for_month(Frequency.MONTHLY, 2025, 3) == [date(2025, 3, 3)]

    def test_single_occurrence_has_no_batch(self):
        assert expand_for_month(Frequency.ONCE, 2025, 1) == []

    def test_accepts_text(self):
        assert len(expand_for_month("semanal", 2025, 1)) == 4
