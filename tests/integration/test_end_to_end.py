"""End-to-end tests for the maintenance log engine.

Import a year plan, list a month, log executions and build the KPI report
against one temporary SQLite database.
"""

from __future__ import annotations

import json
from datetime import date

import pytest

from fixtures.sample_plan_data import get_sample_plan_rows
from src.bitacora.execution.recorder import ExecutionRecorder
from src.bitacora.kpi.aggregator import KPIAggregator
from src.bitacora.kpi.exporter import ReportExporter
from src.bitacora.planning.importer import PlanImporter
from src.bitacora.planning.planner import MaintenancePlanner


@pytest.fixture
def imported(store, settings):
    """Store with the sample plan imported for 2025."""
    result = PlanImporter(store, settings).import_rows(get_sample_plan_rows(), 2025)
    assert result.success
    return result


def _task(tasks, description: str, day: date):
    return next(
        t for t in tasks if t.activity.description == description and t.scheduled_date == day
    )


class TestYearPlan:
    """Import, list and regenerate."""

    def test_import_counts(self, imported):
        """Daily from 2 Jan, weekly from 6 Jan and two monthly activities."""
        assert imported.count == 364 + 52 + 12 + 12
        assert imported.skipped == 0

    def test_january_listing(self, store, settings, imported):
        tasks = MaintenancePlanner(store, settings).get_monthly_plans(2025, 1)
        assert len(tasks) == 30 + 4 + 2
        assert tasks[0].scheduled_date == date(2025, 1, 2)
        assert _task(tasks, "Calibrar presostato", date(2025, 1, 31)).activity.standard_code == "ISO 9001"

    def test_february_clamps_monthly_day(self, store, settings, imported):
        tasks = MaintenancePlanner(store, settings).get_monthly_plans(2025, 2)
        assert _task(tasks, "Calibrar presostato", date(2025, 2, 28))

    def test_monthly_batch_adds_only_missing_dates(self, store, settings, imported):
        """Mondays and weekdays are already covered; the 1st working day is not."""
        result = MaintenancePlanner(store, settings).generate_monthly_plan(2025, 3)
        assert result.success
        # two monthly activities on 3 March (their anchors are the 15th and 31st)
        assert result.count == 2
        assert result.skipped == 21 + 5


class TestYearReport:
    """Execution logging feeding the KPI report."""

    @pytest.fixture
    def executed(self, store, settings, imported):
        tasks = MaintenancePlanner(store, settings).get_monthly_plans(2025, 1)
        recorder = ExecutionRecorder(store, settings)
        belts = _task(tasks, "Cambio de correas", date(2025, 1, 15))
        switch = _task(tasks, "Calibrar presostato", date(2025, 1, 31))
        oil = _task(tasks, "Verificar nivel de aceite", date(2025, 1, 3))

        assert recorder.log_execution(belts.id, "tecnico-1", 120, 60).success
        assert recorder.log_execution(switch.id, "tecnico-2", 30, display=10.02, real=10).success
        assert recorder.log_execution(oil.id, "tecnico-1", completed=False).success

    def test_outcome_hours(self, store, settings, executed):
        report = KPIAggregator(store, settings).get_detailed_stats(2025)

        assert [r.activity for r in report.rows] == ["Cambio de correas", "Calibrar presostato"]
        assert report.totals.to_dict() == {"to": 24.0, "tp": 3.5, "tr": 2.5, "tm": 1.0, "dias": 3}
        assert report.averages.to_dict() == {"to": 12.0, "tp": 1.75, "tr": 1.25, "tm": 0.5}
        assert list(report.by_month()) == ["Enero"]

    def test_planned_hours(self, store, settings, executed):
        report = KPIAggregator(store, settings).get_detailed_stats(2025, use_actual_outcome_hours=False)
        assert report.totals.tr == 3.0
        assert report.totals.tm == 1.5
        assert report.totals.tp == 4.5

    def test_export(self, store, settings, executed, tmp_path):
        output = tmp_path / "kpi_2025.json"
        ReportExporter(store, settings).export_year(2025, output_path=output)
        with open(output, encoding="utf-8") as f:
            data = json.load(f)
        assert data["equipment_log_id"] is None
        assert data["months"][0]["month"] == "Enero"
        assert len(data["rows"]) == 2
