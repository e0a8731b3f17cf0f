"""Tests for execution outcome logging and calibration checks."""

from datetime import date

import pytest

from src.bitacora.database.models import TaskInstance
from src.bitacora.database.repository import (
    EXECUTION_OUTCOMES,
    TASK_INSTANCES,
    ExecutionOutcomeRepository,
    TaskInstanceRepository,
)
from src.bitacora.execution.recorder import ExecutionRecorder, compute_calibration


@pytest.fixture
def plan(store, make_activity) -> TaskInstance:
    activity = make_activity("Calibrar manómetro")
    return TaskInstanceRepository(store).insert_many([
        TaskInstance(activity_id=activity.id, scheduled_date=date(2025, 1, 6), operational_days=2),
    ])[0]


class TestComputeCalibration:
    def test_within_tolerance(self):
        result = compute_calibration(100.4, 100, tolerance_pct=0.5)
        assert result.error_percentage == 0.4
        assert result.within_tolerance

    def test_out_of_tolerance(self):
        result = compute_calibration(101, 100, tolerance_pct=0.5)
        assert result.error_percentage == 1.0
        assert not result.within_tolerance

    def test_negative_error(self):
        result = compute_calibration(98, 100, tolerance_pct=0.5)
        assert result.error_percentage == -2.0
        assert not result.within_tolerance

    def test_missing_readings(self):
        assert compute_calibration(None, 100, 0.5) is None
        assert compute_calibration(100, None, 0.5) is None
        assert compute_calibration(5, 0, 0.5) is None


class TestLogExecution:
    def test_marks_completed(self, store, settings, plan):
        result = ExecutionRecorder(store, settings).log_execution(
            plan.id, "tecnico-1", repair_minutes=90, downtime_minutes=30, observations="OK"
        )
        assert result.success

        row = store.select(TASK_INSTANCES)[0]
        assert row["status"] == "COMPLETADO"
        outcome = ExecutionOutcomeRepository(store).first_for_plans([plan.id])[str(plan.id)]
        assert outcome.id == result.id
        assert outcome.executed_by == "tecnico-1"
        assert outcome.repair_hours == 1.5
        assert outcome.downtime_hours == 0.5
        assert outcome.calibration is None

    def test_not_performed(self, store, settings, plan):
        result = ExecutionRecorder(store, settings).log_execution(plan.id, "tecnico-1", completed=False)
        assert result.success
        assert store.select(TASK_INSTANCES)[0]["status"] == "NO_REALIZADO"
        assert store.select(EXECUTION_OUTCOMES)[0]["is_completed"] == 0

    def test_stores_calibration(self, store, settings, plan):
        ExecutionRecorder(store, settings).log_execution(plan.id, "tecnico-1", display=101, real=100)
        outcome = ExecutionOutcomeRepository(store).first_for_plans([plan.id])[str(plan.id)]
        assert outcome.calibration.error_percentage == 1.0
        assert not outcome.calibration.within_tolerance

    def test_tolerance_from_settings(self, store, settings, plan):
        settings.execution.calibration_tolerance_pct = 2.0
        ExecutionRecorder(store, settings).log_execution(plan.id, "tecnico-1", display=101, real=100)
        outcome = ExecutionOutcomeRepository(store).first_for_plans([plan.id])[str(plan.id)]
        assert outcome.calibration.within_tolerance

    def test_negative_minutes_clamped(self, store, settings, plan):
        ExecutionRecorder(store, settings).log_execution(plan.id, "tecnico-1", repair_minutes=-10)
        assert store.select(EXECUTION_OUTCOMES)[0]["execution_time_minutes"] == 0

    def test_requires_actor(self, store, settings, plan):
        result = ExecutionRecorder(store, settings).log_execution(plan.id, None)
        assert not result.success
        assert result.error == "No autorizado"
        assert store.select(EXECUTION_OUTCOMES) == []
        assert store.select(TASK_INSTANCES)[0]["status"] == "PENDIENTE"

    def test_store_failure(self, failing_store, settings):
        result = ExecutionRecorder(failing_store, settings).log_execution(1, "tecnico-1")
        assert not result.success
        assert result.error.startswith("Error al registrar ejecución:")
