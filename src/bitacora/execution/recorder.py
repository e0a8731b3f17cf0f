"""Execution outcome logging.

A technician's completion form becomes an ExecutionOutcome row and flips
the task instance's status. The two writes are separate: if the status
update fails, the outcome row stays.
"""

from __future__ import annotations

import logging
from datetime import datetime

from src.bitacora.database.models import Calibration, ExecutionOutcome
from src.bitacora.database.repository import (
    ExecutionOutcomeRepository,
    TaskInstanceRepository,
)
from src.bitacora.database.store import RelationalStore, StoreError
from src.common.config import Settings
from src.common.models import OperationResult, TaskStatus

logger = logging.getLogger(__name__)


def compute_calibration(
    display: float | None,
    real: float | None,
    tolerance_pct: float,
) -> Calibration | None:
    """Compare an instrument's displayed value with the reference reading.

    Returns None when either reading is missing or the reference is zero.
    """
    if display is None or real is None or real == 0:
        return None
    error_pct = (display - real) / real * 100
    return Calibration(
        display=display,
        real=real,
        error_percentage=round(error_pct, 2),
        within_tolerance=abs(error_pct) <= tolerance_pct,
    )


class ExecutionRecorder:
    """Record execution outcomes against scheduled task instances."""

    def __init__(self, store: RelationalStore, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.load()
        self.outcomes = ExecutionOutcomeRepository(store)
        self.instances = TaskInstanceRepository(store)

    def log_execution(
        self,
        plan_id: int | str,
        actor_id: str | None,
        repair_minutes: float = 0,
        downtime_minutes: float = 0,
        observations: str = "",
        display: float | None = None,
        real: float | None = None,
        completed: bool = True,
    ) -> OperationResult:
        """Store the outcome and mark the instance COMPLETED (or NOT_PERFORMED).

        Args:
            plan_id: Task instance id.
            actor_id: Acting user from the identity provider; None is rejected.
            repair_minutes: Time spent repairing (TR source).
            downtime_minutes: Dead time (TM source).
            observations: Free text.
            display: Instrument reading shown, for calibration tasks.
            real: Reference reading, for calibration tasks.
            completed: False records a skipped task as NOT_PERFORMED.
        """
        if not actor_id:
            return OperationResult(success=False, error="No autorizado")

        calibration = compute_calibration(
            display, real, self.settings.execution.calibration_tolerance_pct
        )
        outcome = ExecutionOutcome(
            plan_id=plan_id,
            executed_by=actor_id,
            repair_minutes=max(repair_minutes or 0, 0),
            downtime_minutes=max(downtime_minutes or 0, 0),
            observations=observations or "",
            is_completed=completed,
            calibration=calibration,
            logged_at=datetime.now(),
        )
        status = TaskStatus.COMPLETED if completed else TaskStatus.NOT_PERFORMED

        try:
            self.outcomes.insert(outcome)
            self.instances.set_status(plan_id, status)
        except StoreError as e:
            logger.error("Error logging execution for plan %s: %s", plan_id, e)
            return OperationResult(success=False, error=f"Error al registrar ejecución: {e}")

        if calibration and not calibration.within_tolerance:
            logger.warning(
                "Plan %s calibration out of tolerance: %.2f%%", plan_id, calibration.error_percentage
            )
        logger.info("Plan %s logged by %s as %s", plan_id, actor_id, status.value)
        return OperationResult(success=True, count=1, id=outcome.id)
