"""Maintenance plan generation.

Turns activity definitions into dated task instances:
expand (recurrence) -> drop duplicates (guard) -> insert.
Inserts are not wrapped in a transaction spanning several activities; a
store failure part-way leaves the earlier activities' instances in place.
"""

from __future__ import annotations

import logging
from datetime import date

from pydantic import ValidationError

from src.bitacora.database.models import Activity, EquipmentLog, TaskInstance
from src.bitacora.database.repository import (
    ActivityRepository,
    EquipmentLogRepository,
    TaskInstanceRepository,
)
from src.bitacora.database.store import RelationalStore, StoreError
from src.bitacora.recurrence.calendar_utils import month_bounds
from src.bitacora.recurrence.dedup import DeduplicationGuard
from src.bitacora.recurrence.expander import expand_for_month, expand_for_year
from src.common.config import Settings
from src.common.models import (
    ActivityInput,
    EquipmentLogInput,
    Frequency,
    ManualTaskInput,
    OperationResult,
    RiskLevel,
)

from .models import ScheduledTask

logger = logging.getLogger(__name__)


def validation_issues(error: ValidationError) -> list[dict]:
    """Flatten a pydantic error into ``{field, message}`` pairs."""
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


class MaintenancePlanner:
    """Create equipment logs, activities and their scheduled instances.

    Usage:
        planner = MaintenancePlanner(get_store())
        result = planner.generate_monthly_plan(2025, 3, equipment_log_id=1)
        print(f"Created {result.count}, already present {result.skipped}")
    """

    def __init__(self, store: RelationalStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or Settings.load()
        self.logs = EquipmentLogRepository(store)
        self.activities = ActivityRepository(store)
        self.instances = TaskInstanceRepository(store)
        self.guard = DeduplicationGuard(store)

    # --- Equipment logs ---

    def create_equipment_log(self, data: dict | EquipmentLogInput) -> OperationResult:
        try:
            payload = EquipmentLogInput.model_validate(data)
        except ValidationError as e:
            return OperationResult(success=False, error="Datos inválidos", issues=validation_issues(e))

        try:
            log = self.logs.create(EquipmentLog(
                name=payload.name,
                year=payload.year,
                daily_hours=payload.daily_hours,
                description=payload.description,
            ))
        except StoreError as e:
            logger.error("Error creating equipment log: %s", e)
            return OperationResult(success=False, error="Error al crear la bitácora")

        logger.info("Created equipment log %s (%s, %d)", log.id, log.name, log.year)
        return OperationResult(success=True, count=1, id=log.id)

    def list_equipment_logs(self) -> list[EquipmentLog]:
        """All logs, newest year first, then by name."""
        try:
            return self.logs.list_all()
        except StoreError as e:
            logger.error("Error fetching equipment logs: %s", e)
            return []

    def ensure_equipment_log(self, year: int, daily_hours: float | None = None) -> int | str:
        """Return the log for ``year``, creating ``Bitácora <year>`` if missing.

        Raises:
            StoreError: on any store failure.
        """
        existing = self.logs.find_by_year(year)
        if existing:
            if daily_hours is not None and daily_hours != existing.daily_hours:
                self.logs.set_daily_hours(existing.id, daily_hours)
            return existing.id

        hours = daily_hours if daily_hours is not None else self.settings.kpi.default_daily_hours
        log = self.logs.create(EquipmentLog(
            name=f"Bitácora {year}",
            year=year,
            daily_hours=hours,
            description=f"Bitácora {year}",
        ))
        logger.info("Created equipment log %s for year %d", log.id, year)
        return log.id

    # --- Activities ---

    def create_activity(self, data: dict | ActivityInput) -> OperationResult:
        try:
            payload = ActivityInput.model_validate(data)
        except ValidationError as e:
            return OperationResult(success=False, error="Datos inválidos", issues=validation_issues(e))

        try:
            activity = self.upsert_activity(
                payload.description,
                payload.frequency_type,
                payload.risk_level,
                payload.equipment_log_id,
                standard_code=payload.standard_code,
            )
        except StoreError as e:
            logger.error("Error creating activity: %s", e)
            return OperationResult(success=False, error="Error al crear actividad")
        return OperationResult(success=True, count=1, id=activity.id)

    def upsert_activity(
        self,
        description: str,
        frequency: Frequency,
        risk_level: RiskLevel,
        equipment_log_id: int | str,
        standard_code: str | None = None,
        tr_hours: float = 0.0,
        tm_hours: float = 0.0,
    ) -> Activity:
        """Find an activity by description within its log, or create it.

        An existing activity keeps its frequency and risk; its planned
        hours are overwritten when either new value is positive.
        """
        existing = self.activities.find_by_description(description, equipment_log_id)
        if existing:
            if tr_hours > 0 or tm_hours > 0:
                self.activities.set_planned_hours(existing.id, tr_hours, tm_hours)
                existing.tr_hours, existing.tm_hours = tr_hours, tm_hours
            return existing

        return self.activities.create(Activity(
            description=description,
            frequency=frequency,
            risk_level=risk_level,
            equipment_log_id=equipment_log_id,
            standard_code=standard_code,
            tr_hours=tr_hours,
            tm_hours=tm_hours,
        ))

    # --- Scheduling ---

    def schedule_from_anchor(
        self,
        activity: Activity,
        anchor: date,
        year: int,
        operational_days: int = 0,
    ) -> int:
        """Expand an activity for ``year`` from ``anchor`` and insert new dates.

        Returns:
            Number of task instances inserted (already stored dates skipped).

        Raises:
            StoreError: on any store failure.
        """
        dates = expand_for_year(activity.frequency, anchor, year)
        candidates = [
            TaskInstance(activity_id=activity.id, scheduled_date=d, operational_days=operational_days)
            for d in dates
        ]
        fresh = self.guard.filter(candidates)
        if fresh:
            self.instances.insert_many(fresh)
        logger.debug(
            "Activity %s: %d dates expanded, %d inserted", activity.id, len(dates), len(fresh)
        )
        return len(fresh)

    def generate_monthly_plan(
        self,
        year: int,
        month: int,
        equipment_log_id: int | str | None = None,
    ) -> OperationResult:
        """Create one month's instances for every activity (of one log, if given).

        ``count`` is the number inserted; ``skipped`` the candidates that
        already existed.
        """
        try:
            activities = self.activities.list(equipment_log_id)
            if not activities:
                return OperationResult(success=False, error="No se encontraron actividades")

            candidates = [
                TaskInstance(activity_id=activity.id, scheduled_date=d)
                for activity in activities
                for d in expand_for_month(activity.frequency, year, month)
            ]
            fresh = self.guard.filter(candidates)
            if fresh:
                self.instances.insert_many(fresh)
        except StoreError as e:
            logger.error("Error generating plan for %d-%02d: %s", year, month, e)
            return OperationResult(success=False, error="Error al generar la planificación")

        logger.info(
            "Plan %d-%02d: %d activities, %d instances created, %d already present",
            year, month, len(activities), len(fresh), len(candidates) - len(fresh),
        )
        return OperationResult(success=True, count=len(fresh), skipped=len(candidates) - len(fresh))

    def upsert_manual_task(
        self,
        data: dict | ManualTaskInput,
        equipment_log_id: int | str | None,
        year: int,
    ) -> OperationResult:
        """Register a manually entered task and schedule it for the year."""
        try:
            task = ManualTaskInput.model_validate(data)
        except ValidationError as e:
            return OperationResult(success=False, error="Datos inválidos", issues=validation_issues(e))

        if not equipment_log_id:
            return OperationResult(success=False, error="Bitácora no especificada")

        try:
            if task.daily_hours is not None:
                self.logs.set_daily_hours(equipment_log_id, task.daily_hours)

            activity = self.upsert_activity(
                task.description,
                task.frequency_type,
                task.risk_level,
                equipment_log_id,
                tr_hours=task.tr_hours,
                tm_hours=task.tm_hours,
            )
            inserted = self.schedule_from_anchor(
                activity, task.start_date, year, task.operational_days
            )
        except StoreError as e:
            logger.error("Manual task error: %s", e)
            return OperationResult(success=False, error="Error al crear tarea")

        logger.info("Manual task '%s': %d instances created", task.description, inserted)
        return OperationResult(success=True, count=inserted, id=activity.id)

    # --- Listing ---

    def get_monthly_plans(
        self,
        year: int,
        month: int,
        equipment_log_id: int | str | None = None,
    ) -> list[ScheduledTask]:
        """Instances of one month (1-12) joined with their activity, by date."""
        start, end = month_bounds(year, month)
        try:
            instances = self.instances.list_between(start, end)
            activities = self.activities.get_many(i.activity_id for i in instances)
        except StoreError as e:
            logger.error("Error fetching monthly plans: %s", e)
            return []

        tasks: list[ScheduledTask] = []
        for instance in instances:
            activity = activities.get(str(instance.activity_id))
            if activity is None:
                continue
            if equipment_log_id is not None and str(activity.equipment_log_id) != str(equipment_log_id):
                continue
            tasks.append(ScheduledTask(
                id=instance.id,
                scheduled_date=instance.scheduled_date,
                status=instance.status,
                activity=activity,
            ))
        return tasks
