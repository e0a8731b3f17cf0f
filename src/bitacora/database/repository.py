"""Typed repositories over a RelationalStore.

Rows never leave this module as plain dicts: every read is mapped to a
dataclass from models.py. Natural-key upserts are select-then-insert and
are not safe against concurrent writers.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Sequence

from src.common.models import TaskStatus

from .models import Activity, EquipmentLog, ExecutionOutcome, TaskInstance
from .store import Filter, Order, RelationalStore

logger = logging.getLogger(__name__)

EQUIPMENT_LOGS = "bitacoras"
ACTIVITIES = "activities"
TASK_INSTANCES = "maintenance_plans"
EXECUTION_OUTCOMES = "execution_logs"


def date_range_filters(column: str, start: date, end: date) -> list[Filter]:
    """Inclusive calendar-day range as ``[start, end + 1 day)``.

    The half-open upper bound keeps rows stored as full timestamps on the
    last day inside the range.
    """
    return [Filter.gte(column, start), Filter.lt(column, end + timedelta(days=1))]


class EquipmentLogRepository:
    """Access to equipment logs ("bitácoras")."""

    def __init__(self, store: RelationalStore) -> None:
        self.store = store

    def get(self, log_id: int | str) -> EquipmentLog | None:
        rows = self.store.select(EQUIPMENT_LOGS, [Filter.eq("id", log_id)])
        return EquipmentLog.from_row(rows[0]) if rows else None

    def find_by_year(self, year: int) -> EquipmentLog | None:
        """First log registered for ``year`` (lowest id)."""
        rows = self.store.select(
            EQUIPMENT_LOGS, [Filter.eq("year", year)], [Order("id")]
        )
        return EquipmentLog.from_row(rows[0]) if rows else None

    def list_all(self) -> list[EquipmentLog]:
        rows = self.store.select(
            EQUIPMENT_LOGS, order_by=[Order("year", ascending=False), Order("name")]
        )
        return [EquipmentLog.from_row(r) for r in rows]

    def create(self, log: EquipmentLog) -> EquipmentLog:
        row = self.store.insert(EQUIPMENT_LOGS, [log.to_row()])[0]
        log.id = row["id"]
        return log

    def set_daily_hours(self, log_id: int | str, daily_hours: float) -> None:
        if daily_hours < 0:
            raise ValueError(f"daily_hours must be >= 0, got {daily_hours}")
        self.store.update(
            EQUIPMENT_LOGS, {"daily_hours": daily_hours}, [Filter.eq("id", log_id)]
        )


class ActivityRepository:
    """Access to activity definitions."""

    def __init__(self, store: RelationalStore) -> None:
        self.store = store

    def find_by_description(
        self, description: str, equipment_log_id: int | str
    ) -> Activity | None:
        rows = self.store.select(
            ACTIVITIES,
            [
                Filter.eq("description", description),
                Filter.eq("bitacora_id", equipment_log_id),
            ],
            [Order("id")],
        )
        return Activity.from_row(rows[0]) if rows else None

    def list(self, equipment_log_id: int | str | None = None) -> list[Activity]:
        filters = (
            [Filter.eq("bitacora_id", equipment_log_id)] if equipment_log_id is not None else []
        )
        rows = self.store.select(ACTIVITIES, filters, [Order("id")])
        return [Activity.from_row(r) for r in rows]

    def get_many(self, ids: Iterable[int | str]) -> dict[str, Activity]:
        """Activities keyed by ``str(id)``."""
        unique = sorted({i for i in ids}, key=str)
        if not unique:
            return {}
        rows = self.store.select(ACTIVITIES, [Filter.in_("id", unique)])
        return {str(r["id"]): Activity.from_row(r) for r in rows}

    def create(self, activity: Activity) -> Activity:
        row = self.store.insert(ACTIVITIES, [activity.to_row()])[0]
        activity.id = row["id"]
        return activity

    def set_planned_hours(self, activity_id: int | str, tr_hours: float, tm_hours: float) -> None:
        self.store.update(
            ACTIVITIES,
            {"tr_hours": tr_hours, "tm_hours": tm_hours},
            [Filter.eq("id", activity_id)],
        )


class TaskInstanceRepository:
    """Access to scheduled task instances ("maintenance plans")."""

    def __init__(self, store: RelationalStore) -> None:
        self.store = store

    def list_between(
        self,
        start: date,
        end: date,
        activity_ids: Iterable[int | str] | None = None,
    ) -> list[TaskInstance]:
        """Instances scheduled on ``start..end`` (inclusive), by date then id.

        ``activity_ids`` restricts the read to those activities.
        """
        filters = date_range_filters("scheduled_date", start, end)
        if activity_ids is not None:
            filters.append(Filter.in_("activity_id", sorted(set(activity_ids), key=str)))
        rows = self.store.select(
            TASK_INSTANCES,
            filters,
            [Order("scheduled_date"), Order("id")],
        )
        return [TaskInstance.from_row(r) for r in rows]

    def insert_many(self, instances: Sequence[TaskInstance]) -> list[TaskInstance]:
        rows = self.store.insert(TASK_INSTANCES, [i.to_row() for i in instances])
        for instance, row in zip(instances, rows):
            instance.id = row.get("id")
        return list(instances)

    def set_status(self, instance_id: int | str, status: TaskStatus) -> int:
        return self.store.update(
            TASK_INSTANCES, {"status": status.value}, [Filter.eq("id", instance_id)]
        )


class ExecutionOutcomeRepository:
    """Access to execution outcomes ("execution logs")."""

    def __init__(self, store: RelationalStore) -> None:
        self.store = store

    def insert(self, outcome: ExecutionOutcome) -> ExecutionOutcome:
        row = self.store.insert(EXECUTION_OUTCOMES, [outcome.to_row()])[0]
        outcome.id = row.get("id")
        return outcome

    def first_for_plans(self, plan_ids: Iterable[int | str]) -> dict[str, ExecutionOutcome]:
        """The earliest outcome per plan, keyed by ``str(plan_id)``.

        Later outcomes for the same plan are ignored.
        """
        unique = sorted({i for i in plan_ids}, key=str)
        if not unique:
            return {}
        rows = self.store.select(
            EXECUTION_OUTCOMES, [Filter.in_("plan_id", unique)], [Order("id")]
        )
        first: dict[str, ExecutionOutcome] = {}
        for row in rows:
            first.setdefault(str(row["plan_id"]), ExecutionOutcome.from_row(row))
        return first
