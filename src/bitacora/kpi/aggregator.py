"""KPI aggregation over completed maintenance work.

Reads task instances of a year with their activity and first execution
outcome, keeps the COMPLETED ones and rolls them up into hour metrics:

    TO = operational days x daily operating hours
    TR = repair hours, TM = downtime hours, TP = TR + TM

TR/TM come from the logged outcome minutes, or from the activity's
planned hours when ``use_actual_outcome_hours`` is off (legacy imports
without outcome data). Sums use unrounded values; only the reported
numbers are rounded to 2 decimals.

A failing read of the plans yields an all-zero empty report instead of an
error; a failing log lookup only falls back to the default daily hours.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.bitacora.database.models import Activity, ExecutionOutcome, TaskInstance
from src.bitacora.database.repository import (
    ActivityRepository,
    EquipmentLogRepository,
    ExecutionOutcomeRepository,
    TaskInstanceRepository,
)
from src.bitacora.database.store import RelationalStore, StoreError
from src.bitacora.recurrence.calendar_utils import year_bounds
from src.common.config import Settings
from src.common.models import TaskStatus

from .models import DetailedReport, DetailedRow, KPIAverages, KPITotals

logger = logging.getLogger(__name__)

MONTH_NAMES_ES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def round2(value: float) -> float:
    """Round half up to 2 decimals."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def month_label(day: date) -> str:
    """Capitalised Spanish month name, e.g. ``Enero``."""
    return MONTH_NAMES_ES[day.month - 1].capitalize()


def display_date(day: date) -> str:
    """Spanish short date without zero padding, e.g. ``5/3/2025``."""
    return f"{day.day}/{day.month}/{day.year}"


@dataclass(frozen=True)
class HourMetrics:
    """Unrounded hour metrics of one task instance."""

    to: float
    tp: float
    tr: float
    tm: float

    @classmethod
    def compute(
        cls,
        instance: TaskInstance,
        activity: Activity,
        outcome: ExecutionOutcome | None,
        daily_hours: float,
        use_actual_outcome_hours: bool = True,
    ) -> HourMetrics:
        if use_actual_outcome_hours:
            tr = outcome.repair_hours if outcome else 0.0
            tm = outcome.downtime_hours if outcome else 0.0
        else:
            tr = activity.tr_hours or 0.0
            tm = activity.tm_hours or 0.0
        return cls(
            to=(instance.operational_days or 0) * daily_hours,
            tp=tr + tm,
            tr=tr,
            tm=tm,
        )


class KPIAggregator:
    """Build the detailed yearly KPI report.

    Usage:
        aggregator = KPIAggregator(get_store())
        report = aggregator.get_detailed_stats(2025, equipment_log_id=1)
        print(report.totals.to, report.averages.tp)
    """

    def __init__(self, store: RelationalStore, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.load()
        self.logs = EquipmentLogRepository(store)
        self.activities = ActivityRepository(store)
        self.instances = TaskInstanceRepository(store)
        self.outcomes = ExecutionOutcomeRepository(store)

    def resolve_daily_hours(self, year: int, equipment_log_id: int | str | None = None) -> float:
        """Daily operating hours of the scope.

        The given log's value when it exists; without a scope, the first log
        of ``year``; otherwise the configured default.

        Raises:
            StoreError: if the log lookup fails.
        """
        if equipment_log_id is not None:
            log = self.logs.get(equipment_log_id)
        else:
            log = self.logs.find_by_year(year)
        if log is None:
            return self.settings.kpi.default_daily_hours
        return log.daily_hours

    def get_detailed_stats(
        self,
        year: int,
        equipment_log_id: int | str | None = None,
        use_actual_outcome_hours: bool | None = None,
    ) -> DetailedReport:
        """Full recomputation of the report for ``year``.

        Args:
            year: Calendar year to report on.
            equipment_log_id: Restrict to activities of this log.
            use_actual_outcome_hours: TR/TM formula switch; None uses the
                configured default.
        """
        if use_actual_outcome_hours is None:
            use_actual_outcome_hours = self.settings.kpi.use_actual_outcome_hours

        try:
            daily_hours = self.resolve_daily_hours(year, equipment_log_id)
        except StoreError as e:
            daily_hours = self.settings.kpi.default_daily_hours
            logger.warning("Daily hours lookup failed, using %s: %s", daily_hours, e)

        try:
            start, end = year_bounds(year)
            instances = self.instances.list_between(start, end)
            activities = self.activities.get_many(i.activity_id for i in instances)
            completed = [
                i for i in instances
                if i.status is TaskStatus.COMPLETED
                and self._in_scope(activities.get(str(i.activity_id)), equipment_log_id)
            ]
            outcomes = self.outcomes.first_for_plans(i.id for i in completed)
        except StoreError as e:
            logger.error("Error fetching plans for %d: %s", year, e)
            return DetailedReport.empty()

        report = self.aggregate(
            completed, activities, outcomes, daily_hours, use_actual_outcome_hours
        )
        logger.info(
            "KPI %d (log=%s): %d completed rows, TO=%.2f TP=%.2f",
            year, equipment_log_id, report.row_count, report.totals.to, report.totals.tp,
        )
        return report

    @staticmethod
    def aggregate(
        instances: list[TaskInstance],
        activities: dict[str, Activity],
        outcomes: dict[str, ExecutionOutcome],
        daily_hours: float,
        use_actual_outcome_hours: bool = True,
    ) -> DetailedReport:
        """Roll already-fetched COMPLETED instances into a report.

        ``instances`` are expected in ascending date order; the rows keep it.
        """
        rows: list[DetailedRow] = []
        sum_to = sum_tp = sum_tr = sum_tm = 0.0
        sum_dias = 0

        for instance in instances:
            activity = activities[str(instance.activity_id)]
            outcome = outcomes.get(str(instance.id))
            metrics = HourMetrics.compute(
                instance, activity, outcome, daily_hours, use_actual_outcome_hours
            )
            dias = instance.operational_days or 0

            sum_to += metrics.to
            sum_tp += metrics.tp
            sum_tr += metrics.tr
            sum_tm += metrics.tm
            sum_dias += dias

            rows.append(DetailedRow(
                id=instance.id,
                month=month_label(instance.scheduled_date),
                activity=activity.description or "Desconocida",
                date=display_date(instance.scheduled_date),
                scheduled_date=instance.scheduled_date,
                dias=dias,
                to=round2(metrics.to),
                tp=round2(metrics.tp),
                tr=round2(metrics.tr),
                tm=round2(metrics.tm),
            ))

        count = len(rows) or 1  # empty report averages to zero

        return DetailedReport(
            rows=rows,
            totals=KPITotals(
                to=round2(sum_to),
                tp=round2(sum_tp),
                tr=round2(sum_tr),
                tm=round2(sum_tm),
                dias=sum_dias,
            ),
            averages=KPIAverages(
                to=round2(sum_to / count),
                tp=round2(sum_tp / count),
                tr=round2(sum_tr / count),
                tm=round2(sum_tm / count),
            ),
        )

    @staticmethod
    def _in_scope(activity: Activity | None, equipment_log_id: int | str | None) -> bool:
        if activity is None:
            return False
        if equipment_log_id is None:
            return True
        return str(activity.equipment_log_id) == str(equipment_log_id)
