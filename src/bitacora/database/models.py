"""Typed records for the maintenance log store.

Every row fetched from a store is mapped to one of these dataclasses by
``from_row``; ``to_row`` produces the column dict written back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime

from src.common.models import Frequency, RiskLevel, TaskStatus


def as_calendar_date(value: date | datetime | str) -> date:
    """Reduce a stored date or timestamp to its calendar day.

    Time of day and timezone suffixes are dropped, so
    ``"2025-03-10T12:00:00+00:00"`` and ``date(2025, 3, 10)`` compare equal.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _as_datetime(value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class EquipmentLog:
    """A tracked machine ("bitácora") with its yearly operating profile."""

    name: str
    year: int
    daily_hours: float = 4.0
    description: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if self.daily_hours < 0:
            raise ValueError(f"daily_hours must be >= 0, got {self.daily_hours}")

    @classmethod
    def from_row(cls, row: dict) -> EquipmentLog:
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            year=int(row["year"]),
            daily_hours=float(row.get("daily_hours") or 0),
            description=row.get("description"),
        )

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "year": self.year,
            "daily_hours": self.daily_hours,
            "description": self.description,
        }


@dataclass
class Activity:
    """A recurring maintenance task definition owned by an equipment log."""

    description: str
    frequency: Frequency
    equipment_log_id: int | str
    risk_level: RiskLevel = RiskLevel.LOW
    standard_code: str | None = None
    tr_hours: float = 0.0  # planned repair hours
    tm_hours: float = 0.0  # planned downtime hours
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValueError("Activity description must not be empty")

    @classmethod
    def from_row(cls, row: dict) -> Activity:
        return cls(
            id=row.get("id"),
            description=row["description"],
            frequency=Frequency.parse(row.get("frequency_type")),
            risk_level=RiskLevel.parse(row.get("risk_level")),
            standard_code=row.get("standard_code"),
            tr_hours=float(row.get("tr_hours") or 0),
            tm_hours=float(row.get("tm_hours") or 0),
            equipment_log_id=row.get("bitacora_id"),
        )

    def to_row(self) -> dict:
        return {
            "description": self.description,
            "frequency_type": self.frequency.value,
            "risk_level": self.risk_level.value,
            "standard_code": self.standard_code,
            "tr_hours": self.tr_hours,
            "tm_hours": self.tm_hours,
            "bitacora_id": self.equipment_log_id,
        }


@dataclass
class TaskInstance:
    """One scheduled occurrence of an activity ("maintenance plan" entry)."""

    activity_id: int | str
    scheduled_date: date
    status: TaskStatus = TaskStatus.PENDING
    operational_days: int = 0
    id: int | None = None

    @property
    def key(self) -> tuple[str, date]:
        """Natural key used for duplicate detection."""
        return (str(self.activity_id), self.scheduled_date)

    @classmethod
    def from_row(cls, row: dict) -> TaskInstance:
        return cls(
            id=row.get("id"),
            activity_id=row["activity_id"],
            scheduled_date=as_calendar_date(row["scheduled_date"]),
            status=TaskStatus.parse(row.get("status")),
            operational_days=int(float(row.get("operational_days") or 0)),
        )

    def to_row(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "scheduled_date": self.scheduled_date.isoformat(),
            "status": self.status.value,
            "operational_days": self.operational_days,
        }


@dataclass
class Calibration:
    """Instrument reading comparison captured with an execution."""

    display: float
    real: float
    error_percentage: float
    within_tolerance: bool

    @classmethod
    def from_value(cls, value: dict | str | None) -> Calibration | None:
        if not value:
            return None
        data = json.loads(value) if isinstance(value, str) else value
        return cls(
            display=float(data["display"]),
            real=float(data["real"]),
            error_percentage=float(data["error_percentage"]),
            within_tolerance=bool(data["within_tolerance"]),
        )

    def to_dict(self) -> dict:
        return {
            "display": self.display,
            "real": self.real,
            "error_percentage": self.error_percentage,
            "within_tolerance": self.within_tolerance,
        }


@dataclass
class ExecutionOutcome:
    """What actually happened when a task instance was worked."""

    plan_id: int | str
    executed_by: str | None
    repair_minutes: float = 0.0
    downtime_minutes: float = 0.0
    observations: str = ""
    is_completed: bool = True
    calibration: Calibration | None = None
    logged_at: datetime | None = None
    id: int | None = None

    @property
    def repair_hours(self) -> float:
        return (self.repair_minutes or 0) / 60

    @property
    def downtime_hours(self) -> float:
        return (self.downtime_minutes or 0) / 60

    @classmethod
    def from_row(cls, row: dict) -> ExecutionOutcome:
        return cls(
            id=row.get("id"),
            plan_id=row["plan_id"],
            executed_by=row.get("executed_by"),
            repair_minutes=float(row.get("execution_time_minutes") or 0),
            downtime_minutes=float(row.get("tm_minutes") or 0),
            observations=row.get("observations") or "",
            is_completed=bool(row.get("is_completed", True)),
            calibration=Calibration.from_value(row.get("calibration")),
            logged_at=_as_datetime(row.get("logged_at")),
        )

    def to_row(self) -> dict:
        return {
            "plan_id": self.plan_id,
            "executed_by": self.executed_by,
            "execution_time_minutes": self.repair_minutes,
            "tm_minutes": self.downtime_minutes,
            "observations": self.observations,
            "is_completed": self.is_completed,
            "calibration": self.calibration.to_dict() if self.calibration else None,
            "logged_at": (self.logged_at or datetime.now()).isoformat(),
        }
