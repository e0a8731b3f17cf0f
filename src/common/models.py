"""Shared Pydantic data models for the maintenance log engine.

These models define the input contracts accepted from the presentation
layer (forms, spreadsheet rows) and the result shape returned to it.
All modules import enums and contracts from here.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


# === Enums ===

class Frequency(str, Enum):
    """Recurrence class of an activity."""
    DAILY = "DIARIA"
    WEEKLY = "SEMANAL"
    MONTHLY = "MENSUAL"
    ONCE = "UNICA"

    @classmethod
    def parse(cls, value: Any, default: Frequency | None = None) -> Frequency:
        """Normalise free text (Spanish or English) to a Frequency.

        Blank values map to ``default`` (DAILY if not given); anything
        unrecognised maps to ONCE.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        if not text:
            return default or cls.DAILY
        return _FREQUENCY_ALIASES.get(text, cls.ONCE)

    @property
    def is_recurring(self) -> bool:
        return self is not Frequency.ONCE


_FREQUENCY_ALIASES = {
    "DIARIA": Frequency.DAILY,
    "DIARIO": Frequency.DAILY,
    "DAILY": Frequency.DAILY,
    "SEMANAL": Frequency.WEEKLY,
    "WEEKLY": Frequency.WEEKLY,
    "MENSUAL": Frequency.MONTHLY,
    "MONTHLY": Frequency.MONTHLY,
    "UNICA": Frequency.ONCE,
    "ONCE": Frequency.ONCE,
}


class RiskLevel(str, Enum):
    """Risk classification of an activity."""
    LOW = "BAJO"
    MEDIUM = "MEDIO"
    HIGH = "ALTO"

    @classmethod
    def parse(cls, value: Any) -> RiskLevel:
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        if not text:
            return cls.LOW
        risk = _RISK_ALIASES.get(text)
        if risk is None:
            logger.warning("Unknown risk level %r, using %s", value, cls.LOW.value)
            return cls.LOW
        return risk


_RISK_ALIASES = {
    "BAJO": RiskLevel.LOW,
    "LOW": RiskLevel.LOW,
    "MEDIO": RiskLevel.MEDIUM,
    "MEDIUM": RiskLevel.MEDIUM,
    "ALTO": RiskLevel.HIGH,
    "HIGH": RiskLevel.HIGH,
}


class TaskStatus(str, Enum):
    """Lifecycle status of a scheduled task instance."""
    PENDING = "PENDIENTE"
    COMPLETED = "COMPLETADO"
    NOT_PERFORMED = "NO_REALIZADO"

    @classmethod
    def parse(cls, value: Any) -> TaskStatus:
        """Stored status code to TaskStatus.

        Blank means PENDING. Codes written outside this engine (legacy or
        hand-edited rows) are read as PENDING so they never count as done.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        if not text:
            return cls.PENDING
        try:
            return cls(text)
        except ValueError:
            logger.warning("Unknown task status %r, treated as %s", value, cls.PENDING.value)
            return cls.PENDING


# === Helpers ===

def _to_float(value: Any, default: float | None = 0.0) -> float | None:
    """Lenient numeric coercion for spreadsheet cells."""
    if value is None or value == "":
        return default
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        logger.warning("Could not parse number %r, using %s", value, default)
        return default


# === Input contracts ===

class EquipmentLogInput(BaseModel):
    """Form payload for creating an equipment log."""
    name: str = Field(min_length=1)
    year: int = Field(ge=2000, le=2100)
    daily_hours: float = Field(default=4.0, ge=0)
    description: str | None = None


class ActivityInput(BaseModel):
    """Form payload for creating an activity definition."""
    description: str = Field(min_length=3)
    frequency_type: Frequency
    risk_level: RiskLevel
    standard_code: str | None = None
    equipment_log_id: int | str

    @field_validator("frequency_type", "risk_level", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class ManualTaskInput(BaseModel):
    """Form payload for a manually entered recurring task."""
    description: str = Field(min_length=3)
    frequency_type: Frequency
    risk_level: RiskLevel
    start_date: date = Field(alias="date")
    tr_hours: float = Field(default=0.0, ge=0)
    tm_hours: float = Field(default=0.0, ge=0)
    operational_days: int = Field(default=0, ge=0)
    daily_hours: float | None = Field(default=None, ge=0)

    model_config = {"populate_by_name": True}

    @field_validator("frequency_type", "risk_level", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("frequency_type")
    @classmethod
    def _recurring_only(cls, v: Frequency) -> Frequency:
        if not v.is_recurring:
            raise ValueError("frequency must be DIARIA, SEMANAL or MENSUAL")
        return v


class ImportRow(BaseModel):
    """One spreadsheet row, keyed by the sheet's Spanish column headers."""
    description: str = Field(alias="Actividad", min_length=1)
    frequency: Frequency = Field(default=Frequency.DAILY, alias="Frecuencia")
    standard_code: str | None = Field(default=None, alias="Norma")
    risk_level: RiskLevel = Field(default=RiskLevel.LOW, alias="Riesgo")
    date_raw: Any = Field(default=None, alias="Fecha")
    tr_hours: float = Field(default=0.0, alias="TR")
    tm_hours: float = Field(default=0.0, alias="TM")
    operational_days: int = Field(default=0, alias="Dias")
    daily_hours: float | None = Field(default=None, alias="Horas")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, v: Any) -> str:
        return str(v if v is not None else "").strip()

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, v: Any) -> Frequency:
        return Frequency.parse(v)

    @field_validator("risk_level", mode="before")
    @classmethod
    def _parse_risk(cls, v: Any) -> RiskLevel:
        return RiskLevel.parse(v)

    @field_validator("standard_code", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip()

    @field_validator("tr_hours", "tm_hours", mode="before")
    @classmethod
    def _parse_hours(cls, v: Any) -> float:
        return _to_float(v)

    @field_validator("operational_days", mode="before")
    @classmethod
    def _parse_days(cls, v: Any) -> int:
        days = _to_float(v)
        if not math.isfinite(days) or days < 0:
            logger.warning("Invalid operational days %r, using 0", v)
            return 0
        return int(days)

    @field_validator("daily_hours", mode="before")
    @classmethod
    def _parse_daily_hours(cls, v: Any) -> float | None:
        # 0 or blank means "keep the log's current value"
        hours = _to_float(v, None)
        if hours is not None and (not math.isfinite(hours) or hours < 0):
            logger.warning("Invalid daily hours %r, keeping the log's value", v)
            return None
        return hours or None


# === Results ===

class OperationResult(BaseModel):
    """Outcome of a public planning/execution operation."""
    success: bool
    count: int = 0
    skipped: int = 0
    id: int | str | None = None
    error: str = ""
    issues: list[dict] = []
