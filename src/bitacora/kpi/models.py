"""Data models for the detailed KPI report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass
class DetailedRow:
    """One completed task instance in the report.

    Hour metrics are rounded to 2 decimals for display:
    TO = operational days x daily hours, TR = repair, TM = downtime,
    TP = TR + TM.
    """

    id: int | None
    month: str  # capitalised Spanish month name
    activity: str
    date: str  # d/m/yyyy
    scheduled_date: date
    dias: int
    to: float
    tp: float
    tr: float
    tm: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "month": self.month,
            "activity": self.activity,
            "date": self.date,
            "dias": self.dias,
            "to": self.to,
            "tp": self.tp,
            "tr": self.tr,
            "tm": self.tm,
        }


@dataclass
class KPITotals:
    to: float = 0.0
    tp: float = 0.0
    tr: float = 0.0
    tm: float = 0.0
    dias: int = 0

    def to_dict(self) -> dict:
        return {"to": self.to, "tp": self.tp, "tr": self.tr, "tm": self.tm, "dias": self.dias}


@dataclass
class KPIAverages:
    to: float = 0.0
    tp: float = 0.0
    tr: float = 0.0
    tm: float = 0.0

    def to_dict(self) -> dict:
        return {"to": self.to, "tp": self.tp, "tr": self.tr, "tm": self.tm}


@dataclass
class DetailedReport:
    """Completed-work report for one year (and optionally one log)."""

    rows: list[DetailedRow] = field(default_factory=list)
    totals: KPITotals = field(default_factory=KPITotals)
    averages: KPIAverages = field(default_factory=KPIAverages)

    @classmethod
    def empty(cls) -> DetailedReport:
        return cls()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def by_month(self) -> dict[str, list[DetailedRow]]:
        """Rows grouped by month label, months in chronological order."""
        groups: dict[str, list[DetailedRow]] = {}
        for row in sorted(self.rows, key=lambda r: (r.scheduled_date, r.id or 0)):
            groups.setdefault(row.month, []).append(row)
        return groups

    def to_dict(self) -> dict:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "totals": self.totals.to_dict(),
            "averages": self.averages.to_dict(),
        }
