"""Data models for plan listing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from src.bitacora.database.models import Activity
from src.common.models import TaskStatus


@dataclass
class ScheduledTask:
    """A task instance joined with its activity, as shown on the calendar."""

    id: int | None
    scheduled_date: date
    status: TaskStatus
    activity: Activity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scheduled_date": self.scheduled_date.isoformat(),
            "status": self.status.value,
            "activity": {
                "description": self.activity.description,
                "frequency": self.activity.frequency.value,
                "risk": self.activity.risk_level.value,
                "standard": self.activity.standard_code,
            },
        }
