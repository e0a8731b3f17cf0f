"""Planning module - plan generation, manual tasks and sheet import."""

from .importer import PlanImporter, parse_sheet_date
from .models import ScheduledTask
from .planner import MaintenancePlanner

__all__ = [
    "MaintenancePlanner",
    "PlanImporter",
    "ScheduledTask",
    "parse_sheet_date",
]
