"""Database layer: store backends, typed records and repositories."""

from .connection import get_connection, init_db
from .models import Activity, Calibration, EquipmentLog, ExecutionOutcome, TaskInstance
from .repository import (
    ActivityRepository,
    EquipmentLogRepository,
    ExecutionOutcomeRepository,
    TaskInstanceRepository,
)
from .store import Filter, Order, RelationalStore, SQLiteStore, StoreError, get_store

__all__ = [
    "get_connection",
    "init_db",
    "get_store",
    "Filter",
    "Order",
    "RelationalStore",
    "SQLiteStore",
    "StoreError",
    "Activity",
    "Calibration",
    "EquipmentLog",
    "ExecutionOutcome",
    "TaskInstance",
    "ActivityRepository",
    "EquipmentLogRepository",
    "ExecutionOutcomeRepository",
    "TaskInstanceRepository",
]
