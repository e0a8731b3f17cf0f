"""Shared test fixtures for the maintenance log engine."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.bitacora.database.models import Activity, EquipmentLog
from src.bitacora.database.repository import ActivityRepository, EquipmentLogRepository
from src.bitacora.database.store import RelationalStore, SQLiteStore, StoreError
from src.common.config import DatabaseSettings, Settings
from src.common.models import Frequency, RiskLevel


class FailingStore(RelationalStore):
    """Store whose every call fails."""

    def select(self, table, filters=(), order_by=()):
        raise StoreError(f"select from {table} failed: connection refused")

    def insert(self, table, rows):
        raise StoreError(f"insert into {table} failed: connection refused")

    def update(self, table, patch, filters):
        raise StoreError(f"update of {table} failed: connection refused")


class FlakyStore(RelationalStore):
    """Delegates to a real store but fails the Nth insert into one table."""

    def __init__(self, inner: RelationalStore, table: str, fail_on: int) -> None:
        self.inner = inner
        self.table = table
        self.fail_on = fail_on
        self.inserts = 0

    def select(self, table, filters=(), order_by=()):
        return self.inner.select(table, filters, order_by)

    def insert(self, table, rows):
        if table == self.table:
            self.inserts += 1
            if self.inserts == self.fail_on:
                raise StoreError(f"insert into {table} failed: disk I/O error")
        return self.inner.insert(table, rows)

    def update(self, table, patch, filters):
        return self.inner.update(table, patch, filters)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing to a temporary SQLite database."""
    return Settings(database=DatabaseSettings(db_path=str(tmp_path / "test_bitacora.db")))


@pytest.fixture
def store(settings) -> SQLiteStore:
    """An initialized SQLite store on the temporary database."""
    return SQLiteStore(settings.database.db_abs_path)


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def flaky_store(store):
    """Factory: ``flaky_store(table, fail_on)`` wraps the temp store."""

    def _make(table: str, fail_on: int) -> FlakyStore:
        return FlakyStore(store, table, fail_on)

    return _make


@pytest.fixture
def equipment_log(store) -> EquipmentLog:
    """A 2025 log running 4 hours a day."""
    return EquipmentLogRepository(store).create(
        EquipmentLog(name="Compresor Atlas", year=2025, daily_hours=4.0)
    )


@pytest.fixture
def make_activity(store, equipment_log):
    """Factory for activities of ``equipment_log``."""

    def _make(
        description: str,
        frequency: Frequency = Frequency.DAILY,
        tr_hours: float = 0.0,
        tm_hours: float = 0.0,
        equipment_log_id=None,
    ) -> Activity:
        return ActivityRepository(store).create(Activity(
            description=description,
            frequency=frequency,
            risk_level=RiskLevel.MEDIUM,
            equipment_log_id=equipment_log_id or equipment_log.id,
            tr_hours=tr_hours,
            tm_hours=tm_hours,
        ))

    return _make


@pytest.fixture
def sample_sheet_rows() -> list[dict]:
    """Sheet rows as produced by the spreadsheet reader."""
    return [
        {
            "Actividad": "Lubricar rodamientos",
            "Frecuencia": "mensual",
            "Norma": "ISO 281",
            "Riesgo": "alto",
            "Fecha": "2025-01-15",
            "TR": "1.5",
            "TM": 0.5,
            "Dias": 2,
        },
        {
            "Actividad": "Inspección visual",
            "Frecuencia": "SEMANAL",
            "Fecha": "06/01/2025",
            "Dias": "1",
        },
        {
            "Actividad": "",
            "Frecuencia": "DIARIA",
            "Fecha": "2025-01-01",
        },
        {
            "Actividad": "Cambio de filtro",
            "Frecuencia": "ANUAL",
            "Fecha": 45809,  # serial day for 2025-06-01
        },
    ]

