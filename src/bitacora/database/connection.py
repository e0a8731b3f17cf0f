"""SQLite database connection and schema management."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from src.common.config import Settings

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS bitacoras (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    year INTEGER NOT NULL,
    daily_hours REAL NOT NULL DEFAULT 4 CHECK (daily_hours >= 0),
    description TEXT,
    created_at TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_bitacoras_year
    ON bitacoras(year);

CREATE TABLE IF NOT EXISTS activities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    description TEXT NOT NULL,
    frequency_type TEXT NOT NULL,
    risk_level TEXT NOT NULL DEFAULT 'BAJO',
    standard_code TEXT,
    tr_hours REAL DEFAULT 0,
    tm_hours REAL DEFAULT 0,
    bitacora_id INTEGER NOT NULL,
    FOREIGN KEY (bitacora_id) REFERENCES bitacoras(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_activities_bitacora_description
    ON activities(bitacora_id, description);

CREATE TABLE IF NOT EXISTS maintenance_plans (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    activity_id INTEGER NOT NULL,
    scheduled_date TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'PENDIENTE',
    operational_days INTEGER DEFAULT 0,
    FOREIGN KEY (activity_id) REFERENCES activities(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_plans_date
    ON maintenance_plans(scheduled_date);

CREATE INDEX IF NOT EXISTS idx_plans_activity_date
    ON maintenance_plans(activity_id, scheduled_date);

CREATE TABLE IF NOT EXISTS execution_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    plan_id INTEGER NOT NULL,
    executed_by TEXT,
    execution_time_minutes REAL DEFAULT 0,
    tm_minutes REAL DEFAULT 0,
    observations TEXT DEFAULT '',
    is_completed INTEGER DEFAULT 1,
    calibration TEXT,
    logged_at TEXT DEFAULT (datetime('now')),
    FOREIGN KEY (plan_id) REFERENCES maintenance_plans(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_logs_plan
    ON execution_logs(plan_id);
"""


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Get a SQLite connection with row factory enabled.

    Args:
        db_path: Database file. Uses the configured path if not provided.

    Returns:
        sqlite3.Connection with Row factory.
    """
    path = Path(db_path) if db_path else Settings.load().database.db_abs_path
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """Initialize database schema (idempotent)."""
    conn = get_connection(db_path)
    try:
        conn.executescript(_SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized at %s", db_path or "default path")
    finally:
        conn.close()
