"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"
DATA_EXPORTS_DIR = DATA_DIR / "exports"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

# === Engine defaults ===
DEFAULT_DAILY_HOURS = 4.0
DEFAULT_CALIBRATION_TOLERANCE_PCT = 0.5
DEFAULT_USE_ACTUAL_OUTCOME_HOURS = True


class DatabaseSettings(BaseModel):
    """Store backend selection."""
    backend: str = "sqlite"  # sqlite | supabase
    db_path: str = str(DATA_DIR / "bitacora.db")

    @property
    def db_abs_path(self) -> Path:
        """Resolve database path relative to project root."""
        p = Path(self.db_path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


class SupabaseSettings(BaseModel):
    """Hosted PostgreSQL credentials."""
    url: str = ""
    service_key: str = ""


class KPISettings(BaseModel):
    """Defaults for the KPI aggregator."""
    default_daily_hours: float = Field(default=DEFAULT_DAILY_HOURS, ge=0)
    use_actual_outcome_hours: bool = DEFAULT_USE_ACTUAL_OUTCOME_HOURS


class ExecutionSettings(BaseModel):
    """Defaults for execution logging."""
    calibration_tolerance_pct: float = Field(default=DEFAULT_CALIBRATION_TOLERANCE_PCT, ge=0)


class Settings(BaseModel):
    """Top-level application settings."""
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    kpi: KPISettings = Field(default_factory=KPISettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)

    @classmethod
    def load(cls, path: str | Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, then apply env overrides."""
        settings_path = Path(path) if path else CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        _apply_env_overrides(data)
        return cls(**data)


def _apply_env_overrides(data: dict) -> None:
    """Overlay environment variables on the raw settings dict."""
    database = data.setdefault("database", {})
    supabase = data.setdefault("supabase", {})
    kpi = data.setdefault("kpi", {})
    execution = data.setdefault("execution", {})

    if backend := os.getenv("BITACORA_STORE"):
        database["backend"] = backend.strip().lower()
    if db_path := os.getenv("BITACORA_DB_PATH"):
        database["db_path"] = db_path
    if url := os.getenv("SUPABASE_URL"):
        supabase["url"] = url
    if key := os.getenv("SUPABASE_SERVICE_KEY"):
        supabase["service_key"] = key
    if hours := os.getenv("BITACORA_DEFAULT_DAILY_HOURS"):
        kpi["default_daily_hours"] = float(hours)
    if flag := os.getenv("BITACORA_USE_ACTUAL_OUTCOME_HOURS"):
        kpi["use_actual_outcome_hours"] = flag.strip().lower() in ("1", "true", "yes", "on")
    if tolerance := os.getenv("BITACORA_CALIBRATION_TOLERANCE_PCT"):
        execution["calibration_tolerance_pct"] = float(tolerance)
