"""Spreadsheet-row plan import.

Rows arrive already read from the sheet as flat dicts keyed by the
Spanish column headers (Actividad, Frecuencia, Norma, Riesgo, Fecha, TR,
TM, Dias, Horas). Each row upserts its activity and schedules it from
its date to the end of the target year.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from pydantic import ValidationError

from src.bitacora.database.store import RelationalStore, StoreError
from src.common.config import Settings
from src.common.models import ImportRow, OperationResult

from .planner import MaintenancePlanner

logger = logging.getLogger(__name__)

# Day 0 of spreadsheet serial dates (1900 date system)
SHEET_EPOCH = date(1899, 12, 30)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DMY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def parse_sheet_date(raw: Any, fallback: date) -> date:
    """Parse a ``Fecha`` cell.

    Accepts date objects, ISO ``YYYY-MM-DD``, ``DD/MM/YYYY`` and serial day
    numbers (rounded to the nearest day). Anything else, including
    impossible dates such as 30/02, yields ``fallback``.
    """
    if raw is None or raw == "":
        return fallback
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            # a time fraction of half a day or more rolls to the next day
            return SHEET_EPOCH + timedelta(days=math.floor(raw + 0.5))
        except (OverflowError, ValueError):
            logger.warning("Serial date %r out of range, using %s", raw, fallback)
            return fallback

    text = str(raw).strip()
    try:
        if _ISO_DATE.match(text):
            return date.fromisoformat(text)
        if match := _DMY_DATE.match(text):
            day, month, year = (int(g) for g in match.groups())
            return date(year, month, day)
    except ValueError:
        pass
    logger.warning("Unrecognised date %r, using %s", raw, fallback)
    return fallback


class PlanImporter:
    """Import spreadsheet rows into activities and a year of task instances.

    Usage:
        importer = PlanImporter(get_store())
        result = importer.import_rows(rows, year=2025, month=1, equipment_log_id=1)
    """

    def __init__(self, store: RelationalStore, settings: Settings | None = None) -> None:
        self.planner = MaintenancePlanner(store, settings)

    def import_rows(
        self,
        rows: Iterable[dict],
        year: int,
        month: int = 1,
        equipment_log_id: int | str | None = None,
    ) -> OperationResult:
        """Import rows for ``year``.

        Args:
            rows: Sheet rows in sheet order.
            year: Target year; no instance is scheduled after 31 December.
            month: Month (1-12) whose first day replaces missing or
                unparseable dates.
            equipment_log_id: Owning log. When omitted the log of ``year``
                is used, created if needed.

        Returns:
            OperationResult with ``count`` task instances created and
            ``skipped`` rows without an activity. On a store failure
            ``success`` is False and ``count`` is what was committed before it.
        """
        fallback = date(year, month, 1)
        count = 0
        skipped = 0

        try:
            log_id = equipment_log_id
            if log_id is None:
                log_id = self.planner.ensure_equipment_log(year)

            for index, raw in enumerate(rows, start=1):
                row = self._parse_row(raw, index)
                if row is None:
                    skipped += 1
                    continue

                if row.daily_hours:
                    self.planner.logs.set_daily_hours(log_id, row.daily_hours)

                activity = self.planner.upsert_activity(
                    row.description,
                    row.frequency,
                    row.risk_level,
                    log_id,
                    standard_code=row.standard_code,
                    tr_hours=row.tr_hours,
                    tm_hours=row.tm_hours,
                )
                anchor = parse_sheet_date(row.date_raw, fallback)
                count += self.planner.schedule_from_anchor(
                    activity, anchor, year, row.operational_days
                )
        except StoreError as e:
            logger.error("Import stopped after %d task instances: %s", count, e)
            return OperationResult(
                success=False,
                count=count,
                skipped=skipped,
                error=f"Error procesando el archivo: {e}",
            )

        logger.info("Imported %d task instances (%d rows skipped)", count, skipped)
        return OperationResult(success=True, count=count, skipped=skipped)

    @staticmethod
    def _parse_row(raw: dict, index: int) -> ImportRow | None:
        if not raw.get("Actividad"):
            logger.debug("Row %d has no Actividad, skipped", index)
            return None
        try:
            return ImportRow.model_validate(raw)
        except ValidationError as e:
            logger.warning("Row %d rejected: %s", index, e)
            return None
