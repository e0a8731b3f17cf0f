"""KPI report exporter - writes the detailed report as JSON."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from src.bitacora.database.store import RelationalStore
from src.common.config import DATA_EXPORTS_DIR, Settings

from .aggregator import KPIAggregator
from .models import DetailedReport

logger = logging.getLogger(__name__)


class ReportExporter:
    """Export the yearly KPI report for the dashboard."""

    def __init__(self, store: RelationalStore, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.load()
        self.aggregator = KPIAggregator(store, self.settings)

    def export_year(
        self,
        year: int,
        equipment_log_id: int | str | None = None,
        use_actual_outcome_hours: bool | None = None,
        output_path: str | Path | None = None,
    ) -> dict:
        """Build the report and write it to ``output_path``.

        Returns:
            The exported dict.
        """
        if use_actual_outcome_hours is None:
            use_actual_outcome_hours = self.settings.kpi.use_actual_outcome_hours
        report = self.aggregator.get_detailed_stats(
            year, equipment_log_id, use_actual_outcome_hours
        )
        export = build_export(report, year, equipment_log_id, use_actual_outcome_hours)

        if output_path is None:
            scope = equipment_log_id if equipment_log_id is not None else "all"
            output_path = DATA_EXPORTS_DIR / f"kpi_{year}_{scope}.json"
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(export, f, ensure_ascii=False, indent=2)
        logger.info("KPI report exported to %s (%d rows)", output_path, report.row_count)
        return export


def build_export(
    report: DetailedReport,
    year: int,
    equipment_log_id: int | str | None,
    use_actual_outcome_hours: bool,
) -> dict:
    """Report dict plus metadata and the month grouping."""
    return {
        "year": year,
        "equipment_log_id": equipment_log_id,
        "hours_source": "outcome" if use_actual_outcome_hours else "planned",
        "generated_at": datetime.now().isoformat(),
        **report.to_dict(),
        "months": [
            {"month": month, "row_ids": [r.id for r in rows]}
            for month, rows in report.by_month().items()
        ],
    }
