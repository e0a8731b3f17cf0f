"""CLI entry point for the KPI report.

Usage:
    python -m src.bitacora.kpi.main --year 2025
    python -m src.bitacora.kpi.main --year 2025 --log-id 1 --output data/exports/kpi_2025.json
    python -m src.bitacora.kpi.main --year 2025 --planned-hours
"""

from __future__ import annotations

import argparse
import logging

from src.bitacora.database.store import get_store
from src.common.config import Settings
from src.common.logging import setup_logging

from .exporter import ReportExporter

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Maintenance KPI report")
    parser.add_argument("--year", type=int, required=True, help="Report year")
    parser.add_argument("--log-id", type=str, help="Restrict to one equipment log")
    parser.add_argument(
        "--planned-hours",
        action="store_true",
        help="Use activities' planned TR/TM hours instead of logged outcome minutes",
    )
    parser.add_argument("--output", type=str, help="Output JSON file path")
    parser.add_argument("--log-level", type=str, help="Log level name (default BITACORA_LOG_LEVEL or INFO)")

    args = parser.parse_args()
    setup_logging(args.log_level, module_name="src.bitacora")

    settings = Settings.load()
    log_id = int(args.log_id) if args.log_id and args.log_id.isdigit() else args.log_id
    use_actual = False if args.planned_hours else None

    exporter = ReportExporter(get_store(settings), settings)
    export = exporter.export_year(args.year, log_id, use_actual, args.output)

    logger.info("=== KPI %d (%s hours) ===", args.year, export["hours_source"])
    for group in export["months"]:
        logger.info("  %s: %d rows", group["month"], len(group["row_ids"]))
    totals = export["totals"]
    averages = export["averages"]
    logger.info(
        "  Totals  TO=%.2f TP=%.2f TR=%.2f TM=%.2f days=%d",
        totals["to"], totals["tp"], totals["tr"], totals["tm"], totals["dias"],
    )
    logger.info(
        "  Average TO=%.2f TP=%.2f TR=%.2f TM=%.2f",
        averages["to"], averages["tp"], averages["tr"], averages["tm"],
    )


if __name__ == "__main__":
    main()
