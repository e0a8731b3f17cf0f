"""CLI entry point for plan generation and import.

Usage:
    python -m src.bitacora.planning.main --generate --year 2025 --month 3
    python -m src.bitacora.planning.main --generate --year 2025 --month 3 --log-id 1
    python -m src.bitacora.planning.main --import-file data/raw/plan_2025.yaml --year 2025 --log-id 1

The import file is YAML or JSON: a list of rows, or a mapping with a
``rows`` list, each row keyed by the sheet headers (Actividad, Frecuencia, ...).
"""

from __future__ import annotations

import argparse
import logging

import yaml

from src.bitacora.database.store import get_store
from src.common.config import Settings

from .importer import PlanImporter
from .planner import MaintenancePlanner

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def load_rows(path: str) -> list[dict]:
    """Read import rows from a YAML/JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("rows", [])
    return [row for row in data if isinstance(row, dict)]


def main() -> None:
    parser = argparse.ArgumentParser(description="Maintenance plan generation & import")
    parser.add_argument(
        "--generate",
        action="store_true",
        help="Generate one month's plan for all activities",
    )
    parser.add_argument(
        "--import-file",
        type=str,
        help="YAML/JSON file with sheet rows to import",
    )
    parser.add_argument("--year", type=int, required=True, help="Target year")
    parser.add_argument(
        "--month",
        type=int,
        default=1,
        choices=range(1, 13),
        help="Target month (1-12); default date for rows without one",
    )
    parser.add_argument("--log-id", type=str, help="Equipment log id")

    args = parser.parse_args()

    if not args.generate and not args.import_file:
        parser.error("Either --generate or --import-file is required")

    settings = Settings.load()
    store = get_store(settings)
    log_id = int(args.log_id) if args.log_id and args.log_id.isdigit() else args.log_id

    if args.generate:
        result = MaintenancePlanner(store, settings).generate_monthly_plan(
            args.year, args.month, equipment_log_id=log_id
        )
    else:
        rows = load_rows(args.import_file)
        logger.info("Rows read from %s: %d", args.import_file, len(rows))
        result = PlanImporter(store, settings).import_rows(
            rows, args.year, args.month, equipment_log_id=log_id
        )

    if result.success:
        logger.info("Done: %d created, %d skipped", result.count, result.skipped)
    else:
        logger.error("Failed: %s (%d created before failure)", result.error, result.count)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
