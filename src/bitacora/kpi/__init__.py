"""KPI module - yearly completed-work hour metrics."""

from .aggregator import HourMetrics, KPIAggregator, display_date, month_label
from .exporter import ReportExporter
from .models import DetailedReport, DetailedRow, KPIAverages, KPITotals

__all__ = [
    "HourMetrics",
    "KPIAggregator",
    "ReportExporter",
    "DetailedReport",
    "DetailedRow",
    "KPIAverages",
    "KPITotals",
    "display_date",
    "month_label",
]
