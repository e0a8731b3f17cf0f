"""
Maintenance log ("bitácora") engine

Modules:
- recurrence: calendar utilities, recurrence expander, deduplication guard
- planning: monthly plan generation, manual tasks, sheet-row import
- execution: technician outcome logging with calibration readings
- kpi: yearly TO/TP/TR/TM report and JSON export
- database: store backends (SQLite, Supabase) and typed repositories
"""

__version__ = "0.1.0"
