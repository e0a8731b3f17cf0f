# Common utilities and shared modules
"""
Shared components used by every engine package:
- Data models (Pydantic input contracts, enums, results)
- Logging configuration
- Project configuration
"""

from .config import DATA_DIR, PROJECT_ROOT, Settings
from .logging import setup_logging

__all__ = [
    "Settings",
    "PROJECT_ROOT",
    "DATA_DIR",
    "setup_logging",
]
