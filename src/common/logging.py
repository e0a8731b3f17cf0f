"""Logging setup for the maintenance log engine.

Engine modules only call ``logging.getLogger(__name__)``; entry points call
``setup_logging`` once to attach a stdout handler. The level can be given
as a number or a name and defaults to ``BITACORA_LOG_LEVEL`` (INFO).
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str | None = None) -> int:
    """Numeric level from an int, a level name or the environment."""
    if level is None:
        level = os.getenv("BITACORA_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(
    level: int | str | None = None,
    module_name: str = "bitacora",
) -> logging.Logger:
    """Attach a stdout handler to ``module_name`` and return the logger.

    Calling it again for the same name only updates the level.

    Args:
        level: Level number or name; None reads BITACORA_LOG_LEVEL.
        module_name: Logger name. Module loggers below it (for example
            ``src.bitacora.kpi.aggregator`` under ``src.bitacora``) log through
            its handler.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(module_name)
    resolved = resolve_level(level)
    logger.setLevel(resolved)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(resolved)
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    # handled here, not again by the root logger
    logger.propagate = False

    return logger
