"""Execution module - technician outcome logging."""

from .recorder import ExecutionRecorder, compute_calibration

__all__ = ["ExecutionRecorder", "compute_calibration"]
