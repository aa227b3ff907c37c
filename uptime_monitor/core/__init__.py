"""Core monitoring logic: validation, probing, outcome processing, scheduling."""

from uptime_monitor.core.probe import ProbeExecutor
from uptime_monitor.core.processor import OutcomeProcessor
from uptime_monitor.core.scheduler import MonitoringScheduler
from uptime_monitor.core.validator import InvalidCheckError, validate_check_data

__all__ = [
    "ProbeExecutor",
    "OutcomeProcessor",
    "MonitoringScheduler",
    "InvalidCheckError",
    "validate_check_data",
]
