"""Utility modules for Uptime Monitor."""

from uptime_monitor.utils.logger import get_logger, setup_logging
from uptime_monitor.utils.time import now_ms

__all__ = ["get_logger", "setup_logging", "now_ms"]
