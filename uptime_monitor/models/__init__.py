"""Data models for checks, probe outcomes and log entries."""

from uptime_monitor.models.check import Check, CheckState, HttpMethod, Protocol
from uptime_monitor.models.outcome import LogEntry, Outcome

__all__ = ["Check", "CheckState", "HttpMethod", "Protocol", "LogEntry", "Outcome"]
