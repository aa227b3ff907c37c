"""Uptime Monitor - periodic HTTP/HTTPS check worker with SMS alerting."""

__version__ = "1.0.0"
