"""Record store and log sink adapters."""

from uptime_monitor.storage.base import (
    LogSink,
    LogWriteError,
    RecordNotFoundError,
    RecordStore,
    StorageError,
)
from uptime_monitor.storage.file_store import FileRecordStore
from uptime_monitor.storage.log_sink import FileLogSink
from uptime_monitor.storage.sql_store import SQLRecordStore

__all__ = [
    "LogSink",
    "LogWriteError",
    "RecordNotFoundError",
    "RecordStore",
    "StorageError",
    "FileRecordStore",
    "FileLogSink",
    "SQLRecordStore",
]
