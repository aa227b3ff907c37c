"""Append-only per-check log streams stored as ``<log_dir>/<stream_id>.log``."""

import asyncio
from pathlib import Path

from uptime_monitor.storage.base import LogWriteError
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)


class FileLogSink:
    """
    Log sink writing one entry per line to a file per stream.

    Appends are never reordered within a stream; writes from concurrent
    workflows go through the event loop's default thread pool, and each
    append is a single ``write`` on a file opened in append mode.
    """

    def __init__(self, log_dir: str = ".logs"):
        self.base_dir = Path(log_dir)

    async def init(self) -> None:
        """Create the log directory if needed."""
        await asyncio.to_thread(self.base_dir.mkdir, parents=True, exist_ok=True)

    def path_for(self, stream_id: str) -> Path:
        if not stream_id or "/" in stream_id or "\\" in stream_id or stream_id in (".", ".."):
            raise LogWriteError(f"Invalid log stream id: {stream_id!r}")
        return self.base_dir / f"{stream_id}.log"

    async def append(self, stream_id: str, data: str) -> None:
        """
        Append one entry to a stream, creating the stream if needed.

        Raises:
            LogWriteError: If the entry cannot be written
        """
        path = self.path_for(stream_id)
        try:
            await asyncio.to_thread(self._append_sync, path, data)
        except OSError as e:
            raise LogWriteError(f"Could not append to log '{stream_id}': {e}") from e

    @staticmethod
    def _append_sync(path: Path, data: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"{data}\n")
