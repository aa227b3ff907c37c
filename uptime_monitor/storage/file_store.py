"""JSON-file record store: one file per record under ``<data_dir>/<collection>/``."""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from uptime_monitor.storage.base import RecordNotFoundError, StorageError
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

RECORD_SUFFIX = ".json"


class FileRecordStore:
    """
    Record store backed by the filesystem.

    Each collection is a directory and each record a ``<key>.json`` file.
    Blocking file I/O runs in worker threads so the event loop stays free
    for concurrent probes.
    """

    def __init__(self, data_dir: str = ".data"):
        """
        Initialize file record store.

        Args:
            data_dir: Base directory holding one subdirectory per collection
        """
        self.base_dir = Path(data_dir)

        logger.info(
            "File record store initialized",
            extra={"data_dir": str(self.base_dir)}
        )

    def _path(self, collection: str, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise StorageError(f"Invalid record key: {key!r}")
        return self.base_dir / collection / f"{key}{RECORD_SUFFIX}"

    async def init(self) -> None:
        """Create the base directory if needed."""
        await asyncio.to_thread(self.base_dir.mkdir, parents=True, exist_ok=True)

    async def close(self) -> None:
        """Nothing to release for the file backend."""

    async def create(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        """
        Create a new record.

        Raises:
            StorageError: If the record already exists or cannot be written
        """
        path = self._path(collection, key)
        try:
            await asyncio.to_thread(self._create_sync, path, record)
        except FileExistsError:
            raise StorageError(f"Record '{key}' already exists in collection '{collection}'")
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not create record '{key}': {e}") from e

    async def read(self, collection: str, key: str) -> Any:
        """
        Read a record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageError: If the record cannot be read or parsed
        """
        path = self._path(collection, key)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise RecordNotFoundError(collection, key)
        except OSError as e:
            raise StorageError(f"Could not read record '{key}': {e}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Record '{key}' is not valid JSON: {e}") from e

    async def update(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        """
        Replace an existing record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageError: If the record cannot be written
        """
        path = self._path(collection, key)
        if not await asyncio.to_thread(path.exists):
            raise RecordNotFoundError(collection, key)
        try:
            await asyncio.to_thread(self._write_atomic, path, record)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not update record '{key}': {e}") from e

    async def delete(self, collection: str, key: str) -> None:
        """
        Delete a record.

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        path = self._path(collection, key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise RecordNotFoundError(collection, key)
        except OSError as e:
            raise StorageError(f"Could not delete record '{key}': {e}") from e

    async def list(self, collection: str) -> List[str]:
        """
        List record keys in a collection.

        A collection directory that does not exist yet lists as empty.

        Raises:
            StorageError: If the collection directory cannot be read
        """
        directory = self.base_dir / collection
        try:
            return await asyncio.to_thread(self._list_sync, directory)
        except OSError as e:
            raise StorageError(f"Could not list collection '{collection}': {e}") from e

    @staticmethod
    def _list_sync(directory: Path) -> List[str]:
        if not directory.exists():
            return []
        return sorted(
            entry.name[:-len(RECORD_SUFFIX)]
            for entry in os.scandir(directory)
            if entry.is_file() and entry.name.endswith(RECORD_SUFFIX)
        )

    @staticmethod
    def _create_sync(path: Path, record: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(record)
        with open(path, "x", encoding="utf-8") as f:
            f.write(data)

    @staticmethod
    def _write_atomic(path: Path, record: Dict[str, Any]) -> None:
        data = json.dumps(record)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
