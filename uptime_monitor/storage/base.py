"""Collaborator interfaces consumed by the monitoring core."""

from typing import Any, Dict, List, Protocol


class StorageError(Exception):
    """Raised when a record store operation fails."""
    pass


class RecordNotFoundError(StorageError):
    """Raised when a record does not exist in its collection."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Record '{key}' not found in collection '{collection}'")
        self.collection = collection
        self.key = key


class LogWriteError(Exception):
    """Raised when a log entry cannot be appended to its stream."""
    pass


class RecordStore(Protocol):
    """Key/value persistence grouped by collection (users, tokens, checks)."""

    async def read(self, collection: str, key: str) -> Any:
        ...

    async def update(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        ...

    async def list(self, collection: str) -> List[str]:
        ...


class LogSink(Protocol):
    """Append-only log streams, one per check id."""

    async def append(self, stream_id: str, data: str) -> None:
        ...
