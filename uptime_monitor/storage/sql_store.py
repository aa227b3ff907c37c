"""Relational record store using SQLAlchemy async sessions."""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Integer, JSON, String, UniqueConstraint, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from uptime_monitor.storage.base import RecordNotFoundError, StorageError
from uptime_monitor.utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


class Record(Base):
    """
    Record model holding one JSON document per (collection, key).

    Attributes:
        id: Primary key
        collection: Collection name (users, tokens, checks)
        key: Record key, unique within its collection
        data: JSON document
        created_at: Timestamp when record was created
        updated_at: Timestamp of last update
    """

    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("collection", "key", name="uq_records_collection_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String(64), nullable=False, index=True)
    key = Column(String(255), nullable=False)
    data = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation of record."""
        return f"<Record(collection='{self.collection}', key='{self.key}')>"


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine with a pool suited to the database type.

    In-memory SQLite needs a single shared connection; file SQLite creates
    connections on demand; server databases get a regular pool.
    """
    if "sqlite" in database_url:
        if ":memory:" in database_url:
            return create_async_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool
            )
        return create_async_engine(database_url, echo=echo, poolclass=NullPool)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600
    )


class SQLRecordStore:
    """Record store persisting JSON documents in a ``records`` table."""

    def __init__(self, database_url: str, echo: bool = False, engine: Optional[AsyncEngine] = None):
        """
        Initialize database record store.

        Args:
            database_url: SQLAlchemy async URL, e.g. sqlite+aiosqlite:///./.data/uptime.db
            echo: Whether to echo SQL statements
            engine: Pre-built engine (tests)
        """
        self.engine = engine or create_engine_for_url(database_url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Database record store initialized",
            extra={"database": self.engine.url.render_as_string(hide_password=True)}
        )

    async def init(self) -> None:
        """Create tables if they do not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def close(self) -> None:
        """Dispose of the engine and its connections."""
        await self.engine.dispose()

    async def _get(self, session: AsyncSession, collection: str, key: str) -> Optional[Record]:
        result = await session.execute(
            select(Record).where(Record.collection == collection, Record.key == key)
        )
        return result.scalar_one_or_none()

    async def create(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        """
        Create a new record.

        Raises:
            StorageError: If the record already exists or cannot be written
        """
        try:
            async with self.session_factory() as session:
                session.add(Record(collection=collection, key=key, data=record))
                await session.commit()
        except IntegrityError:
            raise StorageError(f"Record '{key}' already exists in collection '{collection}'")
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create record '{key}': {e}") from e

    async def read(self, collection: str, key: str) -> Any:
        """
        Read a record.

        The stored JSON value is returned as is; callers validate its shape.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageError: On database errors
        """
        try:
            async with self.session_factory() as session:
                row = await self._get(session, collection, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read record '{key}': {e}") from e

        if row is None:
            raise RecordNotFoundError(collection, key)
        return copy.deepcopy(row.data)

    async def update(self, collection: str, key: str, record: Dict[str, Any]) -> None:
        """
        Replace an existing record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageError: On database errors
        """
        try:
            async with self.session_factory() as session:
                row = await self._get(session, collection, key)
                if row is None:
                    raise RecordNotFoundError(collection, key)
                row.data = record
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not update record '{key}': {e}") from e

    async def delete(self, collection: str, key: str) -> None:
        """
        Delete a record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StorageError: On database errors
        """
        try:
            async with self.session_factory() as session:
                row = await self._get(session, collection, key)
                if row is None:
                    raise RecordNotFoundError(collection, key)
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not delete record '{key}': {e}") from e

    async def list(self, collection: str) -> List[str]:
        """
        List record keys in a collection.

        Raises:
            StorageError: On database errors
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Record.key)
                    .where(Record.collection == collection)
                    .order_by(Record.key)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(f"Could not list collection '{collection}': {e}") from e
