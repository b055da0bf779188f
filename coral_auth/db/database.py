"""Database connection and session management."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from coral_auth.config import Settings
from coral_auth.constants import (
    DB_MAX_OVERFLOW,
    DB_POOL_RECYCLE,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
)
from coral_auth.exceptions import DatabaseConnectionError
from coral_auth.utils.logging import get_logger

logger = get_logger(__name__)


class Database:
    """Process-wide database handle.

    Created once at startup, verified with :meth:`connect` and released with
    :meth:`dispose` at shutdown. Requests obtain their own sessions from it.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the handle from application settings."""
        url = settings.database_url_async
        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True}
        if make_url(url).get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=DB_POOL_SIZE,
                max_overflow=DB_MAX_OVERFLOW,
                pool_timeout=DB_POOL_TIMEOUT,
                pool_recycle=DB_POOL_RECYCLE,
            )
        return cls(url, **engine_kwargs)

    async def connect(self) -> None:
        """Verify the database is reachable.

        Raises:
            DatabaseConnectionError: If the connection cannot be established
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseConnectionError(
                f"Could not connect to database at {self.engine.url!r}: {e}"
            ) from e
        logger.info(f"Connected to database ({self.engine.url.get_backend_name()})")

    async def create_all(self) -> None:
        """Create tables if needed."""
        from coral_auth.models.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session bound to this database."""
        async with self.session_maker() as session:
            yield session


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session."""
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
