"""
Database connection management.
Handles async SQLAlchemy engine and session creation.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from jobqueue.config import Settings, get_settings
from jobqueue.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Handle to the job store.

    Owns the async engine and the session factory. One instance is created
    at startup and passed to whatever needs the store; nothing here is
    module-global, so several handles (or several service processes) can
    point at the same database.
    """

    def __init__(self, engine: AsyncEngine):
        """
        Initialize the handle around an engine.

        Args:
            engine: The SQLAlchemy async engine instance.
        """
        self.engine = engine
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """
        Open a session whose transaction is rolled back unless committed.

        Yields:
            AsyncSession: An async database session.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_schema(self) -> None:
        """Create the job table if it does not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """
        Check that the store answers a trivial query.

        Returns:
            True if the store is reachable.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database connection closed")


def create_database(settings: Settings | None = None) -> Database:
    """
    Create a database handle from settings.

    Args:
        settings: Application settings. Defaults to the cached settings.

    Returns:
        Database: A handle bound to a pooled engine.
    """
    settings = settings or get_settings()
    engine = create_async_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        echo=settings.log_level == "DEBUG",
        pool_pre_ping=True,
    )
    logger.info("Database connection initialized")
    return Database(engine)


def create_test_database(database_url: str) -> Database:
    """
    Create a database handle with NullPool.

    Args:
        database_url: The database URL for testing.

    Returns:
        Database: A handle whose connections are not pooled.
    """
    return Database(
        create_async_engine(
            database_url,
            poolclass=NullPool,
            echo=False,
        )
    )
