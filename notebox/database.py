"""
Notebox — Database Session Management
=======================================

What:  Async SQLAlchemy engine, session factory and schema bootstrap, wrapped
       in an explicit Database object.
Why:   Centralizes all database connection logic in one place, and lets the
       application factory hand a fully built dependency to the Note Store.
How:   Database(settings) creates an async engine with connection pooling and
       provides a session context manager that commits on success and rolls
       back on error.
Who:   Built by create_app(); used by NoteStore and the health route.
When:  Engine is created with the app; sessions are created per store operation.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (used in tests and local development) skip the pool sizing
    arguments; SQLAlchemy picks an appropriate pool for the file or memory
    database on its own.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notebox.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a shared metadata
    object, which create_schema() uses to create missing tables at startup.
    """
    pass


def _engine_options(settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return options


class Database:
    """
    Owns the async engine and session factory for one database.

    expire_on_commit=False keeps attributes readable after commit; the store
    returns ORM objects to handlers after their session has closed.
    """

    def __init__(self, settings: Settings):
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            **_engine_options(settings),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional session.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller (the caller performs queries)
            3. On success: commits the transaction
            4. On error: rolls back the transaction and re-raises
            5. Always: closes the session (returns connection to pool)
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_schema(self) -> None:
        """
        Create every table registered on Base that does not exist yet.

        Existing tables are left untouched. Raises the driver error when the
        database is unreachable; the caller decides whether that is fatal.
        """
        # Import models so they are registered with Base.metadata
        from notebox.models import note  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (tables: %s)", ", ".join(Base.metadata.tables))

    async def ping(self) -> None:
        """Run SELECT 1; raises when the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """
        Gracefully closes all connections in the pool.
        When: Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()
