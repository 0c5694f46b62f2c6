"""
Venue Directory Backend: Database Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory and declarative base.
How:   `Database` owns one async engine (and therefore one connection pool)
       plus a session factory. The app factory creates a single instance and
       stores it on `app.state.database`; route dependencies open one session
       per request from it.
Who:   Used by the app factory, the dependencies module, the admin script
       and the test suite (which builds a SQLite-backed instance).

Connection Pooling:
    pool_size / max_overflow:  bounded pool shared by all requests
    pool_pre_ping:             validates connections before use
    pool_recycle=3600:         recycles long-lived connections
    timeout / command_timeout: asyncpg connect and statement timeouts

    SQLite URLs (tests) skip the pool sizing and asyncpg arguments.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from venuedir.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations and
    the test suite uses to create tables.
    """
    pass


def build_engine(
    database_url: str,
    settings: Optional[Settings] = None,
) -> AsyncEngine:
    """
    Create the async engine for `database_url`.

    PostgreSQL (asyncpg) engines get the configured pool sizing and
    connect/statement timeouts. SQLite engines get SQLAlchemy's defaults.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url)

    kwargs = {}
    if settings is not None:
        kwargs = dict(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_timeout=settings.db_timeout,
            connect_args={
                "timeout": settings.db_timeout,
                "command_timeout": settings.db_timeout,
            },
            echo=settings.log_level == "DEBUG",
        )
    return create_async_engine(database_url, pool_recycle=3600, **kwargs)


class Database:
    """
    Handle on the connection pool.

    Attributes:
        engine:           Async engine (owns the pool)
        session_factory:  Creates AsyncSession instances bound to the engine
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        # expire_on_commit=False keeps ORM attributes readable after commit
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(build_engine(settings.database_url, settings))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for one session: commit on success, roll back on error.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller (route handler via dependency)
            3. On success: commits the transaction
            4. On error: rolls back and re-raises
            5. Always: closes the session (returns connection to pool)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self):
        """Run a trivial query; returns the database's current timestamp."""
        async with self.engine.connect() as conn:
            result = await conn.execute(text("SELECT CURRENT_TIMESTAMP"))
            return result.scalar()

    async def create_all(self) -> None:
        """Create every table known to `Base.metadata` (tests and local dev)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
