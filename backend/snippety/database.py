"""
Snippety — Database Engine Management
=======================================

What:  Async SQLAlchemy engine and session factory construction.
Why:   Centralizes all database connection logic in one place.
How:   Builds an async engine with a bounded connection pool from settings.
       The app factory owns the engine (on `app.state`); nothing here is
       created at import time.
Who:   Used by create_app(), the health check and the test suite.

Connection Pooling Strategy:
    pool_size / max_overflow: bounded pool from settings
    pool_pre_ping:            validates connections before use
    pool_recycle=3600:        recycles connections every hour
    SQLite URLs skip the sizing arguments (SQLAlchemy picks its own pool).
"""

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snippety.config import Settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings`.

    Creating the engine does not connect; the first checkout does.
    """
    url = make_url(settings.database_url)
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory used by the snippet store.

    expire_on_commit=False keeps loaded attributes readable after commit,
    once the connection is back in the pool.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables registered on `Base.metadata`."""
    # Registers the snippets table on Base.metadata
    from snippety.models import snippet  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping(engine: AsyncEngine) -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
