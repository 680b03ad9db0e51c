"""
Product API — Database Connection Management
==============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   One engine per process, created by connect_database() during startup
       and shared by every request. A session dependency auto-commits on
       success and auto-rolls-back on error.
Who:   connect/dispose are called by the lifespan in main.py; get_db_session
       is injected into route handlers via FastAPI's dependency system.

Connection model:
    The engine is acquired once at startup, verified with a test query, and
    disposed at shutdown. The driver's own pooling interleaves concurrent
    requests; the application performs no locking or queuing of its own.
    The products table is created on connect if it does not exist yet.
"""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.exceptions import DatabaseConnectionError, DatabaseError

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so that they share one metadata
    object, which connect_database() uses to create missing tables.
    """
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def connect_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Open the process-wide engine and verify the database is reachable.

    What:    Creates the engine and session factory, runs SELECT 1, and
             creates the products table if needed.
    When:    Once, during application startup.

    Args:
        url: Connection URL. Defaults to settings.database_url.

    Raises:
        DatabaseConnectionError: The database could not be reached. The engine
            is disposed before raising so no half-open state remains.
    """
    global _engine, _session_factory

    # Register models on Base.metadata before create_all
    from app.models import product  # noqa: F401

    if _engine is not None:
        return _engine

    engine = create_async_engine(
        url or settings.database_url,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",
    )

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        await engine.dispose()
        raise DatabaseConnectionError(
            message="Connection failed!",
            context={"error_type": type(e).__name__, "error": str(e)},
        ) from e

    _engine = engine
    # expire_on_commit=False: attributes stay readable after the
    # dependency commits at the end of the request
    _session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info("Connected to database!")
    return engine


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections and forgets the engine.
    When:  Called during application shutdown (lifespan handler).
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connections closed")
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    """Returns the shared engine; raises DatabaseError before connect_database()."""
    if _engine is None:
        raise DatabaseError(message="Database is not connected")
    return _engine


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the shared factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/api/products")
        async def list_products(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    if _session_factory is None:
        raise DatabaseError(message="Database is not connected")

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
