"""
Database connection, session and transaction management.

This module provides async database session management using SQLAlchemy 2.0.
Production runs on MySQL through the aiomysql driver with connection pooling;
the test suite runs the same code on SQLite through aiosqlite.

It also owns the helpers every service uses to talk to the database:
- ``atomic``: explicit transaction scope with rollback on error
- ``map_db_error``: turns driver errors inside a write step into an error kind
- ``fetch_or_raise``: the single "no row" vs "database failure" triage
"""

import logging
from collections.abc import AsyncGenerator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from calendarium.core.config import settings
from calendarium.exceptions import (
    AppException,
    TransactionCommitError,
    TransactionStartError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Database Engine Configuration
# -----------------------------------------------------------------------------


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async database engine with connection pooling.

    Args:
        database_url: Database URL. If None, uses settings.database_url_str

    Returns:
        Configured AsyncEngine instance

    Connection Pool Configuration (server databases only):
        - pool_size: Number of permanent connections (default: 5)
        - max_overflow: Additional connections under load (default: 10)
        - pool_pre_ping: Test connection before use (default: True)
        - pool_recycle: Recycle connections after N seconds (default: 3600)
    """
    url = database_url or settings.database_url_str

    logger.info("Initializing database engine...")

    if url.startswith("sqlite"):
        # SQLite pools are managed by the dialect itself
        engine = create_async_engine(url, echo=settings.debug)
        logger.info("Database engine created: sqlite")
        return engine

    engine = create_async_engine(
        url,
        echo=settings.debug,
        echo_pool=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,
    )

    logger.info(
        f"Database engine created: pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}"
    )

    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by the application and the test suite."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# -----------------------------------------------------------------------------
# Request Sessions
# -----------------------------------------------------------------------------


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    The session is shared by every dependency and the handler of a request
    (FastAPI caches it). Nothing is committed here: writes commit inside
    ``atomic``. Anything left open is rolled back when the session closes,
    including when the request is cancelled by a client disconnect.
    """
    sessionmaker: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with sessionmaker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection(
    sessionmaker: async_sessionmaker[AsyncSession] | None,
) -> bool:
    """Run ``SELECT 1``; used by the readiness probe."""
    if sessionmaker is None:
        return False
    try:
        async with sessionmaker() as session:
            await session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


# -----------------------------------------------------------------------------
# Transactions and Error Triage
# -----------------------------------------------------------------------------


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block of writes as one transaction.

    Commits when the block exits normally. Any exception inside the block
    rolls the transaction back and propagates unchanged.

    Raises:
        TransactionStartError: If the transaction cannot be opened
        TransactionCommitError: If the commit fails (the transaction is
            rolled back first)

    Example:
        async with atomic(self.session):
            await self.calendar_repo.add(calendar)
            await self.user_calendar_repo.add(link)
    """
    if not session.in_transaction():
        try:
            await session.begin()
        except SQLAlchemyError as e:
            logger.error(f"Failed to start transaction: {e}")
            raise TransactionStartError() from e

    try:
        yield session
    except BaseException:
        await session.rollback()
        raise

    try:
        await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to commit transaction: {e}")
        await session.rollback()
        raise TransactionCommitError() from e


@asynccontextmanager
async def map_db_error(
    error: type[AppException],
    conflict: type[AppException] | None = None,
) -> AsyncGenerator[None, None]:
    """
    Translate driver failures inside a write step into an error kind.

    Args:
        error: Kind raised for any SQLAlchemy error
        conflict: Kind raised instead when a unique index rejects the write
    """
    try:
        yield
    except IntegrityError as e:
        if conflict is None:
            logger.error(f"{error.error_code}: {e}")
            raise error() from e
        logger.warning(f"{conflict.error_code}: unique index rejected write")
        raise conflict() from e
    except SQLAlchemyError as e:
        logger.error(f"{error.error_code}: {e}")
        raise error() from e


async def fetch_or_raise(
    lookup: Awaitable[T | None],
    not_found: type[AppException],
    internal: type[AppException],
) -> T:
    """
    Await a single-row lookup and triage its outcome.

    Returns the row, raises ``not_found`` when there is none, and
    ``internal`` when the database call itself failed.

    Example:
        calendar = await fetch_or_raise(
            repo.get_by_id(calendar_id),
            CalendarNotFoundError,
            CalendarVerificationError,
        )
    """
    try:
        row = await lookup
    except SQLAlchemyError as e:
        logger.error(f"{internal.error_code}: {e}")
        raise internal() from e
    if row is None:
        raise not_found()
    return row


async def close_database_connection(engine: AsyncEngine) -> None:
    """
    Close database engine and dispose of connection pool.

    Should be called on application shutdown to gracefully close
    all database connections.
    """
    try:
        await engine.dispose()
        logger.info("Database engine disposed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error disposing database engine: {e}")
