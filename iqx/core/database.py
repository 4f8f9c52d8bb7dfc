"""
Database configuration and session management.

Uses SQLAlchemy 2.0 async engine with asyncpg driver for PostgreSQL
(aiosqlite for local runs and tests).

Nothing here is created at import time: the API lifespan and the sync
CLI build their own engine and session factory and pass them down.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from iqx.core.config import Settings, settings as default_settings
from iqx.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# Naming convention for constraints (Alembic auto-generation)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def build_engine(
    database_url: Optional[str] = None,
    config: Settings = default_settings,
) -> AsyncEngine:
    """
    Build the async engine.

    SQLite gets a NullPool so every session owns its connection; PostgreSQL
    gets a bounded queue pool sized for the sync pipeline's concurrency.
    """
    url = database_url or config.database_url

    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=config.should_echo_sql,
            poolclass=NullPool,
        )

    return create_async_engine(
        url,
        echo=config.should_echo_sql,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=config.database_pool_size,
        max_overflow=config.database_pool_size,
        pool_timeout=config.database_pool_timeout,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside of request scope.

    Usage:
        async with session_scope(factory) as db:
            result = await db.execute(select(Company))
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_database_connection(
    session_factory: async_sessionmaker[AsyncSession],
    max_retries: int = 3,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """
    Check if database connection is healthy with retries.

    Returns:
        True if connection is successful, False otherwise.
    """
    for attempt in range(max_retries):
        try:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
                return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database connection attempt {attempt + 1} failed: {e}")
            if attempt < max_retries - 1:
                await sleep(1 * (attempt + 1))  # Linear backoff
            else:
                logger.error("All database connection attempts failed.")
    return False


async def init_database(engine: AsyncEngine) -> None:
    """
    Create every mapped table and index that does not exist yet.

    Raises:
        DatabaseError: If the schema cannot be created.
    """
    # Register models on Base.metadata
    import iqx.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database tables: {e}")
        raise DatabaseError(str(e), operation="init_schema") from e

    logger.info("Database tables initialized successfully")
