"""
Company Store

Durable, idempotent persistence of normalized company records keyed by
ticker. Uses INSERT ... ON CONFLICT (ticker) DO UPDATE for PostgreSQL and
SQLite, so a re-synced ticker updates its row in place.

Every operation opens its own session, which makes concurrent upserts on
distinct tickers safe. Same-ticker races resolve as last write wins.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from iqx.core.database import create_session_factory, init_database
from iqx.core.exceptions import DatabaseError
from iqx.models.company import Company
from iqx.providers.simplize.schemas import CompanyRecord

logger = logging.getLogger(__name__)

# Columns an upsert never overwrites on conflict
IMMUTABLE_COLUMNS = frozenset({"id", "ticker", "created_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CompanyStore:
    """Upsert store for the ``companies`` table."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.engine = engine
        self.session_factory = session_factory or create_session_factory(engine)
        self._clock = clock

        dialect = engine.dialect.name
        if dialect == "postgresql":
            self._insert = pg_insert
        elif dialect == "sqlite":
            self._insert = sqlite_insert
        else:
            raise DatabaseError(f"Unsupported database dialect: {dialect}", operation="init")

    async def init_schema(self) -> None:
        """Create the companies table and its indexes if absent."""
        await init_database(self.engine)

    async def upsert(self, record: CompanyRecord) -> Company:
        """
        Insert or update one company by ticker.

        On insert both timestamps are set to now. On conflict every mapped
        column is overwritten (absent values become NULL) and only
        ``updated_at`` advances.

        Returns:
            The persisted row as stored after the write

        Raises:
            DatabaseError: If the write fails
        """
        now = self._clock()
        stmt = self._insert(Company).values(
            **record.model_dump(),
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Company.ticker],
            set_={
                column.name: stmt.excluded[column.name]
                for column in Company.__table__.columns
                if column.name not in IMMUTABLE_COLUMNS
            },
        )

        async with self.session_factory() as session:
            try:
                await session.execute(stmt)
                await session.commit()

                result = await session.execute(
                    select(Company)
                    .where(Company.ticker == record.ticker)
                    .execution_options(populate_existing=True)
                )
                return result.scalar_one()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Upsert failed for {record.ticker}: {e}")
                raise DatabaseError(
                    f"Failed to upsert {record.ticker}: {e}", operation="upsert"
                ) from e

    async def exists(self, ticker: str) -> bool:
        ticker = ticker.upper().strip()
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(Company.id).where(Company.ticker == ticker).limit(1)
                )
                return result.scalar_one_or_none() is not None
            except SQLAlchemyError as e:
                raise DatabaseError(
                    f"Failed to check {ticker}: {e}", operation="exists"
                ) from e

    async def get(self, ticker: str) -> Optional[Company]:
        ticker = ticker.upper().strip()
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(Company).where(Company.ticker == ticker)
                )
                return result.scalar_one_or_none()
            except SQLAlchemyError as e:
                raise DatabaseError(f"Failed to load {ticker}: {e}", operation="get") from e
