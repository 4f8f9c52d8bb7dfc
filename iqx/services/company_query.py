"""
Company Query Service

Read-side queries behind the /companies REST endpoints: paginated
listing with filters, search, classification groupings, top lists and
market aggregates.
"""

import logging
import math
from typing import Any, List, Optional

from sqlalchemy import and_, case, func, literal_column, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from iqx.core.exceptions import InvalidParameterError, ResourceNotFoundError
from iqx.models.company import Company

logger = logging.getLogger(__name__)

EXCHANGES = ("HOSE", "HNX", "UPCOM")

SORTABLE_COLUMNS = {
    "ticker": Company.ticker,
    "name_vi": Company.name_vi,
    "market_cap": Company.market_cap,
    "price_close": Company.price_close,
    "pct_change": Company.pct_change,
    "pe_ratio": Company.pe_ratio,
    "pb_ratio": Company.pb_ratio,
    "roe": Company.roe,
    "roa": Company.roa,
    "created_at": Company.created_at,
    "updated_at": Company.updated_at,
}

# (upper bound, label), checked in order; prices are in VND
PRICE_BUCKETS = [
    (10_000, "< 10,000"),
    (20_000, "10,000 - 20,000"),
    (50_000, "20,000 - 50,000"),
    (100_000, "50,000 - 100,000"),
    (200_000, "100,000 - 200,000"),
]
PRICE_BUCKET_OVERFLOW = "> 200,000"

MAX_COMPARE = 10


def _exchange_filter(exchange: Optional[str]) -> List[ColumnElement]:
    if not exchange:
        return []
    return [Company.stock_exchange == exchange.upper()]


class CompanyQueryService:
    """Queries over the companies table, bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_companies(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        industry: Optional[str] = None,
        sector: Optional[str] = None,
        exchange: Optional[str] = None,
        sort_by: str = "ticker",
        sort_order: str = "asc",
    ) -> dict[str, Any]:
        """
        Paginated company listing.

        Returns:
            ``{"data": [...], "pagination": {page, limit, total, total_pages}}``
        """
        sort_column = SORTABLE_COLUMNS.get(sort_by)
        if sort_column is None:
            raise InvalidParameterError(
                "sort_by", f"must be one of: {', '.join(SORTABLE_COLUMNS)}"
            )
        if sort_order not in ("asc", "desc"):
            raise InvalidParameterError("sort_order", "must be 'asc' or 'desc'")

        conditions: List[ColumnElement] = []
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Company.ticker.ilike(pattern),
                    Company.name_vi.ilike(pattern),
                    Company.name_en.ilike(pattern),
                )
            )
        if industry:
            conditions.append(Company.bc_industry_group_slug == industry)
        if sector:
            conditions.append(Company.bc_economic_sector_slug == sector)
        conditions.extend(_exchange_filter(exchange))

        where = and_(*conditions) if conditions else None

        count_stmt = select(func.count(Company.id))
        data_stmt = select(Company)
        if where is not None:
            count_stmt = count_stmt.where(where)
            data_stmt = data_stmt.where(where)

        total = (await self.session.execute(count_stmt)).scalar_one()

        order = sort_column.desc() if sort_order == "desc" else sort_column.asc()
        data_stmt = (
            data_stmt.order_by(order, Company.ticker.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = (await self.session.execute(data_stmt)).scalars().all()

        return {
            "data": [row.to_dict() for row in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def search(self, query: str, limit: int = 10) -> List[dict[str, Any]]:
        """Search by ticker or name; ticker prefixes first, then name prefixes."""
        term = query.strip()
        contains = f"%{term}%"
        prefix = f"{term}%"

        rank = case(
            (Company.ticker.ilike(prefix), 1),
            (Company.name_vi.ilike(prefix), 2),
            else_=3,
        )
        stmt = (
            select(Company)
            .where(
                or_(
                    Company.ticker.ilike(contains),
                    Company.name_vi.ilike(contains),
                    Company.name_en.ilike(contains),
                )
            )
            .order_by(rank, Company.ticker)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [row.to_dict() for row in rows]

    async def get_company(self, ticker: str) -> dict[str, Any]:
        """
        Raises:
            ResourceNotFoundError: If no company has this ticker
        """
        company = await self._get(ticker)
        if company is None:
            raise ResourceNotFoundError("company", ticker.upper().strip())
        return company.to_dict()

    async def _get(self, ticker: str) -> Optional[Company]:
        result = await self.session.execute(
            select(Company).where(Company.ticker == ticker.upper().strip())
        )
        return result.scalar_one_or_none()

    async def _grouped(self, slug_col, name_col) -> List[dict[str, Any]]:
        count = func.count(Company.id).label("count")
        stmt = (
            select(slug_col.label("slug"), name_col.label("name"), count)
            .where(slug_col.is_not(None))
            .group_by(slug_col, name_col)
            .order_by(count.desc(), slug_col)
        )
        result = await self.session.execute(stmt)
        return [
            {"slug": row.slug, "name": row.name, "count": row.count}
            for row in result
        ]

    async def get_industries(self) -> List[dict[str, Any]]:
        return await self._grouped(
            Company.bc_industry_group_slug, Company.bc_industry_group_code
        )

    async def get_sectors(self) -> List[dict[str, Any]]:
        return await self._grouped(
            Company.bc_economic_sector_slug, Company.bc_economic_sector_name
        )

    async def get_exchange_stats(self) -> List[dict[str, Any]]:
        count = func.count(Company.id).label("count")
        stmt = (
            select(Company.stock_exchange.label("exchange"), count)
            .where(Company.stock_exchange.is_not(None))
            .group_by(Company.stock_exchange)
            .order_by(count.desc())
        )
        result = await self.session.execute(stmt)
        return [{"exchange": row.exchange, "count": row.count} for row in result]

    async def get_stats(self) -> dict[str, Any]:
        total = (await self.session.execute(select(func.count(Company.id)))).scalar_one()
        industries = await self.get_industries()
        sectors = await self.get_sectors()
        exchanges = await self.get_exchange_stats()

        return {
            "total_companies": total,
            "total_industries": len(industries),
            "total_sectors": len(sectors),
            "exchanges": exchanges,
            "top_industries": industries[:10],
            "top_sectors": sectors[:10],
        }

    async def _top(
        self,
        condition: ColumnElement,
        order: ColumnElement,
        limit: int,
        exchange: Optional[str],
    ) -> List[dict[str, Any]]:
        stmt = (
            select(Company)
            .where(condition, *_exchange_filter(exchange))
            .order_by(order, Company.ticker)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [row.to_dict() for row in rows]

    async def top_gainers(self, limit: int = 10, exchange: Optional[str] = None):
        return await self._top(
            and_(Company.pct_change.is_not(None), Company.pct_change > 0),
            Company.pct_change.desc(),
            limit,
            exchange,
        )

    async def top_losers(self, limit: int = 10, exchange: Optional[str] = None):
        return await self._top(
            and_(Company.pct_change.is_not(None), Company.pct_change < 0),
            Company.pct_change.asc(),
            limit,
            exchange,
        )

    async def top_volume(self, limit: int = 10, exchange: Optional[str] = None):
        return await self._top(
            and_(Company.volume.is_not(None), Company.volume > 0),
            Company.volume.desc(),
            limit,
            exchange,
        )

    async def top_market_cap(self, limit: int = 10, exchange: Optional[str] = None):
        return await self._top(
            and_(Company.market_cap.is_not(None), Company.market_cap > 0),
            Company.market_cap.desc(),
            limit,
            exchange,
        )

    async def top_value(self, limit: int = 10, exchange: Optional[str] = None):
        """Top companies by traded value (price_close * volume)."""
        trade_value = (Company.price_close * Company.volume).label("trade_value")
        stmt = (
            select(Company, trade_value)
            .where(
                Company.price_close.is_not(None),
                Company.volume.is_not(None),
                Company.volume > 0,
                *_exchange_filter(exchange),
            )
            .order_by(trade_value.desc(), Company.ticker)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        items = []
        for company, value in result:
            data = company.to_dict()
            data["trade_value"] = value
            items.append(data)
        return items

    async def get_price_ranges(self, exchange: Optional[str] = None) -> List[dict[str, Any]]:
        bucket = case(
            *[(Company.price_close < upper, label) for upper, label in PRICE_BUCKETS],
            else_=PRICE_BUCKET_OVERFLOW,
        ).label("price_range")
        stmt = (
            select(bucket, func.count(Company.id).label("count"))
            .where(Company.price_close.is_not(None), *_exchange_filter(exchange))
            .group_by(literal_column("price_range"))
            .order_by(func.min(Company.price_close))
        )
        result = await self.session.execute(stmt)
        return [{"price_range": row.price_range, "count": row.count} for row in result]

    async def get_market_overview(self) -> List[dict[str, Any]]:
        total = func.count(Company.id).label("total_companies")
        stmt = (
            select(
                Company.stock_exchange.label("stock_exchange"),
                total,
                func.avg(Company.pct_change).label("avg_change"),
                func.sum(case((Company.pct_change > 0, 1), else_=0)).label("gainers"),
                func.sum(case((Company.pct_change < 0, 1), else_=0)).label("losers"),
                func.sum(case((Company.pct_change == 0, 1), else_=0)).label("unchanged"),
                func.sum(Company.volume).label("total_volume"),
                func.sum(Company.market_cap).label("total_market_cap"),
            )
            .where(Company.stock_exchange.is_not(None))
            .group_by(Company.stock_exchange)
            .order_by(total.desc())
        )
        result = await self.session.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def compare(self, tickers: List[str]) -> List[dict[str, Any]]:
        """
        Raises:
            InvalidParameterError: If no usable ticker is given
        """
        normalized = [t.strip().upper() for t in tickers if t.strip()][:MAX_COMPARE]
        if not normalized:
            raise InvalidParameterError("tickers", "at least one ticker is required")

        stmt = select(Company).where(Company.ticker.in_(normalized)).order_by(Company.ticker)
        rows = (await self.session.execute(stmt)).scalars().all()
        return [row.to_dict() for row in rows]

    async def similar(self, ticker: str, limit: int = 5) -> List[dict[str, Any]]:
        """
        Companies in the same industry with market cap within [0.5x, 2x].

        Raises:
            ResourceNotFoundError: If the target ticker is unknown
        """
        target = await self._get(ticker)
        if target is None:
            raise ResourceNotFoundError("company", ticker.upper().strip())
        if target.bc_industry_group_slug is None:
            return []

        market_cap = target.market_cap or 0.0
        stmt = (
            select(Company)
            .where(
                Company.ticker != target.ticker,
                Company.bc_industry_group_slug == target.bc_industry_group_slug,
                Company.market_cap.between(market_cap * 0.5, market_cap * 2),
            )
            .order_by(func.abs(Company.market_cap - market_cap), Company.ticker)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).scalars().all()
        return [row.to_dict() for row in rows]
