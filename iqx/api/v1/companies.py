"""
Company API Endpoints

Read-only access to the companies synced from Simplize: listing,
search, classifications, market top lists and aggregates.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Path, Query

from iqx.api.deps import QueryServiceDep
from iqx.api.v1.schemas import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()

EXCHANGE_PATTERN = r"^(HOSE|HNX|UPCOM)$"
SORT_PATTERN = (
    r"^(ticker|name_vi|market_cap|price_close|pct_change|pe_ratio|pb_ratio"
    r"|roe|roa|created_at|updated_at)$"
)
TICKER_PATTERN = r"^[A-Za-z0-9]+$"


@router.get("", response_model=ApiResponse[dict[str, Any]])
async def list_companies(
    service: QueryServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    industry: Optional[str] = Query(None, min_length=1, max_length=100),
    sector: Optional[str] = Query(None, min_length=1, max_length=100),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
    sort_by: str = Query("ticker", pattern=SORT_PATTERN),
    sort_order: str = Query("asc", pattern=r"^(asc|desc)$"),
):
    """
    List companies with pagination, filters and sorting.

    Example: /companies?exchange=HOSE&sort_by=market_cap&sort_order=desc
    """
    result = await service.list_companies(
        page=page,
        limit=limit,
        search=search,
        industry=industry,
        sector=sector,
        exchange=exchange,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(
        data=result,
        message=f"Found {len(result['data'])} companies",
    )


@router.get("/search", response_model=ApiResponse[list[dict[str, Any]]])
async def search_companies(
    service: QueryServiceDep,
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(10, ge=1, le=50),
):
    """Search by ticker or name. Ticker prefix matches rank first."""
    companies = await service.search(q, limit)
    return ApiResponse(data=companies, message=f"Found {len(companies)} matching companies")


@router.get("/industries", response_model=ApiResponse[list[dict[str, Any]]])
async def get_industries(service: QueryServiceDep):
    industries = await service.get_industries()
    return ApiResponse(data=industries, message=f"Found {len(industries)} industries")


@router.get("/sectors", response_model=ApiResponse[list[dict[str, Any]]])
async def get_sectors(service: QueryServiceDep):
    sectors = await service.get_sectors()
    return ApiResponse(data=sectors, message=f"Found {len(sectors)} sectors")


@router.get("/stats", response_model=ApiResponse[dict[str, Any]])
async def get_stats(service: QueryServiceDep):
    """Totals, exchange distribution and the ten largest industries and sectors."""
    stats = await service.get_stats()
    return ApiResponse(data=stats, message="Statistics loaded")


@router.get("/top-gainers", response_model=ApiResponse[list[dict[str, Any]]])
async def top_gainers(
    service: QueryServiceDep,
    limit: int = Query(10, ge=1, le=50),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    companies = await service.top_gainers(limit, exchange)
    return ApiResponse(data=companies, message=f"Top {len(companies)} gainers")


@router.get("/top-losers", response_model=ApiResponse[list[dict[str, Any]]])
async def top_losers(
    service: QueryServiceDep,
    limit: int = Query(10, ge=1, le=50),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    companies = await service.top_losers(limit, exchange)
    return ApiResponse(data=companies, message=f"Top {len(companies)} losers")


@router.get("/top-volume", response_model=ApiResponse[list[dict[str, Any]]])
async def top_volume(
    service: QueryServiceDep,
    limit: int = Query(10, ge=1, le=50),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    companies = await service.top_volume(limit, exchange)
    return ApiResponse(data=companies, message=f"Top {len(companies)} by volume")


@router.get("/top-value", response_model=ApiResponse[list[dict[str, Any]]])
async def top_value(
    service: QueryServiceDep,
    limit: int = Query(10, ge=1, le=50),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    """Top companies by traded value (price_close * volume)."""
    companies = await service.top_value(limit, exchange)
    return ApiResponse(data=companies, message=f"Top {len(companies)} by traded value")


@router.get("/top-market-cap", response_model=ApiResponse[list[dict[str, Any]]])
async def top_market_cap(
    service: QueryServiceDep,
    limit: int = Query(10, ge=1, le=50),
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    companies = await service.top_market_cap(limit, exchange)
    return ApiResponse(data=companies, message=f"Top {len(companies)} by market cap")


@router.get("/price-ranges", response_model=ApiResponse[list[dict[str, Any]]])
async def price_ranges(
    service: QueryServiceDep,
    exchange: Optional[str] = Query(None, pattern=EXCHANGE_PATTERN),
):
    ranges = await service.get_price_ranges(exchange)
    return ApiResponse(data=ranges, message="Price distribution loaded")


@router.get("/market-overview", response_model=ApiResponse[list[dict[str, Any]]])
async def market_overview(service: QueryServiceDep):
    """Per-exchange breadth, average change, volume and market cap."""
    overview = await service.get_market_overview()
    return ApiResponse(data=overview, message="Market overview loaded")


@router.get("/industry/{slug}", response_model=ApiResponse[dict[str, Any]])
async def companies_by_industry(
    service: QueryServiceDep,
    slug: str = Path(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("ticker", pattern=SORT_PATTERN),
    sort_order: str = Query("asc", pattern=r"^(asc|desc)$"),
):
    result = await service.list_companies(
        page=page, limit=limit, industry=slug, sort_by=sort_by, sort_order=sort_order
    )
    return ApiResponse(data=result, message=f"Companies in industry {slug}")


@router.get("/sector/{slug}", response_model=ApiResponse[dict[str, Any]])
async def companies_by_sector(
    service: QueryServiceDep,
    slug: str = Path(..., min_length=1, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("ticker", pattern=SORT_PATTERN),
    sort_order: str = Query("asc", pattern=r"^(asc|desc)$"),
):
    result = await service.list_companies(
        page=page, limit=limit, sector=slug, sort_by=sort_by, sort_order=sort_order
    )
    return ApiResponse(data=result, message=f"Companies in sector {slug}")


@router.get("/exchange/{exchange}", response_model=ApiResponse[dict[str, Any]])
async def companies_by_exchange(
    service: QueryServiceDep,
    exchange: str = Path(..., min_length=1, max_length=20),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("ticker", pattern=SORT_PATTERN),
    sort_order: str = Query("asc", pattern=r"^(asc|desc)$"),
):
    result = await service.list_companies(
        page=page, limit=limit, exchange=exchange, sort_by=sort_by, sort_order=sort_order
    )
    return ApiResponse(data=result, message=f"Companies listed on {exchange.upper()}")


@router.get("/compare", response_model=ApiResponse[list[dict[str, Any]]])
async def compare_companies(
    service: QueryServiceDep,
    tickers: str = Query(..., min_length=1, max_length=200, description="Comma-separated tickers (max 10)"),
):
    """
    Compare up to 10 companies side by side.

    Example: /companies/compare?tickers=VIC,VNM,FPT
    """
    companies = await service.compare(tickers.split(","))
    return ApiResponse(data=companies, message=f"Compared {len(companies)} companies")


@router.get("/similar/{ticker}", response_model=ApiResponse[list[dict[str, Any]]])
async def similar_companies(
    service: QueryServiceDep,
    ticker: str = Path(..., min_length=1, max_length=20, pattern=TICKER_PATTERN),
    limit: int = Query(5, ge=1, le=20),
):
    """Same industry, market cap within half to double of the target."""
    companies = await service.similar(ticker, limit)
    return ApiResponse(
        data=companies,
        message=f"Found {len(companies)} companies similar to {ticker.upper()}",
    )


@router.get("/{ticker}", response_model=ApiResponse[dict[str, Any]])
async def get_company(
    service: QueryServiceDep,
    ticker: str = Path(..., min_length=1, max_length=20, pattern=TICKER_PATTERN),
):
    company = await service.get_company(ticker)
    return ApiResponse(data=company, message=f"Company {company['ticker']} loaded")
