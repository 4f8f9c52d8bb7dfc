"""
Simplize payload and normalized company schemas.

``RawCompanySummary`` mirrors ``pageProps.summary`` as Simplize sends it:
every field optional and loosely typed, unknown keys kept. ``CompanyRecord``
is the strict normalized record persisted by the store. Only the
transformer converts one into the other.
"""

import math
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Loose = Optional[Any]


class RawCompanySummary(BaseModel):
    """Untyped company summary exactly as returned by Simplize."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Identity & classification
    id: Loose = None
    ticker: Loose = None
    name: Loose = None
    name_vi: Loose = Field(None, alias="nameVi")
    name_en: Loose = Field(None, alias="nameEn")
    industry_activity: Loose = Field(None, alias="industryActivity")
    bc_industry_group_id: Loose = Field(None, alias="bcIndustryGroupId")
    bc_industry_group_slug: Loose = Field(None, alias="bcIndustryGroupSlug")
    bc_industry_group_code: Loose = Field(None, alias="bcIndustryGroupCode")
    bc_industry_group_type: Loose = Field(None, alias="bcIndustryGroupType")
    bc_economic_sector_id: Loose = Field(None, alias="bcEconomicSectorId")
    bc_economic_sector_slug: Loose = Field(None, alias="bcEconomicSectorSlug")
    bc_economic_sector_name: Loose = Field(None, alias="bcEconomicSectorName")
    stock_exchange: Loose = Field(None, alias="stockExchange")
    type: Loose = None
    country: Loose = None

    # Description
    website: Loose = None
    image_url: Loose = Field(None, alias="imageUrl")
    main_service: Loose = Field(None, alias="mainService")
    business_line: Loose = Field(None, alias="businessLine")
    business_strategy: Loose = Field(None, alias="businessStrategy")
    business_risk: Loose = Field(None, alias="businessRisk")
    business_overall: Loose = Field(None, alias="businessOverall")
    detail_info: Loose = Field(None, alias="detailInfo")

    # Market data
    market_cap: Loose = Field(None, alias="marketCap")
    outstanding_shares_value: Loose = Field(None, alias="outstandingSharesValue")
    price_close: Loose = Field(None, alias="priceClose")
    price_open: Loose = Field(None, alias="priceOpen")
    price_high: Loose = Field(None, alias="priceHigh")
    price_low: Loose = Field(None, alias="priceLow")
    price_floor: Loose = Field(None, alias="priceFloor")
    price_ceiling: Loose = Field(None, alias="priceCeiling")
    # Simplize misspells this key
    price_referrance: Loose = Field(None, alias="priceReferrance")
    net_change: Loose = Field(None, alias="netChange")
    pct_change: Loose = Field(None, alias="pctChange")
    volume: Loose = None
    volume_10d_avg: Loose = Field(None, alias="volume10dAvg")
    price_time_stamp: Loose = Field(None, alias="priceTimeStamp")
    price_type: Loose = Field(None, alias="priceType")

    # Valuation & fundamentals
    pe_ratio: Loose = Field(None, alias="peRatio")
    pb_ratio: Loose = Field(None, alias="pbRatio")
    eps_ratio: Loose = Field(None, alias="epsRatio")
    book_value: Loose = Field(None, alias="bookValue")
    roe: Loose = None
    roa: Loose = None
    free_float_rate: Loose = Field(None, alias="freeFloatRate")
    beta_5y: Loose = Field(None, alias="beta5y")
    dividend_yield_current: Loose = Field(None, alias="dividendYieldCurrent")
    revenue_5y_growth: Loose = Field(None, alias="revenue5yGrowth")
    net_income_5y_growth: Loose = Field(None, alias="netIncome5yGrowth")
    revenue_ltm_growth: Loose = Field(None, alias="revenueLtmGrowth")
    net_income_ltm_growth: Loose = Field(None, alias="netIncomeLtmGrowth")
    revenue_growth_qoq: Loose = Field(None, alias="revenueGrowthQoq")
    net_income_growth_qoq: Loose = Field(None, alias="netIncomeGrowthQoq")
    price_pct_chg_7d: Loose = Field(None, alias="pricePctChg7d")
    price_pct_chg_30d: Loose = Field(None, alias="pricePctChg30d")
    price_pct_chg_ytd: Loose = Field(None, alias="pricePctChgYtd")
    price_pct_chg_1y: Loose = Field(None, alias="pricePctChg1y")
    price_pct_chg_3y: Loose = Field(None, alias="pricePctChg3y")
    price_pct_chg_5y: Loose = Field(None, alias="pricePctChg5y")

    # Simplize scores
    valuation_point: Loose = Field(None, alias="valuationPoint")
    growth_point: Loose = Field(None, alias="growthPoint")
    pass_performance_point: Loose = Field(None, alias="passPerformancePoint")
    financial_health_point: Loose = Field(None, alias="financialHealthPoint")
    dividend_point: Loose = Field(None, alias="dividendPoint")
    company_quality: Loose = Field(None, alias="companyQuality")
    overall_risk_level: Loose = Field(None, alias="overallRiskLevel")
    quality_valuation: Loose = Field(None, alias="qualityValuation")
    ta_signal_1d: Loose = Field(None, alias="taSignal1d")
    watchlist_count: Loose = Field(None, alias="watchlistCount")
    analysis_updated: Loose = Field(None, alias="analysisUpdated")


class CompanyRecord(BaseModel):
    """
    Normalized company record.

    Field names match the ``companies`` columns one to one, so
    ``model_dump()`` is directly usable as insert values.
    """

    ticker: str = Field(..., min_length=1, max_length=20)

    name_vi: Optional[str] = None
    name_en: Optional[str] = None
    industry_activity: Optional[str] = None
    bc_industry_group_id: Optional[int] = None
    bc_industry_group_slug: Optional[str] = None
    bc_industry_group_code: Optional[str] = None
    bc_industry_group_type: Optional[str] = None
    bc_economic_sector_id: Optional[int] = None
    bc_economic_sector_slug: Optional[str] = None
    bc_economic_sector_name: Optional[str] = None
    stock_exchange: Optional[str] = None
    security_type: Optional[str] = None
    country: Optional[str] = None

    website: Optional[str] = None
    image_url: Optional[str] = None
    main_service: Optional[str] = None
    business_line: Optional[str] = None
    business_strategy: Optional[str] = None
    business_risk: Optional[str] = None
    business_overall: Optional[str] = None
    detail_info: Optional[str] = None

    market_cap: Optional[float] = None
    outstanding_shares_value: Optional[float] = None
    price_close: Optional[float] = None
    price_open: Optional[float] = None
    price_high: Optional[float] = None
    price_low: Optional[float] = None
    price_floor: Optional[float] = None
    price_ceiling: Optional[float] = None
    price_reference: Optional[float] = None
    net_change: Optional[float] = None
    pct_change: Optional[float] = None
    volume: Optional[float] = None
    volume_10d_avg: Optional[float] = None
    price_timestamp: Optional[datetime] = None
    price_type: Optional[int] = None

    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    eps_ratio: Optional[float] = None
    book_value: Optional[float] = None
    roe: Optional[float] = None
    roa: Optional[float] = None
    free_float_rate: Optional[float] = None
    beta_5y: Optional[float] = None
    dividend_yield_current: Optional[float] = None
    revenue_5y_growth: Optional[float] = None
    net_income_5y_growth: Optional[float] = None
    revenue_ltm_growth: Optional[float] = None
    net_income_ltm_growth: Optional[float] = None
    revenue_growth_qoq: Optional[float] = None
    net_income_growth_qoq: Optional[float] = None
    price_pct_chg_7d: Optional[float] = None
    price_pct_chg_30d: Optional[float] = None
    price_pct_chg_ytd: Optional[float] = None
    price_pct_chg_1y: Optional[float] = None
    price_pct_chg_3y: Optional[float] = None
    price_pct_chg_5y: Optional[float] = None

    valuation_point: Optional[int] = None
    growth_point: Optional[int] = None
    pass_performance_point: Optional[int] = None
    financial_health_point: Optional[int] = None
    dividend_point: Optional[int] = None
    company_quality: Optional[int] = None
    overall_risk_level: Optional[str] = None
    quality_valuation: Optional[str] = None
    ta_signal_1d: Optional[str] = None
    watchlist_count: Optional[int] = None
    analysis_updated: Optional[date] = None

    @field_validator("ticker")
    @classmethod
    def uppercase_ticker(cls, v: str) -> str:
        v = v.upper().strip()
        if not v:
            raise ValueError("ticker must not be blank")
        return v

    @field_validator("*", mode="after")
    @classmethod
    def reject_non_finite(cls, v: Any) -> Any:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("numeric fields must be finite")
        return v
