"""
Company ORM Model

One wide row per listed ticker holding the latest Simplize company summary:
identity and classification, point-in-time prices, valuation ratios and
Simplize's derived scores.
"""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import Date, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from iqx.core.database import Base


class Company(Base):
    """
    Latest known snapshot of a company, keyed by ticker.

    Rows are written only by the sync pipeline's upsert and never deleted.
    """
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticker: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    # Identity & classification
    name_vi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    name_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    industry_activity: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bc_industry_group_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bc_industry_group_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bc_industry_group_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    bc_industry_group_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    bc_economic_sector_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bc_economic_sector_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bc_economic_sector_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    stock_exchange: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    security_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    # Description
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    main_service: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_line: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_strategy: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_risk: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_overall: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    detail_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Market data
    market_cap: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    outstanding_shares_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_close: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_open: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_high: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_low: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_floor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_ceiling: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_reference: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_change: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pct_change: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    volume: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    volume_10d_avg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    price_type: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Valuation & fundamentals
    pe_ratio: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pb_ratio: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    eps_ratio: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    book_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    roe: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    roa: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    free_float_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    beta_5y: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    dividend_yield_current: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    revenue_5y_growth: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_income_5y_growth: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    revenue_ltm_growth: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_income_ltm_growth: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    revenue_growth_qoq: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_income_growth_qoq: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_7d: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_30d: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_ytd: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_1y: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_3y: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    price_pct_chg_5y: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Simplize scores
    valuation_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    growth_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    pass_performance_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    financial_health_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    dividend_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    company_quality: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    overall_risk_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    quality_valuation: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    ta_signal_1d: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    watchlist_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    analysis_updated: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Timestamps (set explicitly by the upsert)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_companies_ticker", "ticker"),
        Index("idx_companies_industry", "bc_industry_group_slug"),
        Index("idx_companies_sector", "bc_economic_sector_slug"),
        Index("idx_companies_exchange", "stock_exchange"),
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary for API responses."""
        data: dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            data[column.key] = value
        return data

    def __repr__(self) -> str:
        return f"<Company(ticker='{self.ticker}', name='{self.name_vi}')>"
