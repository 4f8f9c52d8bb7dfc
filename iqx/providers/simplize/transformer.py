"""
Simplize Summary Transformer

Maps a raw ``pageProps.summary`` payload onto the normalized
``CompanyRecord``. Malformed numbers and dates are dropped rather than
failing the whole record; only a missing ticker is an error.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from iqx.core.exceptions import DataValidationError
from iqx.providers.simplize.schemas import CompanyRecord, RawCompanySummary

logger = logging.getLogger(__name__)


# Raw attribute -> CompanyRecord field, grouped by coercion
TEXT_FIELDS = {
    "name_en": "name_en",
    "industry_activity": "industry_activity",
    "bc_industry_group_slug": "bc_industry_group_slug",
    "bc_industry_group_code": "bc_industry_group_code",
    "bc_industry_group_type": "bc_industry_group_type",
    "bc_economic_sector_slug": "bc_economic_sector_slug",
    "bc_economic_sector_name": "bc_economic_sector_name",
    "stock_exchange": "stock_exchange",
    "type": "security_type",
    "country": "country",
    "website": "website",
    "image_url": "image_url",
    "main_service": "main_service",
    "business_line": "business_line",
    "business_strategy": "business_strategy",
    "business_risk": "business_risk",
    "business_overall": "business_overall",
    "detail_info": "detail_info",
    "overall_risk_level": "overall_risk_level",
    "quality_valuation": "quality_valuation",
    "ta_signal_1d": "ta_signal_1d",
}

FLOAT_FIELDS = {
    "market_cap": "market_cap",
    "outstanding_shares_value": "outstanding_shares_value",
    "price_close": "price_close",
    "price_open": "price_open",
    "price_high": "price_high",
    "price_low": "price_low",
    "price_floor": "price_floor",
    "price_ceiling": "price_ceiling",
    "price_referrance": "price_reference",
    "net_change": "net_change",
    "pct_change": "pct_change",
    "volume": "volume",
    "volume_10d_avg": "volume_10d_avg",
    "pe_ratio": "pe_ratio",
    "pb_ratio": "pb_ratio",
    "eps_ratio": "eps_ratio",
    "book_value": "book_value",
    "roe": "roe",
    "roa": "roa",
    "free_float_rate": "free_float_rate",
    "beta_5y": "beta_5y",
    "dividend_yield_current": "dividend_yield_current",
    "revenue_5y_growth": "revenue_5y_growth",
    "net_income_5y_growth": "net_income_5y_growth",
    "revenue_ltm_growth": "revenue_ltm_growth",
    "net_income_ltm_growth": "net_income_ltm_growth",
    "revenue_growth_qoq": "revenue_growth_qoq",
    "net_income_growth_qoq": "net_income_growth_qoq",
    "price_pct_chg_7d": "price_pct_chg_7d",
    "price_pct_chg_30d": "price_pct_chg_30d",
    "price_pct_chg_ytd": "price_pct_chg_ytd",
    "price_pct_chg_1y": "price_pct_chg_1y",
    "price_pct_chg_3y": "price_pct_chg_3y",
    "price_pct_chg_5y": "price_pct_chg_5y",
}

INT_FIELDS = {
    "bc_industry_group_id": "bc_industry_group_id",
    "bc_economic_sector_id": "bc_economic_sector_id",
    "price_type": "price_type",
    "valuation_point": "valuation_point",
    "growth_point": "growth_point",
    "pass_performance_point": "pass_performance_point",
    "financial_health_point": "financial_health_point",
    "dividend_point": "dividend_point",
    "company_quality": "company_quality",
    "watchlist_count": "watchlist_count",
}


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    candidate = value if isinstance(value, (int, float)) else str(value).strip().replace(",", "")
    if candidate == "":
        return None
    try:
        number = float(candidate)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return round(number) if number is not None else None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def parse_simplize_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a Simplize date value.

    Accepts ``DD/MM/YYYY`` and ``DD/MM/YYYY HH:mm:ss`` (date-only values
    yield midnight) and falls back to ISO 8601 for anything else.
    Timezone-aware results are converted to naive UTC.

    Raises:
        ValueError: If the value matches neither layout.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if "/" in text:
            date_part, _, time_part = text.partition(" ")
            day, month, year = (int(p) for p in date_part.split("/"))
            clock = [int(p) for p in time_part.strip().split(":")] if time_part.strip() else []
            if len(clock) > 3:
                raise ValueError(f"Unexpected time component in {text!r}")
            hour, minute, second = (clock + [0, 0, 0])[:3]
            return datetime(year, month, day, hour, minute, second)
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_date_field(value: Any, field: str, ticker: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return parse_simplize_datetime(value)
    except (ValueError, TypeError, OverflowError):
        logger.warning(f"Failed to parse {field} for {ticker}: {value!r}")
        return None


def transform_summary(
    raw: Union[RawCompanySummary, Mapping[str, Any]],
) -> CompanyRecord:
    """
    Normalize one Simplize company summary.

    Args:
        raw: ``RawCompanySummary`` or the plain ``summary`` dict

    Returns:
        CompanyRecord ready for upsert

    Raises:
        DataValidationError: If the summary has no ticker
    """
    if not isinstance(raw, RawCompanySummary):
        raw = RawCompanySummary.model_validate(raw)

    ticker = _to_text(raw.ticker)
    ticker = ticker.strip().upper() if ticker else ""
    if not ticker:
        raise DataValidationError("Company summary has no ticker", field="ticker")

    values: dict[str, Any] = {"ticker": ticker}
    values["name_vi"] = _to_text(raw.name_vi if raw.name_vi is not None else raw.name)

    for source, target in TEXT_FIELDS.items():
        values[target] = _to_text(getattr(raw, source))
    for source, target in FLOAT_FIELDS.items():
        values[target] = _to_float(getattr(raw, source))
    for source, target in INT_FIELDS.items():
        values[target] = _to_int(getattr(raw, source))

    values["price_timestamp"] = _parse_date_field(
        raw.price_time_stamp, "priceTimeStamp", ticker
    )
    analysis_updated = _parse_date_field(raw.analysis_updated, "analysisUpdated", ticker)
    values["analysis_updated"] = analysis_updated.date() if analysis_updated else None

    try:
        return CompanyRecord(**values)
    except ValidationError as e:
        raise DataValidationError(f"Invalid company summary for {ticker}: {e}") from e
