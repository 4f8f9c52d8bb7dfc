"""
Simplize provider - company summaries scraped from simplize.vn.
"""

from iqx.providers.simplize.client import SimplizeClient
from iqx.providers.simplize.schemas import CompanyRecord, RawCompanySummary
from iqx.providers.simplize.transformer import parse_simplize_datetime, transform_summary

__all__ = [
    "SimplizeClient",
    "CompanyRecord",
    "RawCompanySummary",
    "parse_simplize_datetime",
    "transform_summary",
]
