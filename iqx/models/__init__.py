"""
Models module - SQLAlchemy ORM models for the IQX database.
"""

from iqx.models.company import Company

__all__ = [
    "Company",
]
