"""
Standard API Response Models

Every successful endpoint answers ``{"success": true, "data": ..., "message": ...}``;
errors answer with ``APIError``.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T
    message: Optional[str] = None


class APIError(BaseModel):
    """Error body for failed requests."""

    success: bool = False
    error: str = Field(..., description="Error code (e.g. resource_not_found)")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "resource_not_found",
                "message": "Resource not found: company/XYZ",
                "details": {"resource": "company", "identifier": "XYZ"},
                "timestamp": "2024-03-05T09:30:00Z",
            }
        }
    }
