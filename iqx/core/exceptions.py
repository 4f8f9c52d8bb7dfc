"""
Custom exceptions for IQX.

Provides a hierarchy of exceptions for error handling across
the Simplize provider, the sync pipeline, the store and the API.
"""

from typing import Any, Optional


class IQXException(Exception):
    """Base exception for all IQX errors."""

    def __init__(
        self,
        message: str,
        code: str = "IQX_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# Provider Errors
class ProviderError(IQXException):
    """Base exception for data provider failures. Retryable by the fetcher."""

    def __init__(
        self,
        message: str,
        provider: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="PROVIDER_ERROR",
            details={"provider": provider, **(details or {})},
        )
        self.provider = provider


class ProviderTimeoutError(ProviderError):
    """Provider request timed out."""

    def __init__(self, provider: str, timeout: float):
        super().__init__(
            message=f"Provider {provider} timed out after {timeout}s",
            provider=provider,
            details={"timeout": timeout},
        )
        self.code = "PROVIDER_TIMEOUT"


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, url: str):
        super().__init__(
            message=f"Provider {provider} returned HTTP {status_code}",
            provider=provider,
            details={"status_code": status_code, "url": url},
        )
        self.code = "PROVIDER_HTTP_ERROR"
        self.status_code = status_code


class EmptyPayloadError(ProviderError):
    """Provider answered but carried no usable record."""

    def __init__(self, provider: str, ticker: str):
        super().__init__(
            message=f"No data returned for {ticker}",
            provider=provider,
            details={"ticker": ticker},
        )
        self.code = "EMPTY_RESPONSE"


# Data Errors
class DataValidationError(IQXException):
    """Data failed validation checks."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            code="DATA_VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


class UniverseLoadError(IQXException):
    """Ticker universe file is missing or malformed. Fatal for a sync run."""

    def __init__(self, message: str, path: str):
        super().__init__(
            message=message,
            code="UNIVERSE_LOAD_ERROR",
            details={"path": path},
        )
        self.path = path


# Database Errors
class DatabaseError(IQXException):
    """Database operation failed."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(
            message=message,
            code="DATABASE_ERROR",
            details={"operation": operation} if operation else {},
        )
        self.operation = operation


# API Errors
class InvalidParameterError(IQXException):
    """Invalid API parameter provided."""

    def __init__(self, parameter: str, reason: str):
        super().__init__(
            message=f"Invalid parameter '{parameter}': {reason}",
            code="INVALID_PARAMETER",
            details={"parameter": parameter, "reason": reason},
        )


class ResourceNotFoundError(IQXException):
    """API resource not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"Resource not found: {resource}/{identifier}",
            code="RESOURCE_NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )
