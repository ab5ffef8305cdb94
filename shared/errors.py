"""
Shared error handling for the portfolio cache layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class CacheLayerException(Exception):
    """Base exception for the cache layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class CacheConnectionError(CacheLayerException):
    """The store is unreachable or rejected an operation.

    Raised by every primary data-path operation and left for the caller to
    retry or not.
    """

    def __init__(
        self,
        message: str = "Cache store unavailable",
        details: Optional[Dict[str, Any]] = None,
        code: str = "CACHE_CONNECTION_ERROR"
    ):
        super().__init__(code, message, details)


class CacheIterationError(CacheLayerException):
    """A key scan failed part way through.

    Never raised to callers: it is recorded on the scan result instead.
    """

    def __init__(self, message: str = "Key scan interrupted", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_ITERATION_ERROR", message, details)


class HealthCheckError(CacheLayerException):
    """Health check failed (mismatch, timeout or store error)."""

    def __init__(self, message: str = "Health check failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("HEALTH_CHECK_ERROR", message, details)
