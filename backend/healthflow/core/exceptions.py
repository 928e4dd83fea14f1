"""
Custom exception classes for the application.

Domain errors raised by the pathway engine, plus standardized HTTP
exceptions for the API layer.
"""

from fastapi import HTTPException, status


# ============================================
# Domain errors
# ============================================

class PathwayError(Exception):
    """Base class for pathway resolution errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LocationNotFound(PathwayError):
    """Raised when a country or state is unknown to the reference catalog."""
    pass


class ProcedureNotFound(PathwayError):
    """Raised when no tier of the fallback chain can resolve a procedure."""
    pass


class StoreFailure(PathwayError):
    """Raised when a relational store query or write fails."""
    pass


class MalformedCatalogError(PathwayError):
    """Raised when the reference document does not parse into the expected hierarchy."""
    pass


# ============================================
# HTTP errors
# ============================================

class NotFoundException(HTTPException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class ServiceUnavailableException(HTTPException):
    """Exception raised when a backing service is not configured."""

    def __init__(self, detail: str = "Service unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )
