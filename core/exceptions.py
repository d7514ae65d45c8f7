"""
Shared exception taxonomy for Shopster services

Each service derives its domain errors from these so the HTTP boundary can
translate them into the common error envelope without knowing the service.
"""

from typing import Any, Optional


class ShopsterError(Exception):
    """Base class for domain errors surfaced to clients"""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ShopsterError):
    """Malformed or semantically invalid input"""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(ShopsterError):
    """Requested entity does not exist"""
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(ShopsterError):
    """Request conflicts with current state (duplicates, stale writes)"""
    status_code = 409
    error_code = "CONFLICT"


class UnauthorizedError(ShopsterError):
    """Bad credentials or token"""
    status_code = 401
    error_code = "UNAUTHORIZED"


class UpstreamUnavailableError(ShopsterError):
    """Downstream dependency timed out, failed, or its circuit is open"""
    status_code = 503
    error_code = "UPSTREAM_UNAVAILABLE"


class InternalError(ShopsterError):
    """Unexpected failure"""
    status_code = 500
    error_code = "INTERNAL_ERROR"


class ConcurrentModificationError(ConflictError):
    """Optimistic version check failed on write"""
    error_code = "CONCURRENT_MODIFICATION"


__all__ = [
    "ShopsterError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "UpstreamUnavailableError",
    "InternalError",
    "ConcurrentModificationError",
]
