"""
Domain exceptions raised below the HTTP layer.

Routers let these propagate; the handlers registered in pointart_api.api.main
turn each one into the standard error envelope with the status code declared
on the class.
"""

from __future__ import annotations

from typing import Any, Optional


class PointArtError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    error_type: str = "internal_error"
    retryable: bool = False

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(PointArtError):
    status_code = 404
    error_type = "not_found"


class ValidationFailed(PointArtError):
    """Business-rule validation failure (e.g. insufficient stock)."""

    status_code = 422
    error_type = "validation_error"


class ConflictError(PointArtError):
    status_code = 409
    error_type = "conflict"


class DataAccessError(PointArtError):
    """The data backend could not be reached or timed out after all retries."""

    status_code = 503
    error_type = "data_unavailable"
    retryable = True


class DataAuthError(PointArtError):
    """The data backend refused the operation; never retried."""

    status_code = 403
    error_type = "data_forbidden"


class DataQueryError(PointArtError):
    """The backend rejected a statement for a reason retrying cannot fix."""

    status_code = 500
    error_type = "data_error"


# PUBLIC_INTERFACE
def is_auth_error(exc: BaseException) -> bool:
    """
    Return True for authentication/authorization failures.

    Covers DataAuthError and any exception exposing an HTTP-like status of
    401 or 403 (HTTPException.status_code, or a `status` attribute).
    """
    if isinstance(exc, DataAuthError):
        return True
    for attr in ("status_code", "status"):
        if getattr(exc, attr, None) in (401, 403):
            return True
    return False


# PUBLIC_INTERFACE
def is_transient(exc: BaseException) -> bool:
    """
    Return True when another attempt may succeed.

    Domain errors say so through `retryable` (only DataAccessError does) and
    authorization failures never are. Any other exception, such as a dropped
    connection or a timeout, counts as transient.
    """
    if is_auth_error(exc):
        return False
    if isinstance(exc, PointArtError):
        return exc.retryable
    return True


class AuthenticationFailed(PointArtError):
    """Bad credentials, or a token or session that is no longer valid."""

    status_code = 401
    error_type = "unauthorized"


class PermissionDenied(PointArtError):
    status_code = 403
    error_type = "forbidden"
