"""
Exception handlers that turn every failure into the ErrorResponse envelope.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pointart_api.core.errors import PointArtError
from pointart_api.schemas.common import ErrorInfo, ErrorResponse

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Envelope carrying the request's correlation id, path and method."""
    body = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    plain = isinstance(exc.detail, str)
    response = error_response(
        request,
        exc.status_code,
        "http_error",
        exc.detail if plain else "HTTP Error",
        None if plain else jsonable_encoder(exc.detail),
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _on_domain_error(request: Request, exc: PointArtError) -> JSONResponse:
    details = exc.details
    if exc.retryable:
        details = {**details, "retryable": True} if isinstance(details, dict) else {"retryable": True}
    if exc.status_code >= 500:
        logger.warning("Request failed with %s: %s", exc.error_type, exc.message)
    return error_response(request, exc.status_code, exc.error_type, exc.message, details)


async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        request, 422, "validation_error", "Request validation failed", jsonable_encoder(exc.errors())
    )


async def _on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Stack traces stay in the log.
    logger.exception("Unhandled error processing request")
    return error_response(request, 500, "internal_error", "An unexpected error occurred")


# PUBLIC_INTERFACE
def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope handlers for HTTP, domain, validation and unexpected errors."""
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(PointArtError, _on_domain_error)
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(Exception, _on_unexpected_error)
