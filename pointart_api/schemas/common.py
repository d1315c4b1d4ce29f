from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class IDModel(BaseModel):
    # Row ids are UUIDs in PostgreSQL and generated strings in the mock store.
    id: str


class Timestamps(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorInfo(BaseModel):
    type: str
    message: str
    details: Optional[Any] = None


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """
    Body of every non-2xx response.

    `error.type` is a stable code (e.g. "not_found", "validation_error");
    `correlation_id` matches the X-Correlation-ID response header.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": 404,
                "error": {"type": "not_found", "message": "Invoice not found", "details": None},
                "correlation_id": "5b0c3d52-3f0e-4a4e-9a53-0f1f2d8c6f11",
                "path": "/api/v1/invoices/unknown",
                "method": "GET",
                "timestamp": "2024-05-01T09:30:00Z",
            }
        }
    )

    status: int
    error: ErrorInfo
    correlation_id: Optional[str] = None
    path: Optional[str] = None
    method: Optional[str] = None
    timestamp: datetime
