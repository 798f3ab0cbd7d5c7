"""API response envelope schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from streamscout.models.stream import BaseStreamModel


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error envelopes.

    4xx Client Errors:
        INVALID_IDENTIFIER: Malformed or rejected channel/video ID (400)
        VALIDATION_ERROR: Request body validation failed (422)

    5xx Server Errors:
        INTERNAL_ERROR: Unexpected server error (500)
        UPSTREAM_ERROR: YouTube could not be reached or answered an error (502)
    """

    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


class ApiError(BaseModel):
    """Standard error body."""

    model_config = ConfigDict(strict=True)

    code: str  # Machine-readable error code (e.g., INVALID_IDENTIFIER)
    message: str  # Human-readable message
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error: ApiError


class HealthStatus(BaseStreamModel):
    """Proxy health status."""

    status: str  # "ok"
    version: str
    cache_entries: int
    pending_requests: int
    timestamp: datetime
