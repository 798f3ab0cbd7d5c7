"""API schemas for the metadata proxy."""

from streamscout.api.schemas.responses import (
    ApiError,
    ErrorCode,
    ErrorResponse,
    HealthStatus,
)

__all__ = [
    "ApiError",
    "ErrorCode",
    "ErrorResponse",
    "HealthStatus",
]
