"""Centralized exception handlers for the metadata proxy API.

Domain exceptions are converted to the JSON error envelope
(:class:`ErrorResponse`) so every endpoint fails the same way:

- :class:`InvalidIdentifierError` -> 400
- :class:`UpstreamError` -> 502
- request validation failures -> 422
- anything else -> 500
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from streamscout.api.schemas.responses import ApiError, ErrorCode, ErrorResponse
from streamscout.exceptions import InvalidIdentifierError, UpstreamError

logger = logging.getLogger(__name__)


def _error_response(
    code: ErrorCode,
    status: int,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ApiError(code=code.value, message=message, details=details))
    return JSONResponse(content=body.model_dump(mode="json"), status_code=status)


async def invalid_identifier_handler(
    request: Request, exc: InvalidIdentifierError
) -> JSONResponse:
    """Handle InvalidIdentifierError with a 400 response.

    Parameters
    ----------
    request : Request
        The incoming FastAPI request.
    exc : InvalidIdentifierError
        The rejected identifier error.

    Returns
    -------
    JSONResponse
        Error envelope naming the rejected identifier.
    """
    return _error_response(
        ErrorCode.INVALID_IDENTIFIER,
        400,
        exc.message,
        details={"identifier": exc.identifier, "kind": exc.kind},
    )


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Handle UpstreamError with a 502 response.

    The upstream URL is logged but not exposed to the client.
    """
    logger.error(
        "Upstream error on %s: %s (url=%s, status=%s)",
        request.url.path,
        exc.message,
        exc.url,
        exc.status_code,
    )
    details = {"upstreamStatus": exc.status_code} if exc.status_code is not None else None
    return _error_response(
        ErrorCode.UPSTREAM_ERROR, 502, "Upstream service unavailable", details=details
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body validation failures with a 422 response."""
    errors = [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return _error_response(
        ErrorCode.VALIDATION_ERROR,
        422,
        "Request validation failed",
        details={"errors": errors},
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic 500 response.

    Internal error details are not exposed to the client; the full stack
    trace is logged.
    """
    logger.exception("Unhandled exception: %s", exc)
    return _error_response(ErrorCode.INTERNAL_ERROR, 500, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Parameters
    ----------
    app : FastAPI
        The FastAPI application instance.

    Examples
    --------
    >>> from fastapi import FastAPI
    >>> from streamscout.api.exception_handlers import register_exception_handlers
    >>> app = FastAPI()
    >>> register_exception_handlers(app)
    """
    app.add_exception_handler(InvalidIdentifierError, invalid_identifier_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UpstreamError, upstream_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_error_handler)
