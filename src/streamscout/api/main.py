"""
FastAPI application for the streamscout metadata proxy.

Serves ``/api/youtube/...`` for browser clients of the viewer site. All
routes share one metadata cache (see :mod:`streamscout.api.deps`).
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from streamscout import __version__
from streamscout.api.deps import get_metadata_cache
from streamscout.api.exception_handlers import register_exception_handlers
from streamscout.api.routers import live
from streamscout.config.settings import settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/youtube"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log proxy start and stop, with the cache size at shutdown."""
    logger.info(
        "Metadata proxy %s starting (cache TTL %.0fs, batch delay %.2fs)",
        __version__,
        settings.cache_ttl_seconds,
        settings.batch_delay_seconds,
    )
    yield
    logger.info(
        "Metadata proxy stopping with %d cached entries", len(get_metadata_cache())
    )


app = FastAPI(
    title="streamscout metadata API",
    description="Live status, concurrent viewers, and stream metadata for YouTube channels",
    version=__version__,
    lifespan=lifespan,
)


def _client_address(request: Request) -> str:
    """Client address, preferring the first ``X-Forwarded-For`` hop."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",", 1)[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else "unknown"


def _level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


@app.middleware("http")
async def log_requests(request: Request, call_next: RequestResponseEndpoint) -> Response:
    """
    Log one line per request with status, timing, and client address.

    Upstream failures (502) are logged at ERROR, rejected identifiers (400)
    at WARNING.
    """
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.log(
        _level_for_status(response.status_code),
        "%s %s -> %d in %.1fms (client %s)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        _client_address(request),
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api_cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(live.router, prefix=API_PREFIX, tags=["youtube"])
