"""Metadata proxy endpoints for videos, channels, and channel batches."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path

from streamscout import __version__
from streamscout.api.deps import get_batch_orchestrator, get_metadata_cache, get_metadata_service
from streamscout.api.schemas.responses import ErrorResponse, HealthStatus
from streamscout.models.stream import (
    BatchChannelsRequest,
    BatchChannelsResponse,
    MetadataResponse,
)
from streamscout.services.batch import BatchOrchestrator
from streamscout.services.cache import CachedMetadataService, MetadataCache

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Invalid channel or video ID"},
    502: {"model": ErrorResponse, "description": "YouTube unavailable"},
}


@router.get(
    "/video/{video_id}",
    response_model=MetadataResponse,
    responses=_ERROR_RESPONSES,
)
async def get_video(
    video_id: str = Path(..., description="YouTube video ID (11 characters)"),
    service: CachedMetadataService = Depends(get_metadata_service),
) -> MetadataResponse:
    """
    Get live status and metadata for a single video.

    Served from cache when a fresh entry exists; ``cached`` is true in that
    case.
    """
    return await service.get_video_metadata(video_id)


@router.get(
    "/channel/{channel_id}",
    response_model=MetadataResponse,
    responses=_ERROR_RESPONSES,
)
async def get_channel(
    channel_id: str = Path(..., description="YouTube channel ID (UC + 22 characters)"),
    service: CachedMetadataService = Depends(get_metadata_service),
) -> MetadataResponse:
    """
    Get the current live broadcast of a channel.

    A channel that is not live answers 200 with ``isLiveNow`` false and
    ``videoId`` set to the channel ID.
    """
    return await service.get_channel_metadata(channel_id)


@router.post("/channels/batch", response_model=BatchChannelsResponse)
async def batch_channels(
    request: BatchChannelsRequest,
    orchestrator: BatchOrchestrator = Depends(get_batch_orchestrator),
) -> BatchChannelsResponse:
    """
    Check several channels, one after another.

    Every requested ID gets an entry in ``results``. Failures are reported
    per channel with status ``error`` instead of failing the request.
    """
    logger.info("Batch request for %d channels", len(request.channel_ids))
    results = await orchestrator.channel_statuses(request.channel_ids)
    return BatchChannelsResponse(results=results)


@router.get("/health", response_model=HealthStatus)
async def health_check(
    cache: MetadataCache = Depends(get_metadata_cache),
) -> HealthStatus:
    """Health check endpoint; does not contact YouTube."""
    return HealthStatus(
        status="ok",
        version=__version__,
        cache_entries=len(cache),
        pending_requests=len(cache.pending),
        timestamp=datetime.now(timezone.utc),
    )
