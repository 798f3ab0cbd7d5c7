"""
Data models for streamscout.

Pydantic models for stream metadata, batch results, and validated
YouTube identifier types.
"""

from __future__ import annotations

from streamscout.models.stream import (
    BatchChannelsRequest,
    BatchChannelsResponse,
    BatchChannelStatus,
    ChannelViewers,
    MetadataResponse,
    ResolutionResult,
    StreamCard,
    StreamMetadata,
    Thumbnail,
)
from streamscout.models.youtube_types import ChannelId, VideoId

__all__ = [
    "BatchChannelsRequest",
    "BatchChannelsResponse",
    "BatchChannelStatus",
    "ChannelId",
    "ChannelViewers",
    "MetadataResponse",
    "ResolutionResult",
    "StreamCard",
    "StreamMetadata",
    "Thumbnail",
    "VideoId",
]
