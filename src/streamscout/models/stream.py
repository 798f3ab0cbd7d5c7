"""
Pydantic models for live stream metadata.

These models carry the results of live resolution and viewer extraction
between the scraper, the cache layer, the metadata proxy API, and the CLI.
All models serialize with camelCase aliases so the proxy API and the
metadata API client share one wire shape.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from streamscout.models.youtube_types import ChannelId, VideoId


class BaseStreamModel(BaseModel):
    """
    Base model for all stream metadata models.

    Configures:
    - populate_by_name: Allow both camelCase (wire) and snake_case (Python)
    - alias_generator: Auto-convert snake_case fields to camelCase
    - extra='ignore': Ignore unexpected fields from upstream responses
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, as sent over HTTP and printed by the CLI."""
        return self.model_dump(mode="json", by_alias=True)


class Thumbnail(BaseStreamModel):
    """A single thumbnail rendition of a video."""

    url: str = Field(default="", description="Thumbnail URL")
    width: int = Field(default=0, description="Thumbnail width in pixels")
    height: int = Field(default=0, description="Thumbnail height in pixels")

    @property
    def area(self) -> int:
        """Pixel area, used to rank renditions."""
        return self.width * self.height


class StreamMetadata(BaseStreamModel):
    """
    Metadata for a video, produced by a fetch and parse cycle.

    When ``is_live_now`` is True the concurrent viewer lookup has been
    attempted; ``concurrent_viewers`` may still be None when extraction
    found nothing, which means "unknown", not zero.

    Attributes
    ----------
    method : str
        Pipeline that produced the record: ``"scrape"`` or ``"api"``.
    video_id : str
        Video ID. For channel lookups this is the live video ID, or the
        channel ID itself when the channel is not live.
    channel_id : str | None
        Channel ID, when the record came from a channel lookup.
    thumbnails : list[Thumbnail]
        Thumbnail renditions in page order, without duplicate URLs.
    live_duration_seconds : int | None
        Seconds since ``actual_start_time``, when known.
    """

    method: str = "scrape"
    video_id: str
    channel_id: Optional[str] = None
    title: str = ""
    channel_name: str = ""
    is_live_now: bool = False
    concurrent_viewers: Optional[int] = None
    viewer_count_type: str = "unknown"
    thumbnails: list[Thumbnail] = Field(default_factory=list)
    description: str = ""
    actual_start_time: Optional[str] = None
    is_live_content: bool = False
    live_duration: str = ""
    live_duration_seconds: Optional[int] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("thumbnails")
    @classmethod
    def dedupe_thumbnails(cls, v: list[Thumbnail]) -> list[Thumbnail]:
        """Keep the first occurrence of each thumbnail URL."""
        seen: set[str] = set()
        unique: list[Thumbnail] = []
        for thumb in v:
            if thumb.url in seen:
                continue
            seen.add(thumb.url)
            unique.append(thumb)
        return unique

    @field_validator("concurrent_viewers")
    @classmethod
    def validate_viewers(cls, v: Optional[int]) -> Optional[int]:
        """Viewer counts are never negative."""
        if v is not None and v < 0:
            raise ValueError(f"concurrent_viewers must be >= 0, got {v}")
        return v


class MetadataResponse(BaseStreamModel):
    """
    Envelope returned by the metadata API for video and channel lookups.

    This is the unit stored in cache entries.
    """

    success: bool = True
    data: StreamMetadata
    cached: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ResolutionResult(BaseStreamModel):
    """Outcome of resolving a channel's current live video."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    channel_id: str
    video_id: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_live(self) -> bool:
        """True when a live video ID was resolved."""
        return self.video_id is not None


class ChannelViewers(BaseStreamModel):
    """Record printed by the ``viewers`` CLI command; identifiers are validated."""

    channel_id: ChannelId
    video_id: Optional[VideoId] = None
    live_viewers: Optional[int] = None
    note: Optional[str] = None

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, omitting an absent note."""
        data = self.model_dump(mode="json", by_alias=True)
        if data.get("note") is None:
            data.pop("note", None)
        return data


class BatchChannelStatus(BaseStreamModel):
    """Per-channel outcome in a batch lookup."""

    status: Literal["live", "not_live", "error"]
    data: Optional[StreamMetadata] = None
    error: Optional[str] = None


class BatchChannelsRequest(BaseStreamModel):
    """Request body for the batch channel endpoint."""

    channel_ids: list[str] = Field(default_factory=list)


class BatchChannelsResponse(BaseStreamModel):
    """Response body for the batch channel endpoint."""

    results: dict[str, BatchChannelStatus] = Field(default_factory=dict)


class StreamCard(BaseStreamModel):
    """Presentation record for one live stream in the viewer site listing."""

    id: str
    title: str
    channel_name: str
    channel_id: Optional[str] = None
    viewers: int = 0
    thumbnail: str
    category: str
    is_live: bool
    duration: str
    tags: list[str] = Field(default_factory=list)
    video_id: str
    actual_start_time: Optional[str] = None
    description: str = ""
    is_featured: bool = False
