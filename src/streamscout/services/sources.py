"""
Metadata sources behind the cache layer.

A source answers single video and channel lookups with a
:class:`MetadataResponse`. The metadata API client is the production
source; the scraper is wrapped as a source for standalone use and as the
fallback when the API cannot be reached.
"""

from __future__ import annotations

import logging
from typing import Protocol

from streamscout.exceptions import UpstreamError
from streamscout.models.stream import MetadataResponse
from streamscout.services.live.scraper import LiveStreamScraper

logger = logging.getLogger(__name__)


class MetadataSource(Protocol):
    """Anything that can look up video and channel metadata."""

    async def fetch_video(self, video_id: str) -> MetadataResponse:
        ...

    async def fetch_channel(self, channel_id: str) -> MetadataResponse:
        ...


class ScrapeMetadataSource:
    """Adapts :class:`LiveStreamScraper` to the :class:`MetadataSource` protocol."""

    def __init__(self, scraper: LiveStreamScraper) -> None:
        self._scraper = scraper

    async def fetch_video(self, video_id: str) -> MetadataResponse:
        return MetadataResponse(data=await self._scraper.get_video_metadata(video_id))

    async def fetch_channel(self, channel_id: str) -> MetadataResponse:
        return MetadataResponse(data=await self._scraper.resolve_live_channel(channel_id))


def _proxy_unavailable(error: UpstreamError) -> bool:
    # Transport failures and 5xx answers; 4xx answers are the API's verdict.
    return error.status_code is None or error.status_code >= 500


class FallbackMetadataSource:
    """
    Uses ``primary`` and falls back to ``fallback`` when it is unavailable.

    Identifier rejections from the primary are never retried against the
    fallback.
    """

    def __init__(self, primary: MetadataSource, fallback: MetadataSource) -> None:
        self._primary = primary
        self._fallback = fallback

    async def fetch_video(self, video_id: str) -> MetadataResponse:
        try:
            return await self._primary.fetch_video(video_id)
        except UpstreamError as e:
            if not _proxy_unavailable(e):
                raise
            logger.warning("Metadata API unavailable (%s), scraping video %s", e.message, video_id)
            return await self._fallback.fetch_video(video_id)

    async def fetch_channel(self, channel_id: str) -> MetadataResponse:
        try:
            return await self._primary.fetch_channel(channel_id)
        except UpstreamError as e:
            if not _proxy_unavailable(e):
                raise
            logger.warning(
                "Metadata API unavailable (%s), scraping channel %s", e.message, channel_id
            )
            return await self._fallback.fetch_channel(channel_id)
