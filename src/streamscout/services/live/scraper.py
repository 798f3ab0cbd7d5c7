"""
Direct-scrape live stream engine.

Combines live resolution, viewer extraction, and page metadata parsing
into the lookups used by the metadata proxy API and the CLI. This path
talks to YouTube's public pages directly and is used when the metadata API
is unavailable.
"""

from __future__ import annotations

import logging
from typing import Optional

from streamscout.config.settings import Settings, get_settings
from streamscout.exceptions import InvalidIdentifierError
from streamscout.models.stream import ChannelViewers, StreamMetadata
from streamscout.models.youtube_types import is_channel_id, is_video_id
from streamscout.services.live.extractor import is_live_now_indicated
from streamscout.services.live.fetcher import FetchedPage, PageFetcher
from streamscout.services.live.page_metadata import build_stream_metadata
from streamscout.services.live.resolver import LiveResolver
from streamscout.services.live.viewers import ViewerCountAggregator

logger = logging.getLogger(__name__)


class LiveStreamScraper:
    """
    Scrapes live status, viewers, and metadata from YouTube pages.

    Parameters
    ----------
    settings : Settings | None, optional
        Application settings; loaded from the environment when omitted.
    fetcher : PageFetcher | None, optional
        Page fetcher; built from ``settings`` when omitted.

    Examples
    --------
    >>> scraper = LiveStreamScraper()
    >>> result = await scraper.get_concurrent_viewers_from_channel("UC...")
    >>> result.live_viewers
    1234
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[PageFetcher] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.fetcher = fetcher or PageFetcher(self._settings)
        self.resolver = LiveResolver(self.fetcher)
        self.viewers = ViewerCountAggregator(
            self.fetcher, max_depth=self._settings.max_traversal_depth
        )

    @staticmethod
    def _check_channel_id(channel_id: str) -> None:
        if not is_channel_id(channel_id):
            raise InvalidIdentifierError(channel_id, kind="channel")

    @staticmethod
    def _check_video_id(video_id: str) -> None:
        if not is_video_id(video_id):
            raise InvalidIdentifierError(video_id, kind="video")

    async def _live_watch_page(
        self, channel_id: str
    ) -> tuple[Optional[str], Optional[FetchedPage]]:
        self._check_channel_id(channel_id)
        resolution, page = await self.resolver.resolve_with_page(channel_id)
        video_id = resolution.video_id
        if video_id is None:
            return None, None
        if page is None:
            page = await self.fetcher.fetch(self.fetcher.watch_url(video_id))
        return video_id, page

    async def get_concurrent_viewers_from_channel(self, channel_id: str) -> ChannelViewers:
        """
        Resolve a channel's live video and its concurrent viewer count.

        Raises
        ------
        InvalidIdentifierError
            If ``channel_id`` is malformed or rejected upstream.
        UpstreamError
            If the channel page or the live watch page cannot be fetched.
        """
        video_id, page = await self._live_watch_page(channel_id)
        if video_id is None:
            return ChannelViewers(
                channel_id=channel_id,
                video_id=None,
                live_viewers=None,
                note="Channel is not live",
            )

        live_viewers = await self.viewers.get_concurrent_viewers(video_id, page=page)
        return ChannelViewers(
            channel_id=channel_id, video_id=video_id, live_viewers=live_viewers
        )

    async def resolve_live_channel(self, channel_id: str) -> StreamMetadata:
        """
        Return full stream metadata for a channel's live broadcast.

        When the channel is not live the record has ``is_live_now=False``
        and ``video_id`` set to the channel ID.
        """
        video_id, page = await self._live_watch_page(channel_id)
        if video_id is None or page is None:
            logger.debug("Channel %s is not live", channel_id)
            return StreamMetadata(
                method="scrape",
                video_id=channel_id,
                channel_id=channel_id,
                is_live_now=False,
            )

        viewers = await self.viewers.get_concurrent_viewers(video_id, page=page)
        return build_stream_metadata(
            page.text,
            video_id,
            is_live_now=True,
            concurrent_viewers=viewers,
            channel_id=channel_id,
        )

    async def get_concurrent_viewers(self, video_id: str) -> Optional[int]:
        """Return the concurrent viewer count of a live video, or None."""
        self._check_video_id(video_id)
        return await self.viewers.get_concurrent_viewers(video_id)

    async def get_video_metadata(self, video_id: str) -> StreamMetadata:
        """
        Return stream metadata for a single video.

        Live status comes from the watch page's live indicators; the viewer
        lookup is attempted only when the video is live.
        """
        self._check_video_id(video_id)
        page = await self.fetcher.fetch(self.fetcher.watch_url(video_id))
        is_live = is_live_now_indicated(page.text)
        viewers = await self.viewers.get_concurrent_viewers(video_id, page=page) if is_live else None
        return build_stream_metadata(
            page.text,
            video_id,
            is_live_now=is_live,
            concurrent_viewers=viewers,
        )
