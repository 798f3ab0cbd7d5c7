"""
Live video resolution for YouTube channels.

Determines whether a channel is broadcasting right now and, if so, which
video is the live broadcast. Two strategies are used in order:

1. Request ``/channel/{id}/live`` without following redirects. A redirect
   to a watch URL is taken as authoritative and returned unverified.
2. Otherwise scan the channel page for a ``"videoId"`` literal and treat it
   only as a candidate: channel pages also surface featured, upcoming, and
   recently ended videos, so the candidate's own watch page must show a
   live-now signal before it is reported.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from streamscout.exceptions import InvalidIdentifierError, UpstreamError
from streamscout.models.stream import ResolutionResult
from streamscout.services.live.extractor import (
    find_video_id_in_html,
    live_now_indicators,
)
from streamscout.services.live.fetcher import FetchedPage, PageFetcher

logger = logging.getLogger(__name__)

NOT_LIVE_NOTE = "Channel is not live"

# Upstream statuses that mean the channel ID itself was rejected.
_INVALID_IDENTIFIER_STATUSES = frozenset({400, 404})

_LOCATION_V_PARAM_RE = re.compile(r"[?&]v=([a-zA-Z0-9_-]{11})")
_LOCATION_WATCH_RE = re.compile(r"watch\?v=([a-zA-Z0-9_-]{11})")


def video_id_from_location(location: Optional[str]) -> Optional[str]:
    """
    Extract a video ID from a redirect ``Location`` header.

    Accepts a ``v=`` query parameter or a ``/watch?v=`` path fragment.

    Examples
    --------
    >>> video_id_from_location("https://www.youtube.com/watch?v=XYZ12345678")
    'XYZ12345678'
    >>> video_id_from_location("https://www.youtube.com/channel/UC.../featured") is None
    True
    """
    if not location:
        return None
    for pattern in (_LOCATION_V_PARAM_RE, _LOCATION_WATCH_RE):
        match = pattern.search(str(location))
        if match:
            return match.group(1)
    return None


class LiveResolver:
    """
    Resolves a channel ID to its current live video ID.

    Parameters
    ----------
    fetcher : PageFetcher
        Page fetcher used for channel and watch pages.
    """

    def __init__(self, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher

    async def resolve(self, channel_id: str) -> ResolutionResult:
        """Resolve ``channel_id``; see :meth:`resolve_with_page`."""
        result, _ = await self.resolve_with_page(channel_id)
        return result

    async def resolve_with_page(
        self, channel_id: str
    ) -> tuple[ResolutionResult, Optional[FetchedPage]]:
        """
        Resolve ``channel_id`` and return the verified watch page, if fetched.

        The watch page is returned only on the scrape path, where it was
        already fetched for verification, so callers can reuse it instead
        of requesting it again. On the redirect path it is None.

        Parameters
        ----------
        channel_id : str
            YouTube channel ID.

        Returns
        -------
        tuple[ResolutionResult, FetchedPage | None]
            The resolution and the verified watch page.

        Raises
        ------
        InvalidIdentifierError
            If the platform rejects the channel ID (HTTP 400/404).
        UpstreamError
            If the channel page cannot be fetched.
        """
        url = self._fetcher.channel_live_url(channel_id)
        try:
            page = await self._fetcher.fetch(url, follow_redirects=False)
        except UpstreamError as e:
            if e.status_code in _INVALID_IDENTIFIER_STATUSES:
                raise InvalidIdentifierError(
                    channel_id, kind="channel", status_code=e.status_code
                ) from e
            raise

        if page.is_redirect:
            video_id = video_id_from_location(page.location)
            if video_id:
                logger.debug(
                    "Channel %s redirects to live video %s", channel_id, video_id
                )
                return ResolutionResult(channel_id=channel_id, video_id=video_id), None

        html = page.text
        if not html:
            html = (await self._fetcher.fetch(url, follow_redirects=True)).text
        if not html:
            return self._not_live(channel_id), None

        candidate = find_video_id_in_html(html)
        if not candidate:
            logger.debug("No video ID on channel page for %s", channel_id)
            return self._not_live(channel_id), None

        watch_page = await self._verified_watch_page(candidate)
        if watch_page is None:
            logger.info(
                "Candidate %s for channel %s is not live, ignoring",
                candidate,
                channel_id,
            )
            return self._not_live(channel_id), None

        return ResolutionResult(channel_id=channel_id, video_id=candidate), watch_page

    async def _verified_watch_page(self, video_id: str) -> Optional[FetchedPage]:
        """
        Fetch the candidate's watch page and check it is live now.

        A candidate that cannot be verified is treated as not live, so
        fetch failures here are logged and absorbed.
        """
        try:
            page = await self._fetcher.fetch(self._fetcher.watch_url(video_id))
        except UpstreamError as e:
            logger.warning(
                "Could not verify candidate %s (%s), treating as not live",
                video_id,
                e.message,
            )
            return None

        indicators = live_now_indicators(page.text)
        if not indicators:
            return None
        logger.debug("Candidate %s live indicators: %s", video_id, indicators)
        return page

    @staticmethod
    def _not_live(channel_id: str) -> ResolutionResult:
        return ResolutionResult(channel_id=channel_id, video_id=None, note=NOT_LIVE_NOTE)
