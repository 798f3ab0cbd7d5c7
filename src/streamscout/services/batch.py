"""
Sequential batch lookups with pacing and per-item isolation.

Identifiers are processed one at a time. After an item that needed the
network (anything but a fresh cache hit) the orchestrator waits
``delay_seconds`` before the next item; fresh cache hits are not delayed.
A failing item is logged and left out of the result instead of aborting
the batch. Items are never processed concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from streamscout.exceptions import InvalidIdentifierError, StreamScoutError
from streamscout.models.stream import BatchChannelStatus, MetadataResponse, StreamMetadata
from streamscout.services.cache import CachedMetadataService, CacheLookup

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.5


class BatchOrchestrator:
    """
    Runs cached lookups over a list of identifiers.

    Parameters
    ----------
    service : CachedMetadataService
        Cached lookup service.
    delay_seconds : float, optional
        Pause after each non-cached item (default: 0.5).
    sleep : Callable[[float], Awaitable[None]], optional
        Sleep function, injectable for tests (default: asyncio.sleep).
    """

    def __init__(
        self,
        service: CachedMetadataService,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.service = service
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    async def lookup_channels(self, channel_ids: Sequence[str]) -> list[MetadataResponse]:
        """Return the successful channel lookups, in input order."""
        outcomes = await self._run(channel_ids, self.service.lookup_channel, "channel")
        return [lookup.response for _, lookup in outcomes if lookup is not None]

    async def lookup_videos(self, video_ids: Sequence[str]) -> list[MetadataResponse]:
        """Return the successful video lookups, in input order."""
        outcomes = await self._run(video_ids, self.service.lookup_video, "video")
        return [lookup.response for _, lookup in outcomes if lookup is not None]

    async def batch_resolve_channels(
        self, channel_ids: Sequence[str], live_only: bool = True
    ) -> list[StreamMetadata]:
        """
        Resolve several channels and return their stream metadata.

        Parameters
        ----------
        channel_ids : Sequence[str]
            Channel IDs, processed in order.
        live_only : bool, optional
            Keep only channels that are live now (default: True).
        """
        return _select(await self.lookup_channels(channel_ids), live_only)

    async def batch_resolve_videos(
        self, video_ids: Sequence[str], live_only: bool = True
    ) -> list[StreamMetadata]:
        """Resolve several videos; see :meth:`batch_resolve_channels`."""
        return _select(await self.lookup_videos(video_ids), live_only)

    async def channel_statuses(
        self, channel_ids: Sequence[str]
    ) -> dict[str, BatchChannelStatus]:
        """
        Return a live / not_live / error status for every channel ID.

        A channel listed more than once keeps the status of its last lookup.
        """
        statuses: dict[str, BatchChannelStatus] = {}

        async def record(channel_id: str) -> CacheLookup:
            try:
                lookup = await self.service.lookup_channel(channel_id)
            except StreamScoutError as e:
                statuses[channel_id] = BatchChannelStatus(status="error", error=e.message)
                raise
            except Exception as e:
                statuses[channel_id] = BatchChannelStatus(
                    status="error", error=str(e) or type(e).__name__
                )
                raise
            data = lookup.response.data
            statuses[channel_id] = BatchChannelStatus(
                status="live" if data.is_live_now else "not_live",
                data=data,
            )
            return lookup

        await self._run(channel_ids, record, "channel")
        return statuses

    async def _run(
        self,
        identifiers: Sequence[str],
        lookup: Callable[[str], Awaitable[CacheLookup]],
        kind: str,
    ) -> list[tuple[str, Optional[CacheLookup]]]:
        """Look up each identifier in order; one ``(identifier, lookup)`` pair per item."""
        outcomes: list[tuple[str, Optional[CacheLookup]]] = []
        total = len(identifiers)

        for index, identifier in enumerate(identifiers):
            logger.debug("Processing %s %s (%d/%d)", kind, identifier, index + 1, total)
            result: Optional[CacheLookup] = None
            try:
                result = await lookup(identifier)
            except InvalidIdentifierError as e:
                logger.warning(
                    "Skipping invalid %s ID '%s': %s", kind, identifier, e.message
                )
            except StreamScoutError as e:
                logger.warning("Skipping %s '%s': %s", kind, identifier, e.message)
            except Exception:
                logger.exception("Unexpected error for %s '%s'; skipping", kind, identifier)
            outcomes.append((identifier, result))

            needs_pause = result is None or not result.from_fresh_cache
            if needs_pause and index < total - 1 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

        succeeded = sum(1 for _, outcome in outcomes if outcome is not None)
        logger.info("Successfully fetched %d out of %d %ss", succeeded, total, kind)
        return outcomes


def _select(responses: list[MetadataResponse], live_only: bool) -> list[StreamMetadata]:
    return [
        response.data
        for response in responses
        if response.success and (response.data.is_live_now or not live_only)
    ]
