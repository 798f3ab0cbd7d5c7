"""
Metadata cache and request coalescer.

Classes
-------
MetadataCache
    Keyed store of metadata responses with a freshness TTL, a bounded
    size, and the map of in-flight fetches.
CachedMetadataService
    Cached, single-flight video and channel lookups over a metadata source,
    with stale-on-error fallback.

Lookup rules, per key:

1. A fresh entry (younger than the TTL) is returned without network access.
2. If a fetch for the key is already in flight, its result is awaited and
   shared; no second fetch is issued.
3. Otherwise a fetch is started and registered; it is deregistered when it
   finishes, whatever the outcome.
4. When the fetch fails with :class:`UpstreamError` and any entry exists for
   the key, even an expired one, that entry is returned instead.
   :class:`InvalidIdentifierError` always propagates.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal, Optional

from streamscout.exceptions import InvalidIdentifierError, UpstreamError
from streamscout.models.stream import MetadataResponse
from streamscout.services.sources import MetadataSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_MAX_ENTRIES = 1024

LookupSource = Literal["fresh", "coalesced", "fetched", "stale"]


@dataclass(frozen=True)
class CacheEntry:
    """A cached response and the monotonic time it was stored."""

    key: str
    data: MetadataResponse
    timestamp: float


@dataclass(frozen=True)
class CacheLookup:
    """
    A lookup result and where it came from.

    ``source`` is ``"fresh"`` for a fresh cache hit, ``"coalesced"`` when an
    in-flight fetch was shared, ``"fetched"`` for a completed fetch, and
    ``"stale"`` when an expired entry covered an upstream failure.
    """

    response: MetadataResponse
    source: LookupSource

    @property
    def from_fresh_cache(self) -> bool:
        return self.source == "fresh"


def channel_key(channel_id: str) -> str:
    """Cache key for a channel lookup."""
    return f"channel:{channel_id}"


def video_key(video_id: str) -> str:
    """Cache key for a video lookup."""
    return video_id


class MetadataCache:
    """
    Keyed response store with freshness TTL and bounded size.

    Entries are replaced whole on every successful fetch and are kept past
    their TTL so they can serve the stale-on-error fallback. When the store
    is full, the entry written least recently is evicted.

    Parameters
    ----------
    ttl_seconds : float, optional
        Freshness window (default: 30.0).
    max_entries : int, optional
        Maximum number of stored entries (default: 1024).
    clock : Callable[[], float], optional
        Monotonic clock, injectable for tests (default: time.monotonic).
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.pending: dict[str, asyncio.Task[tuple[MetadataResponse, LookupSource]]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` regardless of age."""
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self.ttl_seconds

    def get_fresh(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` only if it is within the TTL."""
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            return entry
        return None

    def put(self, key: str, data: MetadataResponse) -> CacheEntry:
        """Store ``data`` under ``key``, replacing any previous entry."""
        entry = CacheEntry(key=key, data=data, timestamp=self._clock())
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)
        return entry

    def clear(self) -> None:
        """Drop all entries and forget in-flight fetches."""
        self._entries.clear()
        self.pending.clear()


class CachedMetadataService:
    """
    Cached, coalesced video and channel lookups.

    Parameters
    ----------
    source : MetadataSource
        Where cache misses are fetched from.
    cache : MetadataCache | None, optional
        Backing store; a private one is created when omitted.

    Examples
    --------
    >>> service = CachedMetadataService(MetadataAPIClient())
    >>> response = await service.get_channel_metadata("UC...")
    """

    def __init__(
        self,
        source: MetadataSource,
        cache: Optional[MetadataCache] = None,
    ) -> None:
        self.source = source
        self.cache = cache if cache is not None else MetadataCache()

    async def get_video_metadata(self, video_id: str) -> MetadataResponse:
        return (await self.lookup_video(video_id)).response

    async def get_channel_metadata(self, channel_id: str) -> MetadataResponse:
        return (await self.lookup_channel(channel_id)).response

    async def lookup_video(self, video_id: str) -> CacheLookup:
        return await self._lookup(
            video_key(video_id), lambda: self.source.fetch_video(video_id)
        )

    async def lookup_channel(self, channel_id: str) -> CacheLookup:
        return await self._lookup(
            channel_key(channel_id), lambda: self.source.fetch_channel(channel_id)
        )

    async def _lookup(
        self, key: str, fetch: Callable[[], Awaitable[MetadataResponse]]
    ) -> CacheLookup:
        entry = self.cache.get_fresh(key)
        if entry is not None:
            logger.debug("Using cached data for %s", key)
            return CacheLookup(entry.data.model_copy(update={"cached": True}), "fresh")

        pending = self.cache.pending.get(key)
        if pending is not None:
            logger.debug("Waiting for existing request for %s", key)
            response, _ = await asyncio.shield(pending)
            return CacheLookup(response, "coalesced")

        logger.debug("Fetching metadata for %s", key)
        # Registered before the first suspension point, so no other caller
        # can observe the key as neither cached nor pending.
        task = asyncio.ensure_future(self._fetch_and_release(key, fetch))
        self.cache.pending[key] = task
        response, source = await asyncio.shield(task)
        return CacheLookup(response, source)

    async def _fetch_and_release(
        self, key: str, fetch: Callable[[], Awaitable[MetadataResponse]]
    ) -> tuple[MetadataResponse, LookupSource]:
        try:
            return await self._fetch_and_store(key, fetch)
        finally:
            if self.cache.pending.get(key) is asyncio.current_task():
                del self.cache.pending[key]

    async def _fetch_and_store(
        self, key: str, fetch: Callable[[], Awaitable[MetadataResponse]]
    ) -> tuple[MetadataResponse, LookupSource]:
        try:
            response = await fetch()
        except InvalidIdentifierError:
            raise
        except UpstreamError as e:
            entry = self.cache.get(key)
            if entry is None:
                raise
            logger.warning(
                "Using expired cache data for %s due to upstream error: %s",
                key,
                e.message,
            )
            return entry.data.model_copy(update={"cached": True}), "stale"

        self.cache.put(key, response)
        data = response.data
        logger.info(
            "Metadata received for %s: live=%s viewers=%s title=%r",
            key,
            data.is_live_now,
            data.concurrent_viewers,
            data.title,
        )
        return response, "fetched"
