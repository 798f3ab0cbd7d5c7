"""FastAPI dependencies for the metadata proxy endpoints."""

from __future__ import annotations

from fastapi import Depends

from streamscout.config.settings import settings
from streamscout.services.batch import BatchOrchestrator
from streamscout.services.cache import CachedMetadataService, MetadataCache
from streamscout.services.live.scraper import LiveStreamScraper
from streamscout.services.sources import ScrapeMetadataSource

# Module-level singletons: every request shares one cache, so concurrent
# requests for the same key coalesce into a single scrape.
_metadata_cache = MetadataCache(
    ttl_seconds=settings.cache_ttl_seconds,
    max_entries=settings.cache_max_entries,
)
_scraper = LiveStreamScraper(settings)


def get_metadata_cache() -> MetadataCache:
    """Return the process-wide metadata cache."""
    return _metadata_cache


def get_metadata_service(
    cache: MetadataCache = Depends(get_metadata_cache),
) -> CachedMetadataService:
    """
    Dependency for cached metadata lookups.

    The service is cheap to build; the state that matters (entries and
    in-flight fetches) lives in the shared cache.

    Returns
    -------
    CachedMetadataService
        Lookup service backed by the direct-scrape engine.
    """
    return CachedMetadataService(ScrapeMetadataSource(_scraper), cache=cache)


def get_batch_orchestrator(
    service: CachedMetadataService = Depends(get_metadata_service),
) -> BatchOrchestrator:
    """Dependency for paced batch lookups."""
    return BatchOrchestrator(service, delay_seconds=settings.batch_delay_seconds)
