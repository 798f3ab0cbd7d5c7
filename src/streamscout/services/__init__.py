"""
Services module for streamscout.

Contains the direct-scrape live engine, the metadata API client, the
metadata cache with request coalescing, batch orchestration, and stream
card presentation helpers.
"""

from __future__ import annotations

from streamscout.services.batch import BatchOrchestrator
from streamscout.services.cache import CachedMetadataService, MetadataCache
from streamscout.services.live.scraper import LiveStreamScraper
from streamscout.services.metadata_client import MetadataAPIClient
from streamscout.services.sources import FallbackMetadataSource, ScrapeMetadataSource

__all__: list[str] = [
    "BatchOrchestrator",
    "CachedMetadataService",
    "FallbackMetadataSource",
    "LiveStreamScraper",
    "MetadataAPIClient",
    "MetadataCache",
    "ScrapeMetadataSource",
]
