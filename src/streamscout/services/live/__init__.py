"""
Live stream resolution and viewer extraction.

Modules
-------
extractor
    Embedded JSON, free-text number, and live-indicator extraction
fetcher
    HTTP access to channel and watch pages
resolver
    Channel to live video ID resolution with candidate verification
viewers
    Ordered viewer-count strategies over a watch page
page_metadata
    Descriptive stream metadata from the player response
scraper
    Facade combining the above into channel and video lookups
"""

from __future__ import annotations

from streamscout.services.live.fetcher import FetchedPage, PageFetcher
from streamscout.services.live.resolver import LiveResolver
from streamscout.services.live.scraper import LiveStreamScraper
from streamscout.services.live.viewers import ViewerCountAggregator

__all__ = [
    "FetchedPage",
    "LiveResolver",
    "LiveStreamScraper",
    "PageFetcher",
    "ViewerCountAggregator",
]
