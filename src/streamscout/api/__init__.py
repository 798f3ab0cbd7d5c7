"""Metadata proxy API for streamscout.

Serves ``/api/youtube/video/{id}``, ``/api/youtube/channel/{id}``,
``/api/youtube/channels/batch``, and ``/api/youtube/health`` on top of the
direct-scrape engine and a shared metadata cache.
"""
