"""
streamscout - Live stream discovery and viewer tracking for YouTube channels.

Resolves whether a channel is broadcasting right now, extracts the live
video's concurrent viewer count from the public watch page, and serves the
results through a cached metadata API, a batch orchestrator, and a CLI.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "streamscout"
__email__ = "noreply@streamscout.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
