"""
Configuration management module for streamscout.

Handles application settings loaded from environment variables and
optional ``.env`` files.
"""

from __future__ import annotations

from streamscout.config.settings import Settings, get_settings

__all__: list[str] = ["Settings", "get_settings"]
