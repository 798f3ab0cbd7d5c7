"""
Validated identifier types for YouTube channels and videos.

Channel IDs are ``UC`` followed by 22 URL-safe base64 characters; video IDs
are 11 URL-safe base64 characters. Handles (``@name``) and custom URLs are
not identifiers and are rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Annotated, Callable

from pydantic import BeforeValidator, Field


@dataclass(frozen=True)
class IdentifierFormat:
    """Shape of one kind of YouTube identifier."""

    kind: str
    length: int
    prefix: str = ""

    @property
    def pattern(self) -> re.Pattern[str]:
        body = self.length - len(self.prefix)
        return re.compile(rf"^{re.escape(self.prefix)}[A-Za-z0-9_-]{{{body}}}$")

    def problem(self, value: str) -> str | None:
        """Describe why ``value`` is not of this format, or None if it is."""
        if len(value) != self.length:
            return f"expected {self.length} characters, got {len(value)}"
        if self.prefix and not value.startswith(self.prefix):
            return f"expected prefix {self.prefix!r}"
        if not self.pattern.match(value):
            return "only letters, digits, '-' and '_' are allowed"
        return None


CHANNEL_ID_FORMAT = IdentifierFormat(kind="channel", length=24, prefix="UC")
VIDEO_ID_FORMAT = IdentifierFormat(kind="video", length=11)


def _validator(fmt: IdentifierFormat) -> Callable[[object], str]:
    def validate(value: object) -> str:
        if not isinstance(value, str):
            raise TypeError(f"{fmt.kind} ID must be a string, got {type(value).__name__}")
        problem = fmt.problem(value)
        if problem is not None:
            raise ValueError(f"Invalid {fmt.kind} ID {value!r}: {problem}")
        return value

    validate.__name__ = f"validate_{fmt.kind}_id"
    return validate


validate_channel_id = _validator(CHANNEL_ID_FORMAT)
validate_video_id = _validator(VIDEO_ID_FORMAT)


def is_channel_id(value: object) -> bool:
    """Return True if ``value`` has the shape of a YouTube channel ID."""
    return isinstance(value, str) and CHANNEL_ID_FORMAT.problem(value) is None


def is_video_id(value: object) -> bool:
    """Return True if ``value`` has the shape of a YouTube video ID."""
    return isinstance(value, str) and VIDEO_ID_FORMAT.problem(value) is None


ChannelId = Annotated[
    str,
    BeforeValidator(validate_channel_id),
    Field(description="YouTube channel ID (UC + 22 characters)"),
]

VideoId = Annotated[
    str,
    BeforeValidator(validate_video_id),
    Field(description="YouTube video ID (11 characters)"),
]
