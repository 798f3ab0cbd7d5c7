"""
Presentation helpers: stream cards and viewer count formatting.

Turns :class:`StreamMetadata` records into the :class:`StreamCard` shape the
viewer site lists. Only live records become cards; an empty card list is a
normal outcome, not an error.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from streamscout.models.stream import (
    MetadataResponse,
    StreamCard,
    StreamMetadata,
    Thumbnail,
)
from streamscout.services.live.page_metadata import format_elapsed, parse_timestamp

DEFAULT_THUMBNAIL = "/default-thumbnail.jpg"
DEFAULT_CATEGORY = "Live Stream"
MAX_CARD_TAGS = 3

# First matching rule wins; matched against the lowercased first tag.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Music", ("lofi", "music", "jazz")),
    ("Gaming", ("game", "gaming")),
    ("Education", ("study", "learn")),
    ("News", ("news",)),
    ("Talk", ("talk", "chat")),
)


def best_thumbnail(thumbnails: list[Thumbnail]) -> str:
    """
    Return the URL of the largest thumbnail.

    Renditions without a URL or without dimensions are only used when
    nothing better exists.
    """
    if not thumbnails:
        return DEFAULT_THUMBNAIL
    sized = [t for t in thumbnails if t.url and t.width and t.height]
    if sized:
        return max(sized, key=lambda t: t.area).url
    return thumbnails[0].url or DEFAULT_THUMBNAIL


def category_from_tags(tags: list[str]) -> str:
    """Guess a display category from the first tag."""
    if not tags:
        return DEFAULT_CATEGORY
    first = tags[0].lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in first for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def calculate_duration(start_time: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Elapsed time since ``start_time`` as ``"Xh Ym"`` or ``"Ym"``.

    Returns ``"0m"`` when the start time is missing, unparseable, or in the
    future.
    """
    started = parse_timestamp(start_time)
    if started is None:
        return "0m"
    elapsed = ((now or datetime.now(timezone.utc)) - started).total_seconds()
    return format_elapsed(int(elapsed) if elapsed >= 0 else None)


def format_viewers(count: Optional[int]) -> str:
    """
    Compact viewer count for display.

    Examples
    --------
    >>> format_viewers(1234)
    '1.2K'
    >>> format_viewers(2_500_000)
    '2.5M'
    >>> format_viewers(None)
    '0'
    """
    if not count:
        return "0"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def to_stream_card(data: StreamMetadata, now: Optional[datetime] = None) -> StreamCard:
    """Build the card for one stream."""
    tags = data.tags[:MAX_CARD_TAGS]
    return StreamCard(
        id=data.video_id,
        title=data.title or "Untitled Stream",
        channel_name=data.channel_name or "Unknown Channel",
        channel_id=data.channel_id,
        viewers=data.concurrent_viewers or 0,
        thumbnail=best_thumbnail(data.thumbnails),
        category=category_from_tags(tags),
        is_live=data.is_live_now,
        duration=data.live_duration or calculate_duration(data.actual_start_time, now),
        tags=tags,
        video_id=data.video_id,
        actual_start_time=data.actual_start_time,
        description=data.description,
    )


def live_stream_cards(
    responses: Iterable[MetadataResponse], now: Optional[datetime] = None
) -> list[StreamCard]:
    """Cards for the successful responses that are live now, in order."""
    return [
        to_stream_card(response.data, now)
        for response in responses
        if response.success and response.data.is_live_now
    ]
