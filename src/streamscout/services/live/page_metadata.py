"""
Stream metadata parsing from a watch page's player response.

Fills the descriptive fields of :class:`StreamMetadata` (title, channel
name, thumbnails, tags, description, start time) from the
``ytInitialPlayerResponse`` blob, preferring ``videoDetails`` and falling
back to ``microformat.playerMicroformatRenderer``. Fields the blob does not
provide are taken from the page's Open Graph and ``itemprop`` meta tags;
anything still missing is left at its default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from bs4 import BeautifulSoup

from streamscout.models.stream import StreamMetadata, Thumbnail
from streamscout.models.youtube_types import is_channel_id
from streamscout.services.live.extractor import extract_named_json

logger = logging.getLogger(__name__)


@dataclass
class MetaTagFields:
    """Descriptive fields recovered from HTML meta tags."""

    title: str = ""
    description: str = ""
    channel_name: str = ""
    channel_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    tags: list[str] = field(default_factory=list)


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    content = tag.get("content")
    return str(content) if content else ""


def extract_meta_tags(html: str) -> MetaTagFields:
    """
    Extract metadata from Open Graph and ``itemprop`` meta tags.

    Watch pages carry ``og:title``, ``og:description``, ``og:image`` and one
    ``og:video:tag`` per keyword, plus ``itemprop`` markup naming the
    channel. Absent tags leave the corresponding field empty.

    Parameters
    ----------
    html : str
        Raw watch page HTML.

    Returns
    -------
    MetaTagFields
        The recovered fields.
    """
    soup = BeautifulSoup(html, "html.parser")
    fields = MetaTagFields(
        title=_meta_content(soup, property="og:title"),
        description=_meta_content(soup, property="og:description"),
        thumbnail_url=_meta_content(soup, property="og:image") or None,
    )

    for tag_meta in soup.find_all("meta", attrs={"property": "og:video:tag"}):
        content = tag_meta.get("content")
        if content:
            fields.tags.append(str(content))

    channel_id_meta = soup.find(attrs={"itemprop": "channelId"})
    if channel_id_meta is not None:
        cid = str(channel_id_meta.get("content", ""))
        if is_channel_id(cid):
            fields.channel_id = cid

    # <span itemprop="author"><link itemprop="name" content="..."></span>
    author = soup.find(attrs={"itemprop": "author"})
    if author is not None:
        name = author.find(attrs={"itemprop": "name"})
        if name is not None and name.get("content"):
            fields.channel_name = str(name["content"])

    return fields


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    """Plain string, or the ``simpleText`` of a text renderer."""
    if isinstance(value, str):
        return value
    simple = _dict(value).get("simpleText")
    return simple if isinstance(simple, str) else ""


def _thumbnails(container: Any) -> list[Thumbnail]:
    raw = _dict(container).get("thumbnails")
    if not isinstance(raw, list):
        return []
    thumbs: list[Thumbnail] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("url"), str):
            continue
        try:
            thumbs.append(
                Thumbnail(
                    url=item["url"],
                    width=int(item.get("width") or 0),
                    height=int(item.get("height") or 0),
                )
            )
        except (TypeError, ValueError, OverflowError):
            # Non-numeric or non-finite size (``Infinity``, ``NaN``)
            continue
    return thumbs


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime, or None."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_elapsed(seconds: Optional[int]) -> str:
    """
    Format an elapsed duration as ``"Xh Ym"`` or ``"Ym"``.

    Examples
    --------
    >>> format_elapsed(3900)
    '1h 5m'
    >>> format_elapsed(None)
    '0m'
    """
    if seconds is None or seconds < 0:
        return "0m"
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def build_stream_metadata(
    html: str,
    video_id: str,
    *,
    is_live_now: bool,
    concurrent_viewers: Optional[int] = None,
    channel_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StreamMetadata:
    """
    Build a :class:`StreamMetadata` record from watch page HTML.

    Parameters
    ----------
    html : str
        Watch page HTML. May be empty, in which case only the supplied
        fields are set.
    video_id : str
        Video ID the page belongs to.
    is_live_now : bool
        Live status, as decided by the resolver.
    concurrent_viewers : int | None, optional
        Viewer count, as extracted by the aggregator (default: None).
    channel_id : str | None, optional
        Channel ID; overrides the one found in the page (default: None).
    now : datetime | None, optional
        Reference time for the live duration (default: current UTC time).

    Returns
    -------
    StreamMetadata
        The assembled record.
    """
    player = _dict(extract_named_json(html, "ytInitialPlayerResponse") if html else None)
    details = _dict(player.get("videoDetails"))
    renderer = _dict(_dict(player.get("microformat")).get("playerMicroformatRenderer"))
    broadcast = _dict(renderer.get("liveBroadcastDetails"))

    keywords = details.get("keywords")
    tags = [k for k in keywords if isinstance(k, str)] if isinstance(keywords, list) else []

    thumbnails = _thumbnails(details.get("thumbnail")) or _thumbnails(
        renderer.get("thumbnail")
    )

    actual_start_time = broadcast.get("startTimestamp")
    if not isinstance(actual_start_time, str):
        actual_start_time = None

    live_duration_seconds: Optional[int] = None
    started = parse_timestamp(actual_start_time)
    if started is not None and is_live_now:
        elapsed = ((now or datetime.now(timezone.utc)) - started).total_seconds()
        if elapsed >= 0:
            live_duration_seconds = int(elapsed)

    page_channel_id = details.get("channelId") or renderer.get("externalChannelId")
    if not isinstance(page_channel_id, str):
        page_channel_id = None

    title = _text(details.get("title")) or _text(renderer.get("title"))
    channel_name = _text(details.get("author")) or _text(renderer.get("ownerChannelName"))
    description = _text(details.get("shortDescription")) or _text(renderer.get("description"))

    if html and not (title and channel_name and thumbnails and page_channel_id):
        logger.debug("Player response incomplete for %s, reading meta tags", video_id)
        meta = extract_meta_tags(html)
        title = title or meta.title
        channel_name = channel_name or meta.channel_name
        description = description or meta.description
        page_channel_id = page_channel_id or meta.channel_id
        tags = tags or meta.tags
        if not thumbnails and meta.thumbnail_url:
            thumbnails = [Thumbnail(url=meta.thumbnail_url)]

    return StreamMetadata(
        method="scrape",
        video_id=video_id,
        channel_id=channel_id or page_channel_id,
        title=title,
        channel_name=channel_name,
        is_live_now=is_live_now,
        concurrent_viewers=concurrent_viewers if is_live_now else None,
        viewer_count_type="concurrent" if is_live_now else "unknown",
        thumbnails=thumbnails,
        description=description,
        actual_start_time=actual_start_time,
        is_live_content=bool(details.get("isLiveContent") or renderer.get("isLiveContent")),
        live_duration=format_elapsed(live_duration_seconds) if live_duration_seconds is not None else "",
        live_duration_seconds=live_duration_seconds,
        tags=tags,
    )
