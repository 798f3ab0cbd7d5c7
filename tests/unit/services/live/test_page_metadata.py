"""
Unit tests for stream metadata parsing from the player response.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from streamscout.services.live.page_metadata import (
    build_stream_metadata,
    extract_meta_tags,
    format_elapsed,
    parse_timestamp,
)

VIDEO_ID = "jfKfPfyJRdk"
CHANNEL_ID = "UCSJ4gkVC6NrvII8umztf0Ow"
NOW = datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)


class TestParseTimestamp:
    def test_offset_timestamp(self) -> None:
        assert parse_timestamp("2026-10-19T08:00:00+00:00") == datetime(
            2026, 10, 19, 8, 0, tzinfo=timezone.utc
        )

    def test_zulu_timestamp(self) -> None:
        assert parse_timestamp("2026-10-19T08:00:00Z") == datetime(
            2026, 10, 19, 8, 0, tzinfo=timezone.utc
        )

    def test_naive_timestamp_is_utc(self) -> None:
        parsed = parse_timestamp("2026-10-19T08:00:00")
        assert parsed is not None
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_invalid(self, value: str | None) -> None:
        assert parse_timestamp(value) is None


class TestFormatElapsed:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0m"),
            (59, "0m"),
            (600, "10m"),
            (3600, "1h 0m"),
            (9000, "2h 30m"),
            (None, "0m"),
            (-5, "0m"),
        ],
    )
    def test_format(self, seconds: int | None, expected: str) -> None:
        assert format_elapsed(seconds) == expected


class TestBuildStreamMetadata:
    def test_live_page(self, watch_page_html: Callable[..., str]) -> None:
        html = watch_page_html(VIDEO_ID, live=True, tags=["lofi", "beats", "study", "chill"])

        data = build_stream_metadata(
            html,
            VIDEO_ID,
            is_live_now=True,
            concurrent_viewers=1234,
            channel_id=CHANNEL_ID,
            now=NOW,
        )

        assert data.method == "scrape"
        assert data.video_id == VIDEO_ID
        assert data.channel_id == CHANNEL_ID
        assert data.title == "lofi hip hop radio - beats to relax/study to"
        assert data.channel_name == "Lofi Girl"
        assert data.is_live_now is True
        assert data.concurrent_viewers == 1234
        assert data.viewer_count_type == "concurrent"
        assert data.is_live_content is True
        assert data.description == "Music to study and relax."
        assert data.tags == ["lofi", "beats", "study", "chill"]
        assert data.actual_start_time == "2026-10-19T08:00:00+00:00"
        assert data.live_duration_seconds == 9000
        assert data.live_duration == "2h 30m"
        assert [t.width for t in data.thumbnails] == [120, 480, 320]

    def test_not_live_page_has_no_duration_or_viewers(
        self, watch_page_html: Callable[..., str]
    ) -> None:
        data = build_stream_metadata(
            watch_page_html(VIDEO_ID, live=False),
            VIDEO_ID,
            is_live_now=False,
            concurrent_viewers=50,
            now=NOW,
        )

        assert data.is_live_now is False
        assert data.concurrent_viewers is None
        assert data.viewer_count_type == "unknown"
        assert data.live_duration == ""
        assert data.live_duration_seconds is None
        assert data.channel_id == CHANNEL_ID

    def test_future_start_has_no_duration(self, watch_page_html: Callable[..., str]) -> None:
        html = watch_page_html(VIDEO_ID, start_timestamp="2026-10-20T00:00:00Z")

        data = build_stream_metadata(html, VIDEO_ID, is_live_now=True, now=NOW)

        assert data.live_duration_seconds is None
        assert data.live_duration == ""

    def test_empty_html_keeps_defaults(self) -> None:
        data = build_stream_metadata("", VIDEO_ID, is_live_now=True, concurrent_viewers=3)

        assert data.video_id == VIDEO_ID
        assert data.title == ""
        assert data.thumbnails == []
        assert data.tags == []
        assert data.concurrent_viewers == 3

    def test_microformat_fallbacks(self) -> None:
        html = (
            '<script>var ytInitialPlayerResponse = {"microformat":{"playerMicroformatRenderer":'
            '{"title":{"simpleText":"Fallback title"},"ownerChannelName":"Owner",'
            '"externalChannelId":"UCSJ4gkVC6NrvII8umztf0Ow",'
            '"description":{"simpleText":"Fallback description"},'
            '"thumbnail":{"thumbnails":[{"url":"https://i.ytimg.com/a.jpg","width":10,"height":10},'
            '{"url":"https://i.ytimg.com/a.jpg","width":10,"height":10}]}}}};</script>'
        )

        data = build_stream_metadata(html, VIDEO_ID, is_live_now=False)

        assert data.title == "Fallback title"
        assert data.channel_name == "Owner"
        assert data.channel_id == CHANNEL_ID
        assert data.description == "Fallback description"
        assert len(data.thumbnails) == 1

    def test_non_finite_thumbnail_sizes_are_skipped(self) -> None:
        html = (
            '<script>var ytInitialPlayerResponse = {"videoDetails":{"videoId":"jfKfPfyJRdk",'
            '"title":"Broken sizes","author":"Lofi Girl","channelId":"UCSJ4gkVC6NrvII8umztf0Ow",'
            '"thumbnail":{"thumbnails":['
            '{"url":"https://i.ytimg.com/inf.jpg","width":Infinity,"height":90},'
            '{"url":"https://i.ytimg.com/nan.jpg","width":120,"height":NaN},'
            '{"url":"https://i.ytimg.com/ok.jpg","width":120,"height":90}]}}};</script>'
        )

        data = build_stream_metadata(html, VIDEO_ID, is_live_now=True, concurrent_viewers=7)

        assert data.title == "Broken sizes"
        assert [t.url for t in data.thumbnails] == ["https://i.ytimg.com/ok.jpg"]
        assert data.concurrent_viewers == 7


META_PAGE = (
    "<html><head>"
    '<meta property="og:title" content="Rainy jazz cafe">'
    '<meta property="og:description" content="Smooth jazz for work.">'
    '<meta property="og:image" content="https://i.ytimg.com/vi/jfKfPfyJRdk/maxresdefault_live.jpg">'
    '<meta property="og:video:tag" content="jazz">'
    '<meta property="og:video:tag" content="cafe">'
    '<meta itemprop="channelId" content="UCSJ4gkVC6NrvII8umztf0Ow">'
    "</head><body>"
    '<span itemprop="author"><link itemprop="name" content="Cafe Music BGM"></span>'
    "</body></html>"
)


class TestMetaTags:
    """Open Graph and itemprop fallbacks."""

    def test_extract_meta_tags(self) -> None:
        meta = extract_meta_tags(META_PAGE)

        assert meta.title == "Rainy jazz cafe"
        assert meta.description == "Smooth jazz for work."
        assert meta.thumbnail_url == "https://i.ytimg.com/vi/jfKfPfyJRdk/maxresdefault_live.jpg"
        assert meta.tags == ["jazz", "cafe"]
        assert meta.channel_id == CHANNEL_ID
        assert meta.channel_name == "Cafe Music BGM"

    def test_missing_tags_leave_fields_empty(self) -> None:
        meta = extract_meta_tags('<html><meta itemprop="channelId" content="nope"></html>')

        assert meta.title == ""
        assert meta.thumbnail_url is None
        assert meta.tags == []
        assert meta.channel_id is None

    def test_page_without_player_response_uses_meta_tags(self) -> None:
        data = build_stream_metadata(META_PAGE, VIDEO_ID, is_live_now=True, concurrent_viewers=40)

        assert data.title == "Rainy jazz cafe"
        assert data.channel_name == "Cafe Music BGM"
        assert data.channel_id == CHANNEL_ID
        assert data.tags == ["jazz", "cafe"]
        assert [t.url for t in data.thumbnails] == [
            "https://i.ytimg.com/vi/jfKfPfyJRdk/maxresdefault_live.jpg"
        ]
        assert data.concurrent_viewers == 40

    def test_player_response_wins_over_meta_tags(self, watch_page_html: Callable[..., str]) -> None:
        og_title = '<meta property="og:title" content="Rainy jazz cafe">'
        html = watch_page_html(VIDEO_ID).replace("<head>", "<head>" + og_title, 1)

        data = build_stream_metadata(html, VIDEO_ID, is_live_now=True)

        assert data.title == "lofi hip hop radio - beats to relax/study to"
        assert data.channel_name == "Lofi Girl"
