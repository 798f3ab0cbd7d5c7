"""
Pytest configuration and fixtures for streamscout tests.

Page builders produce compact, YouTube-shaped HTML (inline
``ytInitialPlayerResponse`` / ``ytInitialData`` assignments) so extraction
runs against realistic markup. HTTP is always served by
``httpx.MockTransport``; no test reaches the network.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Callable
from typing import Any, Optional, Union

import httpx
import pytest

from streamscout.config.settings import Settings
from streamscout.services.live.fetcher import PageFetcher

RouteTarget = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def _compact(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"))


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no batch delay and a short timeout."""
    return Settings(
        youtube_base_url="https://www.youtube.com",
        metadata_api_base_url="http://metadata.test/api/youtube",
        cache_ttl_seconds=30.0,
        cache_max_entries=1024,
        batch_delay_seconds=0.0,
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def watch_page_html() -> Callable[..., str]:
    """Factory for watch page HTML, live or not."""

    def build(
        video_id: str,
        *,
        live: bool = True,
        viewers_text: Optional[str] = "1,234 watching now",
        title: str = "lofi hip hop radio - beats to relax/study to",
        author: str = "Lofi Girl",
        channel_id: str = "UCSJ4gkVC6NrvII8umztf0Ow",
        tags: Optional[list[str]] = None,
        start_timestamp: Optional[str] = "2026-10-19T08:00:00+00:00",
    ) -> str:
        player: dict[str, Any] = {
            "videoDetails": {
                "videoId": video_id,
                "title": title,
                "author": author,
                "channelId": channel_id,
                "keywords": tags if tags is not None else ["lofi", "study", "chill"],
                "shortDescription": "Music to study and relax.",
                "isLiveContent": True,
                "thumbnail": {
                    "thumbnails": [
                        {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg", "width": 120, "height": 90},
                        {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg", "width": 480, "height": 360},
                        {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg", "width": 320, "height": 180},
                    ]
                },
            },
            "microformat": {
                "playerMicroformatRenderer": {
                    "title": {"simpleText": title},
                    "liveBroadcastDetails": {"isLiveNow": live},
                }
            },
        }
        if start_timestamp is not None:
            player["microformat"]["playerMicroformatRenderer"]["liveBroadcastDetails"][
                "startTimestamp"
            ] = start_timestamp

        view_count: dict[str, Any]
        if live and viewers_text is not None:
            number, _, phrase = viewers_text.partition(" ")
            view_count = {"runs": [{"text": number}, {"text": f" {phrase}"}]}
        else:
            view_count = {"simpleText": "1,234,567 views"}

        initial_data = {
            "contents": {
                "twoColumnWatchNextResults": {
                    "results": {
                        "results": {
                            "contents": [
                                {
                                    "videoPrimaryInfoRenderer": {
                                        "viewCount": {
                                            "videoViewCountRenderer": {
                                                "viewCount": view_count,
                                            }
                                        }
                                    }
                                }
                            ]
                        }
                    }
                }
            }
        }
        return (
            "<!DOCTYPE html><html><head><title>YouTube</title></head><body>"
            f"<script>var ytInitialPlayerResponse = {_compact(player)};</script>"
            f"<script>var ytInitialData = {_compact(initial_data)};</script>"
            "</body></html>"
        )

    return build


@pytest.fixture
def channel_page_html() -> Callable[..., str]:
    """Factory for a channel page that mentions ``video_id`` (or nothing)."""

    def build(video_id: Optional[str] = None) -> str:
        contents: list[Any] = []
        if video_id is not None:
            contents.append({"videoRenderer": {"videoId": video_id, "title": {"simpleText": "Featured"}}})
        data = {"contents": {"sectionListRenderer": {"contents": contents}}}
        return (
            "<html><body>"
            f"<script>var ytInitialData = {_compact(data)};</script>"
            "</body></html>"
        )

    return build


class RecordingRoutes:
    """Maps request paths (with query) to canned responses and records calls."""

    def __init__(self, routes: dict[str, RouteTarget]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.raw_path.decode()
        target = self.routes.get(key)
        if target is None:
            return httpx.Response(404, text="not found")
        if isinstance(target, httpx.Response):
            # Fresh response per request so canned routes can be hit repeatedly
            return httpx.Response(
                target.status_code, headers=target.headers, content=target.content
            )
        return target(request)

    def paths(self) -> list[str]:
        return [r.url.raw_path.decode() for r in self.requests]


@pytest.fixture
async def make_fetcher(
    test_settings: Settings,
) -> AsyncGenerator[Callable[[dict[str, RouteTarget]], tuple[PageFetcher, RecordingRoutes]], None]:
    """Factory for a PageFetcher served by canned routes."""
    clients: list[httpx.AsyncClient] = []

    def build(routes: dict[str, RouteTarget]) -> tuple[PageFetcher, RecordingRoutes]:
        recorder = RecordingRoutes(routes)
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        clients.append(client)
        return PageFetcher(test_settings, client=client), recorder

    yield build

    for client in clients:
        await client.aclose()
