"""
Concurrent viewer extraction for live watch pages.

The watch page is fetched once and the strategies in
:data:`DEFAULT_VIEWER_STRATEGIES` are tried in order until one yields a
number. A count of None means "unknown", never zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from streamscout.services.live.extractor import (
    DEFAULT_MAX_DEPTH,
    Extraction,
    extract_named_json,
    extract_watching_now_from_html,
    find_concurrent_viewers_result,
)
from streamscout.services.live.fetcher import FetchedPage, PageFetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewerStrategy:
    """A named viewer extraction strategy over watch page HTML."""

    name: str
    extract: Callable[[str, int], Extraction[int]]


def _from_json_blob(variable_name: str) -> Callable[[str, int], Extraction[int]]:
    def extract(html: str, max_depth: int) -> Extraction[int]:
        data = extract_named_json(html, variable_name)
        if data is None:
            return Extraction.miss(f"no_{variable_name}")
        return find_concurrent_viewers_result(data, max_depth=max_depth)

    return extract


def _from_raw_html(html: str, max_depth: int) -> Extraction[int]:
    value = extract_watching_now_from_html(html)
    if value is None:
        return Extraction.miss("no_watching_now_text")
    return Extraction.hit(value, "watching_now_regex")


DEFAULT_VIEWER_STRATEGIES: tuple[ViewerStrategy, ...] = (
    ViewerStrategy("initial_data", _from_json_blob("ytInitialData")),
    ViewerStrategy("player_response", _from_json_blob("ytInitialPlayerResponse")),
    ViewerStrategy("raw_html", _from_raw_html),
)
"""Viewer extraction strategies in precedence order."""


class ViewerCountAggregator:
    """
    Extracts the concurrent viewer count of a live video.

    Parameters
    ----------
    fetcher : PageFetcher
        Page fetcher used for the watch page.
    strategies : Sequence[ViewerStrategy], optional
        Strategies in precedence order (default: DEFAULT_VIEWER_STRATEGIES).
    max_depth : int, optional
        JSON traversal depth bound (default: 64).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        strategies: Sequence[ViewerStrategy] = DEFAULT_VIEWER_STRATEGIES,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._fetcher = fetcher
        self._strategies = tuple(strategies)
        self._max_depth = max_depth

    @property
    def strategies(self) -> tuple[ViewerStrategy, ...]:
        return self._strategies

    def extract(self, html: str) -> Extraction[int]:
        """
        Run the strategies over ``html``, stopping at the first hit.

        The hit's ``strategy`` is ``"<strategy name>:<field shape>"``.
        """
        for strategy in self._strategies:
            result = strategy.extract(html, self._max_depth)
            if result.found:
                return Extraction.hit(
                    result.value, f"{strategy.name}:{result.strategy}"  # type: ignore[arg-type]
                )
            logger.debug("Viewer strategy %s missed: %s", strategy.name, result.miss_reason)
        return Extraction.miss("all_strategies_missed")

    async def get_concurrent_viewers(
        self, video_id: str, page: Optional[FetchedPage] = None
    ) -> Optional[int]:
        """
        Return the concurrent viewer count for a live video, or None.

        Parameters
        ----------
        video_id : str
            Live video ID.
        page : FetchedPage | None, optional
            Already-fetched watch page to reuse (default: None).

        Raises
        ------
        UpstreamError
            If the watch page cannot be fetched.
        """
        if page is None:
            page = await self._fetcher.fetch(self._fetcher.watch_url(video_id))
        result = self.extract(page.text)
        if result.found:
            logger.debug("Viewers for %s via %s: %s", video_id, result.strategy, result.value)
        else:
            logger.info("No viewer count found for live video %s", video_id)
        return result.value
