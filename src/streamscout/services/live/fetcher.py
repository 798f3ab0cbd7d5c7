"""
HTTP access to YouTube's public channel and watch pages.

Every request carries a desktop browser User-Agent and an Accept-Language
header, since the unauthenticated pages vary their markup and free-text
phrases by client and locale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from streamscout.config.settings import Settings, get_settings
from streamscout.exceptions import UpstreamError

logger = logging.getLogger(__name__)

_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)


@dataclass(frozen=True)
class FetchedPage:
    """
    A fetched page.

    Attributes
    ----------
    url : str
        The requested URL.
    status_code : int
        Final HTTP status code.
    text : str
        Response body; empty for 3xx responses.
    location : str | None
        ``Location`` header of a 3xx response.
    """

    url: str
    status_code: int
    text: str = ""
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400


class PageFetcher:
    """
    Fetches YouTube pages with browser-like headers.

    Parameters
    ----------
    settings : Settings | None, optional
        Application settings; loaded from the environment when omitted.
    client : httpx.AsyncClient | None, optional
        Shared client. When omitted a short-lived client is opened per
        request.

    Examples
    --------
    >>> fetcher = PageFetcher()
    >>> page = await fetcher.fetch(fetcher.channel_live_url("UC..."), follow_redirects=False)
    >>> page.location
    'https://www.youtube.com/watch?v=...'
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._settings.user_agent,
            "Accept-Language": self._settings.accept_language,
            "Accept": _ACCEPT,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

    def channel_live_url(self, channel_id: str) -> str:
        return f"{self._settings.youtube_base_url}/channel/{quote(channel_id, safe='')}/live"

    def watch_url(self, video_id: str) -> str:
        return f"{self._settings.youtube_base_url}/watch?v={quote(video_id, safe='')}"

    async def fetch(self, url: str, follow_redirects: bool = True) -> FetchedPage:
        """
        GET ``url``.

        Parameters
        ----------
        url : str
            Page URL.
        follow_redirects : bool, optional
            When False, a 3xx response is returned as-is with its
            ``Location`` header and an empty body (default: True).

        Returns
        -------
        FetchedPage
            The fetched page.

        Raises
        ------
        UpstreamError
            On transport failures and on any non-2xx, non-3xx status.
        """
        if self._client is not None:
            return await self._fetch_with(self._client, url, follow_redirects)

        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout_seconds,
        ) as client:
            return await self._fetch_with(client, url, follow_redirects)

    async def _fetch_with(
        self, client: httpx.AsyncClient, url: str, follow_redirects: bool
    ) -> FetchedPage:
        try:
            response = await client.get(
                url,
                headers=self.headers,
                follow_redirects=follow_redirects,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(
                message=f"Request to {url} failed: {type(e).__name__}",
                url=url,
                original_error=e,
            ) from e

        status = response.status_code
        if response.is_redirect or 300 <= status < 400:
            return FetchedPage(
                url=url,
                status_code=status,
                location=response.headers.get("location"),
            )

        if not response.is_success:
            raise UpstreamError(
                message=f"HTTP {status} requesting {url}",
                url=url,
                status_code=status,
            )

        return FetchedPage(url=url, status_code=status, text=response.text)
