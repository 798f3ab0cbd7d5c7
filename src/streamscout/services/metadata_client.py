"""
Async client for the streamscout metadata API.

The metadata API is a thin backend proxy in front of the scraper (see
:mod:`streamscout.api`). It is the production path for video and channel
lookups; the direct-scrape engine is used when it is unavailable.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from streamscout.config.settings import Settings, get_settings
from streamscout.exceptions import InvalidIdentifierError, UpstreamError
from streamscout.models.stream import (
    BatchChannelsRequest,
    BatchChannelsResponse,
    MetadataResponse,
)

logger = logging.getLogger(__name__)


class MetadataAPIClient:
    """
    Client for ``/video/{id}``, ``/channel/{id}``, and ``/channels/batch``.

    Parameters
    ----------
    settings : Settings | None, optional
        Application settings; loaded from the environment when omitted.
    client : httpx.AsyncClient | None, optional
        Shared client. When omitted a short-lived client is opened per
        request.
    base_url : str | None, optional
        Override for ``settings.metadata_api_base_url``.

    Examples
    --------
    >>> api = MetadataAPIClient()
    >>> response = await api.fetch_channel("UC...")
    >>> response.data.is_live_now
    True
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self.base_url = (base_url or self._settings.metadata_api_base_url).rstrip("/")

    async def fetch_video(self, video_id: str) -> MetadataResponse:
        """
        Fetch metadata for a video.

        Raises
        ------
        InvalidIdentifierError
            If the API answers HTTP 400.
        UpstreamError
            On transport failures, other non-2xx answers, or an
            unreadable body.
        """
        payload = await self._request(
            "GET", f"/video/{quote(video_id, safe='')}", identifier=video_id, kind="video"
        )
        return self._parse(MetadataResponse, payload, f"/video/{video_id}")

    async def fetch_channel(self, channel_id: str) -> MetadataResponse:
        """Fetch metadata for a channel's live broadcast; see :meth:`fetch_video`."""
        payload = await self._request(
            "GET",
            f"/channel/{quote(channel_id, safe='')}",
            identifier=channel_id,
            kind="channel",
        )
        return self._parse(MetadataResponse, payload, f"/channel/{channel_id}")

    async def fetch_channels_batch(self, channel_ids: list[str]) -> BatchChannelsResponse:
        """Fetch the live/not-live/error map for several channels in one call."""
        body = BatchChannelsRequest(channel_ids=channel_ids).to_wire()
        payload = await self._request("POST", "/channels/batch", json=body)
        return self._parse(BatchChannelsResponse, payload, "/channels/batch")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        identifier: Optional[str] = None,
        kind: str = "channel",
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=json)
            else:
                async with httpx.AsyncClient(
                    timeout=self._settings.request_timeout_seconds
                ) as client:
                    response = await client.request(method, url, json=json)
        except httpx.HTTPError as e:
            raise UpstreamError(
                message=f"Metadata API request to {url} failed: {type(e).__name__}",
                url=url,
                original_error=e,
            ) from e

        if response.status_code == 400 and identifier is not None:
            raise InvalidIdentifierError(identifier, kind=kind, status_code=400)

        if not response.is_success:
            logger.error(
                "Metadata API error: %d - %s", response.status_code, response.reason_phrase
            )
            raise UpstreamError(
                message=f"HTTP {response.status_code}: {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                message=f"Metadata API returned invalid JSON for {path}",
                url=url,
                status_code=response.status_code,
                original_error=e,
            ) from e

    @staticmethod
    def _parse(model: Any, payload: Any, path: str) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UpstreamError(
                message=f"Metadata API returned an unexpected body for {path}",
                original_error=e,
            ) from e
