"""HTTP client for the engagement API, used by playback sessions."""

import logging
from typing import Any
from uuid import UUID

import httpx

from engagement.config import settings
from engagement.core.exceptions import EngagementAPIError

logger = logging.getLogger(__name__)


class EngagementClient:
    """HTTP client for reporting views and progress to the engagement API."""

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ENGAGEMENT_API_URL).rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport
        logger.debug(f"EngagementClient initialized: base_url={self.base_url}")

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> dict[str, Any]:
        """Make an HTTP request to the engagement API."""
        url = f"{self.base_url}{path}"
        logger.debug(f"Engagement API request: {method} {url}")

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            headers = kwargs.pop("headers", {})
            headers["Authorization"] = f"Bearer {self.access_token}"

            try:
                response = await client.request(method, url, headers=headers, **kwargs)
            except httpx.RequestError as e:
                logger.error(f"Engagement API connection error: {e}")
                raise EngagementAPIError(f"Connection error: {e}")

            if response.status_code >= 400:
                logger.error(
                    f"Engagement API error: {response.status_code} - {response.text}"
                )
                raise EngagementAPIError(response.text, status_code=response.status_code)

            try:
                return response.json()
            except ValueError as e:
                logger.error(f"Engagement API returned a non-JSON body: {response.text[:200]}")
                raise EngagementAPIError(
                    f"Invalid response body: {e}", status_code=response.status_code
                )

    async def record_view(
        self,
        video_id: UUID | str,
        platform: str = "",
        browser: str = "",
    ) -> dict[str, Any]:
        """Report that the current user viewed a video."""
        return await self._request(
            "POST",
            f"/views/{video_id}",
            json={"platform": platform, "browser": browser},
        )

    async def record_progress(
        self,
        video_id: UUID | str,
        watch_progress: float,
        device_info: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Report the current playback position of a video."""
        return await self._request(
            "POST",
            f"/watch-history/{video_id}",
            json={"watch_progress": watch_progress, "device_info": device_info},
        )

    async def get_feed(self, page: int = 1, limit: int = 20) -> dict[str, Any]:
        """Fetch a page of the subscription feed."""
        return await self._request(
            "GET",
            "/subscriptions/feed",
            params={"page": page, "limit": limit},
        )
