"""
YouTube Data API v3 clients.

This module provides:
- YouTubeSearchClient: keyword video search used for trend collection
- YouTubeUploadClient: multipart video upload for a connected account

API Reference: https://developers.google.com/youtube/v3/docs
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import ExternalServiceError, ValidationError
from shortsbot.integrations.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)

UPLOAD_BOUNDARY = "-------shorts-upload-boundary"
SHORTS_URL_TEMPLATE = "https://www.youtube.com/shorts/{video_id}"


@dataclass
class YouTubeSearchItem:
    """
    A single video search hit.

    Attributes:
        video_id: YouTube video id (may be empty for malformed items)
        title: Video title
        description: Video description snippet
        channel_id: Uploading channel id
        channel_title: Uploading channel name
        published_at: ISO publish timestamp
        thumbnails: Raw thumbnail map from the API
    """

    video_id: str
    title: str
    description: str = ""
    channel_id: str = ""
    channel_title: str = ""
    published_at: str = ""
    thumbnails: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "YouTubeSearchItem":
        """Create a search item from a ``search.list`` result entry."""
        snippet = data.get("snippet") or {}
        item_id = data.get("id") or {}
        return cls(
            video_id=str(item_id.get("videoId") or ""),
            title=str(snippet.get("title") or ""),
            description=str(snippet.get("description") or ""),
            channel_id=str(snippet.get("channelId") or ""),
            channel_title=str(snippet.get("channelTitle") or ""),
            published_at=str(snippet.get("publishedAt") or ""),
            thumbnails=snippet.get("thumbnails") or {},
        )


@dataclass
class SearchPage:
    """One page of search results."""

    items: list[YouTubeSearchItem]
    next_page_token: str | None = None


class YouTubeSearchClient(BaseHTTPClient):
    """
    YouTube search client authenticated with an API key.

    Example:
        ```python
        client = YouTubeSearchClient()
        page = await client.search_videos("ai news", max_results=5)
        for item in page.items:
            print(item.video_id, item.title)
        await client.aclose()
        ```
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        max_retries: int = 2,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the search client.

        Args:
            api_key: YouTube Data API key (uses settings if not provided)
            settings: Application settings instance
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds (uses settings if not provided)
            transport: Optional httpx transport
        """
        settings = settings or get_settings()
        super().__init__(
            base_url=self.BASE_URL,
            api_key=(api_key or settings.youtube_api_key or "").strip() or None,
            settings=settings,
            max_retries=max_retries,
            timeout=timeout or settings.search_timeout_seconds,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "YouTube"

    @property
    def is_configured(self) -> bool:
        """Check whether an API key is available."""
        return bool(self._api_key)

    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        return {"Accept": "application/json"}

    async def search_videos(
        self,
        query: str,
        max_results: int = 10,
        order: str = "relevance",
        page_token: str | None = None,
    ) -> SearchPage:
        """
        Search videos by keyword.

        Args:
            query: Search keyword (truncated to 200 characters)
            max_results: Results per page, clamped to 1..50
            order: Result order (relevance, date, viewCount)
            page_token: Continuation token from a previous page

        Returns:
            SearchPage with parsed items

        Raises:
            ValidationError: If no API key is configured
            ExternalServiceError: If the API request fails
        """
        if not self._api_key:
            raise ValidationError(
                message="YouTube API key is required",
                field="youtube_api_key",
            )

        params: dict[str, Any] = {
            "key": self._api_key,
            "part": "snippet",
            "type": "video",
            "q": query[:200],
            "maxResults": min(50, max(1, max_results)),
            "order": order,
        }
        if page_token:
            params["pageToken"] = page_token

        response = await self._request("GET", "search", params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                service=self.service_name,
                message="YouTube search returned invalid JSON",
                original_error=str(e),
            ) from e

        items = [YouTubeSearchItem.from_api_response(it) for it in data.get("items") or []]
        logger.info(
            "YouTube search completed",
            extra={"query": query, "result_count": len(items)},
        )
        return SearchPage(items=items, next_page_token=data.get("nextPageToken"))


def build_multipart_body(metadata: dict[str, Any], video_bytes: bytes) -> bytes:
    """
    Build a ``multipart/related`` upload body.

    The first part is the JSON resource, the second the raw video.

    Args:
        metadata: Video resource (snippet + status)
        video_bytes: Raw MP4 bytes

    Returns:
        Encoded request body delimited by ``UPLOAD_BOUNDARY``
    """
    meta_part = "\r\n".join(
        [
            f"--{UPLOAD_BOUNDARY}",
            "Content-Type: application/json; charset=UTF-8",
            "",
            json.dumps(metadata, ensure_ascii=False),
        ]
    )
    media_part = "\r\n".join([f"--{UPLOAD_BOUNDARY}", "Content-Type: video/mp4", ""])
    closing = f"\r\n--{UPLOAD_BOUNDARY}--\r\n"
    return b"".join(
        [
            (meta_part + "\r\n").encode("utf-8"),
            (media_part + "\r\n").encode("utf-8"),
            video_bytes,
            closing.encode("utf-8"),
        ]
    )


class YouTubeUploadClient(BaseHTTPClient):
    """
    Uploads videos on behalf of an OAuth-connected account.

    The access token is passed per call; the client holds no credentials.
    Client errors are returned to the caller so the connector can report
    the provider's message.
    """

    BASE_URL = "https://www.googleapis.com"
    UPLOAD_PATH = "upload/youtube/v3/videos"

    def __init__(
        self,
        settings: Settings | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        super().__init__(
            base_url=self.BASE_URL,
            settings=settings,
            timeout=timeout or settings.upload_timeout_seconds,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "YouTube Upload"

    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        return {"Accept": "application/json"}

    async def upload_multipart(
        self,
        access_token: str,
        metadata: dict[str, Any],
        video_bytes: bytes,
    ) -> httpx.Response:
        """
        Submit a multipart upload.

        Args:
            access_token: OAuth bearer token
            metadata: Video resource (snippet + status)
            video_bytes: Raw MP4 bytes

        Returns:
            The raw response (2xx or 4xx)

        Raises:
            ExternalServiceError: On network failure or 5xx
        """
        body = build_multipart_body(metadata, video_bytes)
        return await self._request(
            "POST",
            self.UPLOAD_PATH,
            params={"part": "snippet,status", "uploadType": "multipart"},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": f"multipart/related; boundary={UPLOAD_BOUNDARY}",
            },
            content=body,
            allow_client_errors=True,
            # Uploads are not idempotent on the platform side
            retry=False,
        )
