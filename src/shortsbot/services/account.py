"""
Publishing account connector for YouTube.

Owns the OAuth lifecycle of a connected channel: building the consent URL,
exchanging the authorization code, caching and renewing access tokens, and
submitting uploads. Every operation reports failure through a result value
(``None``, ``ExchangeResult``, ``UploadError``) rather than raising, so the
API layer and the job orchestrator can decide how fatal a failure is.
"""

import asyncio
import logging
import os
import secrets
import time
from collections.abc import Callable
from pathlib import Path

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import ShortsBotException
from shortsbot.integrations.google_oauth_client import (
    GoogleOAuthClient,
    build_authorization_url,
)
from shortsbot.integrations.youtube_client import SHORTS_URL_TEMPLATE, YouTubeUploadClient
from shortsbot.schemas.account import (
    AuthUrl,
    ConnectionStatus,
    ExchangeResult,
    OAuthTokenRecord,
    UploadError,
    UploadResult,
    VideoMeta,
)
from shortsbot.stores.tokens import InMemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"

# Cached access tokens are not used within this window of their expiry
TOKEN_REFRESH_MARGIN_MS = 60_000
MIN_VIDEO_BYTES = 1000
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 5000
PEOPLE_AND_BLOGS_CATEGORY = "22"
SHORTS_TAGS = ["shorts", "short"]

CREDENTIALS_MISSING = "YOUTUBE_CLIENT_ID or YOUTUBE_CLIENT_SECRET not set"
TOKEN_EXCHANGE_FAILED = "Token exchange failed"
NO_REFRESH_TOKEN = "No refresh_token in response"
NOT_CONNECTED = "YouTube account not connected or token expired"
VIDEO_NOT_FOUND = "Video file not found or not generated (pipeline stub)"
VIDEO_TOO_SMALL = "Video file too small (pipeline stub)"
UPLOAD_FAILED = "Upload failed"
NO_VIDEO_ID = "No video id in response"


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def generate_state() -> str:
    """Opaque OAuth state value."""
    return f"st-{now_ms()}-{secrets.token_hex(4)}"


def build_upload_metadata(meta: VideoMeta, privacy_status: str) -> dict:
    """
    Build the video resource sent with an upload.

    Args:
        meta: Title and description
        privacy_status: Privacy applied to the uploaded video

    Returns:
        Resource dict with ``snippet`` and ``status`` parts
    """
    return {
        "snippet": {
            "title": meta.title[:TITLE_MAX_LENGTH],
            "description": meta.description[:DESCRIPTION_MAX_LENGTH],
            "categoryId": PEOPLE_AND_BLOGS_CATEGORY,
            "tags": list(SHORTS_TAGS),
        },
        "status": {
            "privacyStatus": privacy_status,
            "selfDeclaredMadeForKids": False,
        },
    }


def extract_upload_error(payload: object) -> str:
    """Pull the most specific error message out of an upload response body."""
    if not isinstance(payload, dict):
        return UPLOAD_FAILED
    error = payload.get("error")
    if not isinstance(error, dict):
        return UPLOAD_FAILED
    if error.get("message"):
        return str(error["message"])
    errors = error.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        if errors[0].get("message"):
            return str(errors[0]["message"])
    return UPLOAD_FAILED


def _read_video(video_path: str) -> bytes | None:
    path = Path(video_path)
    if not path.is_file():
        return None
    try:
        return path.read_bytes()
    except OSError:
        return None


class AccountConnector:
    """
    OAuth connector for the YouTube publishing account.

    Refresh tokens are written only by a successful code exchange; access
    tokens are a cache renewed on demand. Refreshes for the same key are
    serialized, so concurrent callers observe a single refresh call.

    Example:
        ```python
        connector = AccountConnector()
        auth = connector.get_auth_url()
        result = await connector.exchange_code_and_store(code)
        upload = await connector.upload_video("/tmp/out.mp4", VideoMeta(title="Hi"))
        ```
    """

    def __init__(
        self,
        token_store: TokenStore | None = None,
        settings: Settings | None = None,
        oauth_client: GoogleOAuthClient | None = None,
        upload_client: YouTubeUploadClient | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize the connector.

        Args:
            token_store: Token storage (in-memory by default)
            settings: Application settings instance
            oauth_client: Google token endpoint client
            upload_client: YouTube upload client
            clock: Epoch-milliseconds clock used for token expiry
        """
        self._settings = settings or get_settings()
        self.token_store = token_store or InMemoryTokenStore()
        self.oauth_client = oauth_client or GoogleOAuthClient(settings=self._settings)
        self.upload_client = upload_client or YouTubeUploadClient(settings=self._settings)
        self._clock = clock
        self._refresh_locks: dict[str, asyncio.Lock] = {}

    def _credentials(self) -> tuple[str, str] | None:
        client_id = (self._settings.youtube_client_id or "").strip()
        client_secret = (self._settings.youtube_client_secret or "").strip()
        if not client_id or not client_secret:
            return None
        return client_id, client_secret

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._refresh_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._refresh_locks[key] = lock
        return lock

    # =========================================================================
    # Authorization
    # =========================================================================

    def get_auth_url(self, state: str | None = None) -> AuthUrl | None:
        """
        Build the consent URL.

        Args:
            state: Caller-supplied state; generated when omitted

        Returns:
            AuthUrl, or None when the OAuth client id is not configured
        """
        client_id = (self._settings.youtube_client_id or "").strip()
        if not client_id:
            return None
        state = state or generate_state()
        url = build_authorization_url(client_id, self._settings.youtube_redirect_uri, state)
        return AuthUrl(url=url, state=state)

    async def exchange_code_and_store(self, code: str, key: str = DEFAULT_KEY) -> ExchangeResult:
        """
        Exchange an authorization code and store the resulting tokens.

        Args:
            code: Authorization code from the consent redirect
            key: Connector key to store the account under

        Returns:
            ExchangeResult; on failure nothing is stored
        """
        credentials = self._credentials()
        if credentials is None:
            return ExchangeResult(ok=False, error=CREDENTIALS_MISSING)
        client_id, client_secret = credentials

        try:
            response = await self.oauth_client.exchange_code(
                code,
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=self._settings.youtube_redirect_uri,
            )
        except ShortsBotException as e:
            logger.warning("Token exchange request failed", extra={"key": key, "error": e.message})
            return ExchangeResult(ok=False, error=e.message)

        if not response.ok:
            error = response.error_message or TOKEN_EXCHANGE_FAILED
            logger.warning(
                "Token exchange rejected",
                extra={"key": key, "status_code": response.status_code, "error": error},
            )
            return ExchangeResult(ok=False, error=error)

        if not response.refresh_token:
            return ExchangeResult(ok=False, error=NO_REFRESH_TOKEN)

        expires_in = response.expires_in
        await self.token_store.set(
            OAuthTokenRecord(
                key=key,
                refresh_token=response.refresh_token,
                access_token=response.access_token,
                expiry_ms=self._clock() + expires_in * 1000 if expires_in else None,
            )
        )
        logger.info("YouTube account connected", extra={"key": key})
        return ExchangeResult(ok=True)

    # =========================================================================
    # Tokens
    # =========================================================================

    async def get_access_token(self, key: str = DEFAULT_KEY) -> str | None:
        """
        Return a usable access token, refreshing it when needed.

        Args:
            key: Connector key

        Returns:
            Access token, or None when the account is not connected or the
            refresh failed
        """
        record = await self.token_store.get(key)
        if record is None:
            return None
        if record.access_token_valid(self._clock(), TOKEN_REFRESH_MARGIN_MS):
            return record.access_token

        async with self._lock_for(key):
            # Another caller may have refreshed while we waited
            record = await self.token_store.get(key)
            if record is None:
                return None
            if record.access_token_valid(self._clock(), TOKEN_REFRESH_MARGIN_MS):
                return record.access_token
            return await self._refresh(record)

    async def _refresh(self, record: OAuthTokenRecord) -> str | None:
        credentials = self._credentials()
        if credentials is None:
            return None
        client_id, client_secret = credentials

        try:
            response = await self.oauth_client.refresh_access_token(
                record.refresh_token,
                client_id=client_id,
                client_secret=client_secret,
            )
        except ShortsBotException as e:
            logger.warning("Token refresh failed", extra={"key": record.key, "error": e.message})
            return None

        if not response.ok or not response.access_token:
            logger.warning(
                "Token refresh rejected",
                extra={
                    "key": record.key,
                    "status_code": response.status_code,
                    "error": response.error_message,
                },
            )
            return None

        current = await self.token_store.get(record.key)
        if current is None or current.refresh_token != record.refresh_token:
            # Disconnected or reconnected while refreshing
            return None

        expires_in = response.expires_in or 3600
        await self.token_store.set(
            current.model_copy(
                update={
                    "access_token": response.access_token,
                    "expiry_ms": self._clock() + expires_in * 1000,
                }
            )
        )
        logger.info("Access token refreshed", extra={"key": record.key})
        return response.access_token

    # =========================================================================
    # Upload
    # =========================================================================

    async def upload_video(
        self,
        video_path: str,
        meta: VideoMeta,
        key: str = DEFAULT_KEY,
    ) -> UploadResult | UploadError:
        """
        Upload a video file to the connected channel.

        Args:
            video_path: Path of the assembled MP4
            meta: Title and description
            key: Connector key

        Returns:
            UploadResult with the Shorts URL, or UploadError with the reason
        """
        token = await self.get_access_token(key)
        if not token:
            return UploadError(error=NOT_CONNECTED)

        video_bytes = await asyncio.to_thread(_read_video, video_path)
        if video_bytes is None:
            return UploadError(error=VIDEO_NOT_FOUND)
        if len(video_bytes) < MIN_VIDEO_BYTES:
            return UploadError(error=VIDEO_TOO_SMALL)

        metadata = build_upload_metadata(meta, self._settings.youtube_privacy_status)
        try:
            response = await self.upload_client.upload_multipart(token, metadata, video_bytes)
        except ShortsBotException as e:
            logger.error("Upload request failed", extra={"key": key, "error": e.message})
            return UploadError(error=e.message)

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not (200 <= response.status_code < 300):
            error = extract_upload_error(payload)
            logger.error(
                "Upload rejected",
                extra={"key": key, "status_code": response.status_code, "error": error},
            )
            return UploadError(error=error)

        video_id = payload.get("id") if isinstance(payload, dict) else None
        if not video_id:
            return UploadError(error=NO_VIDEO_ID)

        logger.info(
            "Video uploaded",
            extra={
                "key": key,
                "video_id": video_id,
                "size_bytes": len(video_bytes),
                "file": os.path.basename(video_path),
            },
        )
        return UploadResult(video_id=video_id, url=SHORTS_URL_TEMPLATE.format(video_id=video_id))

    # =========================================================================
    # Connection state
    # =========================================================================

    async def get_connection_status(self, key: str = DEFAULT_KEY) -> ConnectionStatus:
        """Report whether a refresh token is stored for ``key``."""
        return ConnectionStatus(connected=await self.token_store.get(key) is not None)

    async def disconnect(self, key: str = DEFAULT_KEY) -> None:
        """Forget the account stored under ``key``; repeated calls are harmless."""
        await self.token_store.delete(key)
        logger.info("YouTube account disconnected", extra={"key": key})

    async def aclose(self) -> None:
        """Close the OAuth and upload clients."""
        await self.oauth_client.aclose()
        await self.upload_client.aclose()
