"""
Google OAuth 2.0 client for the YouTube publishing account.

Builds the consent URL and talks to the token endpoint for the
authorization-code and refresh-token grants. Token endpoint responses are
returned as ``TokenResponse`` so the caller decides how to surface
``error`` / ``error_description``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from shortsbot.core.config import Settings, get_settings
from shortsbot.integrations.base_client import BaseHTTPClient

logger = logging.getLogger(__name__)

AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_BASE_URL = "https://oauth2.googleapis.com"
SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
    "https://www.googleapis.com/auth/youtube.force-ssl",
]


@dataclass
class TokenResponse:
    """
    Parsed token endpoint response.

    Attributes:
        status_code: HTTP status of the response
        payload: Decoded JSON body (empty when the body was not JSON)
    """

    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Check for a 2xx status."""
        return 200 <= self.status_code < 300

    @property
    def access_token(self) -> str | None:
        return self.payload.get("access_token") or None

    @property
    def refresh_token(self) -> str | None:
        return self.payload.get("refresh_token") or None

    @property
    def expires_in(self) -> int | None:
        value = self.payload.get("expires_in")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @property
    def error_message(self) -> str | None:
        """Best human-readable error the endpoint supplied."""
        return self.payload.get("error_description") or self.payload.get("error") or None


def build_authorization_url(client_id: str, redirect_uri: str, state: str) -> str:
    """
    Build the browser consent URL.

    ``access_type=offline`` and ``prompt=consent`` make Google issue a
    refresh token on every consent.

    Args:
        client_id: OAuth client id
        redirect_uri: Registered redirect target
        state: Opaque value the redirect must return

    Returns:
        Fully encoded authorization URL
    """
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": state,
    }
    return f"{AUTH_BASE_URL}?{urlencode(params)}"


class GoogleOAuthClient(BaseHTTPClient):
    """
    Token endpoint client.

    Grants are sent exactly once: an authorization code is single-use and a
    refresh failure is reported to the caller rather than repeated.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or get_settings()
        super().__init__(
            base_url=TOKEN_BASE_URL,
            settings=settings,
            timeout=timeout or settings.oauth_timeout_seconds,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "Google OAuth"

    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    async def _token_request(self, form: dict[str, str]) -> TokenResponse:
        response = await self._request(
            "POST", "token", data=form, allow_client_errors=True, retry=False
        )
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        return TokenResponse(status_code=response.status_code, payload=payload)

    async def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> TokenResponse:
        """
        Exchange an authorization code for tokens.

        Raises:
            ExternalServiceError: On network failure, timeout or 5xx
            RateLimitError: When the endpoint throttles the grant
        """
        return await self._token_request(
            {
                "code": code,
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            }
        )

    async def refresh_access_token(
        self,
        refresh_token: str,
        client_id: str,
        client_secret: str,
    ) -> TokenResponse:
        """
        Obtain a new access token from a refresh token.

        Raises:
            ExternalServiceError: On network failure, timeout or 5xx
            RateLimitError: When the endpoint throttles the grant
        """
        return await self._token_request(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
