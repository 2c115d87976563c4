"""
Pydantic schemas for the publishing account connector.

Covers the stored OAuth token record and the sentinel result types the
connector returns instead of raising.
"""

from pydantic import BaseModel, Field


class OAuthTokenRecord(BaseModel):
    """
    Tokens for one connected account.

    ``refresh_token`` comes from the authorization-code exchange only.
    ``access_token`` and ``expiry_ms`` are a cache derived from it.

    Attributes:
        key: Connector key the account is stored under
        refresh_token: Long-lived refresh token
        access_token: Cached access token
        expiry_ms: Access token expiry, epoch milliseconds
    """

    key: str
    refresh_token: str
    access_token: str | None = None
    expiry_ms: int | None = None

    def access_token_valid(self, now_ms: int, margin_ms: int) -> bool:
        """Check whether the cached access token outlives ``now + margin``."""
        return bool(
            self.access_token
            and self.expiry_ms is not None
            and self.expiry_ms > now_ms + margin_ms
        )


class AuthUrl(BaseModel):
    """Authorization URL plus the state the redirect must round-trip."""

    url: str
    state: str


class AuthUrlResponse(BaseModel):
    """Response body for the auth-url endpoint."""

    url: str | None
    state: str | None = None
    error: str | None = None


class ExchangeResult(BaseModel):
    """Outcome of an authorization-code exchange."""

    ok: bool
    error: str | None = None


class ConnectionStatus(BaseModel):
    """Whether an account is linked under a connector key."""

    connected: bool


class VideoMeta(BaseModel):
    """Metadata submitted with an upload."""

    title: str
    description: str = ""


class UploadResult(BaseModel):
    """A successful upload."""

    video_id: str
    url: str


class UploadError(BaseModel):
    """A failed upload; ``error`` is a human-readable reason."""

    error: str = Field(description="Failure reason")


class OkResponse(BaseModel):
    """Generic acknowledgement body."""

    ok: bool = True
