"""
YouTube account connection endpoints.

Drives the OAuth consent flow: the UI fetches the auth URL, Google redirects
back to the callback, and the callback redirects the browser to the
frontend with the outcome in the query string.
"""

import logging
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Query, status
from fastapi.responses import RedirectResponse

from shortsbot.core.dependencies import AppSettings, Connector, ConnectorKey
from shortsbot.schemas.account import AuthUrlResponse, ConnectionStatus, OkResponse

logger = logging.getLogger(__name__)

router = APIRouter()

CLIENT_ID_MISSING = "YOUTUBE_CLIENT_ID not set"
CODE_REQUIRED = "code_required"


def frontend_redirect(frontend_origin: str, **params: str) -> RedirectResponse:
    """Redirect the browser to the frontend Shorts page with ``params``."""
    url = f"{frontend_origin.rstrip('/')}/shorts?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get(
    "/auth-url",
    response_model=AuthUrlResponse,
    summary="Get YouTube Authorization URL",
)
async def get_auth_url(
    connector: Connector,
    state: Annotated[str | None, Query(description="Opaque state to round-trip")] = None,
) -> AuthUrlResponse:
    """
    Build the Google consent URL.

    Returns ``url: null`` with an error when OAuth is not configured.
    """
    auth = connector.get_auth_url(state)
    if auth is None:
        return AuthUrlResponse(url=None, error=CLIENT_ID_MISSING)
    return AuthUrlResponse(url=auth.url, state=auth.state)


@router.get(
    "/callback",
    status_code=status.HTTP_302_FOUND,
    summary="OAuth Redirect Target",
    response_class=RedirectResponse,
)
async def oauth_callback(
    connector: Connector,
    settings: AppSettings,
    key: ConnectorKey,
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """
    Exchange the authorization code and redirect to the frontend.

    The redirect carries ``youtube=connected`` on success, or
    ``youtube=error`` with a ``message`` otherwise.
    """
    if not code:
        return frontend_redirect(settings.frontend_origin, youtube="error", message=CODE_REQUIRED)

    result = await connector.exchange_code_and_store(code, key=key)
    if not result.ok:
        logger.warning(
            "YouTube connection failed",
            extra={"key": key, "state": state, "error": result.error},
        )
        return frontend_redirect(
            settings.frontend_origin,
            youtube="error",
            message=result.error or "unknown_error",
        )
    return frontend_redirect(settings.frontend_origin, youtube="connected")


@router.get(
    "/status",
    response_model=ConnectionStatus,
    summary="YouTube Connection Status",
)
async def connection_status(connector: Connector, key: ConnectorKey) -> ConnectionStatus:
    return await connector.get_connection_status(key)


@router.post(
    "/disconnect",
    response_model=OkResponse,
    summary="Disconnect YouTube Account",
)
async def disconnect(connector: Connector, key: ConnectorKey) -> OkResponse:
    """Forget the stored account; succeeds even when nothing was connected."""
    await connector.disconnect(key)
    return OkResponse()
