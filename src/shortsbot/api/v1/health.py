"""
Health check endpoints.

Provides system health information for monitoring and load balancers.
Integrations are optional, so a missing key reports the stage as degraded
rather than the service as unhealthy.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status

from shortsbot import __version__
from shortsbot.core.config import Settings, get_settings
from shortsbot.schemas.common import HealthResponse

router = APIRouter()


def check_integration(configured: bool, name: str, fallback: str) -> dict[str, Any]:
    """
    Report whether an optional integration is configured.

    Args:
        configured: Whether the credentials are present
        name: Integration name for the message
        fallback: What the pipeline does without it

    Returns:
        Health check result for the integration
    """
    if configured:
        return {"status": "healthy", "message": f"{name} configured"}
    return {"status": "not_configured", "message": f"{name} not configured, {fallback}"}


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Returns the health status of the API and its integrations.",
)
async def health_check(
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Perform health check on the API and its integrations.

    Checks:
    - YouTube search key
    - YouTube OAuth client credentials
    - OpenAI image key
    - ElevenLabs narration key

    Returns:
        HealthResponse with overall status and individual check results
    """
    checks = {
        "youtube_search": check_integration(
            bool(settings.youtube_api_key), "YouTube search", "manual topics are used"
        ),
        "youtube_oauth": check_integration(
            settings.youtube_oauth_configured, "YouTube OAuth", "uploads are stubbed"
        ),
        "openai": check_integration(
            bool(settings.openai_api_key), "OpenAI", "placeholder images are used"
        ),
        "elevenlabs": check_integration(
            bool(settings.elevenlabs_api_key), "ElevenLabs", "narration is skipped"
        ),
    }

    if all(c["status"] == "healthy" for c in checks.values()):
        overall_status = "healthy"
    else:
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        environment=settings.environment,
        timestamp=datetime.now(UTC),
        checks=checks,
    )


@router.get(
    "/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness Probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns a simple OK response if the application is running.
    """
    return {"status": "ok"}
