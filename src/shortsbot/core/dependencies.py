"""
FastAPI dependency injection functions.

This module provides the process-wide service instances and common request
parameters. Services are built once and cached; tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from shortsbot.core.config import Settings, get_settings
from shortsbot.integrations.elevenlabs_client import get_elevenlabs_client
from shortsbot.integrations.openai_client import get_openai_image_client
from shortsbot.services.account import DEFAULT_KEY, AccountConnector
from shortsbot.services.narration import NarrationSynthesizer
from shortsbot.services.orchestrator import JobOrchestrator
from shortsbot.services.rendering import SceneRenderer
from shortsbot.services.topics import TopicCollector
from shortsbot.stores.jobs import InMemoryJobStore, JobStore
from shortsbot.stores.tokens import InMemoryTokenStore, TokenStore


@lru_cache
def get_job_store() -> JobStore:
    """Shared job store."""
    return InMemoryJobStore()


@lru_cache
def get_token_store() -> TokenStore:
    """Shared OAuth token store."""
    return InMemoryTokenStore()


@lru_cache
def get_topic_collector() -> TopicCollector:
    return TopicCollector(settings=get_settings())


@lru_cache
def get_account_connector() -> AccountConnector:
    """Shared connector, so every request sees the same refresh locks."""
    return AccountConnector(token_store=get_token_store(), settings=get_settings())


@lru_cache
def get_orchestrator() -> JobOrchestrator:
    """
    Shared job orchestrator wired from settings.

    Image and narration providers are enabled only when their API keys
    are configured.
    """
    settings = get_settings()
    return JobOrchestrator(
        job_store=get_job_store(),
        topic_collector=get_topic_collector(),
        scene_renderer=SceneRenderer(image_client=get_openai_image_client(settings)),
        narration_synthesizer=NarrationSynthesizer(
            tts_client=get_elevenlabs_client(settings),
            settings=settings,
        ),
        account_connector=get_account_connector(),
        settings=settings,
    )


def reset_services() -> None:
    """Drop the cached services so the next startup builds fresh clients."""
    for provider in (get_orchestrator, get_account_connector, get_topic_collector):
        provider.cache_clear()


def get_connector_key(
    x_connector_key: Annotated[
        str | None,
        Header(description="Publishing account key (defaults to 'default')"),
    ] = None,
) -> str:
    """
    Extract the connector key from the request header.

    Args:
        x_connector_key: Value from X-Connector-Key header

    Returns:
        The stripped key, or the default key when absent or blank
    """
    key = (x_connector_key or "").strip()
    return key or DEFAULT_KEY


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
Orchestrator = Annotated[JobOrchestrator, Depends(get_orchestrator)]
Connector = Annotated[AccountConnector, Depends(get_account_connector)]
Collector = Annotated[TopicCollector, Depends(get_topic_collector)]
ConnectorKey = Annotated[str, Depends(get_connector_key)]
