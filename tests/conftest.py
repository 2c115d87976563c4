"""
Pytest configuration and fixtures for ShortsBot API tests.

Provides isolated stores, fake providers, a controllable clock and a test
client whose service dependencies are wired to those fakes.
"""

import os
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

# Set test environment before importing application
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["YOUTUBE_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["YOUTUBE_CLIENT_ID"] = ""
os.environ["YOUTUBE_CLIENT_SECRET"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.dependencies import (
    get_account_connector,
    get_orchestrator,
    get_topic_collector,
)
from shortsbot.core.exceptions import ExternalServiceError
from shortsbot.integrations.google_oauth_client import GoogleOAuthClient
from shortsbot.integrations.youtube_client import (
    SearchPage,
    YouTubeSearchItem,
    YouTubeUploadClient,
)
from shortsbot.main import app
from shortsbot.services.account import AccountConnector
from shortsbot.services.orchestrator import JobOrchestrator
from shortsbot.services.topics import TopicCollector
from shortsbot.stores.jobs import InMemoryJobStore
from shortsbot.stores.tokens import InMemoryTokenStore

Handler = Callable[[httpx.Request], httpx.Response]


class FakeSearchClient:
    """
    Stands in for YouTubeSearchClient.

    ``pages`` maps a keyword to its items; keywords listed in ``failing``
    raise a provider error. Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        pages: dict[str, list[YouTubeSearchItem]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.failing = failing or set()
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def search_videos(
        self,
        query: str,
        max_results: int = 10,
        order: str = "relevance",
        page_token: str | None = None,
    ) -> SearchPage:
        self.calls.append({"query": query, "max_results": max_results, "order": order})
        if query in self.failing:
            raise ExternalServiceError(service="YouTube", message="YouTube API error: 403")
        return SearchPage(items=list(self.pages.get(query, [])))

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Epoch-milliseconds clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1000)


class OAuthServer:
    """
    Scripted Google token endpoint and YouTube upload endpoint.

    Each handler list is consumed in order; requests are recorded so tests
    can assert on what was sent.
    """

    def __init__(self) -> None:
        self.token_responses: list[httpx.Response] = []
        self.upload_responses: list[httpx.Response] = []
        self.token_requests: list[httpx.Request] = []
        self.upload_requests: list[httpx.Request] = []

    def token_handler(self, request: httpx.Request) -> httpx.Response:
        self.token_requests.append(request)
        if not self.token_responses:
            return httpx.Response(500, json={"error": "unexpected token call"})
        return self.token_responses.pop(0)

    def upload_handler(self, request: httpx.Request) -> httpx.Response:
        self.upload_requests.append(request)
        if not self.upload_responses:
            return httpx.Response(500, json={"error": {"message": "unexpected upload"}})
        return self.upload_responses.pop(0)


def make_item(video_id: str, title: str, description: str = "", channel_id: str = "ch") -> YouTubeSearchItem:
    """Build a search hit."""
    return YouTubeSearchItem(
        video_id=video_id,
        title=title,
        description=description,
        channel_id=channel_id,
        published_at="2024-01-01T00:00:00Z",
    )


@pytest.fixture
def settings(tmp_path: Any) -> Settings:
    """Settings with OAuth configured and every media provider disabled."""
    return Settings(
        _env_file=None,
        youtube_api_key="",
        youtube_client_id="test-client-id",
        youtube_client_secret="test-client-secret",
        youtube_redirect_uri="http://localhost:4000/api/v1/shorts/youtube/callback",
        frontend_origin="http://localhost:5173",
        openai_api_key="",
        elevenlabs_api_key="",
        video_output_dir=str(tmp_path),
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings with no OAuth credentials."""
    return Settings(
        _env_file=None,
        youtube_client_id="",
        youtube_client_secret="",
        openai_api_key="",
        elevenlabs_api_key="",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def oauth_server() -> OAuthServer:
    return OAuthServer()


@pytest.fixture
def search_client() -> FakeSearchClient:
    return FakeSearchClient(
        pages={
            "ai": [
                make_item("vid-ai-1", "AI model beats benchmark", "A new model tops the charts."),
                make_item("vid-ai-2", "AI in phones", "Assistants move on-device."),
            ],
            "space": [make_item("vid-space-1", "Rocket landing", "Booster caught by the tower.")],
        }
    )


@pytest.fixture
def connector(
    settings: Settings,
    oauth_server: OAuthServer,
    clock: FakeClock,
) -> AccountConnector:
    """Connector talking to the scripted OAuth and upload endpoints."""
    return AccountConnector(
        token_store=InMemoryTokenStore(),
        settings=settings,
        oauth_client=GoogleOAuthClient(
            settings=settings,
            transport=httpx.MockTransport(oauth_server.token_handler),
        ),
        upload_client=YouTubeUploadClient(
            settings=settings,
            transport=httpx.MockTransport(oauth_server.upload_handler),
        ),
        clock=clock,
    )


@pytest.fixture
def topic_collector(search_client: FakeSearchClient, settings: Settings) -> TopicCollector:
    return TopicCollector(search_client=search_client, settings=settings)


@pytest.fixture
def orchestrator(
    topic_collector: TopicCollector,
    connector: AccountConnector,
    settings: Settings,
) -> JobOrchestrator:
    """Orchestrator with fake search, placeholder images and no narration."""
    return JobOrchestrator(
        job_store=InMemoryJobStore(),
        topic_collector=topic_collector,
        account_connector=connector,
        settings=settings,
    )


@pytest.fixture
def client(
    orchestrator: JobOrchestrator,
    connector: AccountConnector,
    topic_collector: TopicCollector,
    settings: Settings,
) -> Generator[TestClient, None, None]:
    """
    Provide a test client for API testing.

    Service dependencies are replaced by the per-test fakes.
    """
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_account_connector] = lambda: connector
    app.dependency_overrides[get_topic_collector] = lambda: topic_collector
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
