"""
Tests for trend topic collection.
"""

import httpx
import pytest

from conftest import FakeSearchClient, make_item
from shortsbot.core.config import Settings
from shortsbot.integrations.youtube_client import YouTubeSearchClient
from shortsbot.models.enums import TopicSource
from shortsbot.services.topics import (
    MANUAL_TOPIC_SCORE,
    STUB_TOPIC,
    TopicCollector,
    manual_topic,
    stable_hash,
)


class TestTopicCollector:
    """Tests for TopicCollector.collect."""

    @pytest.mark.asyncio
    async def test_provider_topics_sorted_by_score(self, topic_collector: TopicCollector) -> None:
        topics = await topic_collector.collect(["ai", "space"])

        assert {t.id for t in topics} == {"vid-ai-1", "vid-ai-2", "vid-space-1"}
        assert all(t.source == TopicSource.YOUTUBE for t in topics)
        assert all(50 <= (t.score or 0) <= 99 for t in topics)
        scores = [t.score for t in topics]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_failing_keyword_yields_one_manual_topic(self, settings: Settings) -> None:
        search = FakeSearchClient(pages={"ai": [make_item("vid-1", "AI news")]}, failing={"broken"})
        collector = TopicCollector(search_client=search, settings=settings)

        topics = await collector.collect(["ai", "broken"])

        manual = [t for t in topics if t.source == TopicSource.MANUAL]
        assert len(manual) == 1
        assert manual[0].keyword == "broken"
        assert manual[0].title == "broken trends"
        assert manual[0].score == MANUAL_TOPIC_SCORE
        assert manual[0].id.startswith("manual-")
        # Provider topics always outrank manual ones
        assert topics[-1] == manual[0]

    @pytest.mark.asyncio
    async def test_empty_results_fall_back_to_stub(self, settings: Settings) -> None:
        collector = TopicCollector(search_client=FakeSearchClient(), settings=settings)

        topics = await collector.collect(["nothing here"])

        assert topics == [STUB_TOPIC]
        assert topics[0].id == "stub-1"

    @pytest.mark.asyncio
    async def test_no_keywords_returns_stub(self, topic_collector: TopicCollector) -> None:
        assert await topic_collector.collect([]) == [STUB_TOPIC]

    @pytest.mark.asyncio
    async def test_duplicate_ids_across_keywords_keep_first(self, settings: Settings) -> None:
        shared = make_item("same-id", "Shared video")
        search = FakeSearchClient(pages={"a": [shared], "b": [shared, make_item("other", "Other")]})
        collector = TopicCollector(search_client=search, settings=settings)

        topics = await collector.collect(["a", "b"])

        ids = [t.id for t in topics]
        assert sorted(ids) == ["other", "same-id"]
        assert next(t for t in topics if t.id == "same-id").keyword == "a"

    @pytest.mark.asyncio
    async def test_keywords_stripped_blank_skipped_and_capped(
        self,
        settings: Settings,
    ) -> None:
        search = FakeSearchClient()
        collector = TopicCollector(search_client=search, settings=settings)

        keywords = ["  padded  ", "", "   "] + [f"kw{i}" for i in range(12)]
        await collector.collect(keywords)

        queries = [c["query"] for c in search.calls]
        assert queries[0] == "padded"
        # Only the first ten entries are considered; two of them are blank
        assert len(queries) == 8
        assert all(c["order"] == "relevance" for c in search.calls)

    @pytest.mark.asyncio
    async def test_summary_truncated(self, settings: Settings) -> None:
        search = FakeSearchClient(pages={"long": [make_item("v", "Long", "x" * 500)]})
        collector = TopicCollector(search_client=search, settings=settings)

        topics = await collector.collect(["long"], max_per_keyword=3)

        assert len(topics[0].summary) == 200
        assert search.calls[0]["max_results"] == 3

    @pytest.mark.asyncio
    async def test_missing_api_key_degrades_without_network(self, settings: Settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("search should not be called without a key")

        search = YouTubeSearchClient(
            api_key="",
            settings=settings,
            transport=httpx.MockTransport(handler),
        )
        collector = TopicCollector(search_client=search, settings=settings)

        topics = await collector.collect(["ai"])

        assert topics == [manual_topic("ai")]

    @pytest.mark.asyncio
    async def test_real_client_request_and_mapping(self, settings: Settings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": {"videoId": "abc123"},
                            "snippet": {
                                "title": "Trending clip",
                                "description": "Why everyone is watching",
                                "channelId": "UC1",
                                "publishedAt": "2024-05-01T00:00:00Z",
                            },
                        }
                    ]
                },
            )

        search = YouTubeSearchClient(
            api_key="yt-key",
            settings=settings,
            transport=httpx.MockTransport(handler),
        )
        collector = TopicCollector(search_client=search, settings=settings)

        topics = await collector.collect(["clips"], max_per_keyword=99)

        assert seen[0].url.path == "/youtube/v3/search"
        params = seen[0].url.params
        assert params["key"] == "yt-key"
        assert params["q"] == "clips"
        assert params["maxResults"] == "50"
        assert params["type"] == "video"
        assert topics[0].id == "abc123"
        assert topics[0].published_at == "2024-05-01T00:00:00Z"
        assert topics[0].score == 50 + stable_hash("Trending clipUC1") % 50


def test_stable_hash_is_deterministic() -> None:
    assert stable_hash("hello") == stable_hash("hello")
    assert stable_hash("hello") != stable_hash("world")
    assert manual_topic("x").id == manual_topic("x").id
