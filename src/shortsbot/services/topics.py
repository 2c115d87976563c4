"""
Trend topic collection service.

Queries the YouTube search provider per keyword and normalizes the hits
into ``TrendTopic`` candidates. A failing keyword degrades to one manual
topic for that keyword, and an empty batch degrades to a global stub, so
collection never comes back empty.
"""

import hashlib
import logging

from shortsbot.core.config import Settings, get_settings
from shortsbot.integrations.youtube_client import YouTubeSearchClient
from shortsbot.models.enums import TopicSource
from shortsbot.schemas.topic import TrendTopic

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10
DEFAULT_MAX_PER_KEYWORD = 5
SUMMARY_MAX_LENGTH = 200

# Provider topics score in [PROVIDER_SCORE_FLOOR, 99]; manual topics always rank below
PROVIDER_SCORE_FLOOR = 50
MANUAL_TOPIC_SCORE = 40
STUB_TOPIC_SCORE = 60

STUB_TOPIC = TrendTopic(
    id="stub-1",
    keyword="Shorts",
    title="YouTube Shorts trend example",
    summary="The agent collects a trend, then writes the script and renders images and video.",
    source=TopicSource.MANUAL,
    score=STUB_TOPIC_SCORE,
)


def stable_hash(text: str) -> int:
    """Deterministic non-negative hash, stable across processes."""
    return int(hashlib.sha1(text.encode("utf-8")).hexdigest()[:8], 16)


def manual_topic_id(title: str, keyword: str) -> str:
    """Identity for a topic not backed by a provider item."""
    return f"manual-{stable_hash(title + keyword)}"


def manual_topic(keyword: str) -> TrendTopic:
    """Placeholder topic used when the provider fails for ``keyword``."""
    title = f"{keyword} trends"
    return TrendTopic(
        id=manual_topic_id(title, keyword),
        keyword=keyword,
        title=title,
        summary="Manual placeholder topic (search provider unavailable)",
        source=TopicSource.MANUAL,
        score=MANUAL_TOPIC_SCORE,
    )


class TopicCollector:
    """
    Collects candidate topics for a keyword batch.

    Attributes:
        search_client: YouTube search client (anything exposing ``search_videos``)
    """

    def __init__(
        self,
        search_client: YouTubeSearchClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.search_client = search_client or YouTubeSearchClient(settings=self._settings)

    async def aclose(self) -> None:
        await self.search_client.aclose()

    async def collect(
        self,
        keywords: list[str],
        max_per_keyword: int = DEFAULT_MAX_PER_KEYWORD,
    ) -> list[TrendTopic]:
        """
        Collect topics for up to ten keywords.

        Args:
            keywords: Search keywords; blanks are skipped, extras ignored
            max_per_keyword: Provider results requested per keyword

        Returns:
            Non-empty list sorted by score, highest first (ties keep
            collection order)
        """
        topics: list[TrendTopic] = []
        seen: set[str] = set()

        for raw_keyword in keywords[:MAX_KEYWORDS]:
            keyword = (raw_keyword or "").strip()
            if not keyword:
                continue

            try:
                page = await self.search_client.search_videos(
                    keyword,
                    max_results=max_per_keyword,
                    order="relevance",
                )
            except Exception as e:
                logger.warning(
                    "Trend search failed, using manual topic",
                    extra={"keyword": keyword, "error": str(e)},
                )
                fallback = manual_topic(keyword)
                if fallback.id not in seen:
                    seen.add(fallback.id)
                    topics.append(fallback)
                continue

            for item in page.items:
                topic_id = item.video_id or manual_topic_id(item.title, keyword)
                if topic_id in seen:
                    continue
                seen.add(topic_id)
                topics.append(
                    TrendTopic(
                        id=topic_id,
                        keyword=keyword,
                        title=item.title,
                        summary=item.description[:SUMMARY_MAX_LENGTH],
                        source=TopicSource.YOUTUBE,
                        published_at=item.published_at or None,
                        score=PROVIDER_SCORE_FLOOR
                        + stable_hash(item.title + item.channel_id) % (100 - PROVIDER_SCORE_FLOOR),
                    )
                )

        if not topics:
            logger.info("No trend topics collected, using stub topic")
            topics.append(STUB_TOPIC)

        # sorted() is stable, so equal scores keep collection order
        return sorted(topics, key=lambda t: t.score or 0, reverse=True)
