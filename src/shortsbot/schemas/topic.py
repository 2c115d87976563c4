"""
Pydantic schemas for trend topics.

A trend topic is a candidate subject for one Short. Topics are created by
the topic collector for a single run and never mutated afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field

from shortsbot.models.enums import TopicSource


class TrendTopic(BaseModel):
    """
    A candidate topic returned by trend collection.

    Attributes:
        id: Provider item id, or ``manual-<hash>`` for synthesized topics
        keyword: Keyword that produced the topic
        title: Topic title
        summary: Short description (at most 200 characters)
        source: Where the topic came from
        published_at: Provider publish timestamp, when known
        score: Ranking score; higher is preferred
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Topic identity")
    keyword: str = Field(description="Keyword that produced the topic")
    title: str = Field(description="Topic title")
    summary: str = Field(default="", description="Short topic summary")
    source: TopicSource = Field(description="Topic origin")
    published_at: str | None = Field(default=None, description="Provider publish time")
    score: int | None = Field(default=None, description="Ranking score")


class TrendListResponse(BaseModel):
    """Response body for the trend collection endpoint."""

    topics: list[TrendTopic]
