"""
Trend and avatar endpoints.

Exposes topic collection on its own so a UI can preview candidates before
starting a run.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from shortsbot.core.dependencies import Collector
from shortsbot.schemas.script import AvatarPresetListResponse
from shortsbot.schemas.topic import TrendListResponse
from shortsbot.services.scripting import AVATAR_PRESETS

router = APIRouter()

MAX_PER_KEYWORD_LIMIT = 20


def parse_keywords(raw: str | None) -> list[str]:
    """Split a comma-separated keyword list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@router.get(
    "/trends",
    response_model=TrendListResponse,
    summary="Collect Trend Topics",
)
async def list_trends(
    collector: Collector,
    keywords: Annotated[str | None, Query(description="Comma-separated keywords")] = None,
    max_per_keyword: Annotated[int, Query(description="Results per keyword (1-20)")] = 5,
) -> TrendListResponse:
    """
    Collect trend topics for the given keywords.

    Args:
        keywords: Comma-separated keywords
        max_per_keyword: Provider results per keyword, clamped to 1-20

    Returns:
        Topics sorted by score
    """
    limit = max(1, min(MAX_PER_KEYWORD_LIMIT, max_per_keyword))
    topics = await collector.collect(parse_keywords(keywords), max_per_keyword=limit)
    return TrendListResponse(topics=topics)


@router.get(
    "/avatars",
    response_model=AvatarPresetListResponse,
    summary="List Avatar Presets",
)
async def list_avatars() -> AvatarPresetListResponse:
    """List the character presets accepted as ``character_hint``."""
    return AvatarPresetListResponse(presets=AVATAR_PRESETS)
