"""
ShortsBot domain enums.

Jobs and OAuth token records are in-memory pydantic records (see
``shortsbot.schemas``); this package holds the shared state vocabulary.
"""

from shortsbot.models.enums import (
    STAGE_ORDER,
    TERMINAL_STATUSES,
    JobStatus,
    TopicSource,
    can_transition,
)

__all__ = [
    "JobStatus",
    "TopicSource",
    "STAGE_ORDER",
    "TERMINAL_STATUSES",
    "can_transition",
]
