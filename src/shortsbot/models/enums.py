"""
Enum definitions for ShortsBot domain records.

These enums define the valid values for status fields and type fields
throughout the application. They are used by the Pydantic schemas, the
job orchestrator and the API layer for consistent validation.
"""

import enum


class JobStatus(str, enum.Enum):
    """
    Pipeline job lifecycle status values.

    Tracks the progression of a job through the Shorts pipeline. The
    non-terminal values double as stage names so a poller can see which
    stage is in flight.

    Attributes:
        PENDING: Job created, no stage started yet
        COLLECTING: Trend topics being collected
        SCRIPT: Script being composed
        IMAGES: Scene images (and optional narration) being produced
        VIDEO: Video being assembled
        UPLOAD: Video being published
        DONE: Pipeline completed
        FAILED: A mandatory stage failed (see Job.error)
        CANCELLED: Cancellation was requested while the job was running
    """

    PENDING = "pending"
    COLLECTING = "collecting"
    SCRIPT = "script"
    IMAGES = "images"
    VIDEO = "video"
    UPLOAD = "upload"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check whether the job can no longer change."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.FAILED, JobStatus.CANCELLED})

# Linear stage order; FAILED and CANCELLED are reachable from any non-terminal state
STAGE_ORDER: tuple[JobStatus, ...] = (
    JobStatus.PENDING,
    JobStatus.COLLECTING,
    JobStatus.SCRIPT,
    JobStatus.IMAGES,
    JobStatus.VIDEO,
    JobStatus.UPLOAD,
    JobStatus.DONE,
)


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    """
    Check whether a job may move from ``current`` to ``target``.

    Args:
        current: Status the job is in
        target: Requested next status

    Returns:
        True if the transition is allowed by the job state machine
    """
    if current.is_terminal:
        return False
    if target in (JobStatus.FAILED, JobStatus.CANCELLED):
        return True
    if target not in STAGE_ORDER:
        return False
    return STAGE_ORDER.index(target) == STAGE_ORDER.index(current) + 1


class TopicSource(str, enum.Enum):
    """
    Origin of a trend topic.

    Attributes:
        YOUTUBE: Returned by the YouTube search provider
        MANUAL: Synthesized locally when the provider was unavailable
    """

    YOUTUBE = "youtube"
    MANUAL = "manual"
