"""
Pydantic schemas for pipeline jobs.

Defines the job record owned by the orchestrator plus the request and
response bodies of the job endpoints.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from shortsbot.models.enums import JobStatus
from shortsbot.schemas.script import Script
from shortsbot.schemas.topic import TrendTopic


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Job(BaseModel):
    """
    One pipeline run.

    Attributes:
        job_id: Unique job identifier
        status: Current state (stage name while running)
        topic: Topic selected for the run
        script: Composed script
        video_url: Public URL of the published (or stub) video
        video_id: Platform video id
        published: True only when a real upload happened
        error: Failure message, verbatim from the failing stage
        created_at: Creation timestamp
        updated_at: Timestamp of the last state transition
    """

    job_id: str = Field(description="Unique job identifier")
    status: JobStatus = Field(default=JobStatus.PENDING, description="Current job state")
    topic: TrendTopic | None = None
    script: Script | None = None
    video_url: str | None = None
    video_id: str | None = None
    published: bool = False
    error: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        """Check whether the job has finished."""
        return self.status.is_terminal


class RunOptions(BaseModel):
    """
    Options for one pipeline run.

    Attributes:
        character_hint: Avatar preset id used for script and image prompts
        connector_key: Publishing account key
        enable_narration: Run the optional narration stage
    """

    character_hint: str | None = None
    connector_key: str = "default"
    enable_narration: bool = True


class RunRequest(BaseModel):
    """Request body for starting a pipeline run."""

    keywords: list[str] = Field(default_factory=list, description="Trend search keywords")
    character_hint: str | None = Field(default=None, description="Avatar preset id")
    enable_narration: bool = Field(default=True, description="Synthesize scene narration")

    def to_options(self, connector_key: str = "default") -> RunOptions:
        """Build orchestrator options from the request body."""
        return RunOptions(
            character_hint=self.character_hint,
            connector_key=connector_key,
            enable_narration=self.enable_narration,
        )


class JobListResponse(BaseModel):
    """Response body for the job listing endpoint."""

    jobs: list[Job]


class CancelResponse(BaseModel):
    """Response body for job cancellation."""

    job_id: str
    cancelled: bool
