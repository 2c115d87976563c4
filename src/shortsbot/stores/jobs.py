"""In-memory job store for pipeline status tracking."""

from abc import ABC, abstractmethod
from itertools import count
from threading import Lock

from shortsbot.schemas.job import Job


class JobStore(ABC):
    """
    Storage for job records.

    Implementations return copies so callers cannot mutate stored state;
    the orchestrator persists every transition through :meth:`save`.
    """

    @abstractmethod
    async def get(self, job_id: str) -> Job | None:
        """Return the job or None when unknown."""

    @abstractmethod
    async def save(self, job: Job) -> None:
        """Insert or replace a job record."""

    @abstractmethod
    async def list(self, limit: int = 20) -> list[Job]:
        """Return up to ``limit`` jobs, most recently updated first."""

    @abstractmethod
    async def delete(self, job_id: str) -> bool:
        """Remove a job; returns False when it did not exist."""


class InMemoryJobStore(JobStore):
    """Lock-guarded store; safe to share between concurrently running jobs."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        # Save order breaks updated_at ties so the latest write sorts first
        self._revisions: dict[str, int] = {}
        self._counter = count(1)
        self._lock = Lock()

    async def get(self, job_id: str) -> Job | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    async def save(self, job: Job) -> None:
        with self._lock:
            self._jobs[job.job_id] = job.model_copy(deep=True)
            self._revisions[job.job_id] = next(self._counter)

    async def list(self, limit: int = 20) -> list[Job]:
        with self._lock:
            ordered = sorted(
                self._jobs.values(),
                key=lambda j: (j.updated_at, self._revisions[j.job_id]),
                reverse=True,
            )
            return [job.model_copy(deep=True) for job in ordered[: max(0, limit)]]

    async def delete(self, job_id: str) -> bool:
        with self._lock:
            self._revisions.pop(job_id, None)
            return self._jobs.pop(job_id, None) is not None
