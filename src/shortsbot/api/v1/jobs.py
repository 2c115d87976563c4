"""
Pipeline job endpoints.

Starts Shorts pipeline runs, either awaited or in the background, and
exposes job status for polling and cancellation.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from shortsbot.core.dependencies import ConnectorKey, Orchestrator
from shortsbot.core.exceptions import NotFoundError
from shortsbot.schemas.job import CancelResponse, Job, JobListResponse, RunRequest

router = APIRouter()

MAX_LIST_LIMIT = 100


@router.post(
    "/run",
    response_model=Job,
    summary="Run Pipeline",
    description="Run the pipeline to completion and return the finished job.",
)
async def run_pipeline(
    request: RunRequest,
    orchestrator: Orchestrator,
    key: ConnectorKey,
) -> Job:
    """
    Run one job synchronously.

    Stage failures are reported on the returned job (``status=failed``),
    not as HTTP errors.
    """
    return await orchestrator.run(request.keywords, request.to_options(connector_key=key))


@router.post(
    "/jobs",
    response_model=Job,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit Pipeline Job",
)
async def submit_job(
    request: RunRequest,
    orchestrator: Orchestrator,
    key: ConnectorKey,
) -> Job:
    """Start a job in the background and return it while still pending."""
    return await orchestrator.submit(request.keywords, request.to_options(connector_key=key))


@router.get(
    "/jobs",
    response_model=JobListResponse,
    summary="List Jobs",
)
async def list_jobs(
    orchestrator: Orchestrator,
    limit: Annotated[int, Query(description="Maximum jobs to return (1-100)")] = 20,
) -> JobListResponse:
    """List jobs, most recently updated first."""
    limit = max(1, min(MAX_LIST_LIMIT, limit))
    return JobListResponse(jobs=await orchestrator.list_jobs(limit=limit))


@router.get(
    "/jobs/{job_id}",
    response_model=Job,
    summary="Get Job",
)
async def get_job(job_id: str, orchestrator: Orchestrator) -> Job:
    """
    Get a job by id.

    Raises:
        NotFoundError: If the job does not exist
    """
    job = await orchestrator.get_job(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    return job


@router.post(
    "/jobs/{job_id}/cancel",
    response_model=CancelResponse,
    summary="Cancel Job",
)
async def cancel_job(job_id: str, orchestrator: Orchestrator) -> CancelResponse:
    """
    Request cancellation of a running job.

    ``cancelled`` is False when the job already finished.

    Raises:
        NotFoundError: If the job does not exist
    """
    if await orchestrator.get_job(job_id) is None:
        raise NotFoundError("Job", job_id)
    return CancelResponse(job_id=job_id, cancelled=await orchestrator.cancel(job_id))
