"""
Job queue routes.
"""

from fastapi import APIRouter, Path, status

from jobqueue.api.deps import QueueServiceDep
from jobqueue.constants import API_V1_PREFIX
from jobqueue.types.api import CreateJobRequest, ErrorResponse, JobResponse

router = APIRouter(prefix=f"{API_V1_PREFIX}/jobs", tags=["Jobs"])

STORE_ERRORS = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job",
    description="Add a new job to the queue. Status defaults to available.",
    responses=STORE_ERRORS,
)
async def create_job(
    request: CreateJobRequest,
    service: QueueServiceDep,
) -> JobResponse:
    """
    Create a new job.

    Args:
        request: Job creation request.
        service: Queue service.

    Returns:
        JobResponse with the assigned id and timestamp.
    """
    job = await service.create(payload=request.payload, status=request.status)
    return JobResponse.model_validate(job)


@router.get(
    "",
    response_model=list[JobResponse],
    summary="List jobs",
    description="List every job in ascending id order.",
    responses=STORE_ERRORS,
)
async def list_jobs(service: QueueServiceDep) -> list[JobResponse]:
    """List all jobs ordered by id."""
    jobs = await service.list()
    return [JobResponse.model_validate(job) for job in jobs]


@router.put(
    "/claim",
    response_model=JobResponse,
    summary="Claim the next job",
    description=(
        "Claim the lowest-id available job that is not being claimed "
        "concurrently. Returns 404 when nothing is available."
    ),
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, **STORE_ERRORS},
)
async def claim_job(service: QueueServiceDep) -> JobResponse:
    """Claim any available job."""
    job = await service.claim_any()
    return JobResponse.model_validate(job)


@router.put(
    "/{job_id}/claim",
    response_model=JobResponse,
    summary="Claim a job by id",
    description=(
        "Claim a specific job. Returns 404 when the job does not exist or "
        "has already been claimed."
    ),
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, **STORE_ERRORS},
)
async def claim_job_by_id(
    service: QueueServiceDep,
    job_id: int = Path(..., ge=1),
) -> JobResponse:
    """
    Claim a job by its id.

    Args:
        service: Queue service.
        job_id: The job id.

    Returns:
        JobResponse with status claimed.
    """
    job = await service.claim_by_id(job_id)
    return JobResponse.model_validate(job)
