"""
Queue service.

Stateless facade over the job store and the claim protocol. It holds only
the injected database handle, so any number of service instances may run
against the same store.
"""

import logging
from collections.abc import Sequence

from jobqueue.constants import DEFAULT_STATUS, SPAN_CREATE_JOB, SPAN_LIST_JOBS, JobStatus
from jobqueue.db.connection import Database
from jobqueue.db.models import Job
from jobqueue.db.store import JobStore, translate_store_errors, validate_status
from jobqueue.errors import ConstraintViolation
from jobqueue.observability.metrics import get_metrics
from jobqueue.observability.tracing import get_tracer
from jobqueue.queue.claim import ClaimProtocol

logger = logging.getLogger(__name__)


class QueueService:
    """Create, list and claim jobs."""

    def __init__(self, database: Database):
        """
        Initialize the service.

        Args:
            database: Handle to the job store.
        """
        self._database = database
        self._claims = ClaimProtocol(database)
        self._metrics = get_metrics()

    async def create(
        self,
        payload: str | None,
        status: str | JobStatus | None = None,
    ) -> Job:
        """
        Enqueue a new job.

        Input is validated before the store is touched.

        Args:
            payload: Opaque job payload. Required.
            status: Initial status. Defaults to available.

        Returns:
            The created job with id and timestamp assigned.

        Raises:
            ConstraintViolation: If the payload is missing or the status is unknown.
            StoreUnavailable: If the store cannot be reached.
        """
        if payload is None:
            raise ConstraintViolation("payload is required")
        if not isinstance(payload, str):
            raise ConstraintViolation("payload must be a string")
        job_status = validate_status(status if status is not None else DEFAULT_STATUS)

        with get_tracer().start_as_current_span(SPAN_CREATE_JOB):
            async with self._database.session() as session:
                job = await JobStore(session).insert(payload=payload, status=job_status)
                with translate_store_errors("create"):
                    await session.commit()

        self._metrics.record_job_created(status=job_status.value)
        logger.info(
            "Created job",
            extra={"job_id": job.id, "status": job_status.value},
        )
        return job

    async def list(self) -> Sequence[Job]:
        """
        List all jobs ordered by id.

        Takes no locks, so a concurrent claim may or may not be reflected.

        Returns:
            Jobs in ascending id order.
        """
        with get_tracer().start_as_current_span(SPAN_LIST_JOBS):
            async with self._database.session() as session:
                return await JobStore(session).scan_all()

    async def claim_any(self) -> Job:
        """Claim the next available job. See ClaimProtocol.claim_any."""
        return await self._claims.claim_any()

    async def claim_by_id(self, job_id: int) -> Job:
        """Claim a specific job. See ClaimProtocol.claim_by_id."""
        return await self._claims.claim_by_id(job_id)
