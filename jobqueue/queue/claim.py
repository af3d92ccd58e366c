"""
Claim protocol.

A claim locks exactly one available row, flips it to claimed and commits,
all inside a single transaction. The row lock taken by the store is what
guarantees that two consumers never receive the same job; nothing in this
process coordinates claimers.
"""

import logging
import time
from collections.abc import Awaitable, Callable

from opentelemetry.trace import Status, StatusCode
from sqlalchemy.exc import SQLAlchemyError

from jobqueue.constants import SPAN_CLAIM_ANY, SPAN_CLAIM_BY_ID, ClaimMode, JobStatus
from jobqueue.db.connection import Database
from jobqueue.db.models import Job
from jobqueue.db.store import JobStore
from jobqueue.errors import (
    ClaimConflict,
    JobNotAvailable,
    NoJobAvailable,
    TransactionError,
)
from jobqueue.observability.metrics import get_metrics
from jobqueue.observability.tracing import get_tracer

logger = logging.getLogger(__name__)

LockStep = Callable[[JobStore], Awaitable[Job | None]]


class ClaimProtocol:
    """
    Transactional claim of a single job.

    Two entry points share one shape:

    1. Begin a transaction.
    2. Lock a candidate row (skip-locked scan, or a blocking lock on one id).
    3. Update its status to claimed.
    4. Commit.
    5. Return the job with status claimed.

    Any failure before the commit completes rolls the transaction back, so
    a job is either claimed and committed or left untouched.
    """

    def __init__(self, database: Database):
        """
        Initialize the protocol.

        Args:
            database: Handle to the job store.
        """
        self._database = database
        self._metrics = get_metrics()

    async def claim_any(self) -> Job:
        """
        Claim the lowest-id available job that no one else has locked.

        Never waits on row locks held by concurrent claims.

        Returns:
            The claimed job.

        Raises:
            NoJobAvailable: If nothing is available and unlocked.
            TransactionError: If the claim could not be committed.
        """
        return await self._claim(
            mode=ClaimMode.ANY,
            span_name=SPAN_CLAIM_ANY,
            lock=lambda store: store.lock_one_available(),
            conflict=NoJobAvailable,
        )

    async def claim_by_id(self, job_id: int) -> Job:
        """
        Claim a specific job.

        Waits if another transaction holds the row; once it is released the
        row is re-checked, so a job claimed by that transaction is reported
        as not available.

        Args:
            job_id: The job id.

        Returns:
            The claimed job.

        Raises:
            JobNotAvailable: If the job is missing or already claimed.
            TransactionError: If the claim could not be committed.
        """
        return await self._claim(
            mode=ClaimMode.BY_ID,
            span_name=SPAN_CLAIM_BY_ID,
            lock=lambda store: store.lock_available_by_id(job_id),
            conflict=lambda: JobNotAvailable(job_id),
            job_id=job_id,
        )

    async def _claim(
        self,
        mode: ClaimMode,
        span_name: str,
        lock: LockStep,
        conflict: Callable[[], ClaimConflict],
        job_id: int | None = None,
    ) -> Job:
        start_time = time.perf_counter()
        outcome = "error"

        with get_tracer().start_as_current_span(
            span_name,
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            span.set_attribute("claim.mode", mode.value)
            if job_id is not None:
                span.set_attribute("job.id", job_id)

            try:
                async with self._database.session() as session:
                    store = JobStore(session)

                    job = await lock(store)
                    if job is None:
                        outcome = "conflict"
                        await session.rollback()
                        raise conflict()

                    await store.update_status(job.id, JobStatus.CLAIMED)

                    try:
                        await session.commit()
                    except (SQLAlchemyError, OSError) as e:
                        raise TransactionError(
                            f"Failed to commit claim of job {job.id}"
                        ) from e

                    session.expunge(job)

                # The row was read before the update; report the committed state
                job.status = JobStatus.CLAIMED
                outcome = "claimed"
                span.set_attribute("job.id", job.id)

            except ClaimConflict:
                logger.debug(
                    "Nothing to claim",
                    extra={"mode": mode.value, "job_id": job_id},
                )
                raise

            except TransactionError as e:
                logger.warning(
                    f"Claim failed: {e}",
                    extra={"mode": mode.value, "job_id": job_id},
                )
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            finally:
                span.set_attribute("claim.outcome", outcome)
                self._metrics.record_claim(
                    mode=mode.value,
                    outcome=outcome,
                    duration_seconds=time.perf_counter() - start_time,
                )

        logger.info(
            "Claimed job",
            extra={"job_id": job.id, "mode": mode.value},
        )
        return job
