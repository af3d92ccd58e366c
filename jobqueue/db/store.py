"""
Job store for database operations.
Implements the row-level primitives the claim protocol is built from.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import insert, select, update
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.constants import JobStatus
from jobqueue.db.models import Job
from jobqueue.errors import ConstraintViolation, StoreUnavailable, TransactionError

logger = logging.getLogger(__name__)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """
    Map SQLAlchemy and driver exceptions onto the queue error taxonomy.

    Args:
        operation: Name of the store operation, used in messages.

    Raises:
        ConstraintViolation: The store rejected the row.
        StoreUnavailable: The connection could not be used.
        TransactionError: Any other store failure.
    """
    try:
        yield
    except (IntegrityError, DataError) as e:
        raise ConstraintViolation(f"{operation}: {e.orig}") from e
    except (OperationalError, InterfaceError, PoolTimeoutError, OSError) as e:
        raise StoreUnavailable(f"{operation}: job store unavailable") from e
    except SQLAlchemyError as e:
        raise TransactionError(f"{operation}: {e}") from e


def validate_status(status: str | JobStatus) -> JobStatus:
    """
    Coerce a raw status value into a JobStatus.

    Args:
        status: A status name such as "available".

    Returns:
        The matching JobStatus.

    Raises:
        ConstraintViolation: If the value is not a known status.
    """
    try:
        return JobStatus(status)
    except ValueError as e:
        allowed = ", ".join(s.value for s in JobStatus)
        raise ConstraintViolation(
            f"Invalid status {status!r} (expected one of: {allowed})"
        ) from e


class JobStore:
    """
    Store for job rows.

    Every method runs inside the caller's session, so the caller decides
    where the transaction begins and ends. Locking methods come in two named
    flavours because their blocking behaviour differs:

    - lock_one_available skips rows locked by other transactions
    - lock_available_by_id waits for the lock on the one row it targets
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the store with a database session.

        Args:
            session: The async database session.
        """
        self._session = session

    async def insert(
        self,
        payload: str,
        status: str | JobStatus = JobStatus.AVAILABLE,
    ) -> Job:
        """
        Insert a new job row.

        Args:
            payload: Opaque job payload.
            status: Initial status.

        Returns:
            The persisted Job with its id and timestamp populated.
        """
        status = validate_status(status)
        stmt = insert(Job).values(status=status, payload=payload).returning(Job)

        with translate_store_errors("insert"):
            result = await self._session.execute(stmt)
            job = result.scalar_one()

        logger.info(
            "Inserted job",
            extra={"job_id": job.id, "status": job.status.value},
        )
        return job

    async def scan_all(self) -> Sequence[Job]:
        """
        Return every job ordered by id ascending. Takes no locks.

        Returns:
            List of jobs.
        """
        stmt = (
            select(Job)
            .order_by(Job.id.asc())
            .execution_options(populate_existing=True)
        )
        with translate_store_errors("scan_all"):
            result = await self._session.execute(stmt)
            return result.scalars().all()

    async def lock_one_available(self) -> Job | None:
        """
        Lock the lowest-id available job, skipping rows locked elsewhere.

        Uses FOR UPDATE SKIP LOCKED so that concurrent claimers never queue
        up behind one another: each one moves on to the next eligible row.

        Returns:
            The locked Job, or None if nothing is available and unlocked.
        """
        stmt = (
            select(Job)
            .where(Job.status == JobStatus.AVAILABLE)
            .order_by(Job.id.asc())
            .limit(1)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        with translate_store_errors("lock_one_available"):
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()

    async def lock_available_by_id(self, job_id: int) -> Job | None:
        """
        Lock a specific job if it is available, waiting on its row lock.

        If another transaction holds the row, this blocks until it finishes;
        the status predicate is then re-checked against the committed row,
        so a job claimed in the meantime comes back as None.

        Args:
            job_id: The job id.

        Returns:
            The locked Job, or None if it is missing or not available.
        """
        stmt = (
            select(Job)
            .where(Job.id == job_id, Job.status == JobStatus.AVAILABLE)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        with translate_store_errors("lock_available_by_id"):
            result = await self._session.execute(stmt)
            return result.scalar_one_or_none()

    async def update_status(self, job_id: int, new_status: JobStatus) -> None:
        """
        Set the status of a job locked in this session.

        Args:
            job_id: The job id.
            new_status: The status to write.

        Raises:
            TransactionError: If no row was updated.
        """
        stmt = (
            update(Job)
            .where(Job.id == job_id)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        with translate_store_errors("update_status"):
            result = await self._session.execute(stmt)

        if result.rowcount != 1:
            raise TransactionError(f"update_status: job {job_id} not updated")
