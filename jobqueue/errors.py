"""
Queue error taxonomy.

Three families of outcome leave the queue besides a successful result:

- Contention outcomes (``ClaimConflict``): an empty queue or a lost race.
  These are expected and callers should poll or back off, not alarm.
- Transaction faults (``TransactionError``): the store could not complete the
  operation. No partial state change is visible and a retry is safe.
- Validation faults (``ConstraintViolation``): the input was rejected before
  any mutation. Retrying the same input will not help.
"""


class QueueError(Exception):
    """Base class for all queue errors."""

    message = "Queue error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class ClaimConflict(QueueError):
    """A claim found nothing it could take."""

    message = "No claimable job"


class NoJobAvailable(ClaimConflict):
    """Every available job is claimed or locked by another consumer."""

    message = "No available jobs"


class JobNotAvailable(ClaimConflict):
    """The targeted job does not exist or is no longer available."""

    message = "Job not found or not available"

    def __init__(self, job_id: int, message: str | None = None):
        self.job_id = job_id
        super().__init__(message)


class TransactionError(QueueError):
    """The store failed to complete a transaction."""

    message = "Transaction failed"


class StoreUnavailable(TransactionError):
    """The backing store could not be reached."""

    message = "Job store unavailable"


class ConstraintViolation(QueueError):
    """Input rejected before reaching the store."""

    message = "Invalid job"
