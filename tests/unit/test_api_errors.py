"""
Unit tests for mapping queue errors onto HTTP status codes.
"""

import pytest

from jobqueue.api.errors import status_for_error
from jobqueue.errors import (
    ConstraintViolation,
    JobNotAvailable,
    NoJobAvailable,
    QueueError,
    StoreUnavailable,
    TransactionError,
)


@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (NoJobAvailable(), 404, "not_available"),
        (JobNotAvailable(3), 404, "not_available"),
        (ConstraintViolation("bad status"), 422, "invalid_job"),
        (StoreUnavailable(), 503, "store_unavailable"),
        (TransactionError(), 500, "transaction_error"),
        (QueueError(), 500, "queue_error"),
    ],
)
def test_status_for_error(error: QueueError, status_code: int, code: str):
    assert status_for_error(error) == (status_code, code)


def test_contention_is_distinct_from_faults():
    contention = {status_for_error(NoJobAvailable())[0], status_for_error(JobNotAvailable(1))[0]}
    faults = {status_for_error(StoreUnavailable())[0], status_for_error(TransactionError())[0]}

    assert contention.isdisjoint(faults)


def test_default_messages():
    assert str(NoJobAvailable()) == "No available jobs"
    assert str(JobNotAvailable(1)) == "Job not found or not available"
    assert str(StoreUnavailable("insert: down")) == "insert: down"
