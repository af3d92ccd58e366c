"""
Mapping of queue errors onto HTTP responses.

Contention outcomes use 404 so clients can tell an empty queue or a lost
race apart from a fault (5xx) and simply poll again.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from jobqueue.errors import (
    ClaimConflict,
    ConstraintViolation,
    QueueError,
    StoreUnavailable,
    TransactionError,
)
from jobqueue.types.api import ErrorResponse

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases
ERROR_STATUS_CODES: list[tuple[type[QueueError], int, str]] = [
    (ClaimConflict, status.HTTP_404_NOT_FOUND, "not_available"),
    (ConstraintViolation, 422, "invalid_job"),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE, "store_unavailable"),
    (TransactionError, status.HTTP_500_INTERNAL_SERVER_ERROR, "transaction_error"),
]


def status_for_error(exc: QueueError) -> tuple[int, str]:
    """
    Get the HTTP status code and error code for a queue error.

    Args:
        exc: The queue error.

    Returns:
        Tuple of (status_code, error_code).
    """
    for error_type, status_code, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code, code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "queue_error"


async def queue_error_handler(request: Request, exc: QueueError) -> JSONResponse:
    """Render a queue error as an ErrorResponse."""
    status_code, code = status_for_error(exc)

    if status_code >= 500:
        logger.error(
            f"Request failed: {exc}",
            extra={"path": request.url.path, "error": code},
        )

    body = ErrorResponse(error=code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the queue error handler on an application."""
    app.add_exception_handler(QueueError, queue_error_handler)
