"""
FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from jobqueue.db.connection import Database
from jobqueue.queue.service import QueueService


def get_database(request: Request) -> Database:
    """
    Get the database handle attached to the application.

    Raises:
        RuntimeError: If the application has no database.
    """
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized for this application")
    return database


def get_queue_service(
    database: Annotated[Database, Depends(get_database)],
) -> QueueService:
    """Build a queue service around the application's database."""
    return QueueService(database)


DatabaseDep = Annotated[Database, Depends(get_database)]
QueueServiceDep = Annotated[QueueService, Depends(get_queue_service)]
