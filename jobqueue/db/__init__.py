"""
Database module.
Contains the database handle, models, and the job store.
"""

from jobqueue.db.connection import Database, create_database, create_test_database
from jobqueue.db.models import Base, Job
from jobqueue.db.store import JobStore

__all__ = [
    "Database",
    "create_database",
    "create_test_database",
    "Job",
    "Base",
    "JobStore",
]
