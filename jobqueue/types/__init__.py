"""
Type definitions for the job queue API.
"""

from jobqueue.types.api import (
    CreateJobRequest,
    ErrorResponse,
    HealthResponse,
    JobResponse,
)

__all__ = [
    "CreateJobRequest",
    "JobResponse",
    "HealthResponse",
    "ErrorResponse",
]
