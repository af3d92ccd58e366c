"""
API request and response type definitions.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jobqueue.constants import JobStatus


class CreateJobRequest(BaseModel):
    """Request body for creating a new job."""

    payload: str = Field(..., description="Opaque job payload")
    status: JobStatus = Field(
        default=JobStatus.AVAILABLE, description="Initial job status"
    )


class JobResponse(BaseModel):
    """Job details response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    status: JobStatus
    payload: str
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
