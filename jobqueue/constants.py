"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobStatus(StrEnum):
    """
    Job lifecycle states.

    State transitions:
    - AVAILABLE -> CLAIMED (claim committed)

    Claimed jobs are never returned to the queue.
    """

    AVAILABLE = "available"
    CLAIMED = "claimed"


class ClaimMode(StrEnum):
    """How a consumer selected the job it is claiming."""

    ANY = "any"
    BY_ID = "by_id"


# Default values
DEFAULT_STATUS = JobStatus.AVAILABLE

# Table names
JOB_TABLE = "job_queue"

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_JOBS_CREATED = "jobs_created_total"
METRIC_CLAIM_ATTEMPTS = "claim_attempts_total"
METRIC_CLAIM_LATENCY = "claim_latency_seconds"
METRIC_API_REQUESTS = "api_requests_total"
METRIC_API_LATENCY = "api_request_latency_seconds"

# Trace span names
SPAN_CREATE_JOB = "create_job"
SPAN_LIST_JOBS = "list_jobs"
SPAN_CLAIM_ANY = "claim_any"
SPAN_CLAIM_BY_ID = "claim_by_id"
