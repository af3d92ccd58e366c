"""
HTTP client for the job queue API.
"""

import logging

import httpx

from jobqueue.constants import API_V1_PREFIX, JobStatus
from jobqueue.types.api import JobResponse

logger = logging.getLogger(__name__)


class QueueClientError(Exception):
    """The queue API returned a fault or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class QueueClient:
    """
    Synchronous client for the queue API.

    Claims that find nothing (an empty queue or a lost race) return None;
    only faults raise.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the API, e.g. http://localhost:8000.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "QueueClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def create_job(
        self,
        payload: str,
        status: JobStatus | str = JobStatus.AVAILABLE,
    ) -> JobResponse:
        """Create a job and return it."""
        response = self._request(
            "POST",
            f"{API_V1_PREFIX}/jobs",
            json={"payload": payload, "status": str(status)},
        )
        return JobResponse.model_validate(response.json())

    def list_jobs(self) -> list[JobResponse]:
        """List all jobs in id order."""
        response = self._request("GET", f"{API_V1_PREFIX}/jobs")
        return [JobResponse.model_validate(item) for item in response.json()]

    def claim_job(self) -> JobResponse | None:
        """Claim any available job, or return None if there is none."""
        response = self._request(
            "PUT", f"{API_V1_PREFIX}/jobs/claim", allow_not_available=True
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return JobResponse.model_validate(response.json())

    def claim_job_by_id(self, job_id: int) -> JobResponse | None:
        """Claim a job by id, or return None if it is not available."""
        response = self._request(
            "PUT", f"{API_V1_PREFIX}/jobs/{job_id}/claim", allow_not_available=True
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return JobResponse.model_validate(response.json())

    def _request(
        self,
        method: str,
        url: str,
        allow_not_available: bool = False,
        **kwargs,
    ) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise QueueClientError(f"Error sending request to {url}: {e}") from e

        # A 404 from a wrong URL carries no queue error code
        if allow_not_available and _is_not_available(response):
            return response

        if response.is_error:
            raise QueueClientError(
                f"{method} {url} failed with status {response.status_code}: "
                f"{_error_detail(response)}",
                status_code=response.status_code,
            )

        return response


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


def _is_not_available(response: httpx.Response) -> bool:
    if response.status_code != httpx.codes.NOT_FOUND:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and body.get("error") == "not_available"
