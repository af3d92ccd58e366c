"""
Request metrics middleware.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from jobqueue.observability.metrics import get_metrics


async def record_request_metrics(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """
    Record request count and latency per route.

    Routes are labelled by their path template so job ids do not explode
    label cardinality.
    """
    start_time = time.perf_counter()
    response = await call_next(request)

    route = request.scope.get("route")
    endpoint = getattr(route, "path", None) or "unmatched"

    get_metrics().record_api_request(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
        duration_seconds=time.perf_counter() - start_time,
    )
    return response
