"""Request access logging."""

import logging
from time import perf_counter

from fastapi import Request

from dockgate.observability.metrics import metrics

logger = logging.getLogger("dockgate.access")


async def access_log_middleware(request: Request, call_next):
    """Log one line per HTTP request with status and duration."""
    started = perf_counter()
    response = await call_next(request)
    elapsed_ms = (perf_counter() - started) * 1000.0

    metrics.inc_counter("http.requests")
    metrics.observe("http.duration_ms", elapsed_ms)

    client = request.client.host if request.client else "unknown"
    logger.info(
        f"{client} {request.method} {request.url.path} "
        f"{response.status_code} {elapsed_ms:.1f}ms"
    )
    return response
