"""Request logging middleware.

Logs every request on arrival and again with its status code when the
response is ready.
"""

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response

logger = logging.getLogger("gamecatalog.middleware.request_logging")


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """HTTP middleware: log method, path, status and elapsed time."""
    started = time.perf_counter()
    logger.info("%s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Request failed without response: %s %s",
            request.method, request.url.path,
        )
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Response completed: %s %s - Status: %d (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response
