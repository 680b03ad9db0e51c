"""
Product API — Request Logging Middleware
==========================================

What:  One access log line per HTTP request.
How:   Measures time around call_next and logs method, path, status,
       duration, request ID and client IP. Level follows the status code:
       5xx → ERROR, 4xx → WARNING, everything else → INFO.

A request whose handler raises is logged as 500 before the exception
continues to the fallback error handler. Request bodies are never logged.
"""

import logging
import time
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import current_request_id

logger = logging.getLogger("productapi.access")

SKIPPED_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def log_access(request: Request, status: int, started: float) -> None:
    """Emit the access line, with the same fields also passed as `extra`."""
    fields: Dict[str, object] = {
        "request_id": current_request_id(request),
        "method": request.method,
        "path": request.url.path,
        "status": status,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "client_ip": request.client.host if request.client else "unknown",
    }
    logger.log(
        level_for_status(status),
        "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s",
        fields,
        extra=fields,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for every request except health checks."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log_access(request, 500, started)
            raise

        log_access(request, response.status_code, started)
        return response
