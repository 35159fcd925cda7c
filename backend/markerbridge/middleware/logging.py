"""
markerbridge: Request Logging Middleware
===========================================

What:  One log line when a request arrives and one when its response is ready.
How:   Starlette BaseHTTPMiddleware wrapping every route.

Log lines (logger "markerbridge.access"):
    GET /index.html
    GET /index.html 200 1.3ms from 127.0.0.1

The arrival line is written before any routing happens, so even requests
that end in 404/405 show up. Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("markerbridge.access")


def request_path(request: Request) -> str:
    """
    Path as the client sent it, without percent-decoding.

    Falls back to the decoded path when the server gives no raw_path.
    Some ASGI clients put the query inside raw_path, so it is cut off here.
    """
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path
    return raw_path.decode("latin-1").split("?", 1)[0]


def request_target(request: Request) -> str:
    """Path plus query string, as the client sent it in the request line."""
    target = request_path(request)
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        target += "?" + query
    return target


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method and URL on arrival, then status and duration on completion.

    Completion level follows the status:
        5xx → ERROR, 4xx → WARNING, else INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        method = request.method
        target = request_target(request)
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"

        logger.info("%s %s", method, target)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            method,
            target,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": method,
                "path": target,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
