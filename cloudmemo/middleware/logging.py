"""
CloudMemo Backend - Request Logging Middleware
================================================

What:  One access-log line per HTTP request with status and duration.
How:   Times the downstream call and logs at a level chosen by status code.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Logged: method, path, status, duration, request ID, client IP.
Never logged: request bodies (memo and clip text) and the Authorization
header (the bearer token is the whole credential).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cloudmemo.middleware.request_id import request_id_var

logger = logging.getLogger("cloudmemo.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logging with severity by outcome.

    5xx → ERROR, 4xx → WARNING, everything else → INFO. A burst of 401
    warnings in the log is what an expired editor session looks like.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
