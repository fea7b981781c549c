"""
Tally Backend - Access Log Middleware
======================================

What:  One line per request on the "tally.access" logger:

    PATCH /records/3 -> 201 in 4.2ms user=1 rid=5f0c2a9e13d4 ip=127.0.0.1

How:   The session user is read from the ASGI scope after the inner stack has
       run, so a login shows the new user and a logout shows "-". Requests
       without a session are logged with user "-".

5xx lines are logged at ERROR, 4xx at WARNING, everything else at INFO.
Bodies are never logged; /auth bodies carry passwords.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tally.context import SESSION_USER_KEY
from tally.middleware.request_id import current_request_id

logger = logging.getLogger("tally.access")

ANONYMOUS = "-"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def session_user(request: Request) -> str:
    session = request.scope.get("session") or {}
    user_id = session.get(SESSION_USER_KEY)
    return ANONYMOUS if user_id is None else str(user_id)


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    # Health checks and API docs
    SKIPPED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        user = session_user(request)
        rid = current_request_id(request)
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms user=%s rid=%s ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": user,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
