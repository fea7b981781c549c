"""
Tally Backend - Request ID Middleware
======================================

What:  Gives every request a correlation id, shared by the access log, the
       exception handlers and the RequestContext handed to route handlers.
How:   The id lives in a ContextVar for the duration of the request and in
       request.state; `current_request_id()` reads whichever is available.

A client may supply its own id in X-Request-ID. It is kept only when it is a
short token of letters, digits, dots, dashes and underscores, since it is
echoed into log lines and response headers.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def resolve_request_id(header_value: Optional[str]) -> str:
    """The client's id when it is a safe token, otherwise a fresh one."""
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


def current_request_id(request: Optional[Request] = None) -> str:
    if request is not None:
        rid = getattr(request.state, "request_id", "")
        if rid:
            return rid
    return request_id_var.get("")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Outermost middleware; later layers can rely on the id being set."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
