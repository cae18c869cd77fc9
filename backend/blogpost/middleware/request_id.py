"""
Blog Post API - Request ID Middleware
=======================================

What:  Tags every request with a correlation ID and returns it in the
       X-Request-ID response header.
How:   A client-sent X-Request-ID is kept only when it is a short token of
       letters, digits, `.`, `_` or `-`; anything else is replaced by a
       fresh ID. The value lands in `request_id_var`, which the access log
       and the error bodies built in main.py read.

    X-Request-ID: trace-42            → trace-42
    X-Request-ID: <script>…           → 3f9c2a1b (generated)
    (absent)                          → 3f9c2a1b (generated)
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,%d}" % MAX_REQUEST_ID_LENGTH)

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(supplied: Optional[str]) -> str:
    """Return the client's ID when it is safe to log and echo, else a new one."""
    if supplied and _REQUEST_ID_PATTERN.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
