"""
Blog Post API - Access Log Middleware
=======================================

What:  One line per request on the `blogpost.access` logger.
How:   Logs after routing, so the line names the matched route template
       (`/post/{post_id}`) and the concrete post id separately, plus the id
       strategy this process serves. GET /health is not logged.

    INFO  PUT /post/{post_id} 200 3.1ms post=65a4… strategy=objectid [trace-42]

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO. An exception
escaping the handlers is logged as a 500 and re-raised.
"""

import logging
import time
from typing import Any, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogpost.middleware.request_id import request_id_var

logger = logging.getLogger("blogpost.access")

UNLOGGED_ROUTES = {"/health"}


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def _id_strategy(request: Request) -> Optional[str]:
    service = getattr(request.app.state, "post_service", None)
    return getattr(service, "id_strategy", None)


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self._log(request, status, (time.perf_counter() - started) * 1000)

    def _log(self, request: Request, status: int, duration_ms: float) -> None:
        route = _route_template(request)
        if route in UNLOGGED_ROUTES:
            return

        fields: Dict[str, Any] = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "route": route,
            "post_id": request.path_params.get("post_id"),
            "id_strategy": _id_strategy(request),
            "status": status,
            "duration_ms": round(duration_ms, 2),
        }
        logger.log(
            _level_for(status),
            "%s %s %d %.1fms post=%s strategy=%s [%s]",
            fields["method"],
            route,
            status,
            duration_ms,
            fields["post_id"] or "-",
            fields["id_strategy"],
            fields["request_id"],
            extra=fields,
        )
