"""Prometheus instrumentation for every HTTP request.

Path parameters (ids) are collapsed to the route template so that
/api/buddies/<uuid> does not create one time series per buddy.  Requests
that match no route share the "unmatched" label.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from mentor_buddy.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

UNMATCHED = "unmatched"
_UNINSTRUMENTED_PATHS = frozenset({"/metrics"})


def _endpoint_label(request: Request) -> str:
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED)
    return UNMATCHED


def _record(method: str, endpoint: str, status_code: int, elapsed: float) -> None:
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
    REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(elapsed)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _UNINSTRUMENTED_PATHS:
            return await call_next(request)

        endpoint = _endpoint_label(request)
        started = time.perf_counter()
        with ACTIVE_REQUESTS.track_inprogress():
            try:
                response = await call_next(request)
            except Exception:
                # unhandled errors surface to the client as a 500
                _record(request.method, endpoint, 500, time.perf_counter() - started)
                raise
        _record(request.method, endpoint, response.status_code, time.perf_counter() - started)
        return response
