"""Per-request correlation: X-Request-ID, the caller's user id, one summary line.

The id is bound to request_id_var for the duration of the request.  The
log handler stamps it onto every record, so a service log line such as
"Submission id=... approved" can be joined to the request that caused it.

The authenticated user id is published by require_user on the request
state and read back here for the summary line.
"""

from __future__ import annotations

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mentor_buddy.core.logging import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
# Caller-supplied ids are echoed into logs; anything else gets a fresh uuid.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _SAFE_REQUEST_ID.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(req_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)

        user_id = getattr(request.state, "user_id", None)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d %.1fms user=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user_id or "anonymous",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "user_id": user_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers[REQUEST_ID_HEADER] = req_id
        return response
