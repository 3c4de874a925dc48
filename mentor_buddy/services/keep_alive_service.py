"""Backend keep-alive ping.

Called by the scheduled cron endpoint so a free-tier host never idles the
backend out.  The outcome is always reported as data, never raised.
"""

from __future__ import annotations

import logging
import time

import httpx

from mentor_buddy.core.metrics import KEEP_ALIVE_PINGS
from mentor_buddy.models.common import utcnow

logger = logging.getLogger(__name__)

USER_AGENT = "Mentor-Buddy-Keep-Alive/1.0"
PING_TIMEOUT_SECONDS = 10.0


async def ping_backend(
    backend_url: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    health_endpoint = f"{backend_url.rstrip('/')}/api/health"
    logger.info("Pinging backend at %s", health_endpoint)

    started = time.perf_counter()
    try:
        async with httpx.AsyncClient(
            timeout=PING_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.get(
                health_endpoint, headers={"User-Agent": USER_AGENT}
            )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.error("Failed to reach backend at %s: %r", health_endpoint, exc)
        KEEP_ALIVE_PINGS.labels(result="unreachable").inc()
        return {
            "success": False,
            "message": "Failed to reach backend",
            "error": str(exc) or type(exc).__name__,
            "backend": {"url": health_endpoint},
            "timestamp": utcnow().isoformat(),
        }

    response_ms = round((time.perf_counter() - started) * 1000)
    healthy = response.is_success
    logger.info("Backend responded: %d in %dms", response.status_code, response_ms)
    if not healthy:
        logger.error("Backend unhealthy: %d", response.status_code)
    KEEP_ALIVE_PINGS.labels(result="healthy" if healthy else "unhealthy").inc()

    return {
        "success": healthy,
        "message": (
            "Backend is alive" if healthy else "Backend responded but may be unhealthy"
        ),
        "backend": {
            "url": health_endpoint,
            "status": response.status_code,
            "responseTime": f"{response_ms}ms",
        },
        "timestamp": utcnow().isoformat(),
    }
