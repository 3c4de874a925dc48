"""Health endpoint, also the target of the keep-alive cron.

Always answers 200; the status field reports "degraded" when a configured
backing service is unreachable.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter

from mentor_buddy.db import engine as db_engine
from mentor_buddy.db import redis as db_redis
from mentor_buddy.models.common import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _redis_ping() -> None:
    await db_redis.redis_pool.ping()  # type: ignore[union-attr,misc]


async def _check(name: str, configured: bool, ping: Callable[[], Awaitable[None]]) -> str:
    if not configured:
        return "not_configured"
    try:
        await ping()
    except Exception:
        logger.exception("%s health check failed", name)
        return "degraded"
    return "ok"


@router.get("/api/health")
async def health() -> dict:
    checks = {
        "database": await _check(
            "Database", db_engine.engine is not None, db_engine.ping_database
        ),
        "redis": await _check("Redis", db_redis.redis_pool is not None, _redis_ping),
    }
    return {
        "status": "degraded" if "degraded" in checks.values() else "ok",
        "timestamp": utcnow().isoformat(),
        "checks": checks,
    }
