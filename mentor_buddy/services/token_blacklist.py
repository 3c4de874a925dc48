"""Revoked-token registry keyed by JWT id (jti).

Entries live until the token would have expired anyway: Redis drops them
through the key TTL, the in-memory variant drops them on lookup.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from mentor_buddy.core.metrics import TOKEN_BLACKLIST_CHECKS
from mentor_buddy.db.redis import redis_pool


@runtime_checkable
class TokenBlacklist(Protocol):
    async def revoke(self, jti: str, expires_at: float) -> None: ...

    async def is_revoked(self, jti: str) -> bool: ...


class InMemoryTokenBlacklist:
    """Per-process blacklist for tests and local dev."""

    def __init__(self) -> None:
        self._revoked: dict[str, float] = {}

    async def revoke(self, jti: str, expires_at: float) -> None:
        self._revoked[jti] = expires_at

    async def is_revoked(self, jti: str) -> bool:
        exp = self._revoked.get(jti)
        if exp is not None and exp < time.time():
            del self._revoked[jti]
            exp = None
        revoked = exp is not None
        TOKEN_BLACKLIST_CHECKS.labels(result="revoked" if revoked else "valid").inc()
        return revoked


class RedisTokenBlacklist:
    _PREFIX = "blacklist:jti:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def revoke(self, jti: str, expires_at: float) -> None:
        ttl_seconds = int(expires_at - time.time())
        if ttl_seconds <= 0:
            return
        await self._redis.setex(f"{self._PREFIX}{jti}", ttl_seconds, "1")

    async def is_revoked(self, jti: str) -> bool:
        revoked = bool(await self._redis.exists(f"{self._PREFIX}{jti}"))
        TOKEN_BLACKLIST_CHECKS.labels(result="revoked" if revoked else "valid").inc()
        return revoked


if redis_pool is not None:
    token_blacklist: TokenBlacklist = RedisTokenBlacklist(redis_pool)
else:
    token_blacklist = InMemoryTokenBlacklist()
