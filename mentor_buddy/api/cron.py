"""Scheduled keep-alive hook, called by the hosting platform's cron.

Authenticated by a shared secret rather than a user token: the caller
sends Authorization: Bearer <CRON_SECRET>.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from mentor_buddy.core.config import SETTINGS
from mentor_buddy.services import keep_alive_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def _authorized(authorization: str | None) -> bool:
    if not SETTINGS.cron_secret or not authorization:
        return False
    return secrets.compare_digest(authorization, f"Bearer {SETTINGS.cron_secret}")


@router.get("/keep-alive")
async def keep_alive(authorization: str | None = Header(default=None)) -> JSONResponse:
    if not _authorized(authorization):
        logger.warning("Unauthorized keep-alive call")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    result = await keep_alive_service.ping_backend(SETTINGS.backend_url)
    return JSONResponse(status_code=200, content=result)
