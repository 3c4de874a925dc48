from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mentor_buddy.api.auth import router as auth_router
from mentor_buddy.api.buddies import router as buddies_router
from mentor_buddy.api.cron import router as cron_router
from mentor_buddy.api.curriculum import router as curriculum_router
from mentor_buddy.api.dashboard import router as dashboard_router
from mentor_buddy.api.enrollment import router as enrollment_router
from mentor_buddy.api.health import router as health_router
from mentor_buddy.api.mentors import router as mentors_router
from mentor_buddy.api.metrics_endpoint import router as metrics_router
from mentor_buddy.api.portfolios import router as portfolios_router
from mentor_buddy.api.resources import router as resources_router
from mentor_buddy.api.reviews import router as reviews_router
from mentor_buddy.api.settings import router as settings_router
from mentor_buddy.api.submissions import router as submissions_router
from mentor_buddy.api.tasks import router as tasks_router
from mentor_buddy.api.topics import router as topics_router
from mentor_buddy.api.users import router as users_router
from mentor_buddy.core.config import SETTINGS
from mentor_buddy.core.logging import setup_logging
from mentor_buddy.db.engine import lifespan_db
from mentor_buddy.db.redis import lifespan_redis
from mentor_buddy.middleware.metrics import MetricsMiddleware
from mentor_buddy.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="mentor-buddy",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext -> Metrics -> CORS -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(cron_router)
app.include_router(auth_router)
app.include_router(settings_router)
app.include_router(users_router)
app.include_router(mentors_router)
app.include_router(reviews_router)
app.include_router(buddies_router)
app.include_router(enrollment_router)
app.include_router(tasks_router)
app.include_router(resources_router)
app.include_router(topics_router)
app.include_router(portfolios_router)
app.include_router(curriculum_router)
app.include_router(submissions_router)
app.include_router(dashboard_router)

logger.info(
    "mentor-buddy started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
