"""Optional PostgreSQL engine.

DATABASE_URL (postgresql+asyncpg://...) turns it on.  The API itself
serves from the in-memory store in mentor_buddy.repos.store; the engine
backs the health check, the Postgres user repository and, through
Base.metadata, the alembic migrations.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from mentor_buddy.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for every mentor-buddy table."""


def _build_engine(url: str | None) -> AsyncEngine | None:
    if not url:
        return None
    return create_async_engine(
        url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine = _build_engine(SETTINGS.database_url)


async def ping_database() -> None:
    """Round-trip a SELECT 1; raises when the database is unreachable."""
    if engine is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("No DATABASE_URL configured; serving from the in-memory store")
        yield
        return

    logger.info("Database engine created: %s", engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()
    logger.info("Database engine disposed")
