"""Manager dashboard: headline stats and the activity feed.

Stats are a read model computed from the people and task repos and served
read-through from the cache for STATS_CACHE_TTL seconds.  Writers call
invalidate_stats() so the next read recomputes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from uuid import UUID

from mentor_buddy.models.activity import Activity
from mentor_buddy.models.common import percentage, utcnow
from mentor_buddy.repos import store
from mentor_buddy.services.cache import cache_service

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "dashboard:stats"
STATS_CACHE_TTL = 30
DEFAULT_ACTIVITY_LIMIT = 20


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_buddies: int
    active_buddies: int
    total_mentors: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    active_tasks: int
    completion_rate: int


def compute_stats() -> DashboardStats:
    now = utcnow()
    buddies = store.buddy_repo.list_all()
    tasks = store.task_repo.list_all()

    completed = sum(1 for t in tasks if t.status == "completed")
    overdue = sum(1 for t in tasks if t.is_overdue(now))
    in_progress = sum(
        1 for t in tasks if t.status == "in_progress" and not t.is_overdue(now)
    )
    pending = sum(1 for t in tasks if t.status == "pending" and not t.is_overdue(now))

    return DashboardStats(
        total_buddies=len(buddies),
        active_buddies=sum(1 for b in buddies if b.status == "active"),
        total_mentors=len(store.mentor_repo.list_all()),
        completed_tasks=completed,
        pending_tasks=pending,
        overdue_tasks=overdue,
        active_tasks=in_progress,
        completion_rate=percentage(completed, len(tasks)),
    )


async def get_stats() -> DashboardStats:
    cached = await cache_service.get(STATS_CACHE_KEY)
    if cached is not None:
        return DashboardStats(**json.loads(cached))

    stats = compute_stats()
    await cache_service.set(STATS_CACHE_KEY, json.dumps(asdict(stats)), STATS_CACHE_TTL)
    return stats


async def invalidate_stats() -> None:
    await cache_service.delete(STATS_CACHE_KEY)


def record_activity(
    type: str,
    description: str,
    user: str,
    *,
    entity_id: UUID | None = None,
    entity_type: str | None = None,
) -> Activity:
    activity = Activity.new(
        type=type,
        description=description,
        user=user,
        entity_id=entity_id,
        entity_type=entity_type,
    )
    store.activity_repo.add(activity)
    logger.debug("Activity recorded type=%s entity=%s", type, entity_id)
    return activity


def recent_activity(limit: int = DEFAULT_ACTIVITY_LIMIT) -> list[Activity]:
    return store.activity_repo.recent(limit)
