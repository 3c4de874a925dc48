from __future__ import annotations

import asyncio
from datetime import timedelta

from mentor_buddy.models.common import utcnow
from mentor_buddy.services import dashboard_service, task_service
from mentor_buddy.services.cache import cache_service
from tests.conftest import make_buddy, make_mentor, principal_for


def _seed_tasks():
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    principal = principal_for(mentor_user)
    for title, status, due in [
        ("Done", "completed", None),
        ("Pending", "pending", None),
        ("Late", "pending", utcnow() - timedelta(days=2)),
        ("Doing", "in_progress", utcnow() + timedelta(days=2)),
    ]:
        task_service.create_task(
            principal,
            title=title,
            description="",
            buddy_id=buddy.id,
            mentor_id=None,
            status=status,
            due_date=due,
        )
    return mentor, buddy


def test_compute_stats_counts_overdue_separately() -> None:
    _seed_tasks()
    make_buddy(email="other@example.com")

    stats = dashboard_service.compute_stats()
    assert stats.total_buddies == 2
    assert stats.active_buddies == 2
    assert stats.total_mentors == 1
    assert stats.completed_tasks == 1
    assert stats.pending_tasks == 1
    assert stats.overdue_tasks == 1
    assert stats.active_tasks == 1
    assert stats.completion_rate == 25


def test_overdue_status_without_due_date_still_counts_as_overdue() -> None:
    mentor, mentor_user = make_mentor()
    buddy, _ = make_buddy(mentor=mentor)
    task_service.create_task(
        principal_for(mentor_user),
        title="Flagged",
        description="",
        buddy_id=buddy.id,
        mentor_id=None,
        status="overdue",
    )

    stats = dashboard_service.compute_stats()
    assert (stats.overdue_tasks, stats.pending_tasks, stats.active_tasks) == (1, 0, 0)


def test_stats_are_cached_until_invalidated() -> None:
    _seed_tasks()
    first = asyncio.run(dashboard_service.get_stats())
    assert asyncio.run(cache_service.get(dashboard_service.STATS_CACHE_KEY)) is not None

    make_buddy(email="late@example.com")
    assert asyncio.run(dashboard_service.get_stats()) == first

    asyncio.run(dashboard_service.invalidate_stats())
    assert asyncio.run(dashboard_service.get_stats()).total_buddies == first.total_buddies + 1


def test_empty_system_has_zero_rate() -> None:
    stats = dashboard_service.compute_stats()
    assert stats.completion_rate == 0
    assert stats.total_buddies == 0


def test_recent_activity_is_newest_first_and_limited() -> None:
    for n in range(5):
        dashboard_service.record_activity("note", f"event {n}", "System")
    recent = dashboard_service.recent_activity(limit=3)
    assert [a.description for a in recent] == ["event 4", "event 3", "event 2"]
    assert recent[0].user == "System"
