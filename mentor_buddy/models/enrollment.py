"""A buddy's journey through a curriculum.

BuddyCurriculum (one enrollment)
  -> BuddyWeekProgress (one per curriculum week, a projection)
  -> TaskAssignment (one per active task template, the unit of work)

The week and enrollment percentages are projections recomputed from the
assignments whenever an assignment completes; they are never edited
directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow

ENROLLMENT_STATUSES = ("active", "paused", "completed", "dropped")
WEEK_STATUSES = ("not_started", "in_progress", "completed")
ASSIGNMENT_STATUSES = (
    "not_started",
    "in_progress",
    "submitted",
    "under_review",
    "needs_revision",
    "completed",
)


@dataclass(frozen=True, slots=True)
class BuddyCurriculum:
    id: UUID
    buddy_id: UUID
    curriculum_id: UUID
    started_at: datetime
    target_completion_date: datetime | None = None
    completed_at: datetime | None = None
    current_week: int = 1
    overall_progress: int = 0
    status: str = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        buddy_id: UUID,
        curriculum_id: UUID,
        target_completion_date: datetime | None = None,
    ) -> BuddyCurriculum:
        now = utcnow()
        return BuddyCurriculum(
            id=uuid4(),
            buddy_id=buddy_id,
            curriculum_id=curriculum_id,
            started_at=now,
            target_completion_date=target_completion_date,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class BuddyWeekProgress:
    id: UUID
    buddy_curriculum_id: UUID
    curriculum_week_id: UUID
    week_number: int
    total_tasks: int = 0
    completed_tasks: int = 0
    progress_percentage: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    status: str = "not_started"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        buddy_curriculum_id: UUID,
        curriculum_week_id: UUID,
        week_number: int,
        total_tasks: int,
    ) -> BuddyWeekProgress:
        now = utcnow()
        return BuddyWeekProgress(
            id=uuid4(),
            buddy_curriculum_id=buddy_curriculum_id,
            curriculum_week_id=curriculum_week_id,
            week_number=week_number,
            total_tasks=total_tasks,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class TaskAssignment:
    id: UUID
    buddy_id: UUID
    task_template_id: UUID
    buddy_curriculum_id: UUID
    buddy_week_progress_id: UUID
    assigned_at: datetime
    due_date: datetime | None = None
    status: str = "not_started"
    started_at: datetime | None = None
    first_submission_at: datetime | None = None
    completed_at: datetime | None = None
    submission_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        buddy_id: UUID,
        task_template_id: UUID,
        buddy_curriculum_id: UUID,
        buddy_week_progress_id: UUID,
        due_date: datetime | None = None,
    ) -> TaskAssignment:
        now = utcnow()
        return TaskAssignment(
            id=uuid4(),
            buddy_id=buddy_id,
            task_template_id=task_template_id,
            buddy_curriculum_id=buddy_curriculum_id,
            buddy_week_progress_id=buddy_week_progress_id,
            assigned_at=now,
            due_date=due_date,
            created_at=now,
            updated_at=now,
        )
