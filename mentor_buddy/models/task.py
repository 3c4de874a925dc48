"""Ad-hoc tasks a mentor hands to a buddy outside any curriculum."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow

TASK_STATUSES = ("pending", "in_progress", "completed", "overdue")
TASK_PRIORITIES = ("low", "medium", "high")


@dataclass(frozen=True, slots=True)
class Task:
    id: UUID
    title: str
    description: str
    buddy_id: UUID
    mentor_id: UUID
    status: str = "pending"
    priority: str = "medium"
    due_date: datetime | None = None
    completed_at: datetime | None = None
    created_by: UUID | None = None  # user id of the author
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_overdue(self, now: datetime) -> bool:
        if self.status == "overdue":
            return True
        if self.status == "completed" or self.due_date is None:
            return False
        return self.due_date < now

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        buddy_id: UUID,
        mentor_id: UUID,
        status: str = "pending",
        priority: str = "medium",
        due_date: datetime | None = None,
        created_by: UUID | None = None,
    ) -> Task:
        now = utcnow()
        return Task(
            id=uuid4(),
            title=title,
            description=description,
            buddy_id=buddy_id,
            mentor_id=mentor_id,
            status=status,
            priority=priority,
            due_date=due_date,
            completed_at=now if status == "completed" else None,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class TaskSubmission:
    id: UUID
    task_id: UUID
    buddy_id: UUID
    github_link: str | None = None
    deployed_url: str | None = None
    notes: str | None = None
    feedback: str | None = None
    created_at: datetime | None = None

    @staticmethod
    def new(
        *,
        task_id: UUID,
        buddy_id: UUID,
        github_link: str | None = None,
        deployed_url: str | None = None,
        notes: str | None = None,
    ) -> TaskSubmission:
        return TaskSubmission(
            id=uuid4(),
            task_id=task_id,
            buddy_id=buddy_id,
            github_link=github_link,
            deployed_url=deployed_url,
            notes=notes,
            created_at=utcnow(),
        )
