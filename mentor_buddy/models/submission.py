from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow

REVIEW_STATUSES = ("pending", "under_review", "approved", "needs_revision", "rejected")
FEEDBACK_TYPES = ("comment", "question", "approval", "revision_request", "reply")

# Statuses in which a submission still waits on a reviewer.
AWAITING_REVIEW = ("pending", "under_review")


@dataclass(frozen=True, slots=True)
class SubmissionResource:
    id: UUID
    submission_id: UUID
    type: str  # github|hosted_url|pdf|...
    label: str
    url: str
    filename: str | None = None
    filesize: int | None = None
    display_order: int = 0
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Submission:
    """One version of a buddy's work on a TaskAssignment."""

    id: UUID
    task_assignment_id: UUID
    buddy_id: UUID
    version: int
    description: str
    notes: str | None = None
    review_status: str = "pending"
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    grade: str | None = None
    submitted_at: datetime | None = None
    resources: tuple[SubmissionResource, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def awaiting_review(self) -> bool:
        return self.review_status in AWAITING_REVIEW

    @staticmethod
    def new(
        *,
        task_assignment_id: UUID,
        buddy_id: UUID,
        version: int,
        description: str,
        notes: str | None,
        resources: list[dict],
    ) -> Submission:
        now = utcnow()
        submission_id = uuid4()
        attached = tuple(
            SubmissionResource(
                id=uuid4(),
                submission_id=submission_id,
                type=r["type"],
                label=r["label"],
                url=r["url"],
                filename=r.get("filename"),
                filesize=r.get("filesize"),
                display_order=position,
                created_at=now,
            )
            for position, r in enumerate(resources)
        )
        return Submission(
            id=submission_id,
            task_assignment_id=task_assignment_id,
            buddy_id=buddy_id,
            version=version,
            description=description,
            notes=notes,
            submitted_at=now,
            resources=attached,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class SubmissionFeedback:
    id: UUID
    submission_id: UUID
    author_id: UUID
    author_role: str  # mentor|buddy|manager
    message: str
    feedback_type: str = "comment"
    parent_feedback_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        submission_id: UUID,
        author_id: UUID,
        author_role: str,
        message: str,
        feedback_type: str,
        parent_feedback_id: UUID | None = None,
    ) -> SubmissionFeedback:
        now = utcnow()
        return SubmissionFeedback(
            id=uuid4(),
            submission_id=submission_id,
            author_id=author_id,
            author_role=author_role,
            message=message,
            feedback_type=feedback_type,
            parent_feedback_id=parent_feedback_id,
            created_at=now,
            updated_at=now,
        )
