"""Task assignment workflow: submissions, reviews and feedback threads.

Assignment status machine::

    not_started --start--> in_progress
    not_started | in_progress | needs_revision --submit--> submitted
    submitted --start review--> under_review
    submitted | under_review --approve--> completed
    submitted | under_review --request revision / reject--> needs_revision

Every submission is a new version (max existing + 1).  Only the latest
version is reviewable, and a buddy can only submit again once the previous
version has been reviewed.  Reviewers are the buddy's assigned mentor or a
manager.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from uuid import UUID

from mentor_buddy.core.config import SETTINGS
from mentor_buddy.core.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from mentor_buddy.core.metrics import REVIEWS_TOTAL, SUBMISSIONS_TOTAL
from mentor_buddy.models.common import utcnow
from mentor_buddy.models.enrollment import TaskAssignment
from mentor_buddy.models.people import Buddy
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.submission import (
    FEEDBACK_TYPES,
    Submission,
    SubmissionFeedback,
)
from mentor_buddy.repos import store
from mentor_buddy.services import enrollment_service, people_service
from mentor_buddy.services.dashboard_service import record_activity

logger = logging.getLogger(__name__)

# action -> (allowed source statuses, target status)
TRANSITIONS: dict[str, tuple[frozenset[str], str]] = {
    "start": (frozenset({"not_started"}), "in_progress"),
    "submit": (frozenset({"not_started", "in_progress", "needs_revision"}), "submitted"),
    "start review of": (frozenset({"submitted"}), "under_review"),
    "approve": (frozenset({"submitted", "under_review"}), "completed"),
    "request revision on": (frozenset({"submitted", "under_review"}), "needs_revision"),
    "reject": (frozenset({"submitted", "under_review"}), "needs_revision"),
}

REVIEWED = ("approved", "needs_revision", "rejected")


def transition(assignment: TaskAssignment, action: str) -> TaskAssignment:
    """Apply a workflow action, raising InvalidTransitionError when illegal."""
    sources, target = TRANSITIONS[action]
    if assignment.status not in sources:
        logger.warning(
            "Invalid transition: %s assignment=%s from status=%s",
            action,
            assignment.id,
            assignment.status,
        )
        raise InvalidTransitionError("task assignment", assignment.status, action)

    now = utcnow()
    changes: dict = {"status": target, "updated_at": now}
    if target == "in_progress" and assignment.started_at is None:
        changes["started_at"] = now
    if target == "submitted":
        changes["submission_count"] = assignment.submission_count + 1
        changes["first_submission_at"] = assignment.first_submission_at or now
        changes["started_at"] = assignment.started_at or now
    if target == "completed":
        changes["completed_at"] = now
    return replace(assignment, **changes)


# ---------------------------------------------------------------------------
# Access helpers
# ---------------------------------------------------------------------------


def _is_owner(principal: Principal, buddy: Buddy) -> bool:
    return principal.user_id == str(buddy.user_id)


def is_reviewer(principal: Principal, buddy: Buddy) -> bool:
    return principal.is_manager() or people_service.is_assigned_mentor(principal, buddy)


def _require_view(principal: Principal, buddy: Buddy) -> None:
    if not (_is_owner(principal, buddy) or is_reviewer(principal, buddy)):
        logger.warning(
            "Access denied: user=%s on work of buddy=%s", principal.user_id, buddy.id
        )
        raise PermissionDeniedError("not allowed to access this buddy's work")


def _require_reviewer(principal: Principal, buddy: Buddy) -> None:
    if not is_reviewer(principal, buddy):
        logger.warning(
            "Access denied: user=%s is not a reviewer for buddy=%s",
            principal.user_id,
            buddy.id,
        )
        raise PermissionDeniedError("only the assigned mentor or a manager can review")


def _require_owner(principal: Principal, buddy: Buddy) -> None:
    if not _is_owner(principal, buddy):
        raise PermissionDeniedError("only the assigned buddy can do this")


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


def view_assignment(principal: Principal, assignment_id: UUID) -> enrollment_service.AssignmentView:
    assignment = enrollment_service.get_assignment(assignment_id)
    _require_view(principal, people_service.get_buddy(assignment.buddy_id))
    return enrollment_service.assignment_view(assignment)


def start_assignment(principal: Principal, assignment_id: UUID) -> TaskAssignment:
    assignment = enrollment_service.get_assignment(assignment_id)
    _require_owner(principal, people_service.get_buddy(assignment.buddy_id))
    assignment = transition(assignment, "start")
    store.enrollment_repo.update_assignment(assignment)
    enrollment_service.recompute_progress(assignment.buddy_curriculum_id)
    logger.info("Assignment started id=%s", assignment.id)
    return assignment


def _validate_resources(resources: list[dict], required: set[str]) -> None:
    if not resources:
        raise ValidationError("at least one resource is required")
    for r in resources:
        if not (r.get("url") or "").strip():
            raise ValidationError("every resource needs a url")
    missing = required - {r["type"] for r in resources}
    if missing:
        raise ValidationError(
            f"missing required resource types: {', '.join(sorted(missing))}"
        )


def submit(
    principal: Principal,
    assignment_id: UUID,
    *,
    description: str,
    notes: str | None,
    resources: list[dict],
) -> Submission:
    assignment = enrollment_service.get_assignment(assignment_id)
    buddy = people_service.get_buddy(assignment.buddy_id)
    _require_owner(principal, buddy)

    description = (description or "").strip()
    if not description:
        raise ValidationError("description must be non-empty")
    template = store.curriculum_repo.get_template(assignment.task_template_id)
    _validate_resources(resources, template.required_resource_types if template else set())

    previous = store.submission_repo.list_by_assignment(assignment_id)
    if previous and previous[0].awaiting_review:
        raise ConflictError("previous submission has not been reviewed yet")

    assignment = transition(assignment, "submit")
    submission = Submission.new(
        task_assignment_id=assignment_id,
        buddy_id=buddy.id,
        version=max((s.version for s in previous), default=0) + 1,
        description=description,
        notes=notes,
        resources=resources,
    )
    store.submission_repo.add(submission)
    store.enrollment_repo.update_assignment(assignment)
    enrollment_service.recompute_progress(assignment.buddy_curriculum_id)

    SUBMISSIONS_TOTAL.labels(kind="resubmission" if previous else "first").inc()
    record_activity(
        "submission_created",
        f"Submitted version {submission.version} of "
        f"'{template.title if template else 'task'}'",
        people_service.display_name(principal.user_id),
        entity_id=submission.id,
        entity_type="submission",
    )
    logger.info(
        "Submission id=%s assignment=%s version=%d",
        submission.id,
        assignment_id,
        submission.version,
    )
    return submission


def list_submissions(principal: Principal, assignment_id: UUID) -> list[Submission]:
    """Newest version first."""
    assignment = enrollment_service.get_assignment(assignment_id)
    _require_view(principal, people_service.get_buddy(assignment.buddy_id))
    return store.submission_repo.list_by_assignment(assignment_id)


def _load(submission_id: UUID) -> tuple[Submission, TaskAssignment, Buddy]:
    submission = store.submission_repo.get(submission_id)
    if submission is None:
        raise NotFoundError("submission not found")
    assignment = enrollment_service.get_assignment(submission.task_assignment_id)
    return submission, assignment, people_service.get_buddy(submission.buddy_id)


def get_submission(principal: Principal, submission_id: UUID) -> Submission:
    submission, _assignment, buddy = _load(submission_id)
    _require_view(principal, buddy)
    return submission


def _is_latest(submission: Submission) -> bool:
    latest = store.submission_repo.list_by_assignment(submission.task_assignment_id)
    return bool(latest) and latest[0].id == submission.id


def update_submission(principal: Principal, submission_id: UUID, **changes) -> Submission:
    submission, assignment, buddy = _load(submission_id)
    _require_owner(principal, buddy)
    if submission.review_status != "pending":
        raise InvalidTransitionError("submission", submission.review_status, "edit")

    if "description" in changes:
        changes["description"] = (changes["description"] or "").strip()
        if not changes["description"]:
            raise ValidationError("description must be non-empty")
    if "resources" in changes:
        template = store.curriculum_repo.get_template(assignment.task_template_id)
        resources = changes.pop("resources")
        _validate_resources(resources, template.required_resource_types if template else set())
        rebuilt = Submission.new(
            task_assignment_id=submission.task_assignment_id,
            buddy_id=submission.buddy_id,
            version=submission.version,
            description="",
            notes=None,
            resources=resources,
        )
        changes["resources"] = tuple(
            replace(r, submission_id=submission.id) for r in rebuilt.resources
        )

    submission = replace(submission, **changes, updated_at=utcnow())
    store.submission_repo.update(submission)
    return submission


def delete_submission(principal: Principal, submission_id: UUID) -> None:
    submission, assignment, buddy = _load(submission_id)
    _require_owner(principal, buddy)
    if submission.review_status != "pending":
        raise InvalidTransitionError("submission", submission.review_status, "delete")
    if not _is_latest(submission):
        raise ConflictError("only the latest submission can be deleted")

    store.submission_repo.delete(submission_id)
    remaining = store.submission_repo.list_by_assignment(assignment.id)
    assignment = replace(
        assignment,
        status="needs_revision" if remaining else "in_progress",
        submission_count=max(assignment.submission_count - 1, 0),
        first_submission_at=assignment.first_submission_at if remaining else None,
        updated_at=utcnow(),
    )
    store.enrollment_repo.update_assignment(assignment)
    enrollment_service.recompute_progress(assignment.buddy_curriculum_id)
    logger.info("Deleted submission id=%s", submission_id)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


def _reviewable(
    principal: Principal, submission_id: UUID, action: str
) -> tuple[Submission, TaskAssignment]:
    submission, assignment, buddy = _load(submission_id)
    _require_reviewer(principal, buddy)
    if not _is_latest(submission):
        raise ConflictError("only the latest submission can be reviewed")
    if not submission.awaiting_review:
        raise InvalidTransitionError("submission", submission.review_status, action)
    return submission, assignment


def _add_review_note(
    principal: Principal, submission: Submission, message: str | None, feedback_type: str
) -> None:
    if message and message.strip():
        store.submission_repo.add_feedback(
            SubmissionFeedback.new(
                submission_id=submission.id,
                author_id=UUID(principal.user_id),
                author_role=principal.role,
                message=message.strip(),
                feedback_type=feedback_type,
            )
        )


def start_review(principal: Principal, submission_id: UUID) -> Submission:
    submission, assignment = _reviewable(principal, submission_id, "start review of")
    if submission.review_status != "pending":
        raise InvalidTransitionError("submission", submission.review_status, "start review of")

    assignment = transition(assignment, "start review of")
    submission = replace(submission, review_status="under_review", updated_at=utcnow())
    store.submission_repo.update(submission)
    store.enrollment_repo.update_assignment(assignment)
    logger.info("Review started submission=%s by=%s", submission.id, principal.user_id)
    return submission


def _conclude(
    principal: Principal,
    submission_id: UUID,
    *,
    action: str,
    review_status: str,
    grade: str | None = None,
    message: str | None = None,
    feedback_type: str = "comment",
) -> Submission:
    submission, assignment = _reviewable(principal, submission_id, action)
    assignment = transition(assignment, action)

    now = utcnow()
    submission = replace(
        submission,
        review_status=review_status,
        reviewed_by=UUID(principal.user_id),
        reviewed_at=now,
        grade=grade if grade is not None else submission.grade,
        updated_at=now,
    )
    store.submission_repo.update(submission)
    store.enrollment_repo.update_assignment(assignment)
    _add_review_note(principal, submission, message, feedback_type)
    enrollment_service.recompute_progress(assignment.buddy_curriculum_id)

    REVIEWS_TOTAL.labels(outcome=review_status).inc()
    record_activity(
        f"submission_{review_status}",
        f"Submission version {submission.version} {review_status.replace('_', ' ')}",
        people_service.display_name(principal.user_id),
        entity_id=submission.id,
        entity_type="submission",
    )
    logger.info(
        "Submission id=%s %s by=%s", submission.id, review_status, principal.user_id
    )
    return submission


def approve(
    principal: Principal,
    submission_id: UUID,
    *,
    grade: str | None = None,
    message: str | None = None,
) -> Submission:
    return _conclude(
        principal,
        submission_id,
        action="approve",
        review_status="approved",
        grade=grade,
        message=message,
        feedback_type="approval",
    )


def request_revision(principal: Principal, submission_id: UUID, *, message: str) -> Submission:
    if not (message or "").strip():
        raise ValidationError("message must be non-empty")
    return _conclude(
        principal,
        submission_id,
        action="request revision on",
        review_status="needs_revision",
        message=message,
        feedback_type="revision_request",
    )


def reject(principal: Principal, submission_id: UUID, *, message: str | None = None) -> Submission:
    return _conclude(
        principal,
        submission_id,
        action="reject",
        review_status="rejected",
        message=message,
    )


def grade(principal: Principal, submission_id: UUID, grade: str) -> Submission:
    submission, _assignment, buddy = _load(submission_id)
    _require_reviewer(principal, buddy)
    if submission.review_status not in REVIEWED:
        raise InvalidTransitionError("submission", submission.review_status, "grade")
    if not (grade or "").strip():
        raise ValidationError("grade must be non-empty")
    submission = replace(submission, grade=grade.strip(), updated_at=utcnow())
    store.submission_repo.update(submission)
    return submission


# ---------------------------------------------------------------------------
# Feedback threads
# ---------------------------------------------------------------------------


def list_feedback(
    principal: Principal, submission_id: UUID
) -> list[tuple[SubmissionFeedback, list[SubmissionFeedback]]]:
    """Top-level comments oldest first, each with its replies."""
    _submission, _assignment, buddy = _load(submission_id)
    _require_view(principal, buddy)
    items = store.submission_repo.list_feedback(submission_id)
    replies: dict[UUID, list[SubmissionFeedback]] = {}
    for f in items:
        if f.parent_feedback_id is not None:
            replies.setdefault(f.parent_feedback_id, []).append(f)
    return [(f, replies.get(f.id, [])) for f in items if f.parent_feedback_id is None]


def add_feedback(
    principal: Principal,
    submission_id: UUID,
    *,
    message: str,
    feedback_type: str | None = None,
    parent_feedback_id: UUID | None = None,
) -> SubmissionFeedback:
    _submission, _assignment, buddy = _load(submission_id)
    _require_view(principal, buddy)
    message = (message or "").strip()
    if not message:
        raise ValidationError("message must be non-empty")

    if parent_feedback_id is not None:
        parent = store.submission_repo.get_feedback(parent_feedback_id)
        if parent is None:
            raise NotFoundError("parent feedback not found")
        if parent.submission_id != submission_id:
            raise ValidationError("parent feedback belongs to another submission")
        # Threads are one level deep.
        parent_feedback_id = parent.parent_feedback_id or parent.id
        feedback_type = feedback_type or "reply"
    feedback_type = feedback_type or "comment"
    if feedback_type not in FEEDBACK_TYPES:
        raise ValidationError(f"feedbackType must be one of {', '.join(FEEDBACK_TYPES)}")

    feedback = SubmissionFeedback.new(
        submission_id=submission_id,
        author_id=UUID(principal.user_id),
        author_role=principal.role,
        message=message,
        feedback_type=feedback_type,
        parent_feedback_id=parent_feedback_id,
    )
    store.submission_repo.add_feedback(feedback)
    logger.info("Feedback id=%s on submission=%s", feedback.id, submission_id)
    return feedback


def _get_feedback(feedback_id: UUID) -> SubmissionFeedback:
    feedback = store.submission_repo.get_feedback(feedback_id)
    if feedback is None:
        raise NotFoundError("feedback not found")
    return feedback


def update_feedback(principal: Principal, feedback_id: UUID, message: str) -> SubmissionFeedback:
    feedback = _get_feedback(feedback_id)
    if str(feedback.author_id) != principal.user_id:
        raise PermissionDeniedError("only the author can edit feedback")
    message = (message or "").strip()
    if not message:
        raise ValidationError("message must be non-empty")
    feedback = replace(feedback, message=message, updated_at=utcnow())
    store.submission_repo.update_feedback(feedback)
    return feedback


def delete_feedback(principal: Principal, feedback_id: UUID) -> None:
    feedback = _get_feedback(feedback_id)
    if str(feedback.author_id) != principal.user_id and not principal.is_manager():
        raise PermissionDeniedError("only the author or a manager can delete feedback")
    if feedback.parent_feedback_id is None:
        for f in store.submission_repo.list_feedback(feedback.submission_id):
            if f.parent_feedback_id == feedback.id:
                store.submission_repo.delete_feedback(f.id)
    store.submission_repo.delete_feedback(feedback_id)


# ---------------------------------------------------------------------------
# Mentor review queue and dashboard
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReviewQueueItem:
    submission_id: UUID
    buddy_id: UUID
    buddy_name: str
    buddy_avatar: str | None
    task_title: str
    week_number: int
    week_title: str
    submitted_at: datetime
    version: int
    resource_count: int
    previous_feedback_count: int
    days_waiting: int


def _require_mentor_access(principal: Principal, mentor_id: UUID) -> None:
    mentor = people_service.get_mentor(mentor_id)
    if not (principal.is_manager() or principal.user_id == str(mentor.user_id)):
        raise PermissionDeniedError("not allowed to view this mentor's reviews")


def _queue_item(submission: Submission, now: datetime) -> ReviewQueueItem:
    assignment = enrollment_service.get_assignment(submission.task_assignment_id)
    view = enrollment_service.assignment_view(assignment)
    week = store.curriculum_repo.get_week(view.week.curriculum_week_id)
    buddy = people_service.get_buddy(submission.buddy_id)
    user = store.user_repo.get_by_id(buddy.user_id)
    earlier = [
        s
        for s in store.submission_repo.list_by_assignment(assignment.id)
        if s.version < submission.version
    ]
    return ReviewQueueItem(
        submission_id=submission.id,
        buddy_id=buddy.id,
        buddy_name=user.name if user else "Unknown",
        buddy_avatar=user.avatar_url if user else None,
        task_title=view.template.title,
        week_number=view.week.week_number,
        week_title=week.title if week else "",
        submitted_at=submission.submitted_at,
        version=submission.version,
        resource_count=len(submission.resources),
        previous_feedback_count=sum(
            len(store.submission_repo.list_feedback(s.id)) for s in earlier
        ),
        days_waiting=(now - submission.submitted_at).days,
    )


def _pending_for_mentor(mentor_id: UUID) -> list[Submission]:
    buddy_ids = {b.id for b in store.buddy_repo.list_by_mentor(mentor_id)}
    return [
        s
        for s in store.submission_repo.list_all()
        if s.buddy_id in buddy_ids and s.awaiting_review
    ]


def review_queue(
    principal: Principal,
    mentor_id: UUID,
    *,
    buddy_id: UUID | None = None,
    week_number: int | None = None,
    task_template_id: UUID | None = None,
    sort_by: str = "oldest",
) -> dict[str, list[ReviewQueueItem]]:
    _require_mentor_access(principal, mentor_id)
    now = utcnow()

    pending = _pending_for_mentor(mentor_id)
    if buddy_id:
        pending = [s for s in pending if s.buddy_id == buddy_id]
    if task_template_id:
        pending = [
            s
            for s in pending
            if enrollment_service.get_assignment(s.task_assignment_id).task_template_id
            == task_template_id
        ]
    items = [_queue_item(s, now) for s in pending]
    if week_number is not None:
        items = [i for i in items if i.week_number == week_number]

    urgent_after = SETTINGS.urgent_review_days
    if sort_by == "newest":
        items.sort(key=lambda i: i.submitted_at, reverse=True)
    elif sort_by == "priority":
        items.sort(
            key=lambda i: (i.days_waiting <= urgent_after, -i.version, i.submitted_at)
        )
    else:
        items.sort(key=lambda i: i.submitted_at)

    return {
        "urgent": [i for i in items if i.days_waiting > urgent_after],
        "recent": [i for i in items if now - i.submitted_at < timedelta(days=1)],
        "all": items,
    }


def mentor_dashboard(principal: Principal, mentor_id: UUID) -> dict:
    _require_mentor_access(principal, mentor_id)
    now = utcnow()
    buddies = store.buddy_repo.list_by_mentor(mentor_id)
    buddy_ids = {b.id for b in buddies}
    pending = _pending_for_mentor(mentor_id)
    submissions = sorted(
        (s for s in store.submission_repo.list_all() if s.buddy_id in buddy_ids),
        key=lambda s: s.submitted_at,
        reverse=True,
    )

    progress = []
    for buddy in buddies:
        enrollment = enrollment_service.active_enrollment(buddy.id)
        progress.append(
            {
                "buddy_id": buddy.id,
                "buddy_name": people_service.display_name(buddy.user_id),
                "progress": enrollment.overall_progress if enrollment else 0,
                "current_week": enrollment.current_week if enrollment else 0,
            }
        )

    return {
        "total_buddies": len(buddies),
        "active_buddies": sum(1 for b in buddies if b.status == "active"),
        "pending_reviews": len(pending),
        "urgent_reviews": sum(
            1
            for s in pending
            if (now - s.submitted_at).days > SETTINGS.urgent_review_days
        ),
        "recent_submissions": submissions[:5],
        "buddy_progress": progress,
    }
