"""Enrollment of buddies into curricula and progress projection.

enroll() materialises one BuddyWeekProgress per curriculum week and one
TaskAssignment per active template.  recompute_progress() derives the week
and enrollment figures from assignment statuses; nothing else writes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from uuid import UUID

from mentor_buddy.core.errors import ConflictError, NotFoundError, ValidationError
from mentor_buddy.models.common import percentage, utcnow
from mentor_buddy.models.curriculum import Curriculum, CurriculumWeek, TaskTemplate
from mentor_buddy.models.enrollment import (
    BuddyCurriculum,
    BuddyWeekProgress,
    TaskAssignment,
)
from mentor_buddy.models.submission import Submission
from mentor_buddy.repos import store
from mentor_buddy.services import curriculum_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssignmentView:
    assignment: TaskAssignment
    template: TaskTemplate
    week: BuddyWeekProgress


def active_enrollment(buddy_id: UUID) -> BuddyCurriculum | None:
    return next(
        (e for e in store.enrollment_repo.list_by_buddy(buddy_id) if e.status == "active"),
        None,
    )


def current_enrollment(buddy_id: UUID) -> BuddyCurriculum:
    """The active enrollment, else the most recent one."""
    enrollments = store.enrollment_repo.list_by_buddy(buddy_id)
    if not enrollments:
        raise NotFoundError("buddy is not enrolled in a curriculum")
    active = active_enrollment(buddy_id)
    return active or max(enrollments, key=lambda e: e.started_at)


def enroll(
    buddy_id: UUID,
    curriculum_id: UUID,
    target_completion_date: datetime | None = None,
) -> BuddyCurriculum:
    if store.buddy_repo.get(buddy_id) is None:
        raise NotFoundError("buddy not found")
    curriculum = curriculum_service.get_curriculum(curriculum_id)
    if curriculum.status != "published":
        raise ValidationError("only published curricula accept enrollments")
    if active_enrollment(buddy_id) is not None:
        logger.warning("Rejected second active enrollment for buddy=%s", buddy_id)
        raise ConflictError("buddy already has an active curriculum")

    enrollment = BuddyCurriculum.new(
        buddy_id=buddy_id,
        curriculum_id=curriculum_id,
        target_completion_date=target_completion_date,
    )
    store.enrollment_repo.add(enrollment)

    for week, templates in sorted(
        curriculum_service.get_structure(curriculum_id),
        key=lambda pair: pair[0].week_number,
    ):
        active = [t for t in templates if t.is_active]
        progress = BuddyWeekProgress.new(
            buddy_curriculum_id=enrollment.id,
            curriculum_week_id=week.id,
            week_number=week.week_number,
            total_tasks=len(active),
        )
        store.enrollment_repo.add_week(progress)
        due = enrollment.started_at + timedelta(weeks=week.week_number)
        for template in active:
            store.enrollment_repo.add_assignment(
                TaskAssignment.new(
                    buddy_id=buddy_id,
                    task_template_id=template.id,
                    buddy_curriculum_id=enrollment.id,
                    buddy_week_progress_id=progress.id,
                    due_date=due,
                )
            )

    logger.info(
        "Enrolled buddy=%s in curriculum=%s enrollment=%s",
        buddy_id,
        curriculum_id,
        enrollment.id,
    )
    return recompute_progress(enrollment.id)


def recompute_progress(enrollment_id: UUID) -> BuddyCurriculum:
    """Refresh week and enrollment projections from assignment statuses.

    A week completes when it has tasks and all are completed.  currentWeek
    is the first week with unfinished tasks, or the last week when none
    remain.
    """
    enrollment = store.enrollment_repo.get(enrollment_id)
    if enrollment is None:
        raise NotFoundError("enrollment not found")

    now = utcnow()
    assignments = store.enrollment_repo.list_assignments(enrollment_id)
    weeks = store.enrollment_repo.list_weeks(enrollment_id)
    current_week = None
    week_statuses = []

    for week in weeks:
        mine = [a for a in assignments if a.buddy_week_progress_id == week.id]
        done = sum(1 for a in mine if a.status == "completed")
        total = len(mine)
        if total and done == total:
            status = "completed"
        elif any(a.status != "not_started" for a in mine):
            status = "in_progress"
        else:
            status = "not_started"
        week_statuses.append(status)

        if status != "completed" and total and current_week is None:
            current_week = week.week_number

        updated = replace(
            week,
            total_tasks=total,
            completed_tasks=done,
            progress_percentage=percentage(done, total),
            status=status,
            started_at=week.started_at or (now if status != "not_started" else None),
            completed_at=(week.completed_at or now) if status == "completed" else None,
        )
        if updated != week:
            store.enrollment_repo.update_week(replace(updated, updated_at=now))

    done_all = sum(1 for a in assignments if a.status == "completed")
    # a week without tasks never completes, so neither does its enrollment
    finished = bool(week_statuses) and all(s == "completed" for s in week_statuses)
    if current_week is None:
        current_week = weeks[-1].week_number if weeks else 1

    status = enrollment.status
    completed_at = enrollment.completed_at
    if finished and status == "active":
        status, completed_at = "completed", now
        logger.info("Enrollment completed id=%s buddy=%s", enrollment.id, enrollment.buddy_id)

    enrollment = replace(
        enrollment,
        overall_progress=percentage(done_all, len(assignments)),
        current_week=current_week,
        status=status,
        completed_at=completed_at,
        updated_at=now,
    )
    store.enrollment_repo.update(enrollment)
    return enrollment


def get_assignment(assignment_id: UUID) -> TaskAssignment:
    assignment = store.enrollment_repo.get_assignment(assignment_id)
    if assignment is None:
        raise NotFoundError("task assignment not found")
    return assignment


def assignment_view(assignment: TaskAssignment) -> AssignmentView:
    return AssignmentView(
        assignment=assignment,
        template=curriculum_service.get_template(assignment.task_template_id),
        week=store.enrollment_repo.get_week(assignment.buddy_week_progress_id),
    )


def list_assignments(
    buddy_id: UUID,
    *,
    status: str | None = None,
    week_number: int | None = None,
) -> list[AssignmentView]:
    enrollment = current_enrollment(buddy_id)
    views = [
        assignment_view(a) for a in store.enrollment_repo.list_assignments(enrollment.id)
    ]
    if status:
        views = [v for v in views if v.assignment.status == status]
    if week_number is not None:
        views = [v for v in views if v.week.week_number == week_number]
    return sorted(views, key=lambda v: (v.week.week_number, v.template.display_order))


def progress_summary(buddy_id: UUID) -> tuple[BuddyCurriculum, list[BuddyWeekProgress]]:
    enrollment = current_enrollment(buddy_id)
    return enrollment, store.enrollment_repo.list_weeks(enrollment.id)


def curriculum_overview(
    buddy_id: UUID,
) -> tuple[BuddyCurriculum, Curriculum, list[tuple[CurriculumWeek, BuddyWeekProgress | None]]]:
    enrollment = current_enrollment(buddy_id)
    curriculum = curriculum_service.get_curriculum(enrollment.curriculum_id)
    progress = {
        w.curriculum_week_id: w for w in store.enrollment_repo.list_weeks(enrollment.id)
    }
    weeks = [
        (week, progress.get(week.id))
        for week in store.curriculum_repo.list_weeks(curriculum.id)
    ]
    return enrollment, curriculum, weeks


def buddy_dashboard(buddy_id: UUID) -> dict:
    enrollment = current_enrollment(buddy_id)
    curriculum = curriculum_service.get_curriculum(enrollment.curriculum_id)
    views = list_assignments(buddy_id)
    submissions: list[Submission] = sorted(
        (
            s
            for v in views
            for s in store.submission_repo.list_by_assignment(v.assignment.id)
        ),
        key=lambda s: s.submitted_at,
        reverse=True,
    )
    upcoming = [
        v
        for v in views
        if v.assignment.status in ("not_started", "in_progress", "needs_revision")
    ]
    upcoming.sort(key=lambda v: (v.assignment.due_date is None, v.assignment.due_date))

    return {
        "enrollment": enrollment,
        "week_progress": store.enrollment_repo.list_weeks(enrollment.id),
        "upcoming_tasks": upcoming[:5],
        "recent_submissions": submissions[:5],
        "statistics": {
            "overall_progress": enrollment.overall_progress,
            "completed_tasks": sum(
                1 for v in views if v.assignment.status == "completed"
            ),
            "total_tasks": len(views),
            "current_week": enrollment.current_week,
            "total_weeks": curriculum.total_weeks,
            "days_active": (utcnow() - enrollment.started_at).days,
            "pending_submissions": sum(1 for s in submissions if s.awaiting_review),
        },
    }


def curriculum_analytics(curriculum_id: UUID) -> dict:
    curriculum_service.get_curriculum(curriculum_id)
    enrollments = store.enrollment_repo.list_by_curriculum(curriculum_id)
    completed = [e for e in enrollments if e.status == "completed" and e.completed_at]

    assignments = [
        a for e in enrollments for a in store.enrollment_repo.list_assignments(e.id)
    ]
    by_week: dict[int, list[BuddyWeekProgress]] = {}
    for e in enrollments:
        for w in store.enrollment_repo.list_weeks(e.id):
            by_week.setdefault(w.week_number, []).append(w)

    average_days = (
        round(
            sum((e.completed_at - e.started_at).days for e in completed) / len(completed),
            1,
        )
        if completed
        else 0
    )
    return {
        "curriculum_id": curriculum_id,
        "total_buddies": len(enrollments),
        "active_buddies": sum(1 for e in enrollments if e.status == "active"),
        "completed_buddies": len(completed),
        # mean of whole percentages, halves rounded up
        "average_progress": percentage(
            sum(e.overall_progress for e in enrollments), 100 * len(enrollments)
        ),
        "average_completion_time": average_days,
        "task_completion_rate": percentage(
            sum(1 for a in assignments if a.status == "completed"), len(assignments)
        ),
        "week_completion_rates": [
            {
                "week_number": number,
                "completion_rate": percentage(
                    sum(1 for w in rows if w.status == "completed"), len(rows)
                ),
            }
            for number, rows in sorted(by_week.items())
        ],
    }
