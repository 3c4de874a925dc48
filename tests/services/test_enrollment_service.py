from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from mentor_buddy.core.errors import ConflictError, NotFoundError, ValidationError
from mentor_buddy.models.common import percentage
from mentor_buddy.services import curriculum_service, enrollment_service, review_service
from tests.conftest import GITHUB, make_buddy, make_mentor, principal_for, seed_curriculum


def _complete(buddy_user, mentor_user, assignment_id) -> None:
    submission = review_service.submit(
        principal_for(buddy_user),
        assignment_id,
        description="done",
        notes=None,
        resources=[GITHUB],
    )
    review_service.approve(principal_for(mentor_user), submission.id)


def test_enroll_materialises_weeks_and_assignments() -> None:
    buddy, _ = make_buddy()
    seeded = seed_curriculum(weeks=3, tasks_per_week=2)

    enrollment = enrollment_service.enroll(buddy.id, seeded.curriculum.id)

    weeks = enrollment_service.progress_summary(buddy.id)[1]
    assert [w.week_number for w in weeks] == [1, 2, 3]
    assert all(w.total_tasks == 2 for w in weeks)
    views = enrollment_service.list_assignments(buddy.id)
    assert len(views) == 6
    assert enrollment.status == "active"
    assert enrollment.current_week == 1
    assert enrollment.overall_progress == 0


def test_due_dates_follow_week_number() -> None:
    buddy, _ = make_buddy()
    seeded = seed_curriculum(weeks=2)
    enrollment = enrollment_service.enroll(buddy.id, seeded.curriculum.id)

    dues = {
        v.week.week_number: v.assignment.due_date
        for v in enrollment_service.list_assignments(buddy.id)
    }
    assert dues[1] == enrollment.started_at + timedelta(weeks=1)
    assert dues[2] == enrollment.started_at + timedelta(weeks=2)


def test_inactive_templates_are_skipped() -> None:
    buddy, _ = make_buddy()
    seeded = seed_curriculum(weeks=1, tasks_per_week=2)
    curriculum_service.update_template(seeded.templates[1].id, None, is_active=False)

    enrollment_service.enroll(buddy.id, seeded.curriculum.id)
    assert len(enrollment_service.list_assignments(buddy.id)) == 1


def test_enroll_rejects_drafts_and_second_active() -> None:
    buddy, _ = make_buddy()
    draft = seed_curriculum(publish=False)
    with pytest.raises(ValidationError):
        enrollment_service.enroll(buddy.id, draft.curriculum.id)

    published = seed_curriculum(name="Published")
    enrollment_service.enroll(buddy.id, published.curriculum.id)
    with pytest.raises(ConflictError):
        enrollment_service.enroll(buddy.id, published.curriculum.id)


def test_unknown_buddy_or_curriculum() -> None:
    buddy, _ = make_buddy()
    with pytest.raises(NotFoundError):
        enrollment_service.enroll(uuid4(), seed_curriculum().curriculum.id)
    with pytest.raises(NotFoundError):
        enrollment_service.enroll(buddy.id, uuid4())


def test_not_enrolled_buddy_has_no_assignments() -> None:
    buddy, _ = make_buddy()
    with pytest.raises(NotFoundError):
        enrollment_service.list_assignments(buddy.id)


def test_progress_projection_and_completion() -> None:
    mentor, mentor_user = make_mentor()
    seed_curriculum(weeks=2, tasks_per_week=1)
    buddy, buddy_user = make_buddy(mentor=mentor)

    first, second = enrollment_service.list_assignments(buddy.id)
    _complete(buddy_user, mentor_user, first.assignment.id)

    enrollment, weeks = enrollment_service.progress_summary(buddy.id)
    assert enrollment.overall_progress == 50
    assert enrollment.current_week == 2
    assert weeks[0].status == "completed"
    assert weeks[0].progress_percentage == 100
    assert weeks[0].completed_at is not None
    assert weeks[1].status == "not_started"

    _complete(buddy_user, mentor_user, second.assignment.id)
    enrollment, weeks = enrollment_service.progress_summary(buddy.id)
    assert enrollment.status == "completed"
    assert enrollment.overall_progress == 100
    assert enrollment.completed_at is not None
    assert enrollment.current_week == 2


def test_week_without_tasks_keeps_enrollment_active() -> None:
    mentor, mentor_user = make_mentor()
    seeded = seed_curriculum(weeks=2, tasks_per_week=1)
    # deactivated after publishing, so week 2 materialises empty
    curriculum_service.update_template(seeded.templates[1].id, None, is_active=False)
    buddy, buddy_user = make_buddy(mentor=mentor)

    (only,) = enrollment_service.list_assignments(buddy.id)
    _complete(buddy_user, mentor_user, only.assignment.id)

    enrollment, weeks = enrollment_service.progress_summary(buddy.id)
    assert [(w.week_number, w.status) for w in weeks] == [(1, "completed"), (2, "not_started")]
    assert enrollment.overall_progress == 100
    assert enrollment.status == "active"
    assert enrollment.completed_at is None


def test_filters_on_list_assignments() -> None:
    seed_curriculum(weeks=2, tasks_per_week=2)
    buddy, buddy_user = make_buddy()

    first = enrollment_service.list_assignments(buddy.id)[0]
    review_service.start_assignment(principal_for(buddy_user), first.assignment.id)

    assert len(enrollment_service.list_assignments(buddy.id, week_number=2)) == 2
    in_progress = enrollment_service.list_assignments(buddy.id, status="in_progress")
    assert [v.assignment.id for v in in_progress] == [first.assignment.id]
    weeks = enrollment_service.progress_summary(buddy.id)[1]
    assert weeks[0].status == "in_progress"
    assert weeks[0].started_at is not None


def test_curriculum_overview_pairs_weeks_with_progress() -> None:
    seed_curriculum(weeks=2)
    buddy, _ = make_buddy()
    enrollment, curriculum, weeks = enrollment_service.curriculum_overview(buddy.id)
    assert curriculum.id == enrollment.curriculum_id
    assert [(w.week_number, p.week_number) for w, p in weeks] == [(1, 1), (2, 2)]


def test_buddy_dashboard_statistics() -> None:
    seed_curriculum(weeks=2, tasks_per_week=1)
    buddy, buddy_user = make_buddy()
    first = enrollment_service.list_assignments(buddy.id)[0]
    review_service.submit(
        principal_for(buddy_user),
        first.assignment.id,
        description="wip",
        notes=None,
        resources=[GITHUB],
    )

    dashboard = enrollment_service.buddy_dashboard(buddy.id)
    stats = dashboard["statistics"]
    assert stats["total_tasks"] == 2
    assert stats["completed_tasks"] == 0
    assert stats["total_weeks"] == 2
    assert stats["pending_submissions"] == 1
    assert stats["days_active"] == 0
    assert len(dashboard["recent_submissions"]) == 1
    assert len(dashboard["upcoming_tasks"]) == 1


def test_curriculum_analytics() -> None:
    mentor, mentor_user = make_mentor()
    seeded = seed_curriculum(weeks=1, tasks_per_week=1)
    done, done_user = make_buddy(mentor=mentor)
    make_buddy(email="other@example.com", mentor=mentor)

    assignment = enrollment_service.list_assignments(done.id)[0]
    _complete(done_user, mentor_user, assignment.assignment.id)

    analytics = enrollment_service.curriculum_analytics(seeded.curriculum.id)
    assert analytics["total_buddies"] == 2
    assert analytics["active_buddies"] == 1
    assert analytics["completed_buddies"] == 1
    assert analytics["average_progress"] == 50
    assert analytics["task_completion_rate"] == 50
    assert analytics["average_completion_time"] == 0
    assert analytics["week_completion_rates"] == [{"week_number": 1, "completion_rate": 50}]


def test_analytics_for_empty_curriculum() -> None:
    seeded = seed_curriculum()
    analytics = enrollment_service.curriculum_analytics(seeded.curriculum.id)
    assert analytics["total_buddies"] == 0
    assert analytics["average_progress"] == 0
    assert analytics["week_completion_rates"] == []


@pytest.mark.parametrize(
    ("done", "total", "expected"),
    [(0, 0, 0), (1, 8, 13), (5, 8, 63), (1, 3, 33), (2, 3, 67), (1, 2, 50), (4, 4, 100)],
)
def test_percentage_rounds_halves_up(done, total, expected) -> None:
    assert percentage(done, total) == expected
