from __future__ import annotations

from uuid import uuid4

import pytest

from mentor_buddy.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from mentor_buddy.repos import store
from mentor_buddy.services import library_service, people_service, task_service
from tests.conftest import (
    make_buddy,
    make_manager,
    make_mentor,
    principal_for,
    seed_curriculum,
)


def test_create_user_normalizes_email_and_rejects_duplicates() -> None:
    user = people_service.create_user(
        email="  Sam@Example.COM ", password="long-enough", name=" Sam ", role="mentor"
    )
    assert user.email == "sam@example.com"
    assert user.name == "Sam"
    with pytest.raises(ConflictError):
        people_service.create_user(
            email="sam@example.com", password="long-enough", name="Sam", role="buddy"
        )


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"email": "not-an-email"}, "email"),
        ({"name": "   "}, "name"),
        ({"role": "admin"}, "role"),
        ({"domain_role": "design"}, "domainRole"),
        ({"password": "short"}, "password"),
    ],
)
def test_create_user_validation(kwargs: dict, message: str) -> None:
    fields = {
        "email": "ok@example.com",
        "password": "long-enough",
        "name": "Ok",
        "role": "buddy",
        "domain_role": "frontend",
        **kwargs,
    }
    with pytest.raises(ValidationError, match=message):
        people_service.create_user(**fields)


def test_create_user_without_password_gets_a_random_one() -> None:
    user = people_service.create_user(
        email="nopw@example.com", password=None, name="No Pw", role="mentor"
    )
    assert user.password_hash.startswith("$argon2")


def test_display_name_falls_back_to_unknown() -> None:
    manager = make_manager()
    assert people_service.display_name(manager.id) == "Maya Manager"
    assert people_service.display_name(str(uuid4())) == "Unknown"


def test_ensure_profile_creates_matching_profile() -> None:
    user = people_service.create_user(
        email="m@example.com", password="long-enough", name="M", role="mentor"
    )
    people_service.ensure_profile(user)
    people_service.ensure_profile(user)
    assert len(store.mentor_repo.list_all()) == 1
    assert people_service.profile_id_for(user) == store.mentor_repo.list_all()[0].id


def test_buddy_auto_enrolls_in_published_curriculum_for_domain() -> None:
    seeded = seed_curriculum()
    buddy, _ = make_buddy()
    enrollments = store.enrollment_repo.list_by_buddy(buddy.id)
    assert [e.curriculum_id for e in enrollments] == [seeded.curriculum.id]

    backend_buddy, _ = make_buddy(email="be@example.com", domain_role="backend")
    assert store.enrollment_repo.list_by_buddy(backend_buddy.id) == []


def test_create_buddy_rejects_unpublished_curriculum_before_creating_user() -> None:
    draft = seed_curriculum(publish=False)
    with pytest.raises(ValidationError, match="published"):
        people_service.create_buddy(
            name="Nope",
            email="nope@example.com",
            password=None,
            domain_role="frontend",
            curriculum_id=draft.curriculum.id,
        )
    assert store.user_repo.get_by_email("nope@example.com") is None


def test_create_buddy_copies_topics_into_checklist() -> None:
    html = library_service.create_topic(name="HTML", category="basics", domain_role="frontend")
    buddy = people_service.create_buddy(
        name="T", email="t@example.com", password=None, domain_role="frontend",
        topic_ids=[html.id],
    )
    items = store.buddy_topic_repo.list_by_buddy(buddy.id)
    assert [(i.topic_name, i.checked) for i in items] == [("HTML", False)]


def test_update_buddy_field_permissions() -> None:
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    manager = make_manager()

    updated = people_service.update_buddy(principal_for(buddy_user), buddy.id, name="Bee")
    assert people_service.get_user(updated.user_id).name == "Bee"

    with pytest.raises(PermissionDeniedError, match="status"):
        people_service.update_buddy(principal_for(buddy_user), buddy.id, status="exited")
    with pytest.raises(PermissionDeniedError):
        people_service.update_buddy(principal_for(mentor_user), buddy.id, name="X")
    with pytest.raises(PermissionDeniedError, match="email"):
        people_service.update_buddy(principal_for(manager), buddy.id, email="x@example.com")

    updated = people_service.update_buddy(
        principal_for(manager), buddy.id, status="inactive", assigned_mentor_id=None
    )
    assert updated.status == "inactive"
    assert updated.assigned_mentor_id is None


def test_update_buddy_rejects_unknown_status() -> None:
    buddy, _ = make_buddy()
    with pytest.raises(ValidationError):
        people_service.update_buddy(principal_for(make_manager()), buddy.id, status="gone")


def test_rejected_buddy_update_leaves_user_untouched() -> None:
    buddy, buddy_user = make_buddy()
    manager = principal_for(make_manager())

    with pytest.raises(ValidationError):
        people_service.update_buddy(manager, buddy.id, name="Changed", status="bogus")
    with pytest.raises(NotFoundError):
        people_service.update_buddy(
            manager, buddy.id, name="Changed2", assigned_mentor_id=uuid4()
        )

    assert store.user_repo.get_by_id(buddy.user_id).name == buddy_user.name
    assert store.buddy_repo.get(buddy.id).status == buddy.status


def test_rejected_mentor_update_leaves_user_untouched() -> None:
    mentor, mentor_user = make_mentor()
    with pytest.raises(ValidationError):
        people_service.update_mentor(mentor.id, name="Changed", status="retired")
    assert store.user_repo.get_by_id(mentor.user_id).name == mentor_user.name


def test_update_mentor_is_active_maps_to_status() -> None:
    mentor, _ = make_mentor()
    mentor = people_service.update_mentor(mentor.id, is_active=False, bio="Hi")
    assert mentor.status == "inactive"
    assert mentor.is_active is False
    assert mentor.bio == "Hi"


def test_delete_mentor_unassigns_buddies() -> None:
    mentor, mentor_user = make_mentor()
    buddy, _ = make_buddy(mentor=mentor)
    people_service.delete_mentor(mentor.id)

    assert people_service.get_buddy(buddy.id).assigned_mentor_id is None
    assert store.user_repo.get_by_id(mentor_user.id) is None
    with pytest.raises(NotFoundError):
        people_service.get_mentor(mentor.id)


def test_delete_buddy_cascades() -> None:
    seed_curriculum()
    mentor, mentor_user = make_mentor()
    buddy, buddy_user = make_buddy(mentor=mentor)
    task_service.create_task(
        principal_for(mentor_user), title="Read docs", description="",
        buddy_id=buddy.id, mentor_id=None,
    )

    people_service.delete_buddy(buddy.id)

    assert store.task_repo.list_by_buddy(buddy.id) == []
    assert store.enrollment_repo.list_by_buddy(buddy.id) == []
    assert store.enrollment_repo.list_assignments_by_buddy(buddy.id) == []
    assert store.user_repo.get_by_id(buddy_user.id) is None


def test_assign_mentor_records_activity() -> None:
    mentor, _ = make_mentor()
    buddy, _ = make_buddy()
    buddy = people_service.assign_mentor(buddy.id, mentor.id, actor="Maya")
    assert buddy.assigned_mentor_id == mentor.id
    latest = store.activity_repo.recent(1)[0]
    assert latest.type == "buddy_assigned"
    assert latest.description == "Bea Buddy assigned to Milo Mentor"
    assert latest.user == "Maya"


def test_buddy_progress_counts_tasks_and_assignments() -> None:
    seed_curriculum(weeks=1, tasks_per_week=1)
    mentor, mentor_user = make_mentor()
    buddy, _ = make_buddy(mentor=mentor)
    task_service.create_task(
        principal_for(mentor_user), title="Done", description="",
        buddy_id=buddy.id, mentor_id=None, status="completed",
    )
    progress = people_service.buddy_progress(buddy.id)
    assert (progress.tasks_completed, progress.total_tasks, progress.progress) == (1, 2, 50)


def test_list_buddies_filters() -> None:
    mentor, _ = make_mentor()
    make_buddy(mentor=mentor)
    make_buddy(email="zed@example.com", name="Zed", domain_role="backend")

    assert len(people_service.list_buddies(mentor_id=mentor.id)) == 1
    assert [u.name for _b, u in people_service.list_buddies(domain="backend")] == ["Zed"]
    assert [u.name for _b, u in people_service.list_buddies(search="BEA")] == ["Bea Buddy"]
