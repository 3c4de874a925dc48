from __future__ import annotations

from uuid import uuid4

import pytest

from mentor_buddy.core.errors import ConflictError, NotFoundError, ValidationError
from mentor_buddy.repos import store
from mentor_buddy.services import settings_service, task_service
from tests.conftest import make_buddy, make_manager, make_mentor, principal_for


def test_defaults_until_saved() -> None:
    _, user = make_buddy()
    settings = settings_service.get_settings(user.id)
    assert settings.theme == "dark"
    assert settings.profile_visibility == "team"
    assert settings.updated_at is None
    assert store.settings_repo.get(user.id) is None

    with pytest.raises(NotFoundError):
        settings_service.get_settings(uuid4())


def test_update_preferences_keeps_privacy() -> None:
    _, user = make_buddy()
    settings_service.update_privacy(user.id, show_progress=False)
    saved = settings_service.update_preferences(
        user.id, theme="light", timezone=" Europe/Berlin ", task_reminders=False
    )
    assert saved.theme == "light"
    assert saved.timezone == "Europe/Berlin"
    assert saved.task_reminders is False
    assert saved.show_progress is False
    assert saved.updated_at is not None
    assert store.settings_repo.get(user.id) == saved


def test_invalid_settings_are_rejected() -> None:
    _, user = make_buddy()
    with pytest.raises(ValidationError, match="theme"):
        settings_service.update_preferences(user.id, theme="neon")
    with pytest.raises(ValidationError, match="timezone"):
        settings_service.update_preferences(user.id, timezone="  ")
    with pytest.raises(ValidationError, match="visibility"):
        settings_service.update_privacy(user.id, profile_visibility="public")
    with pytest.raises(ValidationError, match="unknown settings"):
        settings_service.update_privacy(user.id, theme="light")
    assert store.settings_repo.get(user.id) is None


def test_export_for_buddy_has_their_records_and_no_password() -> None:
    mentor, mentor_user = make_mentor()
    buddy, user = make_buddy(mentor=mentor)
    task_service.create_task(
        principal_for(mentor_user),
        title="Read the docs",
        description="All of them",
        buddy_id=buddy.id,
        mentor_id=mentor.id,
    )
    settings_service.update_preferences(user.id, theme="navy")

    data = settings_service.export_user_data(user.id)
    assert data["user"]["email"] == "buddy@example.com"
    assert "passwordHash" not in data["user"]
    assert data["profile"]["assignedMentorId"] == mentor.id
    assert data["settings"]["theme"] == "navy"
    assert [t["title"] for t in data["tasks"]] == ["Read the docs"]
    assert data["exportedAt"] is not None

    mentor_data = settings_service.export_user_data(mentor_user.id)
    assert [t["title"] for t in mentor_data["tasks"]] == ["Read the docs"]
    assert mentor_data["portfolios"] == []


def test_delete_account_removes_user_profile_and_settings() -> None:
    buddy, user = make_buddy()
    settings_service.update_preferences(user.id, theme="light")

    settings_service.delete_account(user.id)
    assert store.user_repo.get_by_id(user.id) is None
    assert store.buddy_repo.get(buddy.id) is None
    assert store.settings_repo.get(user.id) is None


def test_last_active_manager_cannot_delete_their_account() -> None:
    first = make_manager()
    with pytest.raises(ConflictError):
        settings_service.delete_account(first.id)

    make_manager(email="second@example.com", name="Sam Second")
    settings_service.delete_account(first.id)
    assert store.user_repo.get_by_id(first.id) is None
