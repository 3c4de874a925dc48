"""Account settings: preferences, privacy switches, data export and self-deletion."""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from uuid import UUID

from mentor_buddy.core.errors import ConflictError, ValidationError
from mentor_buddy.models.common import utcnow
from mentor_buddy.models.settings import PROFILE_VISIBILITIES, THEMES, UserSettings
from mentor_buddy.repos import store
from mentor_buddy.services import people_service

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = frozenset({"theme", "timezone", "email_notifications", "task_reminders"})
PRIVACY_FIELDS = frozenset({"profile_visibility", "show_progress", "show_portfolio"})


def get_settings(user_id: UUID) -> UserSettings:
    people_service.get_user(user_id)
    return store.settings_repo.get(user_id) or UserSettings(user_id=user_id)


def _save(user_id: UUID, allowed: frozenset[str], changes: dict) -> UserSettings:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"unknown settings: {', '.join(sorted(unknown))}")
    settings = replace(get_settings(user_id), **changes, updated_at=utcnow())
    store.settings_repo.save(settings)
    return settings


def update_preferences(user_id: UUID, **changes) -> UserSettings:
    if "theme" in changes and changes["theme"] not in THEMES:
        raise ValidationError(f"theme must be one of {', '.join(THEMES)}")
    if "timezone" in changes:
        changes["timezone"] = (changes["timezone"] or "").strip()
        if not changes["timezone"]:
            raise ValidationError("timezone must be non-empty")
    return _save(user_id, PREFERENCE_FIELDS, changes)


def update_privacy(user_id: UUID, **changes) -> UserSettings:
    visibility = changes.get("profile_visibility")
    if visibility is not None and visibility not in PROFILE_VISIBILITIES:
        raise ValidationError(
            f"profile visibility must be one of {', '.join(PROFILE_VISIBILITIES)}"
        )
    return _save(user_id, PRIVACY_FIELDS, changes)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _document(value):
    if isinstance(value, dict):
        return {_camel(k): _document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_document(v) for v in value]
    return value


def export_user_data(user_id: UUID) -> dict:
    """Everything stored about one user, camelCased, without the password hash."""
    user = people_service.get_user(user_id)
    account = asdict(user)
    account.pop("password_hash")
    data: dict = {
        "exported_at": utcnow(),
        "user": account,
        "settings": asdict(get_settings(user_id)),
        "profile": None,
        "tasks": [],
        "topics": [],
        "portfolios": [],
        "enrollments": [],
        "submissions": [],
    }

    mentor = store.mentor_repo.get_by_user(user_id)
    if mentor is not None:
        data["profile"] = asdict(mentor)
        data["tasks"] = [
            asdict(t) for t in store.task_repo.list_all() if t.mentor_id == mentor.id
        ]

    buddy = store.buddy_repo.get_by_user(user_id)
    if buddy is not None:
        data["profile"] = asdict(buddy)
        data["tasks"] = [asdict(t) for t in store.task_repo.list_by_buddy(buddy.id)]
        data["topics"] = [asdict(t) for t in store.buddy_topic_repo.list_by_buddy(buddy.id)]
        data["portfolios"] = [asdict(p) for p in store.portfolio_repo.list_by_buddy(buddy.id)]
        data["enrollments"] = [
            asdict(e) for e in store.enrollment_repo.list_by_buddy(buddy.id)
        ]
        data["submissions"] = [
            asdict(s) for s in store.submission_repo.list_all() if s.buddy_id == buddy.id
        ]

    logger.info("Exported account data user=%s", user_id)
    return _document(data)


def delete_account(user_id: UUID) -> None:
    user = people_service.get_user(user_id)
    if user.role == "manager" and user.is_active:
        others = [
            u
            for u in people_service.list_users(role="manager")
            if u.is_active and u.id != user.id
        ]
        if not others:
            raise ConflictError("the last active manager cannot delete this account")
    people_service.delete_user(user_id)
    logger.info("Account deleted by its owner user=%s", user_id)
