"""Users and their mentor/buddy profiles.

Every mentor and buddy is backed by a User row carrying the login, name
and domain role; the profile holds the role-specific fields.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass, replace
from uuid import UUID

from mentor_buddy.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from mentor_buddy.core.permissions import can_edit_buddy_field
from mentor_buddy.models.common import DOMAIN_ROLES, ROLES, percentage, utcnow
from mentor_buddy.models.library import BuddyTopic
from mentor_buddy.models.people import Buddy, Mentor
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.user import User
from mentor_buddy.repos import store
from mentor_buddy.services import curriculum_service, enrollment_service
from mentor_buddy.services.auth_service import MIN_PASSWORD_LENGTH, hash_password
from mentor_buddy.services.dashboard_service import record_activity

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

BUDDY_STATUSES = ("active", "inactive", "exited")
MENTOR_STATUSES = ("active", "inactive")


@dataclass(frozen=True, slots=True)
class BuddyProgress:
    progress: int
    tasks_completed: int
    total_tasks: int


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def validate_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def _check_email(email: str) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("email is not a valid address")
    return email


def _check_domain(domain_role: str) -> None:
    if domain_role not in DOMAIN_ROLES:
        raise ValidationError(f"domainRole must be one of {', '.join(DOMAIN_ROLES)}")


def create_user(
    *,
    email: str,
    password: str | None,
    name: str,
    role: str,
    domain_role: str = "frontend",
) -> User:
    """Create a user.  A missing password gets a random one."""
    email = _check_email(email)
    if not (name or "").strip():
        raise ValidationError("name must be non-empty")
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    _check_domain(domain_role)
    if password is None:
        password = secrets.token_urlsafe(16)
    validate_password(password)

    if store.user_repo.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise ConflictError("email already exists")

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=role,
        domain_role=domain_role,
    )
    store.user_repo.add(user)
    logger.info("Created user id=%s role=%s", user.id, role)
    return user


def get_user(user_id: UUID) -> User:
    user = store.user_repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("user not found")
    return user


def list_users(*, role: str | None = None, search: str | None = None) -> list[User]:
    users = store.user_repo.list_all()
    if role:
        users = [u for u in users if u.role == role]
    if search:
        needle = search.lower()
        users = [u for u in users if needle in u.name.lower() or needle in u.email]
    return users


def update_user(user_id: UUID, **changes) -> User:
    user = get_user(user_id)
    if "email" in changes:
        changes["email"] = _check_email(changes["email"])
        other = store.user_repo.get_by_email(changes["email"])
        if other is not None and other.id != user.id:
            raise ConflictError("email already exists")
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise ValidationError("name must be non-empty")
    if "domain_role" in changes:
        _check_domain(changes["domain_role"])
    if "role" in changes and changes["role"] not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")

    user = replace(user, **changes, updated_at=utcnow())
    store.user_repo.update(user)
    return user


def delete_user(user_id: UUID) -> None:
    user = get_user(user_id)
    mentor = store.mentor_repo.get_by_user(user_id)
    if mentor is not None:
        delete_mentor(mentor.id)
        return
    buddy = store.buddy_repo.get_by_user(user_id)
    if buddy is not None:
        delete_buddy(buddy.id)
        return
    store.settings_repo.delete(user.id)
    store.user_repo.delete(user.id)
    logger.info("Deleted user id=%s", user.id)


def display_name(user_id: str | UUID) -> str:
    user = store.user_repo.get_by_id(UUID(str(user_id)))
    return user.name if user else "Unknown"


def profile_id_for(user: User) -> UUID | None:
    if user.role == "mentor":
        mentor = store.mentor_repo.get_by_user(user.id)
        return mentor.id if mentor else None
    if user.role == "buddy":
        buddy = store.buddy_repo.get_by_user(user.id)
        return buddy.id if buddy else None
    return None


def ensure_profile(user: User) -> None:
    """Create the mentor or buddy profile that matches the user's role."""
    if user.role == "mentor" and store.mentor_repo.get_by_user(user.id) is None:
        store.mentor_repo.add(Mentor.new(user_id=user.id))
    elif user.role == "buddy" and store.buddy_repo.get_by_user(user.id) is None:
        buddy = Buddy.new(user_id=user.id)
        store.buddy_repo.add(buddy)
        _auto_enroll(buddy, user.domain_role)


# ---------------------------------------------------------------------------
# Mentors
# ---------------------------------------------------------------------------


def get_mentor(mentor_id: UUID) -> Mentor:
    mentor = store.mentor_repo.get(mentor_id)
    if mentor is None:
        raise NotFoundError("mentor not found")
    return mentor


def mentor_for_user(user_id: str) -> Mentor | None:
    return store.mentor_repo.get_by_user(UUID(user_id))


def buddies_count(mentor_id: UUID) -> int:
    return len(store.buddy_repo.list_by_mentor(mentor_id))


def list_mentors(
    *,
    domain: str | None = None,
    search: str | None = None,
    status: str | None = None,
) -> list[tuple[Mentor, User]]:
    rows = [(m, get_user(m.user_id)) for m in store.mentor_repo.list_all()]
    if domain:
        rows = [(m, u) for m, u in rows if u.domain_role == domain]
    if status:
        rows = [(m, u) for m, u in rows if m.status == status]
    if search:
        needle = search.lower()
        rows = [
            (m, u)
            for m, u in rows
            if needle in u.name.lower()
            or needle in u.email
            or needle in m.expertise.lower()
        ]
    return rows


def create_mentor(
    *,
    name: str,
    email: str,
    password: str | None,
    domain_role: str,
    expertise: str = "",
    experience: str = "",
    bio: str = "",
    actor: str = "system",
) -> Mentor:
    user = create_user(
        email=email, password=password, name=name, role="mentor", domain_role=domain_role
    )
    mentor = Mentor.new(
        user_id=user.id, expertise=expertise, experience=experience, bio=bio
    )
    store.mentor_repo.add(mentor)
    record_activity(
        "mentor_created",
        f"New mentor {user.name} joined",
        actor,
        entity_id=mentor.id,
        entity_type="mentor",
    )
    logger.info("Created mentor id=%s user=%s", mentor.id, user.id)
    return mentor


def update_mentor(mentor_id: UUID, **changes) -> Mentor:
    mentor = get_mentor(mentor_id)
    is_active = changes.pop("is_active", None)
    if is_active is not None:
        changes["status"] = "active" if is_active else "inactive"
    if "status" in changes and changes["status"] not in MENTOR_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(MENTOR_STATUSES)}")

    user_changes = {
        k: changes.pop(k) for k in ("name", "email", "domain_role") if k in changes
    }
    if user_changes:
        update_user(mentor.user_id, **user_changes)

    mentor = replace(mentor, **changes, updated_at=utcnow())
    store.mentor_repo.update(mentor)
    return mentor


def delete_mentor(mentor_id: UUID) -> None:
    mentor = get_mentor(mentor_id)
    for buddy in store.buddy_repo.list_by_mentor(mentor_id):
        store.buddy_repo.update(
            replace(buddy, assigned_mentor_id=None, updated_at=utcnow())
        )
    store.mentor_repo.delete(mentor_id)
    store.settings_repo.delete(mentor.user_id)
    store.user_repo.delete(mentor.user_id)
    logger.info("Deleted mentor id=%s", mentor_id)


# ---------------------------------------------------------------------------
# Buddies
# ---------------------------------------------------------------------------


def get_buddy(buddy_id: UUID) -> Buddy:
    buddy = store.buddy_repo.get(buddy_id)
    if buddy is None:
        raise NotFoundError("buddy not found")
    return buddy


def buddy_for_user(user_id: str) -> Buddy | None:
    return store.buddy_repo.get_by_user(UUID(user_id))


def mentor_user_id(buddy: Buddy) -> str | None:
    if buddy.assigned_mentor_id is None:
        return None
    mentor = store.mentor_repo.get(buddy.assigned_mentor_id)
    return str(mentor.user_id) if mentor else None


def is_assigned_mentor(principal: Principal, buddy: Buddy) -> bool:
    return principal.is_mentor() and mentor_user_id(buddy) == principal.user_id


def can_view_buddy(principal: Principal, buddy: Buddy) -> bool:
    if principal.is_manager() or principal.is_mentor():
        return True
    return principal.user_id == str(buddy.user_id)


def buddy_progress(buddy_id: UUID) -> BuddyProgress:
    """Completion across ad-hoc tasks and curriculum assignments."""
    tasks = store.task_repo.list_by_buddy(buddy_id)
    assignments = store.enrollment_repo.list_assignments_by_buddy(buddy_id)
    done = sum(1 for t in tasks if t.status == "completed") + sum(
        1 for a in assignments if a.status == "completed"
    )
    total = len(tasks) + len(assignments)
    return BuddyProgress(
        progress=percentage(done, total), tasks_completed=done, total_tasks=total
    )


def list_buddies(
    *,
    mentor_id: UUID | None = None,
    domain: str | None = None,
    search: str | None = None,
    status: str | None = None,
) -> list[tuple[Buddy, User]]:
    buddies = (
        store.buddy_repo.list_by_mentor(mentor_id)
        if mentor_id
        else store.buddy_repo.list_all()
    )
    rows = [(b, get_user(b.user_id)) for b in buddies]
    if domain:
        rows = [(b, u) for b, u in rows if u.domain_role == domain]
    if status:
        rows = [(b, u) for b, u in rows if b.status == status]
    if search:
        needle = search.lower()
        rows = [
            (b, u) for b, u in rows if needle in u.name.lower() or needle in u.email
        ]
    return rows


def _auto_enroll(buddy: Buddy, domain_role: str) -> None:
    curriculum = curriculum_service.get_published_for_domain(domain_role)
    if curriculum is not None:
        enrollment_service.enroll(buddy.id, curriculum.id)


def create_buddy(
    *,
    name: str,
    email: str,
    password: str | None,
    domain_role: str,
    assigned_mentor_id: UUID | None = None,
    curriculum_id: UUID | None = None,
    topic_ids: list[UUID] | None = None,
    actor: str = "system",
) -> Buddy:
    if assigned_mentor_id is not None:
        get_mentor(assigned_mentor_id)
    topics = []
    for topic_id in topic_ids or ():
        topic = store.topic_repo.get(topic_id)
        if topic is None:
            raise ValidationError(f"unknown topic {topic_id}")
        topics.append(topic)
    if curriculum_id is not None:
        if curriculum_service.get_curriculum(curriculum_id).status != "published":
            raise ValidationError("only published curricula accept enrollments")

    user = create_user(
        email=email, password=password, name=name, role="buddy", domain_role=domain_role
    )
    buddy = Buddy.new(user_id=user.id, assigned_mentor_id=assigned_mentor_id)
    store.buddy_repo.add(buddy)

    for topic in topics:
        store.buddy_topic_repo.add(
            BuddyTopic.new(
                buddy_id=buddy.id, topic_name=topic.name, category=topic.category
            )
        )

    if curriculum_id is not None:
        enrollment_service.enroll(buddy.id, curriculum_id)
    else:
        _auto_enroll(buddy, domain_role)

    record_activity(
        "buddy_created",
        f"New buddy {user.name} joined",
        actor,
        entity_id=buddy.id,
        entity_type="buddy",
    )
    logger.info("Created buddy id=%s mentor=%s", buddy.id, assigned_mentor_id)
    return buddy


_BUDDY_FIELD_NAMES = {
    "name": "name",
    "email": "email",
    "domain_role": "domainRole",
    "status": "status",
    "assigned_mentor_id": "assignedMentorId",
}


def update_buddy(principal: Principal, buddy_id: UUID, **changes) -> Buddy:
    buddy = get_buddy(buddy_id)
    for field in changes:
        if not can_edit_buddy_field(principal, str(buddy.user_id), _BUDDY_FIELD_NAMES[field]):
            logger.warning(
                "Access denied: user=%s may not edit buddy field=%s",
                principal.user_id,
                field,
            )
            raise PermissionDeniedError(f"not allowed to edit {_BUDDY_FIELD_NAMES[field]}")

    if "status" in changes and changes["status"] not in BUDDY_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(BUDDY_STATUSES)}")
    if changes.get("assigned_mentor_id") is not None:
        get_mentor(changes["assigned_mentor_id"])

    # profile checks pass before the user row is touched
    user_changes = {
        k: changes.pop(k) for k in ("name", "email", "domain_role") if k in changes
    }
    if user_changes:
        update_user(buddy.user_id, **user_changes)

    buddy = replace(buddy, **changes, updated_at=utcnow())
    store.buddy_repo.update(buddy)
    return buddy


def assign_mentor(buddy_id: UUID, mentor_id: UUID, actor: str = "system") -> Buddy:
    buddy = get_buddy(buddy_id)
    mentor = get_mentor(mentor_id)
    buddy = replace(buddy, assigned_mentor_id=mentor.id, updated_at=utcnow())
    store.buddy_repo.update(buddy)
    record_activity(
        "buddy_assigned",
        f"{get_user(buddy.user_id).name} assigned to {get_user(mentor.user_id).name}",
        actor,
        entity_id=buddy.id,
        entity_type="buddy",
    )
    logger.info("Assigned buddy=%s to mentor=%s", buddy_id, mentor_id)
    return buddy


def delete_buddy(buddy_id: UUID) -> None:
    buddy = get_buddy(buddy_id)
    for task in store.task_repo.list_by_buddy(buddy_id):
        store.task_repo.delete(task.id)
    for submission in store.submission_repo.list_all():
        if submission.buddy_id == buddy_id:
            store.submission_repo.delete(submission.id)
    store.buddy_topic_repo.delete_by_buddy(buddy_id)
    store.portfolio_repo.delete_by_buddy(buddy_id)
    store.enrollment_repo.delete_by_buddy(buddy_id)
    store.buddy_repo.delete(buddy_id)
    store.settings_repo.delete(buddy.user_id)
    store.user_repo.delete(buddy.user_id)
    logger.info("Deleted buddy id=%s", buddy_id)
