from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mentor_buddy.core.permissions import permissions_for
from mentor_buddy.main import app
from mentor_buddy.models.curriculum import Curriculum, CurriculumWeek, TaskTemplate
from mentor_buddy.models.people import Buddy, Mentor
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.user import User
from mentor_buddy.repos import store
from mentor_buddy.services import curriculum_service, people_service, token_service
from mentor_buddy.services.cache import cache_service
from mentor_buddy.services.token_blacklist import token_blacklist

# Ensure repo root is on sys.path so `import mentor_buddy` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    store.clear_all()


@pytest.fixture(autouse=True)
def reset_token_blacklist() -> None:
    """Clear token blacklist between tests."""
    if hasattr(token_blacklist, "_revoked"):
        token_blacklist._revoked.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Tokens and principals
# ---------------------------------------------------------------------------


def mint_token(user: User) -> str:
    """Create a valid ES256 access token for an existing user."""
    return token_service.create_access_token(sub=str(user.id), role=user.role)


def auth(user: User | None) -> dict[str, str]:
    if user is None:
        return {}
    return {"Authorization": f"Bearer {mint_token(user)}"}


def principal_for(user: User) -> Principal:
    return Principal(
        user_id=str(user.id), role=user.role, permissions=permissions_for(user.role)
    )


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


def make_manager(email: str = "manager@example.com", name: str = "Maya Manager") -> User:
    return people_service.create_user(
        email=email, password=PASSWORD, name=name, role="manager"
    )


def make_mentor(
    email: str = "mentor@example.com",
    name: str = "Milo Mentor",
    domain_role: str = "frontend",
) -> tuple[Mentor, User]:
    mentor = people_service.create_mentor(
        name=name,
        email=email,
        password=PASSWORD,
        domain_role=domain_role,
        expertise="React, TypeScript",
    )
    return mentor, people_service.get_user(mentor.user_id)


def make_buddy(
    email: str = "buddy@example.com",
    name: str = "Bea Buddy",
    mentor: Mentor | None = None,
    domain_role: str = "frontend",
) -> tuple[Buddy, User]:
    buddy = people_service.create_buddy(
        name=name,
        email=email,
        password=PASSWORD,
        domain_role=domain_role,
        assigned_mentor_id=mentor.id if mentor else None,
    )
    return buddy, people_service.get_user(buddy.user_id)


# ---------------------------------------------------------------------------
# Curricula
# ---------------------------------------------------------------------------


@dataclass
class SeededCurriculum:
    curriculum: Curriculum
    weeks: list[CurriculumWeek]
    templates: list[TaskTemplate]


def seed_curriculum(
    author: User | None = None,
    *,
    name: str = "Frontend Foundations",
    domain_role: str = "frontend",
    weeks: int = 2,
    tasks_per_week: int = 1,
    require_github: bool = False,
    publish: bool = True,
) -> SeededCurriculum:
    """Curriculum with `weeks` weeks of `tasks_per_week` templates each."""
    author_id = author.id if author else None
    curriculum = curriculum_service.create_curriculum(
        name=name,
        description="Start here",
        domain_role=domain_role,
        total_weeks=weeks,
        created_by=author_id,
    )
    seeded_weeks, templates = [], []
    for number in range(1, weeks + 1):
        week = curriculum_service.create_week(
            curriculum_id=curriculum.id,
            week_number=number,
            title=f"Week {number}",
            user_id=author_id,
        )
        seeded_weeks.append(week)
        for n in range(1, tasks_per_week + 1):
            expected = (
                [{"type": "github", "label": "Repository", "required": True}]
                if require_github
                else []
            )
            templates.append(
                curriculum_service.create_template(
                    curriculum_week_id=week.id,
                    title=f"Task {number}.{n}",
                    description="Build it",
                    user_id=author_id,
                    expected_resource_types=expected,
                )
            )
    if publish:
        curriculum = curriculum_service.publish(curriculum.id, author_id)
    return SeededCurriculum(curriculum=curriculum, weeks=seeded_weeks, templates=templates)


GITHUB = {"type": "github", "label": "Repo", "url": "https://github.com/bea/todo"}


# ---------------------------------------------------------------------------
# Common fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def manager() -> User:
    return make_manager()


@pytest.fixture
def mentor_pair() -> tuple[Mentor, User]:
    return make_mentor()


@pytest.fixture
def buddy_pair(mentor_pair: tuple[Mentor, User]) -> tuple[Buddy, User]:
    """A frontend buddy assigned to mentor_pair, not enrolled anywhere."""
    return make_buddy(mentor=mentor_pair[0])
