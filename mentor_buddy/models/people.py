"""Role profiles attached to a User: mentors and buddies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow


@dataclass(frozen=True, slots=True)
class Mentor:
    id: UUID
    user_id: UUID
    expertise: str = ""
    experience: str = ""
    bio: str = ""
    status: str = "active"  # active|inactive
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @staticmethod
    def new(
        *,
        user_id: UUID,
        expertise: str = "",
        experience: str = "",
        bio: str = "",
    ) -> Mentor:
        now = utcnow()
        return Mentor(
            id=uuid4(),
            user_id=user_id,
            expertise=expertise,
            experience=experience,
            bio=bio,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class Buddy:
    id: UUID
    user_id: UUID
    assigned_mentor_id: UUID | None = None
    status: str = "active"  # active|inactive|exited
    join_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(*, user_id: UUID, assigned_mentor_id: UUID | None = None) -> Buddy:
        now = utcnow()
        return Buddy(
            id=uuid4(),
            user_id=user_id,
            assigned_mentor_id=assigned_mentor_id,
            join_date=now,
            created_at=now,
            updated_at=now,
        )
