from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    name: str
    role: str  # manager|mentor|buddy
    domain_role: str = "frontend"
    avatar_url: str | None = None
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str,
        role: str,
        domain_role: str = "frontend",
    ) -> User:
        now = utcnow()
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name.strip(),
            role=role,
            domain_role=domain_role,
            created_at=now,
            updated_at=now,
        )
