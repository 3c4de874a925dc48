"""PostgreSQL implementation of the user repository."""

from __future__ import annotations

from dataclasses import fields
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mentor_buddy.db.tables import UserRow
from mentor_buddy.models.user import User

_COLUMNS = tuple(f.name for f in fields(User))


class PgUserRepo:
    """Async counterpart of InMemoryUserRepo backed by the users table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email.strip().lower())
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def add(self, user: User) -> None:
        self._session.add(_user_to_row(user))
        await self._session.flush()

    async def update(self, user: User) -> None:
        values = {name: getattr(user, name) for name in _COLUMNS if name != "id"}
        result = await self._session.execute(
            update(UserRow).where(UserRow.id == user.id).values(**values)
        )
        if result.rowcount == 0:
            raise KeyError("user not found")

    async def delete(self, user_id: UUID) -> bool:
        result = await self._session.execute(delete(UserRow).where(UserRow.id == user_id))
        return result.rowcount > 0

    async def list_all(self) -> list[User]:
        rows = (await self._session.execute(select(UserRow))).scalars().all()
        return [_row_to_user(row) for row in rows]


def _user_to_row(user: User) -> UserRow:
    return UserRow(**{name: getattr(user, name) for name in _COLUMNS})


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        role=row.role,
        domain_role=row.domain_role or "frontend",
        avatar_url=row.avatar_url,
        is_active=row.is_active,
        last_login_at=row.last_login_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
