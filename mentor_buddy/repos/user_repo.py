from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.user import User


class UserRepo(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def add(self, user: User) -> None: ...
    def update(self, user: User) -> None: ...
    def delete(self, user_id: UUID) -> bool: ...
    def list_all(self) -> list[User]: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_email: dict[str, User] = {}
        self._by_id: dict[UUID, User] = {}

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._by_email.get(email.strip().lower())

    def add(self, user: User) -> None:
        if user.email in self._by_email:
            raise ValueError("email already exists")
        self._by_email[user.email] = user
        self._by_id[user.id] = user

    def update(self, user: User) -> None:
        existing = self._by_id.get(user.id)
        if existing is None:
            raise KeyError("user not found")
        if user.email != existing.email:
            if user.email in self._by_email:
                raise ValueError("email already exists")
            del self._by_email[existing.email]
        self._by_id[user.id] = user
        self._by_email[user.email] = user

    def delete(self, user_id: UUID) -> bool:
        user = self._by_id.pop(user_id, None)
        if user is None:
            return False
        self._by_email.pop(user.email, None)
        return True

    def list_all(self) -> list[User]:
        return list(self._by_id.values())

    def clear(self) -> None:
        self._by_email.clear()
        self._by_id.clear()
