from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.people import Buddy, Mentor


class MentorRepo(Protocol):
    def get(self, mentor_id: UUID) -> Mentor | None: ...
    def get_by_user(self, user_id: UUID) -> Mentor | None: ...
    def add(self, mentor: Mentor) -> None: ...
    def update(self, mentor: Mentor) -> None: ...
    def delete(self, mentor_id: UUID) -> bool: ...
    def list_all(self) -> list[Mentor]: ...


class BuddyRepo(Protocol):
    def get(self, buddy_id: UUID) -> Buddy | None: ...
    def get_by_user(self, user_id: UUID) -> Buddy | None: ...
    def add(self, buddy: Buddy) -> None: ...
    def update(self, buddy: Buddy) -> None: ...
    def delete(self, buddy_id: UUID) -> bool: ...
    def list_all(self) -> list[Buddy]: ...
    def list_by_mentor(self, mentor_id: UUID) -> list[Buddy]: ...


class InMemoryMentorRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Mentor] = {}

    def get(self, mentor_id: UUID) -> Mentor | None:
        return self._by_id.get(mentor_id)

    def get_by_user(self, user_id: UUID) -> Mentor | None:
        return next((m for m in self._by_id.values() if m.user_id == user_id), None)

    def add(self, mentor: Mentor) -> None:
        if self.get_by_user(mentor.user_id) is not None:
            raise ValueError("user already has a mentor profile")
        self._by_id[mentor.id] = mentor

    def update(self, mentor: Mentor) -> None:
        if mentor.id not in self._by_id:
            raise KeyError("mentor not found")
        self._by_id[mentor.id] = mentor

    def delete(self, mentor_id: UUID) -> bool:
        return self._by_id.pop(mentor_id, None) is not None

    def list_all(self) -> list[Mentor]:
        return list(self._by_id.values())

    def clear(self) -> None:
        self._by_id.clear()


class InMemoryBuddyRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Buddy] = {}

    def get(self, buddy_id: UUID) -> Buddy | None:
        return self._by_id.get(buddy_id)

    def get_by_user(self, user_id: UUID) -> Buddy | None:
        return next((b for b in self._by_id.values() if b.user_id == user_id), None)

    def add(self, buddy: Buddy) -> None:
        if self.get_by_user(buddy.user_id) is not None:
            raise ValueError("user already has a buddy profile")
        self._by_id[buddy.id] = buddy

    def update(self, buddy: Buddy) -> None:
        if buddy.id not in self._by_id:
            raise KeyError("buddy not found")
        self._by_id[buddy.id] = buddy

    def delete(self, buddy_id: UUID) -> bool:
        return self._by_id.pop(buddy_id, None) is not None

    def list_all(self) -> list[Buddy]:
        return list(self._by_id.values())

    def list_by_mentor(self, mentor_id: UUID) -> list[Buddy]:
        return [b for b in self.list_all() if b.assigned_mentor_id == mentor_id]

    def clear(self) -> None:
        self._by_id.clear()
