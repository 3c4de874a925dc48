from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.settings import UserSettings


class SettingsRepo(Protocol):
    def get(self, user_id: UUID) -> UserSettings | None: ...
    def save(self, settings: UserSettings) -> None: ...
    def delete(self, user_id: UUID) -> bool: ...


class InMemorySettingsRepo:
    def __init__(self) -> None:
        self._by_user: dict[UUID, UserSettings] = {}

    def get(self, user_id: UUID) -> UserSettings | None:
        return self._by_user.get(user_id)

    def save(self, settings: UserSettings) -> None:
        self._by_user[settings.user_id] = settings

    def delete(self, user_id: UUID) -> bool:
        return self._by_user.pop(user_id, None) is not None

    def clear(self) -> None:
        self._by_user.clear()
