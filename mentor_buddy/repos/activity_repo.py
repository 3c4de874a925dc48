from __future__ import annotations

from typing import Protocol

from mentor_buddy.models.activity import Activity


class ActivityRepo(Protocol):
    def add(self, activity: Activity) -> None: ...
    def recent(self, limit: int) -> list[Activity]: ...


class InMemoryActivityRepo:
    def __init__(self) -> None:
        self._items: list[Activity] = []

    def add(self, activity: Activity) -> None:
        self._items.append(activity)

    def recent(self, limit: int) -> list[Activity]:
        """Newest first."""
        return list(reversed(self._items))[:limit]

    def clear(self) -> None:
        self._items.clear()
