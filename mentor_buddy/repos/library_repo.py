from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.library import BuddyTopic, Portfolio, Resource, Topic


class ResourceRepo(Protocol):
    def get(self, resource_id: UUID) -> Resource | None: ...
    def add(self, resource: Resource) -> None: ...
    def update(self, resource: Resource) -> None: ...
    def delete(self, resource_id: UUID) -> bool: ...
    def list_all(self) -> list[Resource]: ...


class TopicRepo(Protocol):
    def get(self, topic_id: UUID) -> Topic | None: ...
    def add(self, topic: Topic) -> None: ...
    def update(self, topic: Topic) -> None: ...
    def delete(self, topic_id: UUID) -> bool: ...
    def list_all(self) -> list[Topic]: ...


class BuddyTopicRepo(Protocol):
    def get(self, buddy_topic_id: UUID) -> BuddyTopic | None: ...
    def add(self, buddy_topic: BuddyTopic) -> None: ...
    def update(self, buddy_topic: BuddyTopic) -> None: ...
    def list_by_buddy(self, buddy_id: UUID) -> list[BuddyTopic]: ...
    def delete_by_buddy(self, buddy_id: UUID) -> int: ...


class PortfolioRepo(Protocol):
    def get(self, portfolio_id: UUID) -> Portfolio | None: ...
    def add(self, portfolio: Portfolio) -> None: ...
    def update(self, portfolio: Portfolio) -> None: ...
    def delete(self, portfolio_id: UUID) -> bool: ...
    def list_by_buddy(self, buddy_id: UUID) -> list[Portfolio]: ...
    def delete_by_buddy(self, buddy_id: UUID) -> int: ...


class _InMemoryStore:
    """Shared dict-backed storage for the simple catalogue repos."""

    _kind = "entity"

    def __init__(self) -> None:
        self._by_id: dict = {}

    def get(self, entity_id: UUID):
        return self._by_id.get(entity_id)

    def add(self, entity) -> None:
        if entity.id in self._by_id:
            raise ValueError(f"{self._kind} already exists")
        self._by_id[entity.id] = entity

    def update(self, entity) -> None:
        if entity.id not in self._by_id:
            raise KeyError(f"{self._kind} not found")
        self._by_id[entity.id] = entity

    def delete(self, entity_id: UUID) -> bool:
        return self._by_id.pop(entity_id, None) is not None

    def list_all(self) -> list:
        return list(self._by_id.values())

    def clear(self) -> None:
        self._by_id.clear()


class InMemoryResourceRepo(_InMemoryStore):
    _kind = "resource"


class InMemoryTopicRepo(_InMemoryStore):
    _kind = "topic"


class InMemoryBuddyTopicRepo(_InMemoryStore):
    _kind = "buddy topic"

    def list_by_buddy(self, buddy_id: UUID) -> list[BuddyTopic]:
        return [t for t in self._by_id.values() if t.buddy_id == buddy_id]

    def delete_by_buddy(self, buddy_id: UUID) -> int:
        doomed = [t.id for t in self.list_by_buddy(buddy_id)]
        for topic_id in doomed:
            del self._by_id[topic_id]
        return len(doomed)


class InMemoryPortfolioRepo(_InMemoryStore):
    _kind = "portfolio"

    def list_by_buddy(self, buddy_id: UUID) -> list[Portfolio]:
        return [p for p in self._by_id.values() if p.buddy_id == buddy_id]

    def delete_by_buddy(self, buddy_id: UUID) -> int:
        doomed = [p.id for p in self.list_by_buddy(buddy_id)]
        for portfolio_id in doomed:
            del self._by_id[portfolio_id]
        return len(doomed)
