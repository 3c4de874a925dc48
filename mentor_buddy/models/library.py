"""Learning resources, topic checklists and buddy portfolios."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow


@dataclass(frozen=True, slots=True)
class Resource:
    id: UUID
    title: str
    url: str
    type: str = "article"  # article|video|course|documentation|tool
    description: str = ""
    category: str = ""
    difficulty: str = "beginner"  # beginner|intermediate|advanced
    duration: str = ""
    author: str = ""
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(**fields) -> Resource:
        now = utcnow()
        tags = tuple(fields.pop("tags", ()) or ())
        return Resource(id=uuid4(), tags=tags, created_at=now, updated_at=now, **fields)


@dataclass(frozen=True, slots=True)
class Topic:
    id: UUID
    name: str
    category: str
    domain_role: str

    @staticmethod
    def new(*, name: str, category: str, domain_role: str) -> Topic:
        return Topic(id=uuid4(), name=name, category=category, domain_role=domain_role)


@dataclass(frozen=True, slots=True)
class BuddyTopic:
    """One line of a buddy's technical checklist."""

    id: UUID
    buddy_id: UUID
    topic_name: str
    category: str | None = None
    checked: bool = False
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @staticmethod
    def new(*, buddy_id: UUID, topic_name: str, category: str | None) -> BuddyTopic:
        return BuddyTopic(
            id=uuid4(),
            buddy_id=buddy_id,
            topic_name=topic_name,
            category=category,
            created_at=utcnow(),
        )


@dataclass(frozen=True, slots=True)
class PortfolioLink:
    label: str
    url: str
    type: str = "other"  # github|live|other


@dataclass(frozen=True, slots=True)
class Portfolio:
    id: UUID
    buddy_id: UUID
    title: str
    description: str
    technologies: tuple[str, ...] = ()
    links: tuple[PortfolioLink, ...] = ()
    resource_url: str | None = None
    resource_type: str | None = None
    resource_name: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(*, buddy_id: UUID, title: str, description: str, **extra) -> Portfolio:
        now = utcnow()
        return Portfolio(
            id=uuid4(),
            buddy_id=buddy_id,
            title=title,
            description=description,
            created_at=now,
            updated_at=now,
            **extra,
        )
