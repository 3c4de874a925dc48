"""Resources, topics, buddy topic checklists and portfolios."""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

from mentor_buddy.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from mentor_buddy.core.permissions import can_update_buddy_progress
from mentor_buddy.models.common import DOMAIN_ROLES, percentage, utcnow
from mentor_buddy.models.library import (
    BuddyTopic,
    Portfolio,
    PortfolioLink,
    Resource,
    Topic,
)
from mentor_buddy.models.principal import Principal
from mentor_buddy.repos import store
from mentor_buddy.services import people_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


def list_resources(
    *,
    type: str | None = None,
    category: str | None = None,
    difficulty: str | None = None,
    search: str | None = None,
    tags: list[str] | None = None,
) -> list[Resource]:
    items = store.resource_repo.list_all()
    if type:
        items = [r for r in items if r.type == type]
    if category:
        items = [r for r in items if r.category == category]
    if difficulty:
        items = [r for r in items if r.difficulty == difficulty]
    if tags:
        wanted = set(tags)
        items = [r for r in items if wanted & set(r.tags)]
    if search:
        needle = search.lower()
        items = [
            r
            for r in items
            if needle in r.title.lower()
            or needle in r.description.lower()
            or needle in r.author.lower()
        ]
    return items


def get_resource(resource_id: UUID) -> Resource:
    resource = store.resource_repo.get(resource_id)
    if resource is None:
        raise NotFoundError("resource not found")
    return resource


def create_resource(**fields) -> Resource:
    if not (fields.get("title") or "").strip():
        raise ValidationError("title must be non-empty")
    if not (fields.get("url") or "").strip():
        raise ValidationError("url must be non-empty")
    resource = Resource.new(**fields)
    store.resource_repo.add(resource)
    logger.info("Created resource id=%s", resource.id)
    return resource


def update_resource(resource_id: UUID, **changes) -> Resource:
    resource = get_resource(resource_id)
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"] or ())
    resource = replace(resource, **changes, updated_at=utcnow())
    store.resource_repo.update(resource)
    return resource


def delete_resource(resource_id: UUID) -> None:
    if not store.resource_repo.delete(resource_id):
        raise NotFoundError("resource not found")


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------


def list_topics(domain_role: str | None = None) -> list[Topic]:
    topics = store.topic_repo.list_all()
    if domain_role:
        topics = [t for t in topics if t.domain_role == domain_role]
    return topics


def get_topic(topic_id: UUID) -> Topic:
    topic = store.topic_repo.get(topic_id)
    if topic is None:
        raise NotFoundError("topic not found")
    return topic


def create_topic(*, name: str, category: str, domain_role: str) -> Topic:
    if not (name or "").strip():
        raise ValidationError("name must be non-empty")
    if domain_role not in DOMAIN_ROLES:
        raise ValidationError(f"domainRole must be one of {', '.join(DOMAIN_ROLES)}")
    topic = Topic.new(name=name.strip(), category=category, domain_role=domain_role)
    store.topic_repo.add(topic)
    return topic


def update_topic(topic_id: UUID, **changes) -> Topic:
    topic = replace(get_topic(topic_id), **changes)
    if topic.domain_role not in DOMAIN_ROLES:
        raise ValidationError(f"domainRole must be one of {', '.join(DOMAIN_ROLES)}")
    store.topic_repo.update(topic)
    return topic


def delete_topic(topic_id: UUID) -> None:
    if not store.topic_repo.delete(topic_id):
        raise NotFoundError("topic not found")


def buddy_topics(buddy_id: UUID) -> tuple[list[BuddyTopic], int]:
    """The buddy's checklist and the percentage already checked."""
    people_service.get_buddy(buddy_id)
    topics = store.buddy_topic_repo.list_by_buddy(buddy_id)
    return topics, percentage(sum(1 for t in topics if t.checked), len(topics))


def set_topic_checked(principal: Principal, buddy_topic_id: UUID, checked: bool) -> BuddyTopic:
    item = store.buddy_topic_repo.get(buddy_topic_id)
    if item is None:
        raise NotFoundError("buddy topic not found")
    buddy = people_service.get_buddy(item.buddy_id)
    if not can_update_buddy_progress(
        principal, str(buddy.user_id), people_service.mentor_user_id(buddy)
    ):
        logger.warning(
            "Access denied: user=%s may not update progress of buddy=%s",
            principal.user_id,
            buddy.id,
        )
        raise PermissionDeniedError("not allowed to update this buddy's progress")

    item = replace(item, checked=checked, completed_at=utcnow() if checked else None)
    store.buddy_topic_repo.update(item)
    return item


def set_buddy_topic_checked(
    principal: Principal, buddy_id: UUID, topic_id: UUID, checked: bool
) -> BuddyTopic:
    """Tick a catalogue topic on a buddy's checklist, matched by topic name."""
    topic = get_topic(topic_id)
    people_service.get_buddy(buddy_id)
    wanted = topic.name.casefold()
    for item in store.buddy_topic_repo.list_by_buddy(buddy_id):
        if item.topic_name.casefold() == wanted:
            return set_topic_checked(principal, item.id, checked)
    raise NotFoundError("topic is not on this buddy's checklist")


# ---------------------------------------------------------------------------
# Portfolios
# ---------------------------------------------------------------------------


def _links(links: list[dict] | None) -> tuple[PortfolioLink, ...]:
    return tuple(PortfolioLink(**link) for link in links or ())


def list_portfolios(buddy_id: UUID) -> list[Portfolio]:
    people_service.get_buddy(buddy_id)
    return store.portfolio_repo.list_by_buddy(buddy_id)


def get_portfolio(portfolio_id: UUID) -> Portfolio:
    portfolio = store.portfolio_repo.get(portfolio_id)
    if portfolio is None:
        raise NotFoundError("portfolio not found")
    return portfolio


def _require_owner(principal: Principal, buddy_id: UUID) -> None:
    buddy = people_service.get_buddy(buddy_id)
    if principal.user_id != str(buddy.user_id):
        raise PermissionDeniedError("only the buddy can manage their portfolio")


def create_portfolio(
    principal: Principal,
    buddy_id: UUID,
    *,
    title: str,
    description: str,
    links: list[dict] | None = None,
    technologies: list[str] | None = None,
    **extra,
) -> Portfolio:
    _require_owner(principal, buddy_id)
    if not (title or "").strip():
        raise ValidationError("title must be non-empty")
    portfolio = Portfolio.new(
        buddy_id=buddy_id,
        title=title.strip(),
        description=description or "",
        technologies=tuple(technologies or ()),
        links=_links(links),
        **extra,
    )
    store.portfolio_repo.add(portfolio)
    logger.info("Created portfolio id=%s buddy=%s", portfolio.id, buddy_id)
    return portfolio


def update_portfolio(principal: Principal, portfolio_id: UUID, **changes) -> Portfolio:
    portfolio = get_portfolio(portfolio_id)
    _require_owner(principal, portfolio.buddy_id)
    if "links" in changes:
        changes["links"] = _links(changes["links"])
    if "technologies" in changes:
        changes["technologies"] = tuple(changes["technologies"] or ())
    portfolio = replace(portfolio, **changes, updated_at=utcnow())
    store.portfolio_repo.update(portfolio)
    return portfolio


def delete_portfolio(principal: Principal, portfolio_id: UUID) -> None:
    portfolio = get_portfolio(portfolio_id)
    if not principal.is_manager():
        _require_owner(principal, portfolio.buddy_id)
    store.portfolio_repo.delete(portfolio_id)
