"""Topic catalogue and each buddy's technical checklist."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.buddies import load_visible_buddy
from mentor_buddy.api.dependencies import CurrentUser, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import (
    CAN_CREATE_TOPIC,
    CAN_DELETE_TOPIC,
    CAN_EDIT_TOPIC,
    CAN_VIEW_TOPICS,
)
from mentor_buddy.models.library import BuddyTopic, Topic
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import library_service

router = APIRouter(tags=["topics"])


class TopicOut(BaseModel):
    id: UUID
    name: str
    category: str
    domainRole: str


def topic_out(t: Topic) -> TopicOut:
    return TopicOut(id=t.id, name=t.name, category=t.category, domainRole=t.domain_role)


class TopicIn(BaseModel):
    name: str
    category: str = ""
    domainRole: str


class TopicUpdateIn(BaseModel):
    name: str | None = None
    category: str | None = None
    domainRole: str | None = None


class BuddyTopicOut(BaseModel):
    id: UUID
    buddyId: UUID
    topicName: str
    category: str | None = None
    checked: bool
    completedAt: datetime | None = None


def buddy_topic_out(t: BuddyTopic) -> BuddyTopicOut:
    return BuddyTopicOut(
        id=t.id,
        buddyId=t.buddy_id,
        topicName=t.topic_name,
        category=t.category,
        checked=t.checked,
        completedAt=t.completed_at,
    )


class BuddyTopicsOut(BaseModel):
    topics: list[BuddyTopicOut]
    percentage: int


class CheckIn(BaseModel):
    checked: bool


@router.get("/api/topics", response_model=list[TopicOut])
def list_topics(
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_TOPICS))],
    domainRole: str | None = None,
) -> list[TopicOut]:
    return [topic_out(t) for t in library_service.list_topics(domainRole)]


@router.get("/api/topics/{topic_id}", response_model=TopicOut)
def get_topic(
    topic_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_TOPICS))],
) -> TopicOut:
    try:
        return topic_out(library_service.get_topic(topic_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.post("/api/topics", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
def create_topic(
    payload: TopicIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_CREATE_TOPIC))],
) -> TopicOut:
    try:
        topic = library_service.create_topic(
            name=payload.name, category=payload.category, domain_role=payload.domainRole
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return topic_out(topic)


@router.patch("/api/topics/{topic_id}", response_model=TopicOut)
def update_topic(
    topic_id: UUID,
    payload: TopicUpdateIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_EDIT_TOPIC))],
) -> TopicOut:
    fields = {"name": "name", "category": "category", "domainRole": "domain_role"}
    changes = {
        fields[k]: v
        for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()
    }
    try:
        return topic_out(library_service.update_topic(topic_id, **changes))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.delete("/api/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_DELETE_TOPIC))],
) -> Response:
    try:
        library_service.delete_topic(topic_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/buddies/{buddy_id}/topics", response_model=BuddyTopicsOut)
def buddy_topics(buddy_id: UUID, principal: CurrentUser) -> BuddyTopicsOut:
    load_visible_buddy(principal, buddy_id)
    topics, pct = library_service.buddy_topics(buddy_id)
    return BuddyTopicsOut(topics=[buddy_topic_out(t) for t in topics], percentage=pct)


@router.patch("/api/buddy-topics/{buddy_topic_id}", response_model=BuddyTopicOut)
def check_topic(
    buddy_topic_id: UUID, payload: CheckIn, principal: CurrentUser
) -> BuddyTopicOut:
    try:
        item = library_service.set_topic_checked(principal, buddy_topic_id, payload.checked)
    except MentorBuddyError as exc:
        raise_http(exc)
    return buddy_topic_out(item)


@router.patch("/api/buddies/{buddy_id}/progress/{topic_id}", response_model=BuddyTopicOut)
def set_buddy_progress(
    buddy_id: UUID, topic_id: UUID, payload: CheckIn, principal: CurrentUser
) -> BuddyTopicOut:
    try:
        item = library_service.set_buddy_topic_checked(
            principal, buddy_id, topic_id, payload.checked
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return buddy_topic_out(item)
