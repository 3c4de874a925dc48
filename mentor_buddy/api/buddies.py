"""Buddy profiles (/api/buddies).

Reads are open to managers and mentors, plus the buddy for their own
record.  Edits go through the per-field rules in core.permissions, so a
buddy may rename themself while only a manager moves them between mentors.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from mentor_buddy.api.dependencies import CurrentUser, Page, paginate, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import (
    CAN_CREATE_BUDDY,
    CAN_DELETE_BUDDY,
    CAN_EDIT_BUDDY_MENTOR,
    CAN_VIEW_BUDDIES,
)
from mentor_buddy.models.people import Buddy
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.user import User
from mentor_buddy.services import dashboard_service, people_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/buddies", tags=["buddies"])


class BuddyOut(BaseModel):
    id: UUID
    userId: UUID
    name: str
    email: str
    domainRole: str
    assignedMentorId: UUID | None = None
    mentorName: str | None = None
    joinDate: datetime | None = None
    status: str
    progress: int
    tasksCompleted: int
    totalTasks: int
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def buddy_out(buddy: Buddy, user: User | None = None) -> BuddyOut:
    user = user or people_service.get_user(buddy.user_id)
    mentor_name = None
    if buddy.assigned_mentor_id is not None:
        mentor_user = people_service.mentor_user_id(buddy)
        if mentor_user is not None:
            mentor_name = people_service.display_name(mentor_user)
    progress = people_service.buddy_progress(buddy.id)
    return BuddyOut(
        id=buddy.id,
        userId=user.id,
        name=user.name,
        email=user.email,
        domainRole=user.domain_role,
        assignedMentorId=buddy.assigned_mentor_id,
        mentorName=mentor_name,
        joinDate=buddy.join_date,
        status=buddy.status,
        progress=progress.progress,
        tasksCompleted=progress.tasks_completed,
        totalTasks=progress.total_tasks,
        createdAt=buddy.created_at,
        updatedAt=buddy.updated_at,
    )


class BuddyCreateIn(BaseModel):
    name: str
    email: str
    password: str | None = None
    domainRole: str = "frontend"
    assignedMentorId: UUID | None = None
    curriculumId: UUID | None = None
    topicIds: list[UUID] = []


class BuddyUpdateIn(BaseModel):
    name: str | None = None
    email: str | None = None
    domainRole: str | None = None
    status: str | None = None
    assignedMentorId: UUID | None = None


class AssignIn(BaseModel):
    mentorId: UUID


_UPDATE_FIELDS = {
    "name": "name",
    "email": "email",
    "domainRole": "domain_role",
    "status": "status",
    "assignedMentorId": "assigned_mentor_id",
}


def load_visible_buddy(principal: Principal, buddy_id: UUID) -> Buddy:
    """Fetch a buddy the caller may see, or raise 404/403."""
    try:
        buddy = people_service.get_buddy(buddy_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    if not people_service.can_view_buddy(principal, buddy):
        logger.warning(
            "Access denied: user=%s may not view buddy=%s", principal.user_id, buddy_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )
    return buddy


@router.get("", response_model=list[BuddyOut])
def list_buddies(
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_BUDDIES))],
    page: Page,
    mentorId: UUID | None = None,
    domain: str | None = None,
    search: str | None = None,
    status: str | None = None,
) -> list[BuddyOut]:
    rows = people_service.list_buddies(
        mentor_id=mentorId, domain=domain, search=search, status=status
    )
    return [buddy_out(b, u) for b, u in paginate(rows, page)]


@router.get("/{buddy_id}", response_model=BuddyOut)
def get_buddy(buddy_id: UUID, principal: CurrentUser) -> BuddyOut:
    return buddy_out(load_visible_buddy(principal, buddy_id))


@router.post("", response_model=BuddyOut, status_code=status.HTTP_201_CREATED)
async def create_buddy(
    payload: BuddyCreateIn,
    principal: Annotated[Principal, Depends(require_permission(CAN_CREATE_BUDDY))],
) -> BuddyOut:
    try:
        buddy = people_service.create_buddy(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            domain_role=payload.domainRole,
            assigned_mentor_id=payload.assignedMentorId,
            curriculum_id=payload.curriculumId,
            topic_ids=payload.topicIds,
            actor=people_service.display_name(principal.user_id),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return buddy_out(buddy)


@router.patch("/{buddy_id}", response_model=BuddyOut)
async def update_buddy(
    buddy_id: UUID, payload: BuddyUpdateIn, principal: CurrentUser
) -> BuddyOut:
    changes = {}
    for key in payload.model_fields_set:
        value = getattr(payload, key)
        # a null mentor id unassigns
        if value is not None or key == "assignedMentorId":
            changes[_UPDATE_FIELDS[key]] = value
    try:
        buddy = people_service.update_buddy(principal, buddy_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    logger.info("Buddy updated id=%s fields=%s", buddy_id, sorted(changes))
    return buddy_out(buddy)


@router.patch("/{buddy_id}/assign", response_model=BuddyOut)
def assign_mentor(
    buddy_id: UUID,
    payload: AssignIn,
    principal: Annotated[Principal, Depends(require_permission(CAN_EDIT_BUDDY_MENTOR))],
) -> BuddyOut:
    try:
        buddy = people_service.assign_mentor(
            buddy_id,
            payload.mentorId,
            actor=people_service.display_name(principal.user_id),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return buddy_out(buddy)


@router.delete("/{buddy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_buddy(
    buddy_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_DELETE_BUDDY))],
) -> Response:
    try:
        people_service.delete_buddy(buddy_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
