from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.buddies import BuddyOut, buddy_out
from mentor_buddy.api.dependencies import Page, paginate, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import (
    CAN_CREATE_MENTOR,
    CAN_DELETE_MENTOR,
    CAN_EDIT_MENTOR,
    CAN_VIEW_BUDDIES,
    CAN_VIEW_MENTORS,
)
from mentor_buddy.models.people import Mentor
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.user import User
from mentor_buddy.services import dashboard_service, people_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mentors", tags=["mentors"])


class MentorOut(BaseModel):
    id: UUID
    userId: UUID
    name: str
    email: str
    domainRole: str
    expertise: str
    experience: str
    bio: str
    buddiesCount: int
    status: str
    isActive: bool
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def mentor_out(mentor: Mentor, user: User | None = None) -> MentorOut:
    user = user or people_service.get_user(mentor.user_id)
    return MentorOut(
        id=mentor.id,
        userId=user.id,
        name=user.name,
        email=user.email,
        domainRole=user.domain_role,
        expertise=mentor.expertise,
        experience=mentor.experience,
        bio=mentor.bio,
        buddiesCount=people_service.buddies_count(mentor.id),
        status=mentor.status,
        isActive=mentor.is_active,
        createdAt=mentor.created_at,
        updatedAt=mentor.updated_at,
    )


class MentorCreateIn(BaseModel):
    name: str
    email: str
    password: str | None = None
    domainRole: str = "frontend"
    expertise: str = ""
    experience: str = ""
    bio: str = ""


class MentorUpdateIn(BaseModel):
    name: str | None = None
    email: str | None = None
    domainRole: str | None = None
    expertise: str | None = None
    experience: str | None = None
    bio: str | None = None
    status: str | None = None
    isActive: bool | None = None


_UPDATE_FIELDS = {
    "name": "name",
    "email": "email",
    "domainRole": "domain_role",
    "expertise": "expertise",
    "experience": "experience",
    "bio": "bio",
    "status": "status",
    "isActive": "is_active",
}


@router.get("", response_model=list[MentorOut])
def list_mentors(
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_MENTORS))],
    page: Page,
    domain: str | None = None,
    search: str | None = None,
    status: str | None = None,
) -> list[MentorOut]:
    rows = people_service.list_mentors(domain=domain, search=search, status=status)
    return [mentor_out(m, u) for m, u in paginate(rows, page)]


@router.get("/{mentor_id}", response_model=MentorOut)
def get_mentor(
    mentor_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_MENTORS))],
) -> MentorOut:
    try:
        return mentor_out(people_service.get_mentor(mentor_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.get("/{mentor_id}/buddies", response_model=list[BuddyOut])
def mentor_buddies(
    mentor_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_BUDDIES))],
    status: str | None = None,
) -> list[BuddyOut]:
    try:
        people_service.get_mentor(mentor_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    rows = people_service.list_buddies(mentor_id=mentor_id, status=status)
    return [buddy_out(b, u) for b, u in rows]


@router.post("", response_model=MentorOut, status_code=status.HTTP_201_CREATED)
async def create_mentor(
    payload: MentorCreateIn,
    principal: Annotated[Principal, Depends(require_permission(CAN_CREATE_MENTOR))],
) -> MentorOut:
    try:
        mentor = people_service.create_mentor(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            domain_role=payload.domainRole,
            expertise=payload.expertise,
            experience=payload.experience,
            bio=payload.bio,
            actor=people_service.display_name(principal.user_id),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return mentor_out(mentor)


@router.patch("/{mentor_id}", response_model=MentorOut)
async def update_mentor(
    mentor_id: UUID,
    payload: MentorUpdateIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_EDIT_MENTOR))],
) -> MentorOut:
    changes = {
        _UPDATE_FIELDS[k]: getattr(payload, k)
        for k in payload.model_fields_set
        if getattr(payload, k) is not None
    }
    try:
        mentor = people_service.update_mentor(mentor_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    logger.info("Mentor updated id=%s fields=%s", mentor_id, sorted(changes))
    return mentor_out(mentor)


@router.delete("/{mentor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mentor(
    mentor_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_DELETE_MENTOR))],
) -> Response:
    try:
        people_service.delete_mentor(mentor_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
