"""Manager-only user administration (/api/users)."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.auth import UserOut, user_out
from mentor_buddy.api.dependencies import require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import CAN_MANAGE_USERS
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import dashboard_service, people_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

Manager = Annotated[Principal, Depends(require_permission(CAN_MANAGE_USERS))]


class UserCreateIn(BaseModel):
    name: str
    email: str
    password: str | None = None
    role: str
    domainRole: str = "frontend"


class UserUpdateIn(BaseModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None
    domainRole: str | None = None
    isActive: bool | None = None
    avatarUrl: str | None = None


@router.get("", response_model=list[UserOut])
def list_users(
    _principal: Manager, role: str | None = None, search: str | None = None
) -> list[UserOut]:
    return [user_out(u) for u in people_service.list_users(role=role, search=search)]


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreateIn, _principal: Manager) -> UserOut:
    try:
        user = people_service.create_user(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            role=payload.role,
            domain_role=payload.domainRole,
        )
        people_service.ensure_profile(user)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return user_out(user)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: UUID, _principal: Manager) -> UserOut:
    try:
        return user_out(people_service.get_user(user_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: UUID, payload: UserUpdateIn, _principal: Manager) -> UserOut:
    fields = {
        "name": "name",
        "email": "email",
        "role": "role",
        "domainRole": "domain_role",
        "isActive": "is_active",
        "avatarUrl": "avatar_url",
    }
    changes = {}
    for key in payload.model_fields_set:
        value = getattr(payload, key)
        if value is not None or key == "avatarUrl":
            changes[fields[key]] = value
    try:
        user = people_service.update_user(user_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    logger.info("User updated id=%s fields=%s", user_id, sorted(changes))
    return user_out(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, principal: Manager) -> Response:
    if str(user_id) == principal.user_id:
        raise_http(MentorBuddyError("managers cannot delete themselves"))
    try:
        people_service.delete_user(user_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
