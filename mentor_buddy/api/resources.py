from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from mentor_buddy.api.dependencies import Page, paginate, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import (
    CAN_CREATE_RESOURCE,
    CAN_DELETE_RESOURCE,
    CAN_EDIT_RESOURCE,
    CAN_VIEW_RESOURCES,
)
from mentor_buddy.models.library import Resource
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import library_service

router = APIRouter(prefix="/api/resources", tags=["resources"])


class ResourceOut(BaseModel):
    id: UUID
    title: str
    url: str
    type: str
    description: str
    category: str
    difficulty: str
    duration: str
    author: str
    tags: list[str]
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def resource_out(r: Resource) -> ResourceOut:
    return ResourceOut(
        id=r.id,
        title=r.title,
        url=r.url,
        type=r.type,
        description=r.description,
        category=r.category,
        difficulty=r.difficulty,
        duration=r.duration,
        author=r.author,
        tags=list(r.tags),
        createdAt=r.created_at,
        updatedAt=r.updated_at,
    )


class ResourceIn(BaseModel):
    title: str
    url: str
    type: str = "article"
    description: str = ""
    category: str = ""
    difficulty: str = "beginner"
    duration: str = ""
    author: str = ""
    tags: list[str] = []


class ResourceUpdateIn(BaseModel):
    title: str | None = None
    url: str | None = None
    type: str | None = None
    description: str | None = None
    category: str | None = None
    difficulty: str | None = None
    duration: str | None = None
    author: str | None = None
    tags: list[str] | None = None


@router.get("", response_model=list[ResourceOut])
def list_resources(
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_RESOURCES))],
    page: Page,
    type: str | None = None,
    category: str | None = None,
    difficulty: str | None = None,
    search: str | None = None,
    tags: Annotated[list[str] | None, Query()] = None,
) -> list[ResourceOut]:
    items = library_service.list_resources(
        type=type, category=category, difficulty=difficulty, search=search, tags=tags
    )
    return [resource_out(r) for r in paginate(items, page)]


@router.get("/{resource_id}", response_model=ResourceOut)
def get_resource(
    resource_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_RESOURCES))],
) -> ResourceOut:
    try:
        return resource_out(library_service.get_resource(resource_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.post("", response_model=ResourceOut, status_code=status.HTTP_201_CREATED)
def create_resource(
    payload: ResourceIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_CREATE_RESOURCE))],
) -> ResourceOut:
    try:
        return resource_out(library_service.create_resource(**payload.model_dump()))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.patch("/{resource_id}", response_model=ResourceOut)
def update_resource(
    resource_id: UUID,
    payload: ResourceUpdateIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_EDIT_RESOURCE))],
) -> ResourceOut:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    try:
        return resource_out(library_service.update_resource(resource_id, **changes))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_DELETE_RESOURCE))],
) -> Response:
    try:
        library_service.delete_resource(resource_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
