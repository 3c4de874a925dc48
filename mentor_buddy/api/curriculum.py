"""Curriculum authoring: curricula, weeks and task templates.

Any signed-in user may read; every mutation needs can_manage_curriculum.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.dependencies import CurrentUser, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import CAN_MANAGE_CURRICULUM, CAN_VIEW_ANALYTICS
from mentor_buddy.models.curriculum import Curriculum, CurriculumWeek, TaskTemplate
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import curriculum_service, enrollment_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["curriculum"])

Author = Annotated[Principal, Depends(require_permission(CAN_MANAGE_CURRICULUM))]


# --- Schemas ----------------------------------------------------------------


class WeekResourceIn(BaseModel):
    title: str
    url: str
    type: str
    duration: str | None = None


class TaskResourceIn(BaseModel):
    title: str
    url: str
    type: str


class ExpectedResourceTypeIn(BaseModel):
    type: str
    label: str
    required: bool = False


class TaskTemplateOut(BaseModel):
    id: UUID
    curriculumWeekId: UUID
    title: str
    description: str
    requirements: str
    difficulty: str
    estimatedHours: float
    expectedResourceTypes: list[ExpectedResourceTypeIn]
    resources: list[TaskResourceIn]
    displayOrder: int
    createdBy: UUID | None = None
    lastModifiedBy: UUID | None = None
    isActive: bool
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def template_out(t: TaskTemplate) -> TaskTemplateOut:
    return TaskTemplateOut(
        id=t.id,
        curriculumWeekId=t.curriculum_week_id,
        title=t.title,
        description=t.description,
        requirements=t.requirements,
        difficulty=t.difficulty,
        estimatedHours=t.estimated_hours,
        expectedResourceTypes=[
            ExpectedResourceTypeIn(type=e.type, label=e.label, required=e.required)
            for e in t.expected_resource_types
        ],
        resources=[
            TaskResourceIn(title=r.title, url=r.url, type=r.type) for r in t.resources
        ],
        displayOrder=t.display_order,
        createdBy=t.created_by,
        lastModifiedBy=t.last_modified_by,
        isActive=t.is_active,
        createdAt=t.created_at,
        updatedAt=t.updated_at,
    )


class WeekOut(BaseModel):
    id: UUID
    curriculumId: UUID
    weekNumber: int
    title: str
    description: str
    learningObjectives: list[str]
    resources: list[WeekResourceIn]
    displayOrder: int
    tasks: list[TaskTemplateOut] | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def week_out(w: CurriculumWeek, tasks: list[TaskTemplate] | None = None) -> WeekOut:
    return WeekOut(
        id=w.id,
        curriculumId=w.curriculum_id,
        weekNumber=w.week_number,
        title=w.title,
        description=w.description,
        learningObjectives=list(w.learning_objectives),
        resources=[
            WeekResourceIn(title=r.title, url=r.url, type=r.type, duration=r.duration)
            for r in w.resources
        ],
        displayOrder=w.display_order,
        tasks=[template_out(t) for t in tasks] if tasks is not None else None,
        createdAt=w.created_at,
        updatedAt=w.updated_at,
    )


class CurriculumOut(BaseModel):
    id: UUID
    name: str
    description: str
    slug: str
    domainRole: str
    totalWeeks: int
    status: str
    publishedAt: datetime | None = None
    version: str
    createdBy: UUID | None = None
    lastModifiedBy: UUID | None = None
    tags: list[str]
    isActive: bool
    weeks: list[WeekOut] | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def curriculum_out(c: Curriculum, *, with_weeks: bool = False) -> CurriculumOut:
    weeks = None
    if with_weeks:
        weeks = [week_out(w, t) for w, t in curriculum_service.get_structure(c.id)]
    return CurriculumOut(
        id=c.id,
        name=c.name,
        description=c.description,
        slug=c.slug,
        domainRole=c.domain_role,
        totalWeeks=c.total_weeks,
        status=c.status,
        publishedAt=c.published_at,
        version=c.version,
        createdBy=c.created_by,
        lastModifiedBy=c.last_modified_by,
        tags=list(c.tags),
        isActive=c.is_active,
        weeks=weeks,
        createdAt=c.created_at,
        updatedAt=c.updated_at,
    )


class CurriculumIn(BaseModel):
    name: str
    description: str = ""
    domainRole: str
    totalWeeks: int
    tags: list[str] = []
    version: str | None = None


class CurriculumUpdateIn(BaseModel):
    name: str | None = None
    description: str | None = None
    domainRole: str | None = None
    totalWeeks: int | None = None
    tags: list[str] | None = None
    version: str | None = None
    status: str | None = None
    isActive: bool | None = None


class WeekIn(BaseModel):
    weekNumber: int
    title: str
    description: str = ""
    learningObjectives: list[str] = []
    resources: list[WeekResourceIn] = []


class WeekUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    learningObjectives: list[str] | None = None
    resources: list[WeekResourceIn] | None = None


class TemplateIn(BaseModel):
    title: str
    description: str = ""
    requirements: str = ""
    difficulty: str = "medium"
    estimatedHours: float = 1.0
    expectedResourceTypes: list[ExpectedResourceTypeIn] = []
    resources: list[TaskResourceIn] = []
    isActive: bool = True


class TemplateUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    requirements: str | None = None
    difficulty: str | None = None
    estimatedHours: float | None = None
    expectedResourceTypes: list[ExpectedResourceTypeIn] | None = None
    resources: list[TaskResourceIn] | None = None
    isActive: bool | None = None


class ReorderItem(BaseModel):
    id: UUID
    displayOrder: int


class ReorderIn(BaseModel):
    items: list[ReorderItem]


class WeekCompletionOut(BaseModel):
    weekNumber: int
    completionRate: int


class AnalyticsOut(BaseModel):
    curriculumId: UUID
    totalBuddies: int
    activeBuddies: int
    completedBuddies: int
    averageProgress: int
    averageCompletionTime: float
    taskCompletionRate: int
    weekCompletionRates: list[WeekCompletionOut]


_CURRICULUM_FIELDS = {
    "name": "name",
    "description": "description",
    "domainRole": "domain_role",
    "totalWeeks": "total_weeks",
    "tags": "tags",
    "version": "version",
    "status": "status",
    "isActive": "is_active",
}

_WEEK_FIELDS = {
    "title": "title",
    "description": "description",
    "learningObjectives": "learning_objectives",
    "resources": "resources",
}

_TEMPLATE_FIELDS = {
    "title": "title",
    "description": "description",
    "requirements": "requirements",
    "difficulty": "difficulty",
    "estimatedHours": "estimated_hours",
    "expectedResourceTypes": "expected_resource_types",
    "resources": "resources",
    "isActive": "is_active",
}


def _changes(payload: BaseModel, fields: dict[str, str]) -> dict:
    return {
        fields[k]: v
        for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()
    }


def _uid(principal: Principal) -> UUID:
    return UUID(principal.user_id)


# --- Curricula --------------------------------------------------------------


@router.get("/api/curriculums", response_model=list[CurriculumOut])
def list_curricula(
    _principal: CurrentUser,
    domainRole: str | None = None,
    status: str | None = None,
    search: str | None = None,
    createdBy: UUID | None = None,
) -> list[CurriculumOut]:
    items = curriculum_service.list_curricula(
        domain_role=domainRole, status=status, search=search, created_by=createdBy
    )
    return [curriculum_out(c) for c in items]


@router.get("/api/curriculums/{curriculum_id}", response_model=CurriculumOut)
def get_curriculum(curriculum_id: UUID, _principal: CurrentUser) -> CurriculumOut:
    try:
        curriculum = curriculum_service.get_curriculum(curriculum_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(curriculum, with_weeks=True)


@router.post(
    "/api/curriculums", response_model=CurriculumOut, status_code=status.HTTP_201_CREATED
)
def create_curriculum(payload: CurriculumIn, principal: Author) -> CurriculumOut:
    try:
        curriculum = curriculum_service.create_curriculum(
            name=payload.name,
            description=payload.description,
            domain_role=payload.domainRole,
            total_weeks=payload.totalWeeks,
            created_by=_uid(principal),
            tags=payload.tags,
            version=payload.version,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(curriculum)


@router.patch("/api/curriculums/{curriculum_id}", response_model=CurriculumOut)
def update_curriculum(
    curriculum_id: UUID, payload: CurriculumUpdateIn, principal: Author
) -> CurriculumOut:
    try:
        curriculum = curriculum_service.update_curriculum(
            curriculum_id, _uid(principal), **_changes(payload, _CURRICULUM_FIELDS)
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(curriculum)


@router.delete("/api/curriculums/{curriculum_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_curriculum(curriculum_id: UUID, _principal: Author) -> Response:
    try:
        curriculum_service.delete_curriculum(curriculum_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/curriculums/{curriculum_id}/publish", response_model=CurriculumOut)
def publish(curriculum_id: UUID, principal: Author) -> CurriculumOut:
    try:
        curriculum = curriculum_service.publish(curriculum_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(curriculum)


@router.post("/api/curriculums/{curriculum_id}/unpublish", response_model=CurriculumOut)
def unpublish(curriculum_id: UUID, principal: Author) -> CurriculumOut:
    try:
        curriculum = curriculum_service.unpublish(curriculum_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(curriculum)


@router.post(
    "/api/curriculums/{curriculum_id}/duplicate",
    response_model=CurriculumOut,
    status_code=status.HTTP_201_CREATED,
)
def duplicate(curriculum_id: UUID, principal: Author) -> CurriculumOut:
    try:
        copy = curriculum_service.duplicate(curriculum_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return curriculum_out(copy, with_weeks=True)


@router.get("/api/curriculums/{curriculum_id}/analytics", response_model=AnalyticsOut)
def analytics(
    curriculum_id: UUID,
    _principal: Annotated[Principal, Depends(require_permission(CAN_VIEW_ANALYTICS))],
) -> AnalyticsOut:
    try:
        data = enrollment_service.curriculum_analytics(curriculum_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return AnalyticsOut(
        curriculumId=data["curriculum_id"],
        totalBuddies=data["total_buddies"],
        activeBuddies=data["active_buddies"],
        completedBuddies=data["completed_buddies"],
        averageProgress=data["average_progress"],
        averageCompletionTime=data["average_completion_time"],
        taskCompletionRate=data["task_completion_rate"],
        weekCompletionRates=[
            WeekCompletionOut(
                weekNumber=row["week_number"], completionRate=row["completion_rate"]
            )
            for row in data["week_completion_rates"]
        ],
    )


# --- Weeks ------------------------------------------------------------------


@router.get("/api/curriculums/{curriculum_id}/weeks", response_model=list[WeekOut])
def list_weeks(curriculum_id: UUID, _principal: CurrentUser) -> list[WeekOut]:
    try:
        weeks = curriculum_service.list_weeks(curriculum_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return [week_out(w) for w in weeks]


@router.post(
    "/api/curriculums/{curriculum_id}/weeks",
    response_model=WeekOut,
    status_code=status.HTTP_201_CREATED,
)
def create_week(curriculum_id: UUID, payload: WeekIn, principal: Author) -> WeekOut:
    try:
        week = curriculum_service.create_week(
            curriculum_id=curriculum_id,
            week_number=payload.weekNumber,
            title=payload.title,
            description=payload.description,
            learning_objectives=payload.learningObjectives,
            resources=[r.model_dump() for r in payload.resources],
            user_id=_uid(principal),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return week_out(week, [])


@router.post("/api/weeks/reorder", response_model=list[WeekOut])
def reorder_weeks(payload: ReorderIn, principal: Author) -> list[WeekOut]:
    try:
        weeks = curriculum_service.reorder_weeks(
            [(item.id, item.displayOrder) for item in payload.items],
            _uid(principal),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return [week_out(w) for w in weeks]


@router.get("/api/weeks/{week_id}", response_model=WeekOut)
def get_week(week_id: UUID, _principal: CurrentUser) -> WeekOut:
    try:
        week = curriculum_service.get_week(week_id)
        tasks = curriculum_service.list_templates(week_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return week_out(week, tasks)


@router.patch("/api/weeks/{week_id}", response_model=WeekOut)
def update_week(week_id: UUID, payload: WeekUpdateIn, principal: Author) -> WeekOut:
    try:
        week = curriculum_service.update_week(
            week_id, _uid(principal), **_changes(payload, _WEEK_FIELDS)
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return week_out(week)


@router.delete("/api/weeks/{week_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_week(week_id: UUID, principal: Author) -> Response:
    try:
        curriculum_service.delete_week(week_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Task templates ---------------------------------------------------------


@router.get("/api/weeks/{week_id}/tasks", response_model=list[TaskTemplateOut])
def list_templates(week_id: UUID, _principal: CurrentUser) -> list[TaskTemplateOut]:
    try:
        templates = curriculum_service.list_templates(week_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return [template_out(t) for t in templates]


@router.post(
    "/api/weeks/{week_id}/tasks",
    response_model=TaskTemplateOut,
    status_code=status.HTTP_201_CREATED,
)
def create_template(week_id: UUID, payload: TemplateIn, principal: Author) -> TaskTemplateOut:
    fields = _changes(payload, _TEMPLATE_FIELDS)
    fields.pop("title", None)
    fields.pop("description", None)
    try:
        template = curriculum_service.create_template(
            curriculum_week_id=week_id,
            title=payload.title,
            description=payload.description,
            user_id=_uid(principal),
            **fields,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return template_out(template)


@router.post("/api/task-templates/reorder", response_model=list[TaskTemplateOut])
def reorder_templates(payload: ReorderIn, principal: Author) -> list[TaskTemplateOut]:
    try:
        templates = curriculum_service.reorder_templates(
            [(item.id, item.displayOrder) for item in payload.items],
            _uid(principal),
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return [template_out(t) for t in templates]


@router.get("/api/task-templates/{template_id}", response_model=TaskTemplateOut)
def get_template(template_id: UUID, _principal: CurrentUser) -> TaskTemplateOut:
    try:
        return template_out(curriculum_service.get_template(template_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.patch("/api/task-templates/{template_id}", response_model=TaskTemplateOut)
def update_template(
    template_id: UUID, payload: TemplateUpdateIn, principal: Author
) -> TaskTemplateOut:
    try:
        template = curriculum_service.update_template(
            template_id, _uid(principal), **_changes(payload, _TEMPLATE_FIELDS)
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return template_out(template)


@router.delete("/api/task-templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(template_id: UUID, principal: Author) -> Response:
    try:
        curriculum_service.delete_template(template_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/api/task-templates/{template_id}/duplicate",
    response_model=TaskTemplateOut,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_template(template_id: UUID, principal: Author) -> TaskTemplateOut:
    try:
        copy = curriculum_service.duplicate_template(template_id, _uid(principal))
    except MentorBuddyError as exc:
        raise_http(exc)
    return template_out(copy)
