from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.buddies import load_visible_buddy
from mentor_buddy.api.dependencies import CurrentUser, Page, paginate, require_permission
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import CAN_CREATE_TASK, CAN_VIEW_TASKS
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.task import Task, TaskSubmission
from mentor_buddy.services import dashboard_service, people_service, task_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])

Viewer = Annotated[Principal, Depends(require_permission(CAN_VIEW_TASKS))]


class TaskOut(BaseModel):
    id: UUID
    title: str
    description: str
    buddyId: UUID
    mentorId: UUID
    status: str
    priority: str
    dueDate: datetime | None = None
    completedAt: datetime | None = None
    createdBy: UUID | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def task_out(task: Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        buddyId=task.buddy_id,
        mentorId=task.mentor_id,
        status=task.status,
        priority=task.priority,
        dueDate=task.due_date,
        completedAt=task.completed_at,
        createdBy=task.created_by,
        createdAt=task.created_at,
        updatedAt=task.updated_at,
    )


class TaskSubmissionOut(BaseModel):
    id: UUID
    taskId: UUID
    buddyId: UUID
    githubLink: str | None = None
    deployedUrl: str | None = None
    notes: str | None = None
    feedback: str | None = None
    createdAt: datetime | None = None


def task_submission_out(submission: TaskSubmission) -> TaskSubmissionOut:
    return TaskSubmissionOut(
        id=submission.id,
        taskId=submission.task_id,
        buddyId=submission.buddy_id,
        githubLink=submission.github_link,
        deployedUrl=submission.deployed_url,
        notes=submission.notes,
        feedback=submission.feedback,
        createdAt=submission.created_at,
    )


class TaskCreateIn(BaseModel):
    title: str
    description: str = ""
    buddyId: UUID
    mentorId: UUID | None = None
    status: str = "pending"
    priority: str = "medium"
    dueDate: datetime | None = None


class TaskUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    dueDate: datetime | None = None


class TaskSubmissionIn(BaseModel):
    taskId: UUID
    githubLink: str | None = None
    deployedUrl: str | None = None
    notes: str | None = None


_UPDATE_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
}


def _own_buddy_id(principal: Principal) -> UUID | None:
    buddy = people_service.buddy_for_user(principal.user_id)
    return buddy.id if buddy else None


@router.get("/api/tasks", response_model=list[TaskOut])
def list_tasks(
    principal: Viewer,
    page: Page,
    buddyId: UUID | None = None,
    mentorId: UUID | None = None,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
) -> list[TaskOut]:
    # buddies only ever see their own tasks
    if principal.is_buddy():
        buddyId = _own_buddy_id(principal)
        if buddyId is None:
            return []
    tasks = task_service.list_tasks(
        buddy_id=buddyId,
        mentor_id=mentorId,
        status=status,
        priority=priority,
        search=search,
    )
    return [task_out(t) for t in paginate(tasks, page)]


@router.get("/api/tasks/{task_id}", response_model=TaskOut)
def get_task(task_id: UUID, principal: Viewer) -> TaskOut:
    try:
        task = task_service.get_task(task_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    load_visible_buddy(principal, task.buddy_id)
    return task_out(task)


@router.post("/api/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreateIn,
    principal: Annotated[Principal, Depends(require_permission(CAN_CREATE_TASK))],
) -> TaskOut:
    try:
        task = task_service.create_task(
            principal,
            title=payload.title,
            description=payload.description,
            buddy_id=payload.buddyId,
            mentor_id=payload.mentorId,
            status=payload.status,
            priority=payload.priority,
            due_date=payload.dueDate,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return task_out(task)


@router.patch("/api/tasks/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: UUID, payload: TaskUpdateIn, principal: CurrentUser
) -> TaskOut:
    changes = {}
    for key in payload.model_fields_set:
        value = getattr(payload, key)
        if value is not None or key == "dueDate":
            changes[_UPDATE_FIELDS[key]] = value
    try:
        task = task_service.update_task(principal, task_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return task_out(task)


@router.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, principal: CurrentUser) -> Response:
    try:
        task_service.delete_task(principal, task_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/tasks/{task_id}/submissions", response_model=list[TaskSubmissionOut])
def task_submissions(task_id: UUID, principal: Viewer) -> list[TaskSubmissionOut]:
    try:
        task = task_service.get_task(task_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    load_visible_buddy(principal, task.buddy_id)
    return [task_submission_out(s) for s in task_service.list_task_submissions(task_id)]


@router.post(
    "/api/submissions",
    response_model=TaskSubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_task(payload: TaskSubmissionIn, principal: CurrentUser) -> TaskSubmissionOut:
    try:
        submission = task_service.submit_task(
            principal,
            payload.taskId,
            github_link=payload.githubLink,
            deployed_url=payload.deployedUrl,
            notes=payload.notes,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return task_submission_out(submission)


@router.get("/api/buddies/{buddy_id}/tasks", response_model=list[TaskOut])
def buddy_tasks(buddy_id: UUID, principal: CurrentUser) -> list[TaskOut]:
    buddy = load_visible_buddy(principal, buddy_id)
    return [task_out(t) for t in task_service.list_tasks(buddy_id=buddy.id)]
