from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from mentor_buddy.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from mentor_buddy.core.permissions import (
    can_delete_task,
    can_edit_task,
    can_update_task_status,
)
from mentor_buddy.models.common import utcnow
from mentor_buddy.models.principal import Principal
from mentor_buddy.models.task import TASK_PRIORITIES, TASK_STATUSES, Task, TaskSubmission
from mentor_buddy.repos import store
from mentor_buddy.services import people_service
from mentor_buddy.services.dashboard_service import record_activity

logger = logging.getLogger(__name__)


def _check_choice(field: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ValidationError(f"{field} must be one of {', '.join(choices)}")


def _mark_overdue(task: Task, now: datetime) -> Task:
    if task.status in ("pending", "in_progress") and task.is_overdue(now):
        task = replace(task, status="overdue", updated_at=now)
        store.task_repo.update(task)
    return task


def get_task(task_id: UUID) -> Task:
    task = store.task_repo.get(task_id)
    if task is None:
        raise NotFoundError("task not found")
    return _mark_overdue(task, utcnow())


def list_tasks(
    *,
    buddy_id: UUID | None = None,
    mentor_id: UUID | None = None,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
) -> list[Task]:
    now = utcnow()
    tasks = [_mark_overdue(t, now) for t in store.task_repo.list_all()]
    if buddy_id:
        tasks = [t for t in tasks if t.buddy_id == buddy_id]
    if mentor_id:
        tasks = [t for t in tasks if t.mentor_id == mentor_id]
    if status:
        tasks = [t for t in tasks if t.status == status]
    if priority:
        tasks = [t for t in tasks if t.priority == priority]
    if search:
        needle = search.lower()
        tasks = [
            t
            for t in tasks
            if needle in t.title.lower() or needle in t.description.lower()
        ]
    return tasks


def create_task(
    principal: Principal,
    *,
    title: str,
    description: str,
    buddy_id: UUID,
    mentor_id: UUID | None,
    status: str = "pending",
    priority: str = "medium",
    due_date: datetime | None = None,
) -> Task:
    title = (title or "").strip()
    if not title:
        raise ValidationError("title must be non-empty")
    _check_choice("status", status, TASK_STATUSES)
    _check_choice("priority", priority, TASK_PRIORITIES)
    people_service.get_buddy(buddy_id)

    if principal.is_mentor():
        own = people_service.mentor_for_user(principal.user_id)
        if own is None:
            raise PermissionDeniedError("mentor profile not found")
        if mentor_id is not None and mentor_id != own.id:
            raise PermissionDeniedError("mentors can only create their own tasks")
        mentor_id = own.id
    if mentor_id is None:
        raise ValidationError("mentorId is required")
    mentor = people_service.get_mentor(mentor_id)

    task = Task.new(
        title=title,
        description=description or "",
        buddy_id=buddy_id,
        mentor_id=mentor.id,
        status=status,
        priority=priority,
        due_date=due_date,
        created_by=UUID(principal.user_id),
    )
    store.task_repo.add(task)
    record_activity(
        "task_created",
        f"Task '{task.title}' assigned",
        people_service.display_name(principal.user_id),
        entity_id=task.id,
        entity_type="task",
    )
    logger.info("Created task id=%s buddy=%s mentor=%s", task.id, buddy_id, mentor.id)
    return task


def _buddy_user_id(task: Task) -> str:
    buddy = store.buddy_repo.get(task.buddy_id)
    return str(buddy.user_id) if buddy else ""


def update_task(principal: Principal, task_id: UUID, **changes) -> Task:
    task = get_task(task_id)
    creator = str(task.created_by) if task.created_by else None

    if set(changes) <= {"status"}:
        allowed = can_update_task_status(principal, _buddy_user_id(task))
    else:
        allowed = can_edit_task(principal, creator)
    if not allowed:
        logger.warning("Access denied: user=%s may not edit task=%s", principal.user_id, task_id)
        raise PermissionDeniedError("not allowed to edit this task")

    if "title" in changes:
        changes["title"] = (changes["title"] or "").strip()
        if not changes["title"]:
            raise ValidationError("title must be non-empty")
    if "priority" in changes:
        _check_choice("priority", changes["priority"], TASK_PRIORITIES)
    now = utcnow()
    if "status" in changes:
        _check_choice("status", changes["status"], TASK_STATUSES)
        if changes["status"] == "completed" and task.status != "completed":
            changes["completed_at"] = now
            record_activity(
                "task_completed",
                f"Task '{task.title}' completed",
                people_service.display_name(principal.user_id),
                entity_id=task.id,
                entity_type="task",
            )
        elif changes["status"] != "completed":
            changes["completed_at"] = None

    task = replace(task, **changes, updated_at=now)
    store.task_repo.update(task)
    return task


def delete_task(principal: Principal, task_id: UUID) -> None:
    task = get_task(task_id)
    if not can_delete_task(principal, str(task.created_by) if task.created_by else None):
        raise PermissionDeniedError("not allowed to delete this task")
    store.task_repo.delete(task_id)
    logger.info("Deleted task id=%s", task_id)


def submit_task(
    principal: Principal,
    task_id: UUID,
    *,
    github_link: str | None = None,
    deployed_url: str | None = None,
    notes: str | None = None,
) -> TaskSubmission:
    task = get_task(task_id)
    if principal.user_id != _buddy_user_id(task):
        raise PermissionDeniedError("only the assigned buddy can submit this task")

    submission = TaskSubmission.new(
        task_id=task.id,
        buddy_id=task.buddy_id,
        github_link=github_link,
        deployed_url=deployed_url,
        notes=notes,
    )
    store.task_repo.add_submission(submission)
    record_activity(
        "submission_created",
        f"Work submitted for '{task.title}'",
        people_service.display_name(principal.user_id),
        entity_id=task.id,
        entity_type="task",
    )
    logger.info("Task submission id=%s task=%s", submission.id, task.id)
    return submission


def list_task_submissions(task_id: UUID) -> list[TaskSubmission]:
    get_task(task_id)
    return store.task_repo.list_submissions(task_id)
