from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.task import Task, TaskSubmission


class TaskRepo(Protocol):
    def get(self, task_id: UUID) -> Task | None: ...
    def add(self, task: Task) -> None: ...
    def update(self, task: Task) -> None: ...
    def delete(self, task_id: UUID) -> bool: ...
    def list_all(self) -> list[Task]: ...
    def list_by_buddy(self, buddy_id: UUID) -> list[Task]: ...
    def add_submission(self, submission: TaskSubmission) -> None: ...
    def list_submissions(self, task_id: UUID) -> list[TaskSubmission]: ...


class InMemoryTaskRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Task] = {}
        self._submissions: dict[UUID, list[TaskSubmission]] = {}

    def get(self, task_id: UUID) -> Task | None:
        return self._by_id.get(task_id)

    def add(self, task: Task) -> None:
        self._by_id[task.id] = task

    def update(self, task: Task) -> None:
        if task.id not in self._by_id:
            raise KeyError("task not found")
        self._by_id[task.id] = task

    def delete(self, task_id: UUID) -> bool:
        self._submissions.pop(task_id, None)
        return self._by_id.pop(task_id, None) is not None

    def list_all(self) -> list[Task]:
        return list(self._by_id.values())

    def list_by_buddy(self, buddy_id: UUID) -> list[Task]:
        return [t for t in self._by_id.values() if t.buddy_id == buddy_id]

    def add_submission(self, submission: TaskSubmission) -> None:
        self._submissions.setdefault(submission.task_id, []).append(submission)

    def list_submissions(self, task_id: UUID) -> list[TaskSubmission]:
        return list(self._submissions.get(task_id, []))

    def clear(self) -> None:
        self._by_id.clear()
        self._submissions.clear()
