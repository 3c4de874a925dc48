from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.enrollment import (
    BuddyCurriculum,
    BuddyWeekProgress,
    TaskAssignment,
)


class EnrollmentRepo(Protocol):
    def get(self, enrollment_id: UUID) -> BuddyCurriculum | None: ...
    def add(self, enrollment: BuddyCurriculum) -> None: ...
    def update(self, enrollment: BuddyCurriculum) -> None: ...
    def list_by_buddy(self, buddy_id: UUID) -> list[BuddyCurriculum]: ...
    def list_by_curriculum(self, curriculum_id: UUID) -> list[BuddyCurriculum]: ...
    def delete_by_buddy(self, buddy_id: UUID) -> int: ...

    def get_week(self, progress_id: UUID) -> BuddyWeekProgress | None: ...
    def add_week(self, progress: BuddyWeekProgress) -> None: ...
    def update_week(self, progress: BuddyWeekProgress) -> None: ...
    def list_weeks(self, enrollment_id: UUID) -> list[BuddyWeekProgress]: ...

    def get_assignment(self, assignment_id: UUID) -> TaskAssignment | None: ...
    def add_assignment(self, assignment: TaskAssignment) -> None: ...
    def update_assignment(self, assignment: TaskAssignment) -> None: ...
    def list_assignments(self, enrollment_id: UUID) -> list[TaskAssignment]: ...
    def list_assignments_by_buddy(self, buddy_id: UUID) -> list[TaskAssignment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._enrollments: dict[UUID, BuddyCurriculum] = {}
        self._weeks: dict[UUID, BuddyWeekProgress] = {}
        self._assignments: dict[UUID, TaskAssignment] = {}

    def get(self, enrollment_id: UUID) -> BuddyCurriculum | None:
        return self._enrollments.get(enrollment_id)

    def add(self, enrollment: BuddyCurriculum) -> None:
        self._enrollments[enrollment.id] = enrollment

    def update(self, enrollment: BuddyCurriculum) -> None:
        if enrollment.id not in self._enrollments:
            raise KeyError("enrollment not found")
        self._enrollments[enrollment.id] = enrollment

    def list_by_buddy(self, buddy_id: UUID) -> list[BuddyCurriculum]:
        return [e for e in self._enrollments.values() if e.buddy_id == buddy_id]

    def list_by_curriculum(self, curriculum_id: UUID) -> list[BuddyCurriculum]:
        return [
            e for e in self._enrollments.values() if e.curriculum_id == curriculum_id
        ]

    def delete_by_buddy(self, buddy_id: UUID) -> int:
        doomed = {e.id for e in self.list_by_buddy(buddy_id)}
        for enrollment_id in doomed:
            del self._enrollments[enrollment_id]
        self._weeks = {
            k: w for k, w in self._weeks.items() if w.buddy_curriculum_id not in doomed
        }
        self._assignments = {
            k: a
            for k, a in self._assignments.items()
            if a.buddy_curriculum_id not in doomed
        }
        return len(doomed)

    def get_week(self, progress_id: UUID) -> BuddyWeekProgress | None:
        return self._weeks.get(progress_id)

    def add_week(self, progress: BuddyWeekProgress) -> None:
        self._weeks[progress.id] = progress

    def update_week(self, progress: BuddyWeekProgress) -> None:
        if progress.id not in self._weeks:
            raise KeyError("week progress not found")
        self._weeks[progress.id] = progress

    def list_weeks(self, enrollment_id: UUID) -> list[BuddyWeekProgress]:
        weeks = [
            w for w in self._weeks.values() if w.buddy_curriculum_id == enrollment_id
        ]
        return sorted(weeks, key=lambda w: w.week_number)

    def get_assignment(self, assignment_id: UUID) -> TaskAssignment | None:
        return self._assignments.get(assignment_id)

    def add_assignment(self, assignment: TaskAssignment) -> None:
        self._assignments[assignment.id] = assignment

    def update_assignment(self, assignment: TaskAssignment) -> None:
        if assignment.id not in self._assignments:
            raise KeyError("task assignment not found")
        self._assignments[assignment.id] = assignment

    def list_assignments(self, enrollment_id: UUID) -> list[TaskAssignment]:
        return [
            a
            for a in self._assignments.values()
            if a.buddy_curriculum_id == enrollment_id
        ]

    def list_assignments_by_buddy(self, buddy_id: UUID) -> list[TaskAssignment]:
        return [a for a in self._assignments.values() if a.buddy_id == buddy_id]

    def clear(self) -> None:
        self._enrollments.clear()
        self._weeks.clear()
        self._assignments.clear()
