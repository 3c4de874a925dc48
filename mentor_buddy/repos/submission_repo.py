from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.submission import Submission, SubmissionFeedback


class SubmissionRepo(Protocol):
    def get(self, submission_id: UUID) -> Submission | None: ...
    def add(self, submission: Submission) -> None: ...
    def update(self, submission: Submission) -> None: ...
    def delete(self, submission_id: UUID) -> bool: ...
    def list_all(self) -> list[Submission]: ...
    def list_by_assignment(self, assignment_id: UUID) -> list[Submission]: ...

    def get_feedback(self, feedback_id: UUID) -> SubmissionFeedback | None: ...
    def add_feedback(self, feedback: SubmissionFeedback) -> None: ...
    def update_feedback(self, feedback: SubmissionFeedback) -> None: ...
    def delete_feedback(self, feedback_id: UUID) -> bool: ...
    def list_feedback(self, submission_id: UUID) -> list[SubmissionFeedback]: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Submission] = {}
        self._feedback: dict[UUID, SubmissionFeedback] = {}

    def get(self, submission_id: UUID) -> Submission | None:
        return self._by_id.get(submission_id)

    def add(self, submission: Submission) -> None:
        self._by_id[submission.id] = submission

    def update(self, submission: Submission) -> None:
        if submission.id not in self._by_id:
            raise KeyError("submission not found")
        self._by_id[submission.id] = submission

    def delete(self, submission_id: UUID) -> bool:
        if self._by_id.pop(submission_id, None) is None:
            return False
        self._feedback = {
            k: f for k, f in self._feedback.items() if f.submission_id != submission_id
        }
        return True

    def list_all(self) -> list[Submission]:
        return list(self._by_id.values())

    def list_by_assignment(self, assignment_id: UUID) -> list[Submission]:
        """Submissions for one assignment, newest version first."""
        subs = [s for s in self._by_id.values() if s.task_assignment_id == assignment_id]
        return sorted(subs, key=lambda s: s.version, reverse=True)

    def get_feedback(self, feedback_id: UUID) -> SubmissionFeedback | None:
        return self._feedback.get(feedback_id)

    def add_feedback(self, feedback: SubmissionFeedback) -> None:
        self._feedback[feedback.id] = feedback

    def update_feedback(self, feedback: SubmissionFeedback) -> None:
        if feedback.id not in self._feedback:
            raise KeyError("feedback not found")
        self._feedback[feedback.id] = feedback

    def delete_feedback(self, feedback_id: UUID) -> bool:
        return self._feedback.pop(feedback_id, None) is not None

    def list_feedback(self, submission_id: UUID) -> list[SubmissionFeedback]:
        # Insertion order is creation order.
        return [f for f in self._feedback.values() if f.submission_id == submission_id]

    def clear(self) -> None:
        self._by_id.clear()
        self._feedback.clear()
