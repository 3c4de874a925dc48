"""Task assignments, versioned submissions, reviews and feedback threads."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from mentor_buddy.api.curriculum import TaskTemplateOut, template_out
from mentor_buddy.api.dependencies import CurrentUser
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.models.enrollment import TaskAssignment
from mentor_buddy.models.submission import Submission, SubmissionFeedback
from mentor_buddy.services import review_service
from mentor_buddy.services.enrollment_service import AssignmentView

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


# --- Schemas ----------------------------------------------------------------


class AssignmentOut(BaseModel):
    id: UUID
    buddyId: UUID
    taskTemplateId: UUID
    buddyCurriculumId: UUID
    buddyWeekProgressId: UUID
    assignedAt: datetime
    dueDate: datetime | None = None
    status: str
    startedAt: datetime | None = None
    firstSubmissionAt: datetime | None = None
    completedAt: datetime | None = None
    submissionCount: int


def assignment_out(a: TaskAssignment) -> AssignmentOut:
    return AssignmentOut(
        id=a.id,
        buddyId=a.buddy_id,
        taskTemplateId=a.task_template_id,
        buddyCurriculumId=a.buddy_curriculum_id,
        buddyWeekProgressId=a.buddy_week_progress_id,
        assignedAt=a.assigned_at,
        dueDate=a.due_date,
        status=a.status,
        startedAt=a.started_at,
        firstSubmissionAt=a.first_submission_at,
        completedAt=a.completed_at,
        submissionCount=a.submission_count,
    )


class AssignmentDetailOut(AssignmentOut):
    weekNumber: int
    taskTemplate: TaskTemplateOut


def assignment_detail_out(view: AssignmentView) -> AssignmentDetailOut:
    return AssignmentDetailOut(
        **assignment_out(view.assignment).model_dump(),
        weekNumber=view.week.week_number,
        taskTemplate=template_out(view.template),
    )


class SubmissionResourceIn(BaseModel):
    type: str
    label: str
    url: str
    filename: str | None = None
    filesize: int | None = None


class SubmissionResourceOut(SubmissionResourceIn):
    id: UUID
    displayOrder: int


class SubmissionOut(BaseModel):
    id: UUID
    taskAssignmentId: UUID
    buddyId: UUID
    version: int
    description: str
    notes: str | None = None
    reviewStatus: str
    reviewedBy: UUID | None = None
    reviewedAt: datetime | None = None
    grade: str | None = None
    submittedAt: datetime | None = None
    resources: list[SubmissionResourceOut]
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def submission_out(s: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=s.id,
        taskAssignmentId=s.task_assignment_id,
        buddyId=s.buddy_id,
        version=s.version,
        description=s.description,
        notes=s.notes,
        reviewStatus=s.review_status,
        reviewedBy=s.reviewed_by,
        reviewedAt=s.reviewed_at,
        grade=s.grade,
        submittedAt=s.submitted_at,
        resources=[
            SubmissionResourceOut(
                id=r.id,
                type=r.type,
                label=r.label,
                url=r.url,
                filename=r.filename,
                filesize=r.filesize,
                displayOrder=r.display_order,
            )
            for r in s.resources
        ],
        createdAt=s.created_at,
        updatedAt=s.updated_at,
    )


class FeedbackOut(BaseModel):
    id: UUID
    submissionId: UUID
    authorId: UUID
    authorRole: str
    message: str
    feedbackType: str
    parentFeedbackId: UUID | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None
    replies: list[FeedbackOut] = []


def feedback_out(
    f: SubmissionFeedback, replies: list[SubmissionFeedback] | None = None
) -> FeedbackOut:
    return FeedbackOut(
        id=f.id,
        submissionId=f.submission_id,
        authorId=f.author_id,
        authorRole=f.author_role,
        message=f.message,
        feedbackType=f.feedback_type,
        parentFeedbackId=f.parent_feedback_id,
        createdAt=f.created_at,
        updatedAt=f.updated_at,
        replies=[feedback_out(r) for r in replies or ()],
    )


class SubmitIn(BaseModel):
    description: str
    notes: str | None = None
    resources: list[SubmissionResourceIn] = []


class SubmissionUpdateIn(BaseModel):
    description: str | None = None
    notes: str | None = None
    resources: list[SubmissionResourceIn] | None = None


class ApproveIn(BaseModel):
    grade: str | None = None
    message: str | None = None


class RevisionIn(BaseModel):
    message: str


class RejectIn(BaseModel):
    message: str | None = None


class GradeIn(BaseModel):
    grade: str


class FeedbackIn(BaseModel):
    message: str
    feedbackType: str | None = None
    parentFeedbackId: UUID | None = None


class FeedbackUpdateIn(BaseModel):
    message: str


# --- Assignments ------------------------------------------------------------


@router.get("/api/task-assignments/{assignment_id}", response_model=AssignmentDetailOut)
def get_assignment(assignment_id: UUID, principal: CurrentUser) -> AssignmentDetailOut:
    try:
        view = review_service.view_assignment(principal, assignment_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return assignment_detail_out(view)


@router.post("/api/task-assignments/{assignment_id}/start", response_model=AssignmentOut)
def start_assignment(assignment_id: UUID, principal: CurrentUser) -> AssignmentOut:
    try:
        assignment = review_service.start_assignment(principal, assignment_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return assignment_out(assignment)


@router.post(
    "/api/task-assignments/{assignment_id}/submit",
    response_model=SubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
def submit(assignment_id: UUID, payload: SubmitIn, principal: CurrentUser) -> SubmissionOut:
    try:
        submission = review_service.submit(
            principal,
            assignment_id,
            description=payload.description,
            notes=payload.notes,
            resources=[r.model_dump() for r in payload.resources],
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


@router.get(
    "/api/task-assignments/{assignment_id}/submissions",
    response_model=list[SubmissionOut],
)
def assignment_submissions(
    assignment_id: UUID, principal: CurrentUser
) -> list[SubmissionOut]:
    try:
        items = review_service.list_submissions(principal, assignment_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return [submission_out(s) for s in items]


# --- Submissions ------------------------------------------------------------


@router.get("/api/submissions/{submission_id}", response_model=SubmissionOut)
def get_submission(submission_id: UUID, principal: CurrentUser) -> SubmissionOut:
    try:
        return submission_out(review_service.get_submission(principal, submission_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.patch("/api/submissions/{submission_id}", response_model=SubmissionOut)
def update_submission(
    submission_id: UUID, payload: SubmissionUpdateIn, principal: CurrentUser
) -> SubmissionOut:
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("resources") is None:
        changes.pop("resources", None)
    try:
        submission = review_service.update_submission(principal, submission_id, **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


@router.delete("/api/submissions/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_submission(submission_id: UUID, principal: CurrentUser) -> Response:
    try:
        review_service.delete_submission(principal, submission_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/api/submissions/{submission_id}/start-review", response_model=SubmissionOut)
def start_review(submission_id: UUID, principal: CurrentUser) -> SubmissionOut:
    try:
        return submission_out(review_service.start_review(principal, submission_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.post("/api/submissions/{submission_id}/approve", response_model=SubmissionOut)
def approve(submission_id: UUID, payload: ApproveIn, principal: CurrentUser) -> SubmissionOut:
    try:
        submission = review_service.approve(
            principal, submission_id, grade=payload.grade, message=payload.message
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


@router.post(
    "/api/submissions/{submission_id}/request-revision", response_model=SubmissionOut
)
def request_revision(
    submission_id: UUID, payload: RevisionIn, principal: CurrentUser
) -> SubmissionOut:
    try:
        submission = review_service.request_revision(
            principal, submission_id, message=payload.message
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


@router.post("/api/submissions/{submission_id}/reject", response_model=SubmissionOut)
def reject(submission_id: UUID, payload: RejectIn, principal: CurrentUser) -> SubmissionOut:
    try:
        submission = review_service.reject(principal, submission_id, message=payload.message)
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


@router.post("/api/submissions/{submission_id}/grade", response_model=SubmissionOut)
def grade(submission_id: UUID, payload: GradeIn, principal: CurrentUser) -> SubmissionOut:
    try:
        submission = review_service.grade(principal, submission_id, payload.grade)
    except MentorBuddyError as exc:
        raise_http(exc)
    return submission_out(submission)


# --- Feedback ---------------------------------------------------------------


@router.get("/api/submissions/{submission_id}/feedback", response_model=list[FeedbackOut])
def list_feedback(submission_id: UUID, principal: CurrentUser) -> list[FeedbackOut]:
    try:
        threads = review_service.list_feedback(principal, submission_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return [feedback_out(root, replies) for root, replies in threads]


@router.post(
    "/api/submissions/{submission_id}/feedback",
    response_model=FeedbackOut,
    status_code=status.HTTP_201_CREATED,
)
def add_feedback(
    submission_id: UUID, payload: FeedbackIn, principal: CurrentUser
) -> FeedbackOut:
    try:
        feedback = review_service.add_feedback(
            principal,
            submission_id,
            message=payload.message,
            feedback_type=payload.feedbackType,
            parent_feedback_id=payload.parentFeedbackId,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return feedback_out(feedback)


@router.patch("/api/feedback/{feedback_id}", response_model=FeedbackOut)
def update_feedback(
    feedback_id: UUID, payload: FeedbackUpdateIn, principal: CurrentUser
) -> FeedbackOut:
    try:
        feedback = review_service.update_feedback(principal, feedback_id, payload.message)
    except MentorBuddyError as exc:
        raise_http(exc)
    return feedback_out(feedback)


@router.delete("/api/feedback/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_feedback(feedback_id: UUID, principal: CurrentUser) -> Response:
    try:
        review_service.delete_feedback(principal, feedback_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
