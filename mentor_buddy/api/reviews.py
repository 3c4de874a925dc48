from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from mentor_buddy.api.dependencies import CurrentUser
from mentor_buddy.api.submissions import SubmissionOut, submission_out
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.services import review_service
from mentor_buddy.services.review_service import ReviewQueueItem

router = APIRouter(prefix="/api/mentors/{mentor_id}", tags=["reviews"])


class QueueItemOut(BaseModel):
    submissionId: UUID
    buddyId: UUID
    buddyName: str
    buddyAvatar: str | None = None
    taskTitle: str
    weekNumber: int
    weekTitle: str
    submittedAt: datetime
    version: int
    resourceCount: int
    previousFeedbackCount: int
    daysWaiting: int


def queue_item_out(i: ReviewQueueItem) -> QueueItemOut:
    return QueueItemOut(
        submissionId=i.submission_id,
        buddyId=i.buddy_id,
        buddyName=i.buddy_name,
        buddyAvatar=i.buddy_avatar,
        taskTitle=i.task_title,
        weekNumber=i.week_number,
        weekTitle=i.week_title,
        submittedAt=i.submitted_at,
        version=i.version,
        resourceCount=i.resource_count,
        previousFeedbackCount=i.previous_feedback_count,
        daysWaiting=i.days_waiting,
    )


class ReviewQueueOut(BaseModel):
    urgent: list[QueueItemOut]
    recent: list[QueueItemOut]
    all: list[QueueItemOut]


class BuddyProgressOut(BaseModel):
    buddyId: UUID
    buddyName: str
    progress: int
    currentWeek: int


class MentorDashboardOut(BaseModel):
    totalBuddies: int
    activeBuddies: int
    pendingReviews: int
    urgentReviews: int
    recentSubmissions: list[SubmissionOut]
    buddyProgress: list[BuddyProgressOut]


@router.get("/review-queue", response_model=ReviewQueueOut)
def review_queue(
    mentor_id: UUID,
    principal: CurrentUser,
    buddyId: UUID | None = None,
    weekNumber: int | None = None,
    taskTemplateId: UUID | None = None,
    sortBy: Literal["oldest", "newest", "priority"] = "oldest",
) -> ReviewQueueOut:
    try:
        queue = review_service.review_queue(
            principal,
            mentor_id,
            buddy_id=buddyId,
            week_number=weekNumber,
            task_template_id=taskTemplateId,
            sort_by=sortBy,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return ReviewQueueOut(
        **{key: [queue_item_out(i) for i in items] for key, items in queue.items()}
    )


@router.get("/dashboard", response_model=MentorDashboardOut)
def mentor_dashboard(mentor_id: UUID, principal: CurrentUser) -> MentorDashboardOut:
    try:
        data = review_service.mentor_dashboard(principal, mentor_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return MentorDashboardOut(
        totalBuddies=data["total_buddies"],
        activeBuddies=data["active_buddies"],
        pendingReviews=data["pending_reviews"],
        urgentReviews=data["urgent_reviews"],
        recentSubmissions=[submission_out(s) for s in data["recent_submissions"]],
        buddyProgress=[
            BuddyProgressOut(
                buddyId=row["buddy_id"],
                buddyName=row["buddy_name"],
                progress=row["progress"],
                currentWeek=row["current_week"],
            )
            for row in data["buddy_progress"]
        ],
    )
