"""A buddy's curriculum enrollment and progress views."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from mentor_buddy.api.buddies import load_visible_buddy
from mentor_buddy.api.curriculum import CurriculumOut, WeekOut, curriculum_out, week_out
from mentor_buddy.api.dependencies import CurrentUser, require_permission
from mentor_buddy.api.submissions import (
    AssignmentDetailOut,
    SubmissionOut,
    assignment_detail_out,
    submission_out,
)
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import CAN_MANAGE_CURRICULUM
from mentor_buddy.models.enrollment import BuddyCurriculum, BuddyWeekProgress
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import enrollment_service

router = APIRouter(prefix="/api/buddies/{buddy_id}", tags=["enrollment"])


class EnrollmentOut(BaseModel):
    id: UUID
    buddyId: UUID
    curriculumId: UUID
    startedAt: datetime
    targetCompletionDate: datetime | None = None
    completedAt: datetime | None = None
    currentWeek: int
    overallProgress: int
    status: str


def enrollment_out(e: BuddyCurriculum) -> EnrollmentOut:
    return EnrollmentOut(
        id=e.id,
        buddyId=e.buddy_id,
        curriculumId=e.curriculum_id,
        startedAt=e.started_at,
        targetCompletionDate=e.target_completion_date,
        completedAt=e.completed_at,
        currentWeek=e.current_week,
        overallProgress=e.overall_progress,
        status=e.status,
    )


class WeekProgressOut(BaseModel):
    id: UUID
    curriculumWeekId: UUID
    weekNumber: int
    totalTasks: int
    completedTasks: int
    progressPercentage: int
    startedAt: datetime | None = None
    completedAt: datetime | None = None
    status: str


def week_progress_out(w: BuddyWeekProgress) -> WeekProgressOut:
    return WeekProgressOut(
        id=w.id,
        curriculumWeekId=w.curriculum_week_id,
        weekNumber=w.week_number,
        totalTasks=w.total_tasks,
        completedTasks=w.completed_tasks,
        progressPercentage=w.progress_percentage,
        startedAt=w.started_at,
        completedAt=w.completed_at,
        status=w.status,
    )


class EnrollIn(BaseModel):
    curriculumId: UUID
    targetCompletionDate: datetime | None = None


class OverviewWeekOut(WeekOut):
    progress: WeekProgressOut | None = None


class OverviewOut(BaseModel):
    enrollment: EnrollmentOut
    curriculum: CurriculumOut
    weeks: list[OverviewWeekOut]


class ProgressOut(BaseModel):
    enrollment: EnrollmentOut
    weeks: list[WeekProgressOut]


class StatisticsOut(BaseModel):
    overallProgress: int
    completedTasks: int
    totalTasks: int
    currentWeek: int
    totalWeeks: int
    daysActive: int
    pendingSubmissions: int


class BuddyDashboardOut(BaseModel):
    enrollment: EnrollmentOut
    weekProgress: list[WeekProgressOut]
    upcomingTasks: list[AssignmentDetailOut]
    recentSubmissions: list[SubmissionOut]
    statistics: StatisticsOut


@router.post("/curriculum", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll(
    buddy_id: UUID,
    payload: EnrollIn,
    _principal: Annotated[Principal, Depends(require_permission(CAN_MANAGE_CURRICULUM))],
) -> EnrollmentOut:
    try:
        enrollment = enrollment_service.enroll(
            buddy_id, payload.curriculumId, payload.targetCompletionDate
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return enrollment_out(enrollment)


@router.get("/curriculum", response_model=OverviewOut)
def curriculum_overview(buddy_id: UUID, principal: CurrentUser) -> OverviewOut:
    load_visible_buddy(principal, buddy_id)
    try:
        enrollment, curriculum, weeks = enrollment_service.curriculum_overview(buddy_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return OverviewOut(
        enrollment=enrollment_out(enrollment),
        curriculum=curriculum_out(curriculum),
        weeks=[
            OverviewWeekOut(
                **week_out(week).model_dump(),
                progress=week_progress_out(progress) if progress else None,
            )
            for week, progress in weeks
        ],
    )


@router.get("/progress", response_model=ProgressOut)
def progress(buddy_id: UUID, principal: CurrentUser) -> ProgressOut:
    load_visible_buddy(principal, buddy_id)
    try:
        enrollment, weeks = enrollment_service.progress_summary(buddy_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    return ProgressOut(
        enrollment=enrollment_out(enrollment),
        weeks=[week_progress_out(w) for w in weeks],
    )


@router.get("/assignments", response_model=list[AssignmentDetailOut])
def assignments(
    buddy_id: UUID,
    principal: CurrentUser,
    status: str | None = None,
    weekNumber: Annotated[int | None, Query(ge=1)] = None,
) -> list[AssignmentDetailOut]:
    load_visible_buddy(principal, buddy_id)
    try:
        views = enrollment_service.list_assignments(
            buddy_id, status=status, week_number=weekNumber
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return [assignment_detail_out(v) for v in views]


@router.get("/dashboard", response_model=BuddyDashboardOut)
def dashboard(buddy_id: UUID, principal: CurrentUser) -> BuddyDashboardOut:
    load_visible_buddy(principal, buddy_id)
    try:
        data = enrollment_service.buddy_dashboard(buddy_id)
    except MentorBuddyError as exc:
        raise_http(exc)
    stats = data["statistics"]
    return BuddyDashboardOut(
        enrollment=enrollment_out(data["enrollment"]),
        weekProgress=[week_progress_out(w) for w in data["week_progress"]],
        upcomingTasks=[assignment_detail_out(v) for v in data["upcoming_tasks"]],
        recentSubmissions=[submission_out(s) for s in data["recent_submissions"]],
        statistics=StatisticsOut(
            overallProgress=stats["overall_progress"],
            completedTasks=stats["completed_tasks"],
            totalTasks=stats["total_tasks"],
            currentWeek=stats["current_week"],
            totalWeeks=stats["total_weeks"],
            daysActive=stats["days_active"],
            pendingSubmissions=stats["pending_submissions"],
        ),
    )
