from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from mentor_buddy.api.dependencies import require_permission
from mentor_buddy.core.permissions import CAN_VIEW_DASHBOARD
from mentor_buddy.models.principal import Principal
from mentor_buddy.services import dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

Viewer = Annotated[Principal, Depends(require_permission(CAN_VIEW_DASHBOARD))]


class StatsOut(BaseModel):
    totalBuddies: int
    activeBuddies: int
    totalMentors: int
    completedTasks: int
    pendingTasks: int
    overdueTasks: int
    activeTasks: int
    completionRate: int


class ActivityOut(BaseModel):
    id: UUID
    type: str
    description: str
    user: str
    timestamp: datetime
    entityId: UUID | None = None
    entityType: str | None = None


@router.get("/stats", response_model=StatsOut)
async def stats(_principal: Viewer) -> StatsOut:
    s = await dashboard_service.get_stats()
    return StatsOut(
        totalBuddies=s.total_buddies,
        activeBuddies=s.active_buddies,
        totalMentors=s.total_mentors,
        completedTasks=s.completed_tasks,
        pendingTasks=s.pending_tasks,
        overdueTasks=s.overdue_tasks,
        activeTasks=s.active_tasks,
        completionRate=s.completion_rate,
    )


@router.get("/activity", response_model=list[ActivityOut])
def activity(
    _principal: Viewer,
    limit: Annotated[int, Query(ge=1, le=100)] = dashboard_service.DEFAULT_ACTIVITY_LIMIT,
) -> list[ActivityOut]:
    return [
        ActivityOut(
            id=a.id,
            type=a.type,
            description=a.description,
            user=a.user,
            timestamp=a.timestamp,
            entityId=a.entity_id,
            entityType=a.entity_type,
        )
        for a in dashboard_service.recent_activity(limit)
    ]
