from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow


@dataclass(frozen=True, slots=True)
class Activity:
    """Append-only feed entry shown on the manager dashboard."""

    id: UUID
    type: str  # mentor_created|buddy_created|task_created|submission_created|...
    description: str
    user: str  # display name of the actor
    timestamp: datetime
    entity_id: UUID | None = None
    entity_type: str | None = None

    @staticmethod
    def new(
        *,
        type: str,
        description: str,
        user: str,
        entity_id: UUID | None = None,
        entity_type: str | None = None,
    ) -> Activity:
        return Activity(
            id=uuid4(),
            type=type,
            description=description,
            user=user,
            timestamp=utcnow(),
            entity_id=entity_id,
            entity_type=entity_type,
        )
