"""Curriculum templates: Curriculum -> CurriculumWeek -> TaskTemplate.

Templates are what managers author.  Buddies never work on a template
directly; enrolling a buddy materialises TaskAssignments from them
(see mentor_buddy.models.enrollment).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

from mentor_buddy.models.common import utcnow

CURRICULUM_STATUSES = ("draft", "published", "archived")
TASK_DIFFICULTIES = ("easy", "medium", "hard")


@dataclass(frozen=True, slots=True)
class WeekResource:
    title: str
    url: str
    type: str
    duration: str | None = None


@dataclass(frozen=True, slots=True)
class TaskResource:
    title: str
    url: str
    type: str


@dataclass(frozen=True, slots=True)
class ExpectedResourceType:
    """A kind of attachment a submission should carry, e.g. a GitHub link."""

    type: str
    label: str
    required: bool = False


@dataclass(frozen=True, slots=True)
class Curriculum:
    id: UUID
    name: str
    description: str
    slug: str
    domain_role: str
    total_weeks: int
    status: str = "draft"
    published_at: datetime | None = None
    version: str = "1.0"
    created_by: UUID | None = None
    last_modified_by: UUID | None = None
    tags: tuple[str, ...] = ()
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        name: str,
        description: str,
        slug: str,
        domain_role: str,
        total_weeks: int,
        created_by: UUID | None = None,
        tags: tuple[str, ...] = (),
        version: str = "1.0",
    ) -> Curriculum:
        now = utcnow()
        return Curriculum(
            id=uuid4(),
            name=name,
            description=description,
            slug=slug,
            domain_role=domain_role,
            total_weeks=total_weeks,
            version=version,
            created_by=created_by,
            last_modified_by=created_by,
            tags=tags,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class CurriculumWeek:
    id: UUID
    curriculum_id: UUID
    week_number: int
    title: str
    description: str = ""
    learning_objectives: tuple[str, ...] = ()
    resources: tuple[WeekResource, ...] = ()
    display_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def new(
        *,
        curriculum_id: UUID,
        week_number: int,
        title: str,
        description: str = "",
        learning_objectives: tuple[str, ...] = (),
        resources: tuple[WeekResource, ...] = (),
        display_order: int | None = None,
    ) -> CurriculumWeek:
        now = utcnow()
        return CurriculumWeek(
            id=uuid4(),
            curriculum_id=curriculum_id,
            week_number=week_number,
            title=title,
            description=description,
            learning_objectives=learning_objectives,
            resources=resources,
            display_order=week_number if display_order is None else display_order,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class TaskTemplate:
    id: UUID
    curriculum_week_id: UUID
    title: str
    description: str
    requirements: str = ""
    difficulty: str = "medium"
    estimated_hours: float = 1.0
    expected_resource_types: tuple[ExpectedResourceType, ...] = ()
    resources: tuple[TaskResource, ...] = ()
    display_order: int = 0
    created_by: UUID | None = None
    last_modified_by: UUID | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def required_resource_types(self) -> set[str]:
        return {e.type for e in self.expected_resource_types if e.required}

    @staticmethod
    def new(
        *,
        curriculum_week_id: UUID,
        title: str,
        description: str,
        display_order: int,
        created_by: UUID | None = None,
        **fields,
    ) -> TaskTemplate:
        now = utcnow()
        return TaskTemplate(
            id=uuid4(),
            curriculum_week_id=curriculum_week_id,
            title=title,
            description=description,
            display_order=display_order,
            created_by=created_by,
            last_modified_by=created_by,
            created_at=now,
            updated_at=now,
            **fields,
        )
