"""Curriculum authoring: curricula, their weeks and task templates.

A curriculum is edited as a draft and becomes enrollable once published.
Publishing requires at least one week, and every week must hold an active
task template.
Templates added after buddies enrolled are not pushed to existing
enrollments.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from uuid import UUID

from mentor_buddy.core.errors import ConflictError, NotFoundError, ValidationError
from mentor_buddy.models.common import DOMAIN_ROLES, utcnow
from mentor_buddy.models.curriculum import (
    CURRICULUM_STATUSES,
    TASK_DIFFICULTIES,
    Curriculum,
    CurriculumWeek,
    ExpectedResourceType,
    TaskResource,
    TaskTemplate,
    WeekResource,
)
from mentor_buddy.repos import store

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    slug = _SLUG_STRIP.sub("-", name.lower()).strip("-")
    return slug or "curriculum"


def _unique_slug(name: str, exclude: UUID | None = None) -> str:
    base = slugify(name)
    slug, n = base, 2
    while True:
        existing = store.curriculum_repo.get_by_slug(slug)
        if existing is None or existing.id == exclude:
            return slug
        slug = f"{base}-{n}"
        n += 1


def _require_name(value: str, field: str = "name") -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} must be non-empty")
    return value


def _check_domain(domain_role: str) -> None:
    if domain_role not in DOMAIN_ROLES:
        raise ValidationError(f"domainRole must be one of {', '.join(DOMAIN_ROLES)}")


def _touch(curriculum_id: UUID, user_id: UUID | None) -> None:
    curriculum = store.curriculum_repo.get(curriculum_id)
    if curriculum is not None:
        store.curriculum_repo.update(
            replace(curriculum, last_modified_by=user_id, updated_at=utcnow())
        )


# ---------------------------------------------------------------------------
# Curricula
# ---------------------------------------------------------------------------


def list_curricula(
    *,
    domain_role: str | None = None,
    status: str | None = None,
    search: str | None = None,
    created_by: UUID | None = None,
) -> list[Curriculum]:
    items = store.curriculum_repo.list_all()
    if domain_role:
        items = [c for c in items if c.domain_role == domain_role]
    if status:
        items = [c for c in items if c.status == status]
    if created_by:
        items = [c for c in items if c.created_by == created_by]
    if search:
        needle = search.lower()
        items = [
            c
            for c in items
            if needle in c.name.lower() or needle in c.description.lower()
        ]
    return items


def get_curriculum(curriculum_id: UUID) -> Curriculum:
    curriculum = store.curriculum_repo.get(curriculum_id)
    if curriculum is None:
        raise NotFoundError("curriculum not found")
    return curriculum


def get_structure(curriculum_id: UUID) -> list[tuple[CurriculumWeek, list[TaskTemplate]]]:
    """Weeks in display order, each with its templates."""
    get_curriculum(curriculum_id)
    return [
        (week, store.curriculum_repo.list_templates(week.id))
        for week in store.curriculum_repo.list_weeks(curriculum_id)
    ]


def get_published_for_domain(domain_role: str) -> Curriculum | None:
    """Most recently published active curriculum for a domain role."""
    published = [
        c
        for c in store.curriculum_repo.list_all()
        if c.domain_role == domain_role and c.status == "published" and c.is_active
    ]
    if not published:
        return None
    return max(published, key=lambda c: c.published_at or c.created_at)


def create_curriculum(
    *,
    name: str,
    description: str,
    domain_role: str,
    total_weeks: int,
    created_by: UUID | None,
    tags: list[str] | None = None,
    version: str | None = None,
) -> Curriculum:
    name = _require_name(name)
    _check_domain(domain_role)
    if total_weeks < 1:
        raise ValidationError("totalWeeks must be at least 1")

    curriculum = Curriculum.new(
        name=name,
        description=(description or "").strip(),
        slug=_unique_slug(name),
        domain_role=domain_role,
        total_weeks=total_weeks,
        created_by=created_by,
        tags=tuple(tags or ()),
        version=version or "1.0",
    )
    store.curriculum_repo.add(curriculum)
    logger.info("Created curriculum id=%s slug=%s", curriculum.id, curriculum.slug)
    return curriculum


def update_curriculum(curriculum_id: UUID, user_id: UUID | None, **changes) -> Curriculum:
    curriculum = get_curriculum(curriculum_id)
    status = changes.pop("status", None)
    if status is not None and status not in CURRICULUM_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(CURRICULUM_STATUSES)}")

    if "name" in changes:
        changes["name"] = _require_name(changes["name"])
        changes["slug"] = _unique_slug(changes["name"], exclude=curriculum_id)
    if "domain_role" in changes:
        _check_domain(changes["domain_role"])
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"] or ())
    if "total_weeks" in changes:
        total = changes["total_weeks"]
        highest = max(
            (w.week_number for w in store.curriculum_repo.list_weeks(curriculum_id)),
            default=0,
        )
        if total < 1 or total < highest:
            raise ValidationError(f"totalWeeks must be at least {max(highest, 1)}")

    curriculum = replace(
        curriculum, **changes, last_modified_by=user_id, updated_at=utcnow()
    )
    store.curriculum_repo.update(curriculum)

    if status is not None and status != curriculum.status:
        if status == "published":
            curriculum = publish(curriculum_id, user_id)
        else:
            curriculum = _set_status(curriculum, status, user_id)
    return curriculum


def delete_curriculum(curriculum_id: UUID) -> None:
    get_curriculum(curriculum_id)
    if store.enrollment_repo.list_by_curriculum(curriculum_id):
        logger.warning("Refused to delete curriculum=%s with enrollments", curriculum_id)
        raise ConflictError("curriculum has enrolled buddies")
    store.curriculum_repo.delete(curriculum_id)
    logger.info("Deleted curriculum id=%s", curriculum_id)


def _set_status(curriculum: Curriculum, status: str, user_id: UUID | None) -> Curriculum:
    now = utcnow()
    curriculum = replace(
        curriculum,
        status=status,
        published_at=now if status == "published" else curriculum.published_at,
        last_modified_by=user_id,
        updated_at=now,
    )
    store.curriculum_repo.update(curriculum)
    logger.info("Curriculum id=%s status=%s", curriculum.id, status)
    return curriculum


def publish(curriculum_id: UUID, user_id: UUID | None) -> Curriculum:
    curriculum = get_curriculum(curriculum_id)
    structure = get_structure(curriculum_id)
    if not structure:
        raise ValidationError("curriculum needs at least one week")
    empty = [
        week.week_number
        for week, templates in structure
        if not any(t.is_active for t in templates)
    ]
    if empty:
        raise ValidationError(f"weeks without an active task: {empty}")
    return _set_status(curriculum, "published", user_id)


def unpublish(curriculum_id: UUID, user_id: UUID | None) -> Curriculum:
    return _set_status(get_curriculum(curriculum_id), "draft", user_id)


def duplicate(curriculum_id: UUID, user_id: UUID | None) -> Curriculum:
    source = get_curriculum(curriculum_id)
    name = f"{source.name} (Copy)"
    copy = Curriculum.new(
        name=name,
        description=source.description,
        slug=_unique_slug(name),
        domain_role=source.domain_role,
        total_weeks=source.total_weeks,
        created_by=user_id,
        tags=source.tags,
        version=source.version,
    )
    store.curriculum_repo.add(copy)

    for week, templates in get_structure(curriculum_id):
        week_copy = CurriculumWeek.new(
            curriculum_id=copy.id,
            week_number=week.week_number,
            title=week.title,
            description=week.description,
            learning_objectives=week.learning_objectives,
            resources=week.resources,
            display_order=week.display_order,
        )
        store.curriculum_repo.add_week(week_copy)
        for template in templates:
            store.curriculum_repo.add_template(
                _copy_template(template, week_copy.id, template.title, user_id)
            )

    logger.info("Duplicated curriculum %s -> %s", curriculum_id, copy.id)
    return copy


# ---------------------------------------------------------------------------
# Weeks
# ---------------------------------------------------------------------------


def list_weeks(curriculum_id: UUID) -> list[CurriculumWeek]:
    get_curriculum(curriculum_id)
    return store.curriculum_repo.list_weeks(curriculum_id)


def get_week(week_id: UUID) -> CurriculumWeek:
    week = store.curriculum_repo.get_week(week_id)
    if week is None:
        raise NotFoundError("week not found")
    return week


def _week_resources(resources: list[dict] | None) -> tuple[WeekResource, ...]:
    return tuple(WeekResource(**r) for r in resources or ())


def create_week(
    *,
    curriculum_id: UUID,
    week_number: int,
    title: str,
    description: str = "",
    learning_objectives: list[str] | None = None,
    resources: list[dict] | None = None,
    user_id: UUID | None = None,
) -> CurriculumWeek:
    curriculum = get_curriculum(curriculum_id)
    title = _require_name(title, "title")
    if not 1 <= week_number <= curriculum.total_weeks:
        raise ValidationError(
            f"weekNumber must be between 1 and {curriculum.total_weeks}"
        )
    if any(
        w.week_number == week_number
        for w in store.curriculum_repo.list_weeks(curriculum_id)
    ):
        raise ConflictError(f"week {week_number} already exists")

    week = CurriculumWeek.new(
        curriculum_id=curriculum_id,
        week_number=week_number,
        title=title,
        description=description or "",
        learning_objectives=tuple(learning_objectives or ()),
        resources=_week_resources(resources),
    )
    store.curriculum_repo.add_week(week)
    _touch(curriculum_id, user_id)
    logger.info("Added week %d to curriculum=%s", week_number, curriculum_id)
    return week


def update_week(week_id: UUID, user_id: UUID | None, **changes) -> CurriculumWeek:
    week = get_week(week_id)
    if "title" in changes:
        changes["title"] = _require_name(changes["title"], "title")
    if "learning_objectives" in changes:
        changes["learning_objectives"] = tuple(changes["learning_objectives"] or ())
    if "resources" in changes:
        changes["resources"] = _week_resources(changes["resources"])
    week = replace(week, **changes, updated_at=utcnow())
    store.curriculum_repo.update_week(week)
    _touch(week.curriculum_id, user_id)
    return week


def delete_week(week_id: UUID, user_id: UUID | None) -> None:
    week = get_week(week_id)
    store.curriculum_repo.delete_week(week_id)
    _touch(week.curriculum_id, user_id)
    logger.info("Deleted week id=%s", week_id)


def reorder_weeks(
    items: list[tuple[UUID, int]], user_id: UUID | None
) -> list[CurriculumWeek]:
    """Apply display orders; every week must belong to one curriculum."""
    weeks = {item_id: get_week(item_id) for item_id, _ in items}
    curriculum_ids = {w.curriculum_id for w in weeks.values()}
    if len(curriculum_ids) != 1:
        raise ValidationError("reorder items must belong to exactly one curriculum")
    (curriculum_id,) = curriculum_ids
    for item_id, order in items:
        store.curriculum_repo.update_week(
            replace(weeks[item_id], display_order=order, updated_at=utcnow())
        )
    _touch(curriculum_id, user_id)
    return store.curriculum_repo.list_weeks(curriculum_id)


# ---------------------------------------------------------------------------
# Task templates
# ---------------------------------------------------------------------------


def list_templates(week_id: UUID) -> list[TaskTemplate]:
    get_week(week_id)
    return store.curriculum_repo.list_templates(week_id)


def get_template(template_id: UUID) -> TaskTemplate:
    template = store.curriculum_repo.get_template(template_id)
    if template is None:
        raise NotFoundError("task template not found")
    return template


def _template_fields(changes: dict) -> dict:
    if "title" in changes:
        changes["title"] = _require_name(changes["title"], "title")
    if "difficulty" in changes and changes["difficulty"] not in TASK_DIFFICULTIES:
        raise ValidationError(f"difficulty must be one of {', '.join(TASK_DIFFICULTIES)}")
    if "estimated_hours" in changes and not changes["estimated_hours"] > 0:
        raise ValidationError("estimatedHours must be greater than 0")
    if "expected_resource_types" in changes:
        changes["expected_resource_types"] = tuple(
            ExpectedResourceType(**e) for e in changes["expected_resource_types"] or ()
        )
    if "resources" in changes:
        changes["resources"] = tuple(
            TaskResource(**r) for r in changes["resources"] or ()
        )
    return changes


def create_template(
    *,
    curriculum_week_id: UUID,
    title: str,
    description: str,
    user_id: UUID | None,
    **fields,
) -> TaskTemplate:
    week = get_week(curriculum_week_id)
    fields = _template_fields({"title": title, **fields})
    existing = store.curriculum_repo.list_templates(curriculum_week_id)
    next_order = max((t.display_order for t in existing), default=0) + 1

    template = TaskTemplate.new(
        curriculum_week_id=curriculum_week_id,
        description=description or "",
        display_order=next_order,
        created_by=user_id,
        **fields,
    )
    store.curriculum_repo.add_template(template)
    _touch(week.curriculum_id, user_id)
    logger.info("Added task template id=%s to week=%s", template.id, week.id)
    return template


def update_template(template_id: UUID, user_id: UUID | None, **changes) -> TaskTemplate:
    template = get_template(template_id)
    template = replace(
        template,
        **_template_fields(changes),
        last_modified_by=user_id,
        updated_at=utcnow(),
    )
    store.curriculum_repo.update_template(template)
    _touch(get_week(template.curriculum_week_id).curriculum_id, user_id)
    return template


def delete_template(template_id: UUID, user_id: UUID | None) -> None:
    template = get_template(template_id)
    store.curriculum_repo.delete_template(template_id)
    _touch(get_week(template.curriculum_week_id).curriculum_id, user_id)
    logger.info("Deleted task template id=%s", template_id)


def _copy_template(
    template: TaskTemplate, week_id: UUID, title: str, user_id: UUID | None
) -> TaskTemplate:
    copy = TaskTemplate.new(
        curriculum_week_id=week_id,
        title=title,
        description=template.description,
        display_order=template.display_order,
        created_by=user_id,
        requirements=template.requirements,
        difficulty=template.difficulty,
        estimated_hours=template.estimated_hours,
        expected_resource_types=template.expected_resource_types,
        resources=template.resources,
    )
    return replace(copy, is_active=template.is_active)


def duplicate_template(template_id: UUID, user_id: UUID | None) -> TaskTemplate:
    template = get_template(template_id)
    existing = store.curriculum_repo.list_templates(template.curriculum_week_id)
    copy = replace(
        _copy_template(
            template, template.curriculum_week_id, f"{template.title} (Copy)", user_id
        ),
        display_order=max(t.display_order for t in existing) + 1,
    )
    store.curriculum_repo.add_template(copy)
    return copy


def reorder_templates(
    items: list[tuple[UUID, int]], user_id: UUID | None
) -> list[TaskTemplate]:
    """Apply display orders; every template must belong to one week."""
    templates = {item_id: get_template(item_id) for item_id, _ in items}
    week_ids = {t.curriculum_week_id for t in templates.values()}
    if len(week_ids) != 1:
        raise ValidationError("reorder items must belong to exactly one week")
    week = get_week(week_ids.pop())
    for item_id, order in items:
        store.curriculum_repo.update_template(
            replace(templates[item_id], display_order=order, updated_at=utcnow())
        )
    _touch(week.curriculum_id, user_id)
    return store.curriculum_repo.list_templates(week.id)
