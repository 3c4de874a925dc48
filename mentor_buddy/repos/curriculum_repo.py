from __future__ import annotations

from typing import Protocol
from uuid import UUID

from mentor_buddy.models.curriculum import Curriculum, CurriculumWeek, TaskTemplate


class CurriculumRepo(Protocol):
    def get(self, curriculum_id: UUID) -> Curriculum | None: ...
    def get_by_slug(self, slug: str) -> Curriculum | None: ...
    def add(self, curriculum: Curriculum) -> None: ...
    def update(self, curriculum: Curriculum) -> None: ...
    def delete(self, curriculum_id: UUID) -> bool: ...
    def list_all(self) -> list[Curriculum]: ...

    def get_week(self, week_id: UUID) -> CurriculumWeek | None: ...
    def add_week(self, week: CurriculumWeek) -> None: ...
    def update_week(self, week: CurriculumWeek) -> None: ...
    def delete_week(self, week_id: UUID) -> bool: ...
    def list_weeks(self, curriculum_id: UUID) -> list[CurriculumWeek]: ...

    def get_template(self, template_id: UUID) -> TaskTemplate | None: ...
    def add_template(self, template: TaskTemplate) -> None: ...
    def update_template(self, template: TaskTemplate) -> None: ...
    def delete_template(self, template_id: UUID) -> bool: ...
    def list_templates(self, week_id: UUID) -> list[TaskTemplate]: ...


class InMemoryCurriculumRepo:
    """Curricula with their weeks and task templates.

    Deleting a curriculum removes its weeks, and deleting a week removes its
    templates, matching the ON DELETE CASCADE of the relational schema.
    """

    def __init__(self) -> None:
        self._curricula: dict[UUID, Curriculum] = {}
        self._weeks: dict[UUID, CurriculumWeek] = {}
        self._templates: dict[UUID, TaskTemplate] = {}

    # -- curricula ---------------------------------------------------------

    def get(self, curriculum_id: UUID) -> Curriculum | None:
        return self._curricula.get(curriculum_id)

    def get_by_slug(self, slug: str) -> Curriculum | None:
        return next((c for c in self._curricula.values() if c.slug == slug), None)

    def add(self, curriculum: Curriculum) -> None:
        if self.get_by_slug(curriculum.slug) is not None:
            raise ValueError("slug already exists")
        self._curricula[curriculum.id] = curriculum

    def update(self, curriculum: Curriculum) -> None:
        if curriculum.id not in self._curricula:
            raise KeyError("curriculum not found")
        self._curricula[curriculum.id] = curriculum

    def delete(self, curriculum_id: UUID) -> bool:
        if self._curricula.pop(curriculum_id, None) is None:
            return False
        for week in self.list_weeks(curriculum_id):
            self.delete_week(week.id)
        return True

    def list_all(self) -> list[Curriculum]:
        return list(self._curricula.values())

    # -- weeks -------------------------------------------------------------

    def get_week(self, week_id: UUID) -> CurriculumWeek | None:
        return self._weeks.get(week_id)

    def add_week(self, week: CurriculumWeek) -> None:
        self._weeks[week.id] = week

    def update_week(self, week: CurriculumWeek) -> None:
        if week.id not in self._weeks:
            raise KeyError("week not found")
        self._weeks[week.id] = week

    def delete_week(self, week_id: UUID) -> bool:
        if self._weeks.pop(week_id, None) is None:
            return False
        for template in self.list_templates(week_id):
            del self._templates[template.id]
        return True

    def list_weeks(self, curriculum_id: UUID) -> list[CurriculumWeek]:
        weeks = [w for w in self._weeks.values() if w.curriculum_id == curriculum_id]
        return sorted(weeks, key=lambda w: (w.display_order, w.week_number))

    # -- templates ---------------------------------------------------------

    def get_template(self, template_id: UUID) -> TaskTemplate | None:
        return self._templates.get(template_id)

    def add_template(self, template: TaskTemplate) -> None:
        self._templates[template.id] = template

    def update_template(self, template: TaskTemplate) -> None:
        if template.id not in self._templates:
            raise KeyError("task template not found")
        self._templates[template.id] = template

    def delete_template(self, template_id: UUID) -> bool:
        return self._templates.pop(template_id, None) is not None

    def list_templates(self, week_id: UUID) -> list[TaskTemplate]:
        templates = [
            t for t in self._templates.values() if t.curriculum_week_id == week_id
        ]
        return sorted(templates, key=lambda t: t.display_order)

    def clear(self) -> None:
        self._curricula.clear()
        self._weeks.clear()
        self._templates.clear()
