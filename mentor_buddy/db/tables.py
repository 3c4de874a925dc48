"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in mentor_buddy/models/.
Repos convert between rows and dataclasses; nested value objects
(week resources, expected resource types, portfolio links) are stored as
JSONB arrays.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from mentor_buddy.db.engine import Base


def _pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


def _ts(nullable: bool = True) -> Mapped[datetime | None]:
    return mapped_column(DateTime(timezone=True), nullable=nullable)


# --- People ---


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = _pk()
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)  # manager|mentor|buddy
    domain_role: Mapped[str] = mapped_column(String(32), nullable=False, default="frontend")
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = _ts()
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class UserSettingsRow(Base):
    __tablename__ = "user_settings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    theme: Mapped[str] = mapped_column(String(16), nullable=False, default="dark")
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    task_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    profile_visibility: Mapped[str] = mapped_column(String(16), nullable=False, default="team")
    show_progress: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_portfolio: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime | None] = _ts()


class MentorRow(Base):
    __tablename__ = "mentors"

    id: Mapped[uuid.UUID] = _pk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    expertise: Mapped[str] = mapped_column(Text, nullable=False, default="")
    experience: Mapped[str] = mapped_column(Text, nullable=False, default="")
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class BuddyRow(Base):
    __tablename__ = "buddies"

    id: Mapped[uuid.UUID] = _pk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    assigned_mentor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("mentors.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="active"
    )  # active|inactive|exited
    join_date: Mapped[datetime | None] = _ts()
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


# --- Ad-hoc tasks ---


class TaskRow(Base):
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = _pk()
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    mentor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("mentors.id", ondelete="CASCADE")
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    due_date: Mapped[datetime | None] = _ts()
    completed_at: Mapped[datetime | None] = _ts()
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class TaskSubmissionRow(Base):
    __tablename__ = "task_submissions"

    id: Mapped[uuid.UUID] = _pk()
    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tasks.id", ondelete="CASCADE")
    )
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    github_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    deployed_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = _ts()


# --- Library ---


class ResourceRow(Base):
    __tablename__ = "resources"

    id: Mapped[uuid.UUID] = _pk()
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="article")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False, default="beginner")
    duration: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    author: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class TopicRow(Base):
    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    domain_role: Mapped[str] = mapped_column(String(32), nullable=False)


class BuddyTopicRow(Base):
    __tablename__ = "buddy_topics"

    id: Mapped[uuid.UUID] = _pk()
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    topic_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = _ts()
    created_at: Mapped[datetime | None] = _ts()


class PortfolioRow(Base):
    __tablename__ = "portfolios"

    id: Mapped[uuid.UUID] = _pk()
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    technologies: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    links: Mapped[list[dict]] = mapped_column(JSONB, nullable=False, default=list)
    resource_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    resource_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    completed_at: Mapped[datetime | None] = _ts()
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


# --- Curriculum templates ---


class CurriculumRow(Base):
    __tablename__ = "curriculums"

    id: Mapped[uuid.UUID] = _pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    domain_role: Mapped[str] = mapped_column(String(32), nullable=False)
    total_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="draft"
    )  # draft|published|archived
    published_at: Mapped[datetime | None] = _ts()
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="1.0")
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_modified_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class CurriculumWeekRow(Base):
    __tablename__ = "curriculum_weeks"

    id: Mapped[uuid.UUID] = _pk()
    curriculum_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("curriculums.id", ondelete="CASCADE")
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    learning_objectives: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    resources: Mapped[list[dict]] = mapped_column(JSONB, nullable=False, default=list)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()

    __table_args__ = (UniqueConstraint("curriculum_id", "week_number"),)


class TaskTemplateRow(Base):
    __tablename__ = "task_templates"

    id: Mapped[uuid.UUID] = _pk()
    curriculum_week_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("curriculum_weeks.id", ondelete="CASCADE")
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    requirements: Mapped[str] = mapped_column(Text, nullable=False, default="")
    difficulty: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium"
    )  # easy|medium|hard
    estimated_hours: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    expected_resource_types: Mapped[list[dict]] = mapped_column(
        JSONB, nullable=False, default=list
    )
    resources: Mapped[list[dict]] = mapped_column(JSONB, nullable=False, default=list)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    last_modified_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


# --- Enrollment and progress (projections recomputed from assignments) ---


class BuddyCurriculumRow(Base):
    __tablename__ = "buddy_curriculums"

    id: Mapped[uuid.UUID] = _pk()
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    curriculum_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("curriculums.id")
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    target_completion_date: Mapped[datetime | None] = _ts()
    completed_at: Mapped[datetime | None] = _ts()
    current_week: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    overall_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="active"
    )  # active|paused|completed|dropped
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class BuddyWeekProgressRow(Base):
    __tablename__ = "buddy_week_progress"

    id: Mapped[uuid.UUID] = _pk()
    buddy_curriculum_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddy_curriculums.id", ondelete="CASCADE")
    )
    curriculum_week_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("curriculum_weeks.id")
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    total_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    progress_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime | None] = _ts()
    completed_at: Mapped[datetime | None] = _ts()
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="not_started")
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


class TaskAssignmentRow(Base):
    __tablename__ = "task_assignments"

    id: Mapped[uuid.UUID] = _pk()
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    task_template_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("task_templates.id")
    )
    buddy_curriculum_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddy_curriculums.id", ondelete="CASCADE")
    )
    buddy_week_progress_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddy_week_progress.id", ondelete="CASCADE")
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime | None] = _ts()
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="not_started")
    started_at: Mapped[datetime | None] = _ts()
    first_submission_at: Mapped[datetime | None] = _ts()
    completed_at: Mapped[datetime | None] = _ts()
    submission_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


# --- Submissions and review ---


class SubmissionRow(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = _pk()
    task_assignment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("task_assignments.id", ondelete="CASCADE")
    )
    buddy_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("buddies.id", ondelete="CASCADE")
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending"
    )  # pending|under_review|approved|needs_revision|rejected
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = _ts()
    grade: Mapped[str | None] = mapped_column(String(32), nullable=True)
    submitted_at: Mapped[datetime | None] = _ts()
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()

    __table_args__ = (UniqueConstraint("task_assignment_id", "version"),)


class SubmissionResourceRow(Base):
    __tablename__ = "submission_resources"

    id: Mapped[uuid.UUID] = _pk()
    submission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE")
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    filesize: Mapped[int | None] = mapped_column(Integer, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime | None] = _ts()


class SubmissionFeedbackRow(Base):
    __tablename__ = "submission_feedback"

    id: Mapped[uuid.UUID] = _pk()
    submission_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("submissions.id", ondelete="CASCADE")
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE")
    )
    author_role: Mapped[str] = mapped_column(String(16), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    feedback_type: Mapped[str] = mapped_column(String(32), nullable=False, default="comment")
    parent_feedback_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("submission_feedback.id", ondelete="CASCADE"),
        nullable=True,
    )
    created_at: Mapped[datetime | None] = _ts()
    updated_at: Mapped[datetime | None] = _ts()


# --- Dashboard feed ---


class ActivityRow(Base):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = _pk()
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    entity_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
