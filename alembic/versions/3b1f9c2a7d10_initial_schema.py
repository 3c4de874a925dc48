"""initial schema

Revision ID: 3b1f9c2a7d10
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f9c2a7d10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _fk(name: str, target: str, ondelete: str | None = "CASCADE", nullable: bool = False):
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def _ts(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def _stamps() -> list[sa.Column]:
    return [_ts("created_at"), _ts("updated_at")]


def _strings(name: str) -> sa.Column:
    return sa.Column(name, postgresql.ARRAY(sa.String()), nullable=False, server_default="{}")


def _json(name: str) -> sa.Column:
    return sa.Column(name, postgresql.JSONB(), nullable=False, server_default="[]")


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("domain_role", sa.String(length=32), nullable=False, server_default="frontend"),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("last_login_at"),
        *_stamps(),
    )
    op.create_table(
        "mentors",
        _id(),
        _fk("user_id", "users.id"),
        sa.Column("expertise", sa.Text(), nullable=False, server_default=""),
        sa.Column("experience", sa.Text(), nullable=False, server_default=""),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        *_stamps(),
        sa.UniqueConstraint("user_id"),
    )
    op.create_table(
        "buddies",
        _id(),
        _fk("user_id", "users.id"),
        _fk("assigned_mentor_id", "mentors.id", ondelete="SET NULL", nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        _ts("join_date"),
        *_stamps(),
        sa.UniqueConstraint("user_id"),
    )
    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _fk("buddy_id", "buddies.id"),
        _fk("mentor_id", "mentors.id"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="medium"),
        _ts("due_date"),
        _ts("completed_at"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_stamps(),
    )
    op.create_table(
        "task_submissions",
        _id(),
        _fk("task_id", "tasks.id"),
        _fk("buddy_id", "buddies.id"),
        sa.Column("github_link", sa.Text(), nullable=True),
        sa.Column("deployed_url", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        _ts("created_at"),
    )
    op.create_table(
        "resources",
        _id(),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False, server_default="article"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("difficulty", sa.String(length=32), nullable=False, server_default="beginner"),
        sa.Column("duration", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("author", sa.String(length=255), nullable=False, server_default=""),
        _strings("tags"),
        *_stamps(),
    )
    op.create_table(
        "topics",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("domain_role", sa.String(length=32), nullable=False),
    )
    op.create_table(
        "buddy_topics",
        _id(),
        _fk("buddy_id", "buddies.id"),
        sa.Column("topic_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("checked", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("completed_at"),
        _ts("created_at"),
    )
    op.create_table(
        "portfolios",
        _id(),
        _fk("buddy_id", "buddies.id"),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _strings("technologies"),
        _json("links"),
        sa.Column("resource_url", sa.Text(), nullable=True),
        sa.Column("resource_type", sa.String(length=32), nullable=True),
        sa.Column("resource_name", sa.String(length=255), nullable=True),
        _ts("completed_at"),
        *_stamps(),
    )
    op.create_table(
        "curriculums",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("slug", sa.String(length=255), nullable=False, unique=True),
        sa.Column("domain_role", sa.String(length=32), nullable=False),
        sa.Column("total_weeks", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="draft"),
        _ts("published_at"),
        sa.Column("version", sa.String(length=32), nullable=False, server_default="1.0"),
        _fk("created_by", "users.id", ondelete="SET NULL", nullable=True),
        _fk("last_modified_by", "users.id", ondelete="SET NULL", nullable=True),
        _strings("tags"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_stamps(),
    )
    op.create_table(
        "curriculum_weeks",
        _id(),
        _fk("curriculum_id", "curriculums.id"),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _strings("learning_objectives"),
        _json("resources"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_stamps(),
        sa.UniqueConstraint("curriculum_id", "week_number"),
    )
    op.create_table(
        "task_templates",
        _id(),
        _fk("curriculum_week_id", "curriculum_weeks.id"),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("requirements", sa.Text(), nullable=False, server_default=""),
        sa.Column("difficulty", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default="1"),
        _json("expected_resource_types"),
        _json("resources"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("last_modified_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_stamps(),
    )
    op.create_table(
        "buddy_curriculums",
        _id(),
        _fk("buddy_id", "buddies.id"),
        _fk("curriculum_id", "curriculums.id", ondelete=None),
        _ts("started_at", nullable=False),
        _ts("target_completion_date"),
        _ts("completed_at"),
        sa.Column("current_week", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("overall_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        *_stamps(),
    )
    op.create_table(
        "buddy_week_progress",
        _id(),
        _fk("buddy_curriculum_id", "buddy_curriculums.id"),
        _fk("curriculum_week_id", "curriculum_weeks.id", ondelete=None),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("total_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_tasks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("progress_percentage", sa.Integer(), nullable=False, server_default="0"),
        _ts("started_at"),
        _ts("completed_at"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="not_started"),
        *_stamps(),
    )
    op.create_table(
        "task_assignments",
        _id(),
        _fk("buddy_id", "buddies.id"),
        _fk("task_template_id", "task_templates.id", ondelete=None),
        _fk("buddy_curriculum_id", "buddy_curriculums.id"),
        _fk("buddy_week_progress_id", "buddy_week_progress.id"),
        _ts("assigned_at", nullable=False),
        _ts("due_date"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="not_started"),
        _ts("started_at"),
        _ts("first_submission_at"),
        _ts("completed_at"),
        sa.Column("submission_count", sa.Integer(), nullable=False, server_default="0"),
        *_stamps(),
    )
    op.create_table(
        "submissions",
        _id(),
        _fk("task_assignment_id", "task_assignments.id"),
        _fk("buddy_id", "buddies.id"),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("review_status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        _ts("reviewed_at"),
        sa.Column("grade", sa.String(length=32), nullable=True),
        _ts("submitted_at"),
        *_stamps(),
        sa.UniqueConstraint("task_assignment_id", "version"),
    )
    op.create_table(
        "submission_resources",
        _id(),
        _fk("submission_id", "submissions.id"),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=True),
        sa.Column("filesize", sa.Integer(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
    )
    op.create_table(
        "submission_feedback",
        _id(),
        _fk("submission_id", "submissions.id"),
        _fk("author_id", "users.id"),
        sa.Column("author_role", sa.String(length=16), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("feedback_type", sa.String(length=32), nullable=False, server_default="comment"),
        _fk("parent_feedback_id", "submission_feedback.id", nullable=True),
        *_stamps(),
    )
    op.create_table(
        "activities",
        _id(),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("user", sa.String(length=255), nullable=False),
        _ts("timestamp", nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("entity_type", sa.String(length=32), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "activities",
        "submission_feedback",
        "submission_resources",
        "submissions",
        "task_assignments",
        "buddy_week_progress",
        "buddy_curriculums",
        "task_templates",
        "curriculum_weeks",
        "curriculums",
        "portfolios",
        "buddy_topics",
        "topics",
        "resources",
        "task_submissions",
        "tasks",
        "buddies",
        "mentors",
        "users",
    ):
        op.drop_table(table)
