"""add user settings

Revision ID: 8c4e2d9b6a31
Revises: 3b1f9c2a7d10
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c4e2d9b6a31"
down_revision: str | Sequence[str] | None = "3b1f9c2a7d10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "user_settings",
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("theme", sa.String(length=16), nullable=False, server_default="dark"),
        sa.Column("timezone", sa.String(length=64), nullable=False, server_default="UTC"),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("task_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "profile_visibility", sa.String(length=16), nullable=False, server_default="team"
        ),
        sa.Column("show_progress", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_portfolio", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
