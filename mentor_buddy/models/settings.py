from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

THEMES = ("dark", "navy", "light")
PROFILE_VISIBILITIES = ("everyone", "team", "private")


@dataclass(frozen=True, slots=True)
class UserSettings:
    """Per-user preferences and privacy switches; defaults apply until saved."""

    user_id: UUID
    # preferences
    theme: str = "dark"
    timezone: str = "UTC"
    email_notifications: bool = True
    task_reminders: bool = True
    # privacy
    profile_visibility: str = "team"
    show_progress: bool = True
    show_portfolio: bool = True
    updated_at: datetime | None = None
