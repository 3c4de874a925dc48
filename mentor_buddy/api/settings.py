from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

import jwt as pyjwt
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from mentor_buddy.api.auth import UserOut, user_out
from mentor_buddy.api.dependencies import CurrentUser, oauth2_scheme
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.models.settings import UserSettings
from mentor_buddy.services import (
    dashboard_service,
    people_service,
    settings_service,
    token_service,
)
from mentor_buddy.services.token_blacklist import token_blacklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class ProfileIn(BaseModel):
    name: str | None = None
    avatarUrl: str | None = None


class PreferencesIn(BaseModel):
    theme: str | None = None
    timezone: str | None = None
    emailNotifications: bool | None = None
    taskReminders: bool | None = None


class PrivacyIn(BaseModel):
    profileVisibility: str | None = None
    showProgress: bool | None = None
    showPortfolio: bool | None = None


class SettingsOut(BaseModel):
    theme: str
    timezone: str
    emailNotifications: bool
    taskReminders: bool
    profileVisibility: str
    showProgress: bool
    showPortfolio: bool
    updatedAt: datetime | None = None


def settings_out(s: UserSettings) -> SettingsOut:
    return SettingsOut(
        theme=s.theme,
        timezone=s.timezone,
        emailNotifications=s.email_notifications,
        taskReminders=s.task_reminders,
        profileVisibility=s.profile_visibility,
        showProgress=s.show_progress,
        showPortfolio=s.show_portfolio,
        updatedAt=s.updated_at,
    )


_PREFERENCE_NAMES = {
    "theme": "theme",
    "timezone": "timezone",
    "emailNotifications": "email_notifications",
    "taskReminders": "task_reminders",
}
_PRIVACY_NAMES = {
    "profileVisibility": "profile_visibility",
    "showProgress": "show_progress",
    "showPortfolio": "show_portfolio",
}


@router.patch("/profile", response_model=UserOut)
def update_profile(payload: ProfileIn, principal: CurrentUser) -> UserOut:
    changes = {}
    if payload.name is not None:
        changes["name"] = payload.name
    if "avatarUrl" in payload.model_fields_set:
        changes["avatar_url"] = payload.avatarUrl
    try:
        user = people_service.update_user(UUID(principal.user_id), **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    return user_out(user)


@router.get("", response_model=SettingsOut)
def get_settings(principal: CurrentUser) -> SettingsOut:
    try:
        return settings_out(settings_service.get_settings(UUID(principal.user_id)))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.patch("/preferences", response_model=SettingsOut)
def update_preferences(payload: PreferencesIn, principal: CurrentUser) -> SettingsOut:
    changes = {
        _PREFERENCE_NAMES[k]: v
        for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()
    }
    try:
        settings = settings_service.update_preferences(UUID(principal.user_id), **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    return settings_out(settings)


@router.patch("/privacy", response_model=SettingsOut)
def update_privacy(payload: PrivacyIn, principal: CurrentUser) -> SettingsOut:
    changes = {
        _PRIVACY_NAMES[k]: v
        for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()
    }
    try:
        settings = settings_service.update_privacy(UUID(principal.user_id), **changes)
    except MentorBuddyError as exc:
        raise_http(exc)
    return settings_out(settings)


@router.get("/export")
def export_data(principal: CurrentUser) -> dict:
    try:
        return settings_service.export_user_data(UUID(principal.user_id))
    except MentorBuddyError as exc:
        raise_http(exc)


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    principal: CurrentUser,
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Response:
    """Delete the caller's account and revoke the token that asked for it."""
    try:
        settings_service.delete_account(UUID(principal.user_id))
    except MentorBuddyError as exc:
        raise_http(exc)

    try:
        claims = token_service.decode_access_token(raw_token)
    except pyjwt.InvalidTokenError:
        claims = None
    if claims:
        await token_blacklist.revoke(claims["jti"], float(claims["exp"]))
        logger.info("Token revoked after account deletion jti=%s", claims["jti"])

    await dashboard_service.invalidate_stats()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
