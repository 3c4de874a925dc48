"""JSON auth endpoints for the SPA (/api/auth/*).

register and login return { message, user, token, refreshToken }; the
client keeps the token and sends it as a bearer on every call.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

import jwt as pyjwt
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from mentor_buddy.api.dependencies import CurrentUser, oauth2_scheme
from mentor_buddy.core.config import SETTINGS
from mentor_buddy.core.errors import MentorBuddyError, raise_http
from mentor_buddy.core.permissions import permissions_for
from mentor_buddy.models.user import User
from mentor_buddy.repos import store
from mentor_buddy.services import (
    auth_service,
    dashboard_service,
    people_service,
    token_service,
)
from mentor_buddy.services.token_blacklist import token_blacklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- Schemas ----------------------------------------------------------------


class UserOut(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    domainRole: str
    permissions: list[str]
    profileId: UUID | None = None
    avatarUrl: str | None = None
    isActive: bool
    lastLoginAt: datetime | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        domainRole=user.domain_role,
        permissions=sorted(permissions_for(user.role)),
        profileId=people_service.profile_id_for(user),
        avatarUrl=user.avatar_url,
        isActive=user.is_active,
        lastLoginAt=user.last_login_at,
        createdAt=user.created_at,
        updatedAt=user.updated_at,
    )


class RegisterIn(BaseModel):
    name: str
    email: str
    password: str
    role: str = "buddy"
    domainRole: str = "frontend"


class LoginIn(BaseModel):
    email: str
    password: str


class RefreshIn(BaseModel):
    refreshToken: str


class LogoutBody(BaseModel):
    refreshToken: str | None = None


class ChangePasswordIn(BaseModel):
    currentPassword: str
    newPassword: str
    confirmPassword: str


class ForgotPasswordIn(BaseModel):
    email: str


class ResetPasswordIn(BaseModel):
    password: str
    confirmPassword: str


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str
    refreshToken: str


def _auth_response(message: str, user: User) -> AuthResponse:
    access, refresh = token_service.issue_token_pair(sub=str(user.id), role=user.role)
    return AuthResponse(
        message=message, user=user_out(user), token=access, refreshToken=refresh
    )


# --- Endpoints --------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn) -> AuthResponse:
    if payload.role == "manager":
        logger.warning("Rejected manager self-registration email=%s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Managers cannot self-register",
        )
    try:
        user = people_service.create_user(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            role=payload.role,
            domain_role=payload.domainRole,
        )
        people_service.ensure_profile(user)
    except MentorBuddyError as exc:
        raise_http(exc)
    await dashboard_service.invalidate_stats()

    logger.info("User registered user_id=%s role=%s", user.id, user.role)
    return _auth_response("Registration successful", user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginIn) -> AuthResponse:
    user = auth_service.authenticate_user(store.user_repo, payload.email, payload.password)
    if user is None:
        logger.warning("Login failed email=%s", payload.email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info("Login succeeded user_id=%s", user.id)
    return _auth_response("Login successful", user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(payload: RefreshIn) -> AuthResponse:
    """Rotate a refresh token: the old one is revoked, a new pair issued."""
    try:
        claims = token_service.decode_refresh_token(payload.refreshToken)
    except pyjwt.ExpiredSignatureError:
        logger.warning("Expired refresh token presented")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token expired"
        ) from None
    except pyjwt.InvalidTokenError as e:
        logger.warning("Invalid refresh token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
        ) from None

    jti = claims["jti"]
    if await token_blacklist.is_revoked(jti):
        logger.warning("Revoked refresh token reuse jti=%s sub=%s", jti, claims["sub"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token has been revoked",
        )

    try:
        user = store.user_repo.get_by_id(UUID(claims["sub"]))
    except ValueError:
        user = None
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    await token_blacklist.revoke(jti, float(claims["exp"]))
    logger.info("Refresh token rotated old_jti=%s user=%s", jti, user.id)
    return _auth_response("Token refreshed", user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
    body: LogoutBody | None = None,
) -> Response:
    """Revoke the access token and, when given, the refresh token.

    Idempotent: an already invalid token still yields 204.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except pyjwt.InvalidTokenError:
        claims = None
    if claims:
        await token_blacklist.revoke(claims["jti"], float(claims["exp"]))
        logger.info("Token revoked jti=%s", claims["jti"])

    if body and body.refreshToken:
        try:
            refresh_claims = token_service.decode_refresh_token(body.refreshToken)
        except pyjwt.InvalidTokenError:
            refresh_claims = None
        if refresh_claims:
            await token_blacklist.revoke(
                refresh_claims["jti"], float(refresh_claims["exp"])
            )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserOut)
def me(principal: CurrentUser) -> UserOut:
    return user_out(people_service.get_user(UUID(principal.user_id)))


@router.post("/change-password")
def change_password(payload: ChangePasswordIn, principal: CurrentUser) -> dict:
    user = people_service.get_user(UUID(principal.user_id))
    try:
        auth_service.change_password(
            store.user_repo,
            user,
            current_password=payload.currentPassword,
            new_password=payload.newPassword,
            confirm_password=payload.confirmPassword,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return {"message": "Password changed successfully"}


_RESET_REQUESTED = "If that email is registered, a password reset link has been sent"


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordIn) -> dict:
    """Issue a reset token without revealing whether the email exists.

    There is no mail transport; outside production the token is returned
    in the body so the reset page can be driven directly.
    """
    token = auth_service.request_password_reset(store.user_repo, payload.email)
    body: dict = {"message": _RESET_REQUESTED}
    if token is not None and not SETTINGS.is_prod:
        body["resetToken"] = token
    return body


@router.post("/reset-password/{token}")
def reset_password(token: str, payload: ResetPasswordIn) -> dict:
    try:
        auth_service.reset_password(
            store.user_repo,
            token,
            new_password=payload.password,
            confirm_password=payload.confirmPassword,
        )
    except MentorBuddyError as exc:
        raise_http(exc)
    return {"message": "Password has been reset"}
