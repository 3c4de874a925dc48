from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from mentor_buddy.core.errors import MentorBuddyError, ValidationError
from mentor_buddy.models.common import utcnow
from mentor_buddy.models.user import User
from mentor_buddy.repos.user_repo import UserRepo
from mentor_buddy.services import token_service

logger = logging.getLogger(__name__)

_ph = PasswordHasher()

MIN_PASSWORD_LENGTH = 8


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the user for valid credentials, stamping last_login_at."""
    user = repo.get_by_email(email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None

    now = utcnow()
    changes: dict = {"last_login_at": now, "updated_at": now}
    try:
        if _ph.check_needs_rehash(user.password_hash):
            changes["password_hash"] = _ph.hash(password)
            logger.info("Rehashed password for user=%s", user.id)
    except InvalidHash:
        return None

    user = replace(user, **changes)
    repo.update(user)
    return user


def _check_new_password(new_password: str, confirm_password: str) -> None:
    if new_password != confirm_password:
        raise ValidationError("new password and confirmation do not match")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def change_password(
    repo: UserRepo,
    user: User,
    *,
    current_password: str,
    new_password: str,
    confirm_password: str,
) -> User:
    _check_new_password(new_password, confirm_password)
    if not verify_password(current_password, user.password_hash):
        logger.warning("Password change with wrong current password user=%s", user.id)
        raise MentorBuddyError("current password is incorrect")

    user = replace(user, password_hash=hash_password(new_password), updated_at=utcnow())
    repo.update(user)
    logger.info("Password changed for user=%s", user.id)
    return user


def request_password_reset(repo: UserRepo, email: str) -> str | None:
    """Reset token for an active account, None when there is none.

    Callers answer the same way either way so the endpoint does not reveal
    which emails are registered.
    """
    user = repo.get_by_email(email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive email")
        return None
    logger.info("Password reset requested user=%s", user.id)
    return token_service.create_reset_token(
        sub=str(user.id), password_hash=user.password_hash
    )


def reset_password(
    repo: UserRepo, token: str, *, new_password: str, confirm_password: str
) -> User:
    _check_new_password(new_password, confirm_password)
    try:
        claims = token_service.decode_reset_token(token)
        user = repo.get_by_id(UUID(claims["sub"]))
    except (jwt.InvalidTokenError, ValueError):
        user, claims = None, {}
    if (
        user is None
        or not user.is_active
        or claims.get("pwv") != token_service.password_fingerprint(user.password_hash)
    ):
        logger.warning("Rejected password reset token")
        raise MentorBuddyError("reset token is invalid or has expired")

    user = replace(user, password_hash=hash_password(new_password), updated_at=utcnow())
    repo.update(user)
    logger.info("Password reset for user=%s", user.id)
    return user
