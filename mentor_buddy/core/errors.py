"""Domain exceptions raised by the service layer.

Services know nothing about HTTP; API modules catch these and translate
them with raise_http() into HTTPException.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, status


class MentorBuddyError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MentorBuddyError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(MentorBuddyError):
    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(ConflictError):
    """A workflow action is not allowed from the entity's current status."""

    def __init__(self, entity: str, current: str, action: str) -> None:
        super().__init__(f"cannot {action} {entity} in status {current!r}")
        self.entity = entity
        self.current = current
        self.action = action


class ValidationError(MentorBuddyError):
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT


class PermissionDeniedError(MentorBuddyError):
    status_code = status.HTTP_403_FORBIDDEN


def raise_http(exc: MentorBuddyError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from None
