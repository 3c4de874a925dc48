from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, TypeVar
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer

from mentor_buddy.core.permissions import permissions_for
from mentor_buddy.models.principal import Principal
from mentor_buddy.repos import store
from mentor_buddy.services import token_service
from mentor_buddy.services.token_blacklist import token_blacklist

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

T = TypeVar("T")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    request: Request,
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and resolve the caller.

    Rejects expired, malformed and revoked tokens, and tokens whose user
    has since been deleted or deactivated.  The role is re-read from the
    user record so a role change applies immediately.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    if await token_blacklist.is_revoked(claims["jti"]):
        logger.warning("Revoked token rejected jti=%s", claims["jti"])
        raise _unauthorized("Token has been revoked")

    try:
        user = store.user_repo.get_by_id(UUID(claims["sub"]))
    except ValueError:
        user = None
    if user is None or not user.is_active:
        logger.warning("Token for unknown or inactive user sub=%s", claims["sub"])
        raise _unauthorized("User not found or inactive")

    principal = Principal(
        user_id=str(user.id),
        role=user.role,
        permissions=permissions_for(user.role),
    )
    request.state.user_id = principal.user_id
    logger.debug("Token validated for user=%s role=%s", principal.user_id, principal.role)
    return principal


def require_permission(permission: str):
    """Dependency factory: demand a named permission.

    Usage: Depends(require_permission(CAN_CREATE_MENTOR))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_permission(permission):
            logger.warning(
                "Access denied: user=%s role=%s missing permission=%s",
                principal.user_id,
                principal.role,
                permission,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int | None


def page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> PageParams:
    return PageParams(page=page, limit=limit)


def paginate(items: list[T], params: PageParams) -> list[T]:
    """Slice a list by page/limit; no limit means everything."""
    if params.limit is None:
        return items
    start = (params.page - 1) * params.limit
    return items[start : start + params.limit]


Page = Annotated[PageParams, Depends(page_params)]
CurrentUser = Annotated[Principal, Depends(require_user)]
