from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

Role = Literal["manager", "mentor", "buddy"]
DomainRole = Literal["frontend", "backend", "fullstack", "devops", "qa", "hr"]

ROLES: tuple[str, ...] = ("manager", "mentor", "buddy")
DOMAIN_ROLES: tuple[str, ...] = (
    "frontend",
    "backend",
    "fullstack",
    "devops",
    "qa",
    "hr",
)


def utcnow() -> datetime:
    return datetime.now(UTC)


def percentage(done: int, total: int) -> int:
    """Whole-number completion percentage; 0 when there is nothing to do.

    Halves round up (1 of 8 is 13), in integer arithmetic.
    """
    if total <= 0:
        return 0
    return (done * 200 + total) // (2 * total)
