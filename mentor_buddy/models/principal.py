from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated access token.

    user_id is the JWT subject (a User id).  role is the platform role
    (manager|mentor|buddy) and permissions is the set granted to that role
    by mentor_buddy.core.permissions at the time the request is served.
    """

    user_id: str
    role: str
    permissions: frozenset[str] = frozenset()

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def has_any_permission(self, permissions: set[str]) -> bool:
        return bool(self.permissions & permissions)

    def is_manager(self) -> bool:
        return self.role == "manager"

    def is_mentor(self) -> bool:
        return self.role == "mentor"

    def is_buddy(self) -> bool:
        return self.role == "buddy"
