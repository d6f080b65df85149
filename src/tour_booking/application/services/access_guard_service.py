"""Role-based authorization checks applied after session resolution."""

from __future__ import annotations

from collections.abc import Collection

from tour_booking.domain.auth.roles import Role


class RoleNotAuthorizedError(PermissionError):
    """Raised when a resolved user's role is outside the allowed set."""

    def __init__(self, *, role: Role) -> None:
        super().__init__("You do not have permission to perform this action")
        self.role = role


class AccessGuardService:
    """Stateless role gate."""

    def require_role(self, *, role: Role, allowed_roles: Collection[Role]) -> None:
        if role not in allowed_roles:
            raise RoleNotAuthorizedError(role=role)
