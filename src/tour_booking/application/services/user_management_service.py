"""Application service for admin user-management operations."""

from __future__ import annotations

import logging
from uuid import UUID

from tour_booking.application.ports.user_repository_port import (
    UserProfileUpdate,
    UserRecord,
    UserRepositoryPort,
)
from tour_booking.domain.auth.credentials import normalize_user_email, normalize_user_name
from tour_booking.domain.auth.roles import Role

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when a target user cannot be found."""

    def __init__(self, message: str = "No user found with that ID") -> None:
        super().__init__(message)


class UserManagementService:
    """Expose user listing and lifecycle management use-cases to admins.

    Admin paths see deactivated accounts too; self-service paths do not.
    """

    def __init__(self, *, users: UserRepositoryPort) -> None:
        self._users = users

    async def list_users(self, *, include_inactive: bool = False) -> list[UserRecord]:
        """Return deterministic user listing for admin surfaces."""

        return await self._users.list_users(include_inactive=include_inactive)

    async def get_user(self, *, user_id: UUID) -> UserRecord:
        user = await self._users.get_by_id(user_id=user_id, include_inactive=True)
        if user is None:
            raise UserNotFoundError()
        return user

    async def update_user(
        self,
        *,
        user_id: UUID,
        name: str | None = None,
        email: str | None = None,
        role: Role | None = None,
    ) -> UserRecord:
        """Update profile fields and role; passwords never change here."""

        update = UserProfileUpdate(
            name=normalize_user_name(name=name) if name is not None else None,
            email=normalize_user_email(email=email) if email is not None else None,
            role=role,
        )
        updated = await self._users.update_profile(user_id=user_id, update=update)
        if updated is None:
            raise UserNotFoundError()
        logger.info("admin_user_updated user_id=%s role=%s", user_id, updated.role.value)
        return updated

    async def delete_user(self, *, user_id: UUID) -> None:
        """Physically remove one user."""

        deleted = await self._users.delete_user(user_id=user_id)
        if not deleted:
            raise UserNotFoundError()
        logger.info("admin_user_deleted user_id=%s", user_id)
