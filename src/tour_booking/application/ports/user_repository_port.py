"""Port for user persistence operations used by account services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from tour_booking.domain.auth.roles import Role


class DuplicateEmailError(ValueError):
    """Raised when a write would violate the unique email constraint."""

    def __init__(self) -> None:
        super().__init__("Email address is already in use")


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool
    password_changed_at: datetime | None
    password_reset_token_hash: str | None
    password_reset_expires_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user account."""

    user_id: UUID
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER


@dataclass(frozen=True)
class UserProfileUpdate:
    """Partial update of non-credential user fields; `None` leaves a field unchanged."""

    name: str | None = None
    email: str | None = None
    role: Role | None = None


class UserRepositoryPort(Protocol):
    """User repository contract.

    Lookups return active users only unless `include_inactive` is set.
    """

    async def get_by_id(
        self,
        *,
        user_id: UUID,
        include_inactive: bool = False,
    ) -> UserRecord | None:
        """Return user by id or None."""

    async def get_by_email(
        self,
        *,
        email: str,
        include_inactive: bool = False,
    ) -> UserRecord | None:
        """Return user by normalized email or None."""

    async def get_by_reset_token_hash(
        self,
        *,
        token_hash: str,
        now: datetime,
    ) -> UserRecord | None:
        """Return active user holding this reset hash with an expiry after `now`."""

    async def list_users(self, *, include_inactive: bool = False) -> list[UserRecord]:
        """Return users ordered by email."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user and return the persisted row."""

    async def update_profile(
        self,
        *,
        user_id: UUID,
        update: UserProfileUpdate,
    ) -> UserRecord | None:
        """Apply profile changes to any user, active or not."""

    async def set_password(
        self,
        *,
        user_id: UUID,
        password_hash: str,
        password_changed_at: datetime | None,
    ) -> UserRecord | None:
        """Store a new password hash, stamp the change and clear reset fields."""

    async def set_password_reset(
        self,
        *,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> None:
        """Persist the hash and expiry of a freshly issued reset credential."""

    async def consume_password_reset(
        self,
        *,
        user_id: UUID,
        token_hash: str,
        now: datetime,
        password_hash: str,
        password_changed_at: datetime | None,
    ) -> UserRecord | None:
        """Store a new password only while this reset hash is still pending and unexpired.

        Returns None when another request consumed or replaced the credential first.
        """

    async def clear_password_reset(self, *, user_id: UUID, token_hash: str) -> None:
        """Remove the pending reset credential if it is still the one with `token_hash`."""

    async def set_active(self, *, user_id: UUID, is_active: bool) -> UserRecord | None:
        """Flip the soft-delete marker."""

    async def delete_user(self, *, user_id: UUID) -> bool:
        """Physically delete one user and return whether a row was removed."""

    async def count_users(self) -> int:
        """Return the number of stored users, active or not."""
