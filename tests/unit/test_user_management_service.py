from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from tour_booking.application.ports.user_repository_port import UserProfileUpdate, UserRecord
from tour_booking.application.services.user_management_service import (
    UserManagementService,
    UserNotFoundError,
)
from tour_booking.domain.auth.credentials import InvalidUserInputError
from tour_booking.domain.auth.roles import Role


def _make_user(
    *,
    email: str = "guide@example.com",
    role: Role = Role.GUIDE,
    is_active: bool = True,
) -> UserRecord:
    now = datetime.now(tz=UTC)
    return UserRecord(
        user_id=uuid4(),
        name="Managed User",
        email=email,
        password_hash="hashed",
        role=role,
        is_active=is_active,
        password_changed_at=None,
        password_reset_token_hash=None,
        password_reset_expires_at=None,
        created_at=now,
        updated_at=now,
    )


@dataclass
class FakeUserRepository:
    users: dict[UUID, UserRecord]

    async def get_by_id(self, *, user_id: UUID, include_inactive: bool = False) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None or (not user.is_active and not include_inactive):
            return None
        return user

    async def list_users(self, *, include_inactive: bool = False) -> list[UserRecord]:
        return sorted(
            (user for user in self.users.values() if user.is_active or include_inactive),
            key=lambda item: item.email,
        )

    async def update_profile(
        self,
        *,
        user_id: UUID,
        update: UserProfileUpdate,
    ) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(
            user,
            name=update.name or user.name,
            email=update.email or user.email,
            role=update.role or user.role,
        )
        self.users[user_id] = updated
        return updated

    async def delete_user(self, *, user_id: UUID) -> bool:
        return self.users.pop(user_id, None) is not None


def _service(*users: UserRecord) -> tuple[UserManagementService, FakeUserRepository]:
    repository = FakeUserRepository(users={user.user_id: user for user in users})
    return UserManagementService(users=repository), repository


@pytest.mark.asyncio
async def test_list_users_hides_deactivated_accounts_by_default() -> None:
    active = _make_user(email="a@example.com")
    inactive = _make_user(email="b@example.com", is_active=False)
    service, _ = _service(active, inactive)

    assert await service.list_users() == [active]
    assert await service.list_users(include_inactive=True) == [active, inactive]


@pytest.mark.asyncio
async def test_get_user_sees_deactivated_accounts() -> None:
    inactive = _make_user(is_active=False)
    service, _ = _service(inactive)

    assert await service.get_user(user_id=inactive.user_id) == inactive


@pytest.mark.asyncio
async def test_get_user_unknown_id_raises_not_found() -> None:
    service, _ = _service()

    with pytest.raises(UserNotFoundError, match="No user found with that ID"):
        await service.get_user(user_id=uuid4())


@pytest.mark.asyncio
async def test_update_user_changes_role_and_normalizes_fields() -> None:
    user = _make_user()
    service, repository = _service(user)

    updated = await service.update_user(
        user_id=user.user_id,
        name=" Lead  Guide ",
        email="LEAD@example.com",
        role=Role.LEAD_GUIDE,
    )

    assert updated.role is Role.LEAD_GUIDE
    assert updated.name == "Lead Guide"
    assert updated.email == "lead@example.com"
    assert updated.password_hash == "hashed"
    assert repository.users[user.user_id] == updated


@pytest.mark.asyncio
async def test_update_user_rejects_blank_name() -> None:
    user = _make_user()
    service, _ = _service(user)

    with pytest.raises(InvalidUserInputError):
        await service.update_user(user_id=user.user_id, name="   ")


@pytest.mark.asyncio
async def test_update_user_unknown_id_raises_not_found() -> None:
    service, _ = _service()

    with pytest.raises(UserNotFoundError):
        await service.update_user(user_id=uuid4(), role=Role.ADMIN)


@pytest.mark.asyncio
async def test_delete_user_removes_row() -> None:
    user = _make_user()
    service, repository = _service(user)

    await service.delete_user(user_id=user.user_id)

    assert repository.users == {}
    with pytest.raises(UserNotFoundError):
        await service.delete_user(user_id=user.user_id)
