"""SQLAlchemy adapter for user persistence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tour_booking.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserCreateInput,
    UserProfileUpdate,
    UserRecord,
    UserRepositoryPort,
)
from tour_booking.domain.auth.roles import Role
from tour_booking.infrastructure.db.metadata import users

_TOUCH_UPDATED_AT = {"updated_at": sa.text("CURRENT_TIMESTAMP")}


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(
        self,
        *,
        user_id: UUID,
        include_inactive: bool = False,
    ) -> UserRecord | None:
        """Return user by id, active only unless `include_inactive` is set."""

        statement = _select_users(include_inactive=include_inactive).where(users.c.id == user_id)
        return await self._fetch_one(statement)

    async def get_by_email(
        self,
        *,
        email: str,
        include_inactive: bool = False,
    ) -> UserRecord | None:
        """Return user by normalized email, active only unless `include_inactive` is set."""

        statement = _select_users(include_inactive=include_inactive).where(users.c.email == email)
        return await self._fetch_one(statement)

    async def get_by_reset_token_hash(
        self,
        *,
        token_hash: str,
        now: datetime,
    ) -> UserRecord | None:
        """Return active user whose pending reset hash matches and has not expired."""

        statement = _select_users(include_inactive=False).where(
            users.c.password_reset_token_hash == token_hash,
            users.c.password_reset_expires_at > now,
        )
        return await self._fetch_one(statement)

    async def list_users(self, *, include_inactive: bool = False) -> list[UserRecord]:
        """Return users ordered by email."""

        statement = _select_users(include_inactive=include_inactive).order_by(users.c.email)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def count_users(self) -> int:
        """Return the number of stored users, including deactivated ones."""

        statement = sa.select(sa.func.count()).select_from(users)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return int(result.scalar_one())

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user and return the persisted row."""

        statement = sa.insert(users).values(
            id=payload.user_id,
            name=payload.name,
            email=payload.email,
            password_hash=payload.password_hash,
            role=payload.role.value,
            is_active=True,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateEmailError() from exc

        return _to_user_record(result.mappings().one())

    async def update_profile(
        self,
        *,
        user_id: UUID,
        update: UserProfileUpdate,
    ) -> UserRecord | None:
        """Apply non-credential field changes and return the updated row."""

        values: dict[str, Any] = {}
        if update.name is not None:
            values["name"] = update.name
        if update.email is not None:
            values["email"] = update.email
        if update.role is not None:
            values["role"] = update.role.value
        if not values:
            return await self.get_by_id(user_id=user_id, include_inactive=True)

        try:
            return await self._update_returning(user_id=user_id, values=values)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

    async def set_password(
        self,
        *,
        user_id: UUID,
        password_hash: str,
        password_changed_at: datetime | None,
    ) -> UserRecord | None:
        """Store a new hash, stamp the change time and clear pending reset state."""

        return await self._update_returning(
            user_id=user_id,
            values={
                "password_hash": password_hash,
                "password_changed_at": password_changed_at,
                "password_reset_token_hash": None,
                "password_reset_expires_at": None,
            },
        )

    async def set_password_reset(
        self,
        *,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> None:
        """Persist reset hash and expiry, replacing any earlier pending reset."""

        await self._update_returning(
            user_id=user_id,
            values={
                "password_reset_token_hash": token_hash,
                "password_reset_expires_at": expires_at,
            },
        )

    async def consume_password_reset(
        self,
        *,
        user_id: UUID,
        token_hash: str,
        now: datetime,
        password_hash: str,
        password_changed_at: datetime | None,
    ) -> UserRecord | None:
        """Swap in the new hash in the same statement that checks the pending reset."""

        return await self._update_returning(
            user_id=user_id,
            values={
                "password_hash": password_hash,
                "password_changed_at": password_changed_at,
                "password_reset_token_hash": None,
                "password_reset_expires_at": None,
            },
            conditions=(
                users.c.is_active.is_(True),
                users.c.password_reset_token_hash == token_hash,
                users.c.password_reset_expires_at > now,
            ),
        )

    async def clear_password_reset(self, *, user_id: UUID, token_hash: str) -> None:
        """Remove pending reset hash and expiry unless a newer reset replaced them."""

        await self._update_returning(
            user_id=user_id,
            values={
                "password_reset_token_hash": None,
                "password_reset_expires_at": None,
            },
            conditions=(users.c.password_reset_token_hash == token_hash,),
        )

    async def set_active(self, *, user_id: UUID, is_active: bool) -> UserRecord | None:
        """Flip the soft-delete marker for one user."""

        return await self._update_returning(user_id=user_id, values={"is_active": is_active})

    async def delete_user(self, *, user_id: UUID) -> bool:
        """Physically delete one user row."""

        statement = sa.delete(users).where(users.c.id == user_id)

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0) > 0

    async def _fetch_one(self, statement: sa.Select[Any]) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(statement.limit(1))

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def _update_returning(
        self,
        *,
        user_id: UUID,
        values: dict[str, Any],
        conditions: tuple[sa.ColumnElement[bool], ...] = (),
    ) -> UserRecord | None:
        statement = (
            sa.update(users)
            .where(users.c.id == user_id, *conditions)
            .values(**values, **_TOUCH_UPDATED_AT)
            .returning(*users.c)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().first()
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise

        if row is None:
            return None
        return _to_user_record(row)


def _select_users(*, include_inactive: bool) -> sa.Select[Any]:
    statement = sa.select(*users.c)
    if not include_inactive:
        statement = statement.where(users.c.is_active.is_(True))
    return statement


def _as_utc(value: datetime | None) -> datetime | None:
    # sqlite hands timestamps back without tzinfo; stored values are UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        name=cast(str, row["name"]),
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        role=Role(cast(str, row["role"])),
        is_active=bool(row["is_active"]),
        password_changed_at=_as_utc(cast(datetime | None, row["password_changed_at"])),
        password_reset_token_hash=cast(str | None, row["password_reset_token_hash"]),
        password_reset_expires_at=_as_utc(
            cast(datetime | None, row["password_reset_expires_at"])
        ),
        created_at=cast(datetime, _as_utc(cast(datetime, row["created_at"]))),
        updated_at=cast(datetime, _as_utc(cast(datetime, row["updated_at"]))),
    )
