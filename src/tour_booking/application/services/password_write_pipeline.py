"""Ordered steps every password write goes through before it is persisted."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from tour_booking.application.ports.password_hasher_port import PasswordHasherPort
from tour_booking.domain.auth.credentials import (
    normalize_user_password,
    require_matching_confirmation,
)
from tour_booking.domain.auth.password_change import password_change_timestamp


@dataclass(frozen=True)
class PreparedPassword:
    """Password hash ready to store with its change stamp."""

    password_hash: str
    password_changed_at: datetime | None


class PasswordWritePipeline:
    """Validate, confirm, hash and stamp one plaintext password.

    The confirmation check and the hash run before anything reaches the
    repository, so the plaintext never leaves this object. Account creation
    skips the change stamp because no token can predate the account.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasherPort,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._password_hasher = password_hasher
        self._now = now or (lambda: datetime.now(tz=UTC))

    def prepare(
        self,
        *,
        password: str,
        password_confirm: str,
        stamp_change: bool = True,
    ) -> PreparedPassword:
        normalized = normalize_user_password(password=password)
        require_matching_confirmation(password=normalized, password_confirm=password_confirm)

        changed_at = password_change_timestamp(now=self._now()) if stamp_change else None
        return PreparedPassword(
            password_hash=self._password_hasher.hash_password(normalized),
            password_changed_at=changed_at,
        )
