"""Application authentication service for credential verification."""

from __future__ import annotations

import logging
from uuid import UUID

from tour_booking.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
    RequestContext,
)
from tour_booking.application.ports.password_hasher_port import PasswordHasherPort
from tour_booking.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from tour_booking.domain.auth.credentials import InvalidUserInputError, normalize_user_email

logger = logging.getLogger(__name__)

_UNKNOWN_USER_PASSWORD = "no-account-matches-this-login"


class InvalidCredentialsError(PermissionError):
    """Raised when an email/password pair does not identify an active user."""

    def __init__(self, message: str = "Incorrect email or password") -> None:
        super().__init__(message)


class AuthService:
    """Authenticate credentials and append auth audit events."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_events: AuthEventRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._auth_events = auth_events
        self._password_hasher = password_hasher
        self._unknown_user_hash: str | None = None

    async def authenticate(
        self,
        *,
        email: str,
        password: str,
        context: RequestContext,
    ) -> UserRecord:
        """Return the active user owning these credentials and always emit an auth event.

        Unknown emails, deactivated accounts and wrong passwords are reported
        identically, and each one runs one hash check, so callers cannot tell
        which accounts exist.
        """

        if not email.strip() or not password:
            raise InvalidUserInputError("Please provide email and password!")
        normalized_email = normalize_user_email(email=email)

        user = await self._users.get_by_email(email=normalized_email)
        if user is None:
            self._verify_against_unknown_user_hash(password=password)
            await self._append(
                user_id=None,
                event_type="login_failed",
                context=context,
                payload={"email": normalized_email, "reason": "unknown_or_inactive"},
            )
            logger.info("login_failed email=%s reason=unknown_or_inactive", normalized_email)
            raise InvalidCredentialsError()

        is_valid = self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        )
        if not is_valid:
            await self._append(
                user_id=user.user_id,
                event_type="login_failed",
                context=context,
                payload={"email": normalized_email, "reason": "invalid_password"},
            )
            logger.info("login_failed email=%s reason=invalid_password", normalized_email)
            raise InvalidCredentialsError()

        await self._append(
            user_id=user.user_id,
            event_type="login_success",
            context=context,
            payload={"email": normalized_email, "role": user.role.value},
        )
        logger.info("login_success user_id=%s", user.user_id)
        return user

    def _verify_against_unknown_user_hash(self, *, password: str) -> None:
        if self._unknown_user_hash is None:
            self._unknown_user_hash = self._password_hasher.hash_password(_UNKNOWN_USER_PASSWORD)
        self._password_hasher.verify_password(
            password=password,
            password_hash=self._unknown_user_hash,
        )

    async def record_logout(self, *, user_id: UUID | None, context: RequestContext) -> None:
        await self._append(user_id=user_id, event_type="logout", context=context, payload={})

    async def _append(
        self,
        *,
        user_id: UUID | None,
        event_type: str,
        context: RequestContext,
        payload: dict[str, object],
    ) -> None:
        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=user_id,
                event_type=event_type,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
                payload=payload,
            )
        )
