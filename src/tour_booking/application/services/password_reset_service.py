"""Forgot-password and reset-password use-cases."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from tour_booking.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
    RequestContext,
)
from tour_booking.application.ports.email_sender_port import EmailSenderPort
from tour_booking.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from tour_booking.application.services.password_write_pipeline import PasswordWritePipeline
from tour_booking.application.services.user_management_service import UserNotFoundError
from tour_booking.domain.auth.credentials import normalize_user_email
from tour_booking.infrastructure.security.reset_token_service import ResetTokenService

logger = logging.getLogger(__name__)

DEFAULT_RESET_TTL = timedelta(minutes=10)


class InvalidResetTokenError(ValueError):
    """Raised when a reset credential is unknown, already used or expired."""

    def __init__(self) -> None:
        super().__init__("Token is invalid or has expired")


class PasswordResetDeliveryError(RuntimeError):
    """Raised when the reset email could not be sent; the reset was rolled back."""

    def __init__(self) -> None:
        super().__init__("There was an error sending the email. Try again later!")


class PasswordResetService:
    """Issue one-time reset credentials and consume them.

    Only the SHA-256 digest of a credential is stored. Issuing a new
    credential replaces any pending one for the same user.
    """

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_events: AuthEventRepositoryPort,
        reset_tokens: ResetTokenService,
        password_pipeline: PasswordWritePipeline,
        email_sender: EmailSenderPort,
        reset_ttl: timedelta = DEFAULT_RESET_TTL,
        mask_unknown_email: bool = False,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._users = users
        self._auth_events = auth_events
        self._reset_tokens = reset_tokens
        self._password_pipeline = password_pipeline
        self._email_sender = email_sender
        self._reset_ttl = reset_ttl
        self._mask_unknown_email = mask_unknown_email
        self._now = now or (lambda: datetime.now(tz=UTC))

    async def request_reset(
        self,
        *,
        email: str,
        build_reset_url: Callable[[str], str],
        context: RequestContext,
    ) -> None:
        """Issue a credential for the active account at `email` and mail its link."""

        normalized_email = normalize_user_email(email=email)
        user = await self._users.get_by_email(email=normalized_email)
        if user is None:
            if self._mask_unknown_email:
                logger.info("password_reset_unknown_email_masked email=%s", normalized_email)
                return
            raise UserNotFoundError("There is no user with that email address.")

        credential = self._reset_tokens.generate()
        await self._users.set_password_reset(
            user_id=user.user_id,
            token_hash=credential.token_hash,
            expires_at=self._now() + self._reset_ttl,
        )
        try:
            await self._append(
                user_id=user.user_id,
                event_type="password_reset_requested",
                context=context,
            )
            await self._email_sender.send_password_reset(
                user=user,
                url=build_reset_url(credential.token),
            )
        except Exception as error:
            # Any failure after the credential was stored must not leave it usable.
            await self._users.clear_password_reset(
                user_id=user.user_id,
                token_hash=credential.token_hash,
            )
            await self._append(
                user_id=user.user_id,
                event_type="password_reset_delivery_failed",
                context=context,
                payload={"error": str(error)},
            )
            logger.error(
                "password_reset_delivery_failed user_id=%s error=%s",
                user.user_id,
                error,
            )
            raise PasswordResetDeliveryError() from error

        logger.info("password_reset_requested user_id=%s", user.user_id)

    async def reset_password(
        self,
        *,
        token: str,
        password: str,
        password_confirm: str,
        context: RequestContext,
    ) -> UserRecord:
        """Consume a valid credential and store the new password in one write."""

        token_hash = self._reset_tokens.hash_token(token)
        user = await self._users.get_by_reset_token_hash(token_hash=token_hash, now=self._now())
        if user is None:
            raise InvalidResetTokenError()

        prepared = self._password_pipeline.prepare(
            password=password,
            password_confirm=password_confirm,
        )
        updated = await self._users.consume_password_reset(
            user_id=user.user_id,
            token_hash=token_hash,
            now=self._now(),
            password_hash=prepared.password_hash,
            password_changed_at=prepared.password_changed_at,
        )
        if updated is None:
            raise InvalidResetTokenError()

        await self._append(
            user_id=user.user_id,
            event_type="password_reset_completed",
            context=context,
        )
        logger.info("password_reset_completed user_id=%s", user.user_id)
        return updated

    async def _append(
        self,
        *,
        user_id: UUID,
        event_type: str,
        context: RequestContext,
        payload: dict[str, Any] | None = None,
    ) -> None:
        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=user_id,
                event_type=event_type,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
                payload=payload or {},
            )
        )
