"""Self-service account use-cases: signup, profile and password changes."""

from __future__ import annotations

import logging
from uuid import UUID, uuid4

from tour_booking.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
    RequestContext,
)
from tour_booking.application.ports.email_sender_port import EmailDeliveryError, EmailSenderPort
from tour_booking.application.ports.password_hasher_port import PasswordHasherPort
from tour_booking.application.ports.user_repository_port import (
    UserCreateInput,
    UserProfileUpdate,
    UserRecord,
    UserRepositoryPort,
)
from tour_booking.application.services.auth_service import InvalidCredentialsError
from tour_booking.application.services.password_write_pipeline import PasswordWritePipeline
from tour_booking.application.services.user_management_service import UserNotFoundError
from tour_booking.domain.auth.credentials import (
    InvalidUserInputError,
    normalize_user_email,
    normalize_user_name,
)
from tour_booking.domain.auth.roles import Role

logger = logging.getLogger(__name__)


class PasswordUpdateNotAllowedError(InvalidUserInputError):
    """Raised when a profile update carries password fields."""

    def __init__(self) -> None:
        super().__init__(
            "This route is not for password updates. Please use /update-my-password"
        )


class AccountService:
    """Account lifecycle operations performed by the account owner."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        auth_events: AuthEventRepositoryPort,
        password_hasher: PasswordHasherPort,
        password_pipeline: PasswordWritePipeline,
        email_sender: EmailSenderPort,
    ) -> None:
        self._users = users
        self._auth_events = auth_events
        self._password_hasher = password_hasher
        self._password_pipeline = password_pipeline
        self._email_sender = email_sender

    async def signup(
        self,
        *,
        name: str,
        email: str,
        password: str,
        password_confirm: str,
        account_url: str,
        context: RequestContext,
    ) -> UserRecord:
        """Create a standard `user` account and send the welcome email.

        A failed welcome email is logged and does not undo the signup.
        """

        normalized_name = normalize_user_name(name=name)
        normalized_email = normalize_user_email(email=email)
        prepared = self._password_pipeline.prepare(
            password=password,
            password_confirm=password_confirm,
            stamp_change=False,
        )

        user = await self._users.create_user(
            UserCreateInput(
                user_id=uuid4(),
                name=normalized_name,
                email=normalized_email,
                password_hash=prepared.password_hash,
                role=Role.USER,
            )
        )
        await self._append(user_id=user.user_id, event_type="signup", context=context)
        logger.info("signup_completed user_id=%s", user.user_id)

        try:
            await self._email_sender.send_welcome(user=user, url=account_url)
        except EmailDeliveryError as error:
            logger.warning("welcome_email_failed user_id=%s error=%s", user.user_id, error)

        return user

    async def update_password(
        self,
        *,
        user: UserRecord,
        current_password: str,
        password: str,
        password_confirm: str,
        context: RequestContext,
    ) -> UserRecord:
        """Replace the password of a logged-in user after re-checking the current one."""

        if not self._password_hasher.verify_password(
            password=current_password,
            password_hash=user.password_hash,
        ):
            raise InvalidCredentialsError("Your current password is wrong")

        prepared = self._password_pipeline.prepare(
            password=password,
            password_confirm=password_confirm,
        )
        updated = await self._users.set_password(
            user_id=user.user_id,
            password_hash=prepared.password_hash,
            password_changed_at=prepared.password_changed_at,
        )
        if updated is None:
            raise UserNotFoundError()

        await self._append(user_id=user.user_id, event_type="password_changed", context=context)
        logger.info("password_changed user_id=%s", user.user_id)
        return updated

    async def update_me(
        self,
        *,
        user_id: UUID,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        password_confirm: str | None = None,
    ) -> UserRecord:
        """Update the caller's name and email; password fields are rejected."""

        if password is not None or password_confirm is not None:
            raise PasswordUpdateNotAllowedError()

        update = UserProfileUpdate(
            name=normalize_user_name(name=name) if name is not None else None,
            email=normalize_user_email(email=email) if email is not None else None,
        )
        updated = await self._users.update_profile(user_id=user_id, update=update)
        if updated is None:
            raise UserNotFoundError()
        return updated

    async def delete_me(self, *, user_id: UUID) -> None:
        """Deactivate the caller's account; the row stays for admin inspection."""

        deactivated = await self._users.set_active(user_id=user_id, is_active=False)
        if deactivated is None:
            raise UserNotFoundError()
        logger.info("account_deactivated user_id=%s", user_id)

    async def _append(self, *, user_id: UUID, event_type: str, context: RequestContext) -> None:
        await self._auth_events.append_event(
            AuthEventCreateInput(
                user_id=user_id,
                event_type=event_type,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )
