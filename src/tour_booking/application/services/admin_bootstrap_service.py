"""First-admin provisioning run once at API startup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from uuid import uuid4

from tour_booking.application.ports.user_repository_port import (
    DuplicateEmailError,
    UserCreateInput,
    UserRepositoryPort,
)
from tour_booking.application.services.password_write_pipeline import PasswordWritePipeline
from tour_booking.domain.auth.credentials import (
    InvalidUserInputError,
    normalize_user_email,
    normalize_user_password,
)
from tour_booking.domain.auth.roles import Role

logger = logging.getLogger(__name__)

BOOTSTRAP_ADMIN_NAME = "Administrator"


class AdminBootstrapConfigError(ValueError):
    """Raised when the BOOTSTRAP_ADMIN_* variables are inconsistent."""


@dataclass(frozen=True)
class AdminBootstrapConfig:
    email: str
    password: str
    name: str = BOOTSTRAP_ADMIN_NAME


class AdminBootstrapOutcome(StrEnum):
    CREATED = "created"
    SKIPPED_USERS_PRESENT = "skipped_users_present"
    SKIPPED_CONCURRENT_INSERT = "skipped_concurrent_insert"


@dataclass(frozen=True)
class AdminBootstrapResult:
    outcome: AdminBootstrapOutcome
    email: str


def resolve_admin_bootstrap_config(
    *,
    email: str | None,
    password: str | None,
    password_file: str | None,
) -> AdminBootstrapConfig | None:
    """Build the bootstrap config, or return None when no variable is set.

    The password comes from exactly one of the inline value or a file path
    (a mounted secret). Email and password pass the same checks as signup,
    so a bad value stops the app factory before it serves anything.
    """

    if email is None:
        if password is None and password_file is None:
            return None
        raise AdminBootstrapConfigError(
            "BOOTSTRAP_ADMIN_EMAIL is required when bootstrap-admin variables are set"
        )

    if password is not None and password_file is not None:
        raise AdminBootstrapConfigError(
            "set only one of BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE"
        )
    if password is None and password_file is None:
        raise AdminBootstrapConfigError(
            "set BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE "
            "when BOOTSTRAP_ADMIN_EMAIL is set"
        )

    raw_password = password if password is not None else _read_password_file(password_file)
    try:
        return AdminBootstrapConfig(
            email=normalize_user_email(email=email),
            password=normalize_user_password(password=raw_password),
        )
    except InvalidUserInputError as exc:
        raise AdminBootstrapConfigError(f"bootstrap admin rejected: {exc}") from exc


def _read_password_file(path: str | None) -> str:
    assert path is not None
    try:
        return Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise AdminBootstrapConfigError("failed to read BOOTSTRAP_ADMIN_PASSWORD_FILE") from exc


class AdminBootstrapService:
    """Create the first `admin` account when no user exists yet."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_pipeline: PasswordWritePipeline,
    ) -> None:
        self._users = users
        self._password_pipeline = password_pipeline

    async def ensure_initial_admin(self, config: AdminBootstrapConfig) -> AdminBootstrapResult:
        if await self._users.count_users() > 0:
            logger.info("admin_bootstrap_skipped reason=users_present")
            return AdminBootstrapResult(
                outcome=AdminBootstrapOutcome.SKIPPED_USERS_PRESENT,
                email=config.email,
            )

        prepared = self._password_pipeline.prepare(
            password=config.password,
            password_confirm=config.password,
            stamp_change=False,
        )
        try:
            await self._users.create_user(
                UserCreateInput(
                    user_id=uuid4(),
                    name=config.name,
                    email=config.email,
                    password_hash=prepared.password_hash,
                    role=Role.ADMIN,
                )
            )
        except DuplicateEmailError:
            # Another API process won the race for the same email.
            logger.info("admin_bootstrap_skipped reason=concurrent_insert")
            return AdminBootstrapResult(
                outcome=AdminBootstrapOutcome.SKIPPED_CONCURRENT_INSERT,
                email=config.email,
            )

        logger.info("admin_bootstrap_created email=%s", config.email)
        return AdminBootstrapResult(outcome=AdminBootstrapOutcome.CREATED, email=config.email)
