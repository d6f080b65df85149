"""Session token extraction, user resolution and role-gate dependencies."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request

from tour_booking.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from tour_booking.application.services.access_guard_service import AccessGuardService
from tour_booking.domain.auth.password_change import changed_password_after
from tour_booking.domain.auth.roles import Role
from tour_booking.infrastructure.security.jwt_token_service import (
    InvalidTokenError,
    JwtTokenService,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "jwt"

UserDependency = Callable[[Request], Awaitable[UserRecord]]


class UnauthenticatedError(PermissionError):
    """Base error for requests that fail identity resolution."""


class MissingAuthTokenError(UnauthenticatedError):
    """Raised when neither a bearer header nor a session cookie carries a token."""

    def __init__(self) -> None:
        super().__init__("You are not logged in! Please log in to get access.")


class InvalidAuthTokenError(UnauthenticatedError):
    """Raised when the token does not verify or its user is gone or deactivated."""

    def __init__(self) -> None:
        super().__init__("Invalid token. Please log in again!")


class StaleAuthTokenError(UnauthenticatedError):
    """Raised when the password changed after the token was issued."""

    def __init__(self) -> None:
        super().__init__("User recently changed password! Please log in again.")


def extract_session_token(
    *,
    authorization_header: str | None,
    session_cookie: str | None,
) -> str:
    """Return the bearer token from the header, else from the session cookie."""

    if authorization_header is not None:
        parts = authorization_header.strip().split()
        if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
            return parts[1]

    if session_cookie is not None and session_cookie.strip():
        return session_cookie.strip()

    raise MissingAuthTokenError()


class SessionGuard:
    """Resolve the caller behind a request and apply role gates."""

    def __init__(
        self,
        *,
        token_service: JwtTokenService,
        user_repository: UserRepositoryPort,
        access_guard: AccessGuardService | None = None,
    ) -> None:
        self._token_service = token_service
        self._user_repository = user_repository
        self._access_guard = access_guard or AccessGuardService()

    async def require_user(
        self,
        *,
        authorization_header: str | None,
        session_cookie: str | None,
    ) -> UserRecord:
        """Resolve an active user from the request credentials or raise `UnauthenticatedError`."""

        token = extract_session_token(
            authorization_header=authorization_header,
            session_cookie=session_cookie,
        )
        try:
            claims = self._token_service.verify(token)
        except InvalidTokenError as exc:
            raise InvalidAuthTokenError() from exc

        user = await self._user_repository.get_by_id(user_id=claims.user_id)
        if user is None:
            raise InvalidAuthTokenError()

        if changed_password_after(
            password_changed_at=user.password_changed_at,
            token_issued_at=claims.issued_at,
        ):
            raise StaleAuthTokenError()

        return user

    async def resolve_optional_user(
        self,
        *,
        authorization_header: str | None,
        session_cookie: str | None,
    ) -> UserRecord | None:
        """Soft variant of `require_user`: any resolution failure means anonymous."""

        try:
            return await self.require_user(
                authorization_header=authorization_header,
                session_cookie=session_cookie,
            )
        except UnauthenticatedError as exc:
            logger.debug("optional_session_anonymous reason=%s", type(exc).__name__)
            return None

    def require_session(self) -> UserDependency:
        """Build a FastAPI dependency resolving the current user."""

        async def dependency(request: Request) -> UserRecord:
            return await self.require_user(
                authorization_header=request.headers.get("authorization"),
                session_cookie=request.cookies.get(SESSION_COOKIE_NAME),
            )

        return dependency

    def require_roles(self, *roles: Role) -> UserDependency:
        """Build a dependency that resolves the session and then applies the role gate."""

        allowed_roles = frozenset(roles)

        async def dependency(request: Request) -> UserRecord:
            user = await self.require_user(
                authorization_header=request.headers.get("authorization"),
                session_cookie=request.cookies.get(SESSION_COOKIE_NAME),
            )
            self._access_guard.require_role(role=user.role, allowed_roles=allowed_roles)
            return user

        return dependency

    async def optional_session(self, request: Request) -> UserRecord | None:
        return await self.resolve_optional_user(
            authorization_header=request.headers.get("authorization"),
            session_cookie=request.cookies.get(SESSION_COOKIE_NAME),
        )
