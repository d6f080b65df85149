"""tour-booking API entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI

from tour_booking.application.ports.auth_event_repository_port import AuthEventRepositoryPort
from tour_booking.application.ports.email_sender_port import EmailSenderPort
from tour_booking.application.ports.password_hasher_port import PasswordHasherPort
from tour_booking.application.ports.user_repository_port import UserRepositoryPort
from tour_booking.application.services.account_service import AccountService
from tour_booking.application.services.admin_bootstrap_service import (
    AdminBootstrapService,
    resolve_admin_bootstrap_config,
)
from tour_booking.application.services.auth_service import AuthService
from tour_booking.application.services.password_reset_service import PasswordResetService
from tour_booking.application.services.password_write_pipeline import PasswordWritePipeline
from tour_booking.application.services.user_management_service import UserManagementService
from tour_booking.config.settings import Settings, load_settings
from tour_booking.infrastructure.db.auth_event_repository import SqlAlchemyAuthEventRepository
from tour_booking.infrastructure.db.session import create_session_factory
from tour_booking.infrastructure.db.user_repository import SqlAlchemyUserRepository
from tour_booking.infrastructure.email.factory import build_email_sender
from tour_booking.infrastructure.http.admin_user_router import build_admin_user_router
from tour_booking.infrastructure.http.auth_guard import SessionGuard
from tour_booking.infrastructure.http.auth_router import build_auth_router
from tour_booking.infrastructure.http.error_handlers import register_error_handlers
from tour_booking.infrastructure.http.session_cookies import SessionCookieSettings
from tour_booking.infrastructure.http.user_router import build_user_router
from tour_booking.infrastructure.logging import configure_logging
from tour_booking.infrastructure.security.jwt_token_service import JwtTokenService
from tour_booking.infrastructure.security.password_hasher import BcryptPasswordHasher
from tour_booking.infrastructure.security.reset_token_service import ResetTokenService

API_HOST = "0.0.0.0"
API_PORT = 8000
logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    users: UserRepositoryPort | None = None,
    auth_events: AuthEventRepositoryPort | None = None,
    password_hasher: PasswordHasherPort | None = None,
    email_sender: EmailSenderPort | None = None,
    token_service: JwtTokenService | None = None,
    reset_tokens: ResetTokenService | None = None,
) -> FastAPI:
    """Create the FastAPI app; collaborators default to the settings-driven adapters."""

    if settings is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)

    session_factory = create_session_factory(settings.database_url)
    if users is None:
        users = SqlAlchemyUserRepository(session_factory)
    if auth_events is None:
        auth_events = SqlAlchemyAuthEventRepository(session_factory)
    if password_hasher is None:
        password_hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    if email_sender is None:
        email_sender = build_email_sender(settings)
    if token_service is None:
        token_service = JwtTokenService(
            secret=settings.jwt_secret,
            token_ttl=timedelta(days=settings.jwt_expires_days),
        )
    if reset_tokens is None:
        reset_tokens = ResetTokenService()

    admin_bootstrap_config = resolve_admin_bootstrap_config(
        email=settings.bootstrap_admin_email,
        password=settings.bootstrap_admin_password,
        password_file=settings.bootstrap_admin_password_file,
    )
    password_pipeline = PasswordWritePipeline(password_hasher=password_hasher)
    admin_bootstrap = AdminBootstrapService(users=users, password_pipeline=password_pipeline)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if admin_bootstrap_config is not None:
            await admin_bootstrap.ensure_initial_admin(admin_bootstrap_config)
        yield

    auth_service = AuthService(
        users=users,
        auth_events=auth_events,
        password_hasher=password_hasher,
    )
    account_service = AccountService(
        users=users,
        auth_events=auth_events,
        password_hasher=password_hasher,
        password_pipeline=password_pipeline,
        email_sender=email_sender,
    )
    password_reset_service = PasswordResetService(
        users=users,
        auth_events=auth_events,
        reset_tokens=reset_tokens,
        password_pipeline=password_pipeline,
        email_sender=email_sender,
        reset_ttl=timedelta(minutes=settings.password_reset_ttl_minutes),
        mask_unknown_email=settings.password_reset_mask_unknown_email,
    )
    session_guard = SessionGuard(token_service=token_service, user_repository=users)
    cookie_settings = SessionCookieSettings(
        max_age=timedelta(days=settings.jwt_cookie_expires_days),
        secure=settings.is_production,
    )
    public_base_url = str(settings.public_base_url) if settings.public_base_url else None

    app = FastAPI(title="tour-booking", lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(
        build_auth_router(
            auth_service=auth_service,
            account_service=account_service,
            password_reset_service=password_reset_service,
            token_service=token_service,
            session_guard=session_guard,
            cookie_settings=cookie_settings,
            public_base_url=public_base_url,
        )
    )
    app.include_router(
        build_user_router(account_service=account_service, session_guard=session_guard)
    )
    app.include_router(
        build_admin_user_router(
            user_management_service=UserManagementService(users=users),
            session_guard=session_guard,
        )
    )
    logger.info("api_app_created app_env=%s", settings.app_env)
    return app


def run_asgi_server(*, host: str = API_HOST, port: int = API_PORT) -> None:
    """Run the API as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    run_asgi_server()


if __name__ == "__main__":
    main()
