"""FastAPI router for signup, login, logout and password lifecycle endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from tour_booking.application.dto.user_models import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    OptionalUserData,
    ResetPasswordRequest,
    SessionResponseEnvelope,
    SignupRequest,
    StatusResponse,
    TokenResponseEnvelope,
    UpdatePasswordRequest,
    UserData,
    UserResponse,
)
from tour_booking.application.ports.user_repository_port import UserRecord
from tour_booking.application.services.account_service import AccountService
from tour_booking.application.services.auth_service import AuthService
from tour_booking.application.services.password_reset_service import PasswordResetService
from tour_booking.infrastructure.http.auth_guard import SessionGuard
from tour_booking.infrastructure.http.error_handlers import ERROR_RESPONSES
from tour_booking.infrastructure.http.session_cookies import (
    SessionCookieSettings,
    replace_session_cookie,
    request_context,
    resolve_base_url,
    set_session_cookie,
)
from tour_booking.infrastructure.security.jwt_token_service import JwtTokenService

API_USERS_PREFIX = "/api/v1/users"
RESET_LINK_SENT_MESSAGE = "Token sent to email!"


def build_auth_router(
    *,
    auth_service: AuthService,
    account_service: AccountService,
    password_reset_service: PasswordResetService,
    token_service: JwtTokenService,
    session_guard: SessionGuard,
    cookie_settings: SessionCookieSettings,
    public_base_url: str | None = None,
) -> APIRouter:
    """Build router exposing authentication and password lifecycle endpoints."""

    router = APIRouter(prefix=API_USERS_PREFIX, tags=["auth"], responses=ERROR_RESPONSES)
    current_user = Depends(session_guard.require_session())

    def send_token(user: UserRecord, response: Response) -> TokenResponseEnvelope:
        issued = token_service.issue(user.user_id)
        set_session_cookie(response, token=issued.token, settings=cookie_settings)
        return TokenResponseEnvelope(
            token=issued.token,
            data=UserData(user=UserResponse.from_record(user)),
        )

    @router.post("/signup", response_model=TokenResponseEnvelope, status_code=201)
    async def signup(
        payload: SignupRequest,
        request: Request,
        response: Response,
    ) -> TokenResponseEnvelope:
        base_url = resolve_base_url(request, public_base_url=public_base_url)
        user = await account_service.signup(
            name=payload.name,
            email=str(payload.email),
            password=payload.password,
            password_confirm=payload.password_confirm,
            account_url=f"{base_url}{API_USERS_PREFIX}/me",
            context=request_context(request),
        )
        return send_token(user, response)

    @router.post("/login", response_model=TokenResponseEnvelope)
    async def login(
        payload: LoginRequest,
        request: Request,
        response: Response,
    ) -> TokenResponseEnvelope:
        user = await auth_service.authenticate(
            email=payload.email,
            password=payload.password,
            context=request_context(request),
        )
        return send_token(user, response)

    @router.get("/logout", response_model=StatusResponse)
    async def logout(request: Request, response: Response) -> StatusResponse:
        user = await session_guard.optional_session(request)
        await auth_service.record_logout(
            user_id=user.user_id if user is not None else None,
            context=request_context(request),
        )
        replace_session_cookie(response, settings=cookie_settings)
        return StatusResponse()

    @router.get("/session", response_model=SessionResponseEnvelope)
    async def session(
        user: Annotated[UserRecord | None, Depends(session_guard.optional_session)],
    ) -> SessionResponseEnvelope:
        return SessionResponseEnvelope(
            data=OptionalUserData(
                user=UserResponse.from_record(user) if user is not None else None
            )
        )

    @router.post("/forgot-password", response_model=MessageResponse)
    async def forgot_password(
        payload: ForgotPasswordRequest,
        request: Request,
    ) -> MessageResponse:
        base_url = resolve_base_url(request, public_base_url=public_base_url)
        await password_reset_service.request_reset(
            email=str(payload.email),
            build_reset_url=lambda token: f"{base_url}{API_USERS_PREFIX}/reset-password/{token}",
            context=request_context(request),
        )
        return MessageResponse(message=RESET_LINK_SENT_MESSAGE)

    @router.patch("/reset-password/{token}", response_model=TokenResponseEnvelope)
    async def reset_password(
        token: str,
        payload: ResetPasswordRequest,
        request: Request,
        response: Response,
    ) -> TokenResponseEnvelope:
        user = await password_reset_service.reset_password(
            token=token,
            password=payload.password,
            password_confirm=payload.password_confirm,
            context=request_context(request),
        )
        return send_token(user, response)

    @router.patch("/update-my-password", response_model=TokenResponseEnvelope)
    async def update_my_password(
        payload: UpdatePasswordRequest,
        request: Request,
        response: Response,
        user: UserRecord = current_user,
    ) -> TokenResponseEnvelope:
        updated = await account_service.update_password(
            user=user,
            current_password=payload.password_current,
            password=payload.password,
            password_confirm=payload.password_confirm,
            context=request_context(request),
        )
        return send_token(updated, response)

    return router
