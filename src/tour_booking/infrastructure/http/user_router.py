"""FastAPI router for the logged-in user's own account."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from tour_booking.application.dto.user_models import (
    UpdateMeRequest,
    UserData,
    UserResponse,
    UserResponseEnvelope,
)
from tour_booking.application.ports.user_repository_port import UserRecord
from tour_booking.application.services.account_service import AccountService
from tour_booking.infrastructure.http.auth_guard import SessionGuard
from tour_booking.infrastructure.http.auth_router import API_USERS_PREFIX
from tour_booking.infrastructure.http.error_handlers import ERROR_RESPONSES


def build_user_router(
    *,
    account_service: AccountService,
    session_guard: SessionGuard,
) -> APIRouter:
    """Build router exposing self-service profile endpoints."""

    router = APIRouter(prefix=API_USERS_PREFIX, tags=["account"], responses=ERROR_RESPONSES)
    current_user = Depends(session_guard.require_session())

    @router.get("/me", response_model=UserResponseEnvelope)
    async def get_me(user: UserRecord = current_user) -> UserResponseEnvelope:
        return UserResponseEnvelope(data=UserData(user=UserResponse.from_record(user)))

    @router.patch("/update-me", response_model=UserResponseEnvelope)
    async def update_me(
        payload: UpdateMeRequest,
        user: UserRecord = current_user,
    ) -> UserResponseEnvelope:
        updated = await account_service.update_me(
            user_id=user.user_id,
            name=payload.name,
            email=str(payload.email) if payload.email is not None else None,
            password=payload.password,
            password_confirm=payload.password_confirm,
        )
        return UserResponseEnvelope(data=UserData(user=UserResponse.from_record(updated)))

    @router.delete("/delete-me", status_code=204, response_class=Response)
    async def delete_me(user: UserRecord = current_user) -> Response:
        await account_service.delete_me(user_id=user.user_id)
        return Response(status_code=204)

    return router
