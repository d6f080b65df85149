"""FastAPI router for admin user-management endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from tour_booking.application.dto.user_models import (
    AdminUpdateUserRequest,
    UserData,
    UserListResponseEnvelope,
    UserResponse,
    UserResponseEnvelope,
    UsersData,
)
from tour_booking.application.services.user_management_service import UserManagementService
from tour_booking.domain.auth.roles import Role
from tour_booking.infrastructure.http.auth_guard import SessionGuard
from tour_booking.infrastructure.http.auth_router import API_USERS_PREFIX
from tour_booking.infrastructure.http.error_handlers import ERROR_RESPONSES, error_envelope

CREATE_USER_NOT_DEFINED_MESSAGE = "This route is not defined! Please use /signup instead"


def build_admin_user_router(
    *,
    user_management_service: UserManagementService,
    session_guard: SessionGuard,
) -> APIRouter:
    """Build router exposing admin-only user listing and lifecycle endpoints.

    Registered after the self-service routers so `/me` and friends are not
    captured by `/{user_id}`.
    """

    router = APIRouter(
        prefix=API_USERS_PREFIX,
        tags=["admin-users"],
        responses=ERROR_RESPONSES,
        dependencies=[Depends(session_guard.require_roles(Role.ADMIN))],
    )

    @router.get("", response_model=UserListResponseEnvelope)
    async def list_users(
        include_inactive: bool = Query(default=False),
    ) -> UserListResponseEnvelope:
        users = await user_management_service.list_users(include_inactive=include_inactive)
        return UserListResponseEnvelope(
            results=len(users),
            data=UsersData(users=[UserResponse.from_record(user) for user in users]),
        )

    @router.post("")
    async def create_user() -> JSONResponse:
        return error_envelope(status_code=500, message=CREATE_USER_NOT_DEFINED_MESSAGE)

    @router.get("/{user_id}", response_model=UserResponseEnvelope)
    async def get_user(user_id: UUID) -> UserResponseEnvelope:
        user = await user_management_service.get_user(user_id=user_id)
        return UserResponseEnvelope(data=UserData(user=UserResponse.from_record(user)))

    @router.patch("/{user_id}", response_model=UserResponseEnvelope)
    async def update_user(
        user_id: UUID,
        payload: AdminUpdateUserRequest,
    ) -> UserResponseEnvelope:
        updated = await user_management_service.update_user(
            user_id=user_id,
            name=payload.name,
            email=str(payload.email) if payload.email is not None else None,
            role=payload.role,
        )
        return UserResponseEnvelope(data=UserData(user=UserResponse.from_record(updated)))

    @router.delete("/{user_id}", status_code=204, response_class=Response)
    async def delete_user(user_id: UUID) -> Response:
        await user_management_service.delete_user(user_id=user_id)
        return Response(status_code=204)

    return router
