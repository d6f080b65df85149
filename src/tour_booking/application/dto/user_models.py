"""Pydantic request and response models for the user account API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tour_booking.application.ports.user_repository_port import UserRecord
from tour_booking.domain.auth.roles import Role


class RequestModel(BaseModel):
    """Request body base: camelCase aliases accepted, unknown fields dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StrictModel(BaseModel):
    """Response base with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


class SignupRequest(RequestModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str
    password_confirm: str = Field(alias="passwordConfirm")


class LoginRequest(RequestModel):
    email: str = ""
    password: str = ""


class ForgotPasswordRequest(RequestModel):
    email: EmailStr


class ResetPasswordRequest(RequestModel):
    password: str
    password_confirm: str = Field(alias="passwordConfirm")


class UpdatePasswordRequest(RequestModel):
    password_current: str = Field(alias="passwordCurrent")
    password: str
    password_confirm: str = Field(alias="passwordConfirm")


class UpdateMeRequest(RequestModel):
    """Self-service profile update; password fields are accepted only to be refused."""

    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    password_confirm: str | None = Field(default=None, alias="passwordConfirm")


class AdminUpdateUserRequest(RequestModel):
    name: str | None = None
    email: EmailStr | None = None
    role: Role | None = None


class UserResponse(StrictModel):
    """Public projection of one user; credential fields never appear here."""

    id: UUID
    name: str
    email: str
    role: Role
    active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, user: UserRecord) -> UserResponse:
        return cls(
            id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserData(StrictModel):
    user: UserResponse


class OptionalUserData(StrictModel):
    user: UserResponse | None


class UsersData(StrictModel):
    users: list[UserResponse]


class StatusResponse(StrictModel):
    status: Literal["success"] = "success"


class MessageResponse(StrictModel):
    status: Literal["success"] = "success"
    message: str


class UserResponseEnvelope(StrictModel):
    status: Literal["success"] = "success"
    data: UserData


class TokenResponseEnvelope(StrictModel):
    status: Literal["success"] = "success"
    token: str
    data: UserData


class SessionResponseEnvelope(StrictModel):
    status: Literal["success"] = "success"
    data: OptionalUserData


class UserListResponseEnvelope(StrictModel):
    status: Literal["success"] = "success"
    results: int
    data: UsersData


class ErrorResponse(StrictModel):
    status: Literal["fail", "error"]
    message: str
