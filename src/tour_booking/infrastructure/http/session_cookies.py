"""Session cookie and request metadata helpers shared by the account routers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request, Response

from tour_booking.application.ports.auth_event_repository_port import RequestContext
from tour_booking.infrastructure.http.auth_guard import SESSION_COOKIE_NAME

LOGGED_OUT_COOKIE_VALUE = "loggedout"
LOGGED_OUT_COOKIE_TTL = timedelta(seconds=10)


@dataclass(frozen=True)
class SessionCookieSettings:
    """Attributes applied to the `jwt` cookie."""

    max_age: timedelta
    secure: bool = False


def set_session_cookie(response: Response, *, token: str, settings: SessionCookieSettings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=int(settings.max_age.total_seconds()),
        httponly=True,
        secure=settings.secure,
        samesite="lax",
    )


def replace_session_cookie(response: Response, *, settings: SessionCookieSettings) -> None:
    """Overwrite the session cookie with a short-lived placeholder."""

    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=LOGGED_OUT_COOKIE_VALUE,
        max_age=int(LOGGED_OUT_COOKIE_TTL.total_seconds()),
        httponly=True,
        secure=settings.secure,
        samesite="lax",
    )


def request_context(request: Request) -> RequestContext:
    return RequestContext(
        ip_address=request.client.host if request.client is not None else None,
        user_agent=request.headers.get("user-agent"),
    )


def resolve_base_url(request: Request, *, public_base_url: str | None) -> str:
    """Return the configured public origin, else the origin the request came in on."""

    if public_base_url:
        return public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")
