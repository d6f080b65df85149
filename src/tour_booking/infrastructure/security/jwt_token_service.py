"""Signed bearer token issuing and verification backed by PyJWT."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

DEFAULT_TOKEN_TTL = timedelta(days=90)
DEFAULT_ALGORITHM = "HS256"


class InvalidTokenError(ValueError):
    """Raised when a token is malformed or its signature does not verify."""


class ExpiredTokenError(InvalidTokenError):
    """Raised when a correctly signed token is past its expiry."""


@dataclass(frozen=True)
class IssuedToken:
    """Freshly signed token with its validity window."""

    token: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    """Verified identity claims carried by a token."""

    user_id: UUID
    issued_at: datetime
    expires_at: datetime


class JwtTokenService:
    """Issue and verify HS256 JWTs binding a user id.

    Expiry is checked against the injected clock rather than by PyJWT so the
    validity window is deterministic under test.
    """

    def __init__(
        self,
        *,
        secret: str,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        algorithm: str = DEFAULT_ALGORITHM,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret:
            raise ValueError("token secret cannot be empty")
        self._secret = secret
        self._token_ttl = token_ttl
        self._algorithm = algorithm
        self._now = now or (lambda: datetime.now(tz=UTC))

    @property
    def token_ttl(self) -> timedelta:
        return self._token_ttl

    def issue(self, user_id: UUID) -> IssuedToken:
        """Sign a token for `user_id` valid for the configured duration."""

        issued_at = self._now().replace(microsecond=0)
        expires_at = issued_at + self._token_ttl
        token = jwt.encode(
            {"sub": str(user_id), "iat": issued_at, "exp": expires_at},
            self._secret,
            algorithm=self._algorithm,
        )
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str) -> TokenClaims:
        """Return claims of a valid token or raise `InvalidTokenError`."""

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("invalid token") from exc

        try:
            user_id = UUID(str(claims["sub"]))
            issued_at = datetime.fromtimestamp(int(claims["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=UTC)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("invalid token claims") from exc

        if self._now() >= expires_at:
            raise ExpiredTokenError("token expired")

        return TokenClaims(user_id=user_id, issued_at=issued_at, expires_at=expires_at)
