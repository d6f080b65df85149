from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest

from tour_booking.infrastructure.security.jwt_token_service import (
    ExpiredTokenError,
    InvalidTokenError,
    JwtTokenService,
)

SECRET = "unit-test-secret-with-enough-length"
FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def _service(*, now: datetime = FIXED_NOW, ttl: timedelta = timedelta(days=90)) -> JwtTokenService:
    return JwtTokenService(secret=SECRET, token_ttl=ttl, now=lambda: now)


def test_issue_embeds_subject_and_validity_window() -> None:
    user_id = uuid4()

    issued = _service().issue(user_id)

    assert issued.issued_at == FIXED_NOW
    assert issued.expires_at == FIXED_NOW + timedelta(days=90)
    claims = jwt.decode(
        issued.token,
        SECRET,
        algorithms=["HS256"],
        options={"verify_exp": False, "verify_iat": False},
    )
    assert claims["sub"] == str(user_id)
    assert claims["iat"] == int(FIXED_NOW.timestamp())
    assert claims["exp"] == int((FIXED_NOW + timedelta(days=90)).timestamp())


def test_verify_returns_claims_for_token_within_window() -> None:
    user_id = uuid4()
    issued = _service().issue(user_id)

    claims = _service(now=FIXED_NOW + timedelta(days=89)).verify(issued.token)

    assert claims.user_id == user_id
    assert claims.issued_at == FIXED_NOW
    assert claims.expires_at == issued.expires_at


def test_verify_rejects_expired_token() -> None:
    issued = _service(ttl=timedelta(minutes=5)).issue(uuid4())

    with pytest.raises(ExpiredTokenError):
        _service(now=FIXED_NOW + timedelta(minutes=5)).verify(issued.token)


def test_expired_token_error_is_an_invalid_token_error() -> None:
    assert issubclass(ExpiredTokenError, InvalidTokenError)


def test_verify_rejects_token_signed_with_another_secret() -> None:
    other = JwtTokenService(secret="another-secret-entirely", now=lambda: FIXED_NOW)
    token = other.issue(uuid4()).token

    with pytest.raises(InvalidTokenError):
        _service().verify(token)


def test_verify_rejects_tampered_payload() -> None:
    token = _service().issue(uuid4()).token
    header, _, signature = token.split(".")
    forged_payload = jwt.encode(
        {"sub": str(uuid4()), "iat": FIXED_NOW, "exp": FIXED_NOW + timedelta(days=1)},
        SECRET,
    ).split(".")[1]

    with pytest.raises(InvalidTokenError):
        _service().verify(f"{header}.{forged_payload}.{signature}")


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_verify_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(InvalidTokenError):
        _service().verify(token)


def test_verify_rejects_token_missing_expiry_claim() -> None:
    token = jwt.encode({"sub": str(uuid4()), "iat": FIXED_NOW}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        _service().verify(token)


def test_verify_rejects_non_uuid_subject() -> None:
    token = jwt.encode(
        {"sub": "not-a-uuid", "iat": FIXED_NOW, "exp": FIXED_NOW + timedelta(days=1)},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        _service().verify(token)


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        JwtTokenService(secret="")
