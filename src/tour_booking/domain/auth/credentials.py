"""Shared normalization and validation helpers for user credential inputs."""

from __future__ import annotations

MIN_PASSWORD_LENGTH = 8
# bcrypt only accepts the first 72 bytes of a secret.
MAX_PASSWORD_BYTES = 72


class InvalidUserInputError(ValueError):
    """Raised when user-supplied account fields fail validation."""


class PasswordMismatchError(InvalidUserInputError):
    """Raised when password and password confirmation differ."""

    def __init__(self) -> None:
        super().__init__("Passwords are not the same!")


def normalize_user_email(*, email: str) -> str:
    """Normalize one user email and reject blank values."""

    normalized = email.strip().lower()
    if not normalized:
        raise InvalidUserInputError("Please provide your email")
    return normalized


def normalize_user_name(*, name: str) -> str:
    """Collapse inner whitespace and reject blank names."""

    normalized = " ".join(name.split())
    if not normalized:
        raise InvalidUserInputError("Please tell us your name!")
    return normalized


def normalize_user_password(*, password: str) -> str:
    """Reject blank, too-short or over-long plaintext passwords."""

    if not password.strip():
        raise InvalidUserInputError("Please provide a password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidUserInputError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidUserInputError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return password


def require_matching_confirmation(*, password: str, password_confirm: str) -> None:
    """Raise when a password confirmation does not match its password."""

    if password != password_confirm:
        raise PasswordMismatchError()
