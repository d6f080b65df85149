"""Port for one-way password hashing used by credential checks."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherPort(Protocol):
    """Salted adaptive hashing contract for account passwords."""

    def hash_password(self, password: str) -> str:
        """Return a salted hash suitable for the `password_hash` column."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Return whether `password` matches the stored hash."""
