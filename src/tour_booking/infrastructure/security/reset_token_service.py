"""One-time password reset credential generation and hashing."""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable
from dataclasses import dataclass

_RESET_TOKEN_BYTES = 32


@dataclass(frozen=True)
class ResetCredential:
    """Plaintext reset value paired with the digest that gets persisted."""

    token: str
    token_hash: str


class ResetTokenService:
    """Generate high-entropy reset values and hash them with SHA-256."""

    def __init__(self, *, token_factory: Callable[[], str] | None = None) -> None:
        self._token_factory = token_factory or (lambda: secrets.token_hex(_RESET_TOKEN_BYTES))

    def generate(self) -> ResetCredential:
        token = self._token_factory()
        return ResetCredential(token=token, token_hash=self.hash_token(token))

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
