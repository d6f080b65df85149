from __future__ import annotations

import hashlib
import re

from tour_booking.infrastructure.security.reset_token_service import ResetTokenService


def test_generate_returns_32_random_bytes_hex_encoded() -> None:
    credential = ResetTokenService().generate()

    assert re.fullmatch(r"[0-9a-f]{64}", credential.token)


def test_generate_pairs_plaintext_with_its_sha256_digest() -> None:
    credential = ResetTokenService(token_factory=lambda: "plain-reset-value").generate()

    assert credential.token == "plain-reset-value"
    assert credential.token_hash == hashlib.sha256(b"plain-reset-value").hexdigest()
    assert credential.token_hash != credential.token


def test_generated_values_are_unique() -> None:
    service = ResetTokenService()

    assert len({service.generate().token for _ in range(20)}) == 20


def test_hash_token_is_deterministic() -> None:
    service = ResetTokenService()

    assert service.hash_token("abc") == service.hash_token("abc")
    assert service.hash_token("abc") != service.hash_token("abd")
