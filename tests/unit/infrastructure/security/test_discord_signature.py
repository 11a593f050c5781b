# tests/unit/infrastructure/security/test_discord_signature.py
from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from tickerbot.infrastructure.security.discord_signature import verify_signature

BODY = b'{"type":1}'
TIMESTAMP = "1700000000"


@pytest.fixture
def keypair() -> tuple[Ed25519PrivateKey, str]:
    private = Ed25519PrivateKey.generate()
    public_hex = private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()
    return private, public_hex


def test_valid_signature_is_accepted(keypair: tuple[Ed25519PrivateKey, str]) -> None:
    private, public_hex = keypair
    signature = private.sign(TIMESTAMP.encode() + BODY).hex()
    assert verify_signature(public_hex, signature, TIMESTAMP, BODY) is True


def test_tampered_body_is_rejected(keypair: tuple[Ed25519PrivateKey, str]) -> None:
    private, public_hex = keypair
    signature = private.sign(TIMESTAMP.encode() + BODY).hex()
    assert verify_signature(public_hex, signature, TIMESTAMP, b'{"type":2}') is False


def test_signature_bound_to_timestamp(keypair: tuple[Ed25519PrivateKey, str]) -> None:
    private, public_hex = keypair
    signature = private.sign(TIMESTAMP.encode() + BODY).hex()
    assert verify_signature(public_hex, signature, "1700000001", BODY) is False


@pytest.mark.parametrize(
    ("signature", "timestamp"),
    [(None, TIMESTAMP), ("", TIMESTAMP), ("ab" * 64, None), ("not-hex", TIMESTAMP)],
)
def test_missing_or_malformed_headers_are_rejected(
    keypair: tuple[Ed25519PrivateKey, str], signature: str | None, timestamp: str | None
) -> None:
    _, public_hex = keypair
    assert verify_signature(public_hex, signature, timestamp, BODY) is False


def test_bad_public_key_is_rejected(keypair: tuple[Ed25519PrivateKey, str]) -> None:
    private, _ = keypair
    signature = private.sign(TIMESTAMP.encode() + BODY).hex()
    assert verify_signature("abcd", signature, TIMESTAMP, BODY) is False
