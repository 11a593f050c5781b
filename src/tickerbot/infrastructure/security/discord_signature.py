# src/tickerbot/infrastructure/security/discord_signature.py
# Copyright (c) Tickerbot.
# SPDX-License-Identifier: MIT
"""Discord request signature verification.

Discord signs every interaction with the application's Ed25519 key over
``timestamp + raw_body``; the hex signature and the timestamp arrive in the
``X-Signature-Ed25519`` and ``X-Signature-Timestamp`` headers.
"""

from __future__ import annotations

from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from tickerbot.infrastructure.logging.logger import get_json_logger

__all__ = ["SIGNATURE_HEADER", "TIMESTAMP_HEADER", "verify_signature"]

SIGNATURE_HEADER: Final[str] = "X-Signature-Ed25519"
TIMESTAMP_HEADER: Final[str] = "X-Signature-Timestamp"

logger = get_json_logger(__name__)


def verify_signature(
    public_key_hex: str,
    signature_hex: str | None,
    timestamp: str | None,
    body: bytes,
) -> bool:
    """Return ``True`` when ``signature_hex`` signs ``timestamp + body``.

    Missing headers, malformed hex and wrong-length keys all yield ``False``.
    """
    if not signature_hex or not timestamp:
        logger.warning("discord.signature_missing")
        return False
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        key.verify(bytes.fromhex(signature_hex), timestamp.encode("utf-8") + body)
    except InvalidSignature:
        logger.warning("discord.signature_invalid")
        return False
    except ValueError as exc:
        logger.warning("discord.signature_malformed", extra={"extra": {"error": str(exc)}})
        return False
    return True
