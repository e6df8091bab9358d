"""Mailgun webhook signature verification.

Mailgun signs every webhook with HMAC-SHA256 over ``timestamp + token``,
keyed with the account API key, and posts the hex digest as ``signature``.
"""

import binascii
import hashlib
import hmac
from enum import Enum

from result import Err, Ok, Result


class SignatureError(Enum):
    """Error types for signature verification."""

    DECODE_ERROR = "decode_error"
    MISMATCH = "mismatch"


def compute_signature(key: bytes, timestamp: int, token: str) -> str:
    """Return the hex HMAC-SHA256 Mailgun would send for timestamp and token."""
    message = f"{timestamp}{token}".encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def verify_signature(
    key: bytes, timestamp: int, token: str, signature_hex: str
) -> Result[None, SignatureError]:
    """Verify a webhook signature.

    Args:
        key: HMAC key (the Mailgun API key as bytes)
        timestamp: Provider-supplied timestamp in seconds
        token: Per-message nonce
        signature_hex: Hex-encoded signature from the request

    Returns:
        Ok(None) when the signature matches, otherwise the SignatureError
    """
    try:
        signature = binascii.unhexlify(signature_hex)
    except ValueError:
        # binascii.Error (odd length, non-hex digit) and non-ASCII input
        return Err(SignatureError.DECODE_ERROR)

    message = f"{timestamp}{token}".encode("utf-8")
    expected = hmac.new(key, message, hashlib.sha256).digest()

    if not hmac.compare_digest(expected, signature):
        return Err(SignatureError.MISMATCH)

    return Ok(None)
