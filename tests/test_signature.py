"""Tests for Mailgun webhook signature verification."""

import hashlib
import hmac

from mailrelay.services.signature import (
    SignatureError,
    compute_signature,
    verify_signature,
)

KEY = b"key-test-secret"
TIMESTAMP = 1704067200
TOKEN = "c2f1e6d8a0b94e7f8d3b2a1c0e9f8d7c"


class TestComputeSignature:
    """Tests for compute_signature."""

    def test_matches_hmac_sha256_of_timestamp_and_token(self) -> None:
        """Signature is HMAC-SHA256 over str(timestamp) + token."""
        expected = hmac.new(
            KEY, f"{TIMESTAMP}{TOKEN}".encode(), hashlib.sha256
        ).hexdigest()

        assert compute_signature(KEY, TIMESTAMP, TOKEN) == expected
        assert len(expected) == 64


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_valid_signature_is_ok(self) -> None:
        """A signature produced with the same key verifies."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN)

        result = verify_signature(KEY, TIMESTAMP, TOKEN, signature)

        assert result.is_ok()
        assert result.unwrap() is None

    def test_uppercase_hex_is_accepted(self) -> None:
        """Hex decoding is case-insensitive."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN).upper()

        assert verify_signature(KEY, TIMESTAMP, TOKEN, signature).is_ok()

    def test_every_flipped_byte_is_a_mismatch(self) -> None:
        """Flipping any single byte of the signature fails with MISMATCH."""
        raw = bytes.fromhex(compute_signature(KEY, TIMESTAMP, TOKEN))

        for index in range(len(raw)):
            tampered = bytearray(raw)
            tampered[index] ^= 0x01
            result = verify_signature(KEY, TIMESTAMP, TOKEN, tampered.hex())

            assert result.is_err()
            assert result.unwrap_err() == SignatureError.MISMATCH

    def test_wrong_key_is_a_mismatch(self) -> None:
        """A signature made with another key does not verify."""
        signature = compute_signature(b"other-key", TIMESTAMP, TOKEN)

        result = verify_signature(KEY, TIMESTAMP, TOKEN, signature)

        assert result.unwrap_err() == SignatureError.MISMATCH

    def test_changed_token_or_timestamp_is_a_mismatch(self) -> None:
        """The signature covers both timestamp and token."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN)

        assert (
            verify_signature(KEY, TIMESTAMP + 1, TOKEN, signature).unwrap_err()
            == SignatureError.MISMATCH
        )
        assert (
            verify_signature(KEY, TIMESTAMP, TOKEN + "x", signature).unwrap_err()
            == SignatureError.MISMATCH
        )

    def test_truncated_signature_is_a_mismatch(self) -> None:
        """Valid hex of the wrong length is a mismatch, not a decode error."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN)[:32]

        result = verify_signature(KEY, TIMESTAMP, TOKEN, signature)

        assert result.unwrap_err() == SignatureError.MISMATCH

    def test_odd_length_hex_is_a_decode_error(self) -> None:
        """Odd-length hex cannot be decoded."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN)[:-1]

        result = verify_signature(KEY, TIMESTAMP, TOKEN, signature)

        assert result.unwrap_err() == SignatureError.DECODE_ERROR

    def test_non_hex_characters_are_a_decode_error(self) -> None:
        """Non-hex characters cannot be decoded."""
        result = verify_signature(KEY, TIMESTAMP, TOKEN, "zz" * 32)

        assert result.unwrap_err() == SignatureError.DECODE_ERROR

    def test_whitespace_is_a_decode_error(self) -> None:
        """Embedded whitespace is rejected rather than skipped."""
        signature = compute_signature(KEY, TIMESTAMP, TOKEN)
        spaced = f"{signature[:2]} {signature[2:]}"

        result = verify_signature(KEY, TIMESTAMP, TOKEN, spaced)

        assert result.unwrap_err() == SignatureError.DECODE_ERROR

    def test_non_ascii_is_a_decode_error(self) -> None:
        """Non-ASCII text is rejected as undecodable."""
        result = verify_signature(KEY, TIMESTAMP, TOKEN, "é" * 64)

        assert result.unwrap_err() == SignatureError.DECODE_ERROR
