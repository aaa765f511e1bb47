"""Tests for webhook request signing."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from taskhooks.exceptions import ValidationError
from taskhooks.webhooks.signing import compute_signature, generate_secret_key, verify_signature


class TestComputeSignature:
    """Tests for compute_signature."""

    def test_matches_hmac_sha256_of_body(self) -> None:
        """Signature should be sha256= plus the hex HMAC of the exact bytes."""
        body = b'{"event":"task.created","data":{}}'
        secret = "shared_secret_value"

        expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

        assert compute_signature(body, secret) == f"sha256={expected}"

    def test_str_and_bytes_agree(self) -> None:
        """A str body is signed as its UTF-8 encoding."""
        payload = '{"message": "olá mundo"}'
        assert compute_signature(payload, "s") == compute_signature(payload.encode("utf-8"), "s")

    def test_lowercase_hex(self) -> None:
        """Digest should be rendered as 64 lowercase hex characters."""
        sig = compute_signature(b"", "secret")
        digest = sig.removeprefix("sha256=")
        assert len(digest) == 64
        assert digest == digest.lower()

    def test_changes_with_secret(self) -> None:
        """Different secrets should produce different signatures."""
        body = b'{"event": "test"}'
        assert compute_signature(body, "secret_one") != compute_signature(body, "secret_two")

    def test_changes_with_single_byte(self) -> None:
        """Any change to the body should change the signature."""
        assert compute_signature(b'{"a":1}', "s") != compute_signature(b'{"a":2}', "s")


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_accepts_valid_signature(self) -> None:
        body = b'{"event": "test"}'
        sig = compute_signature(body, "secret")
        assert verify_signature(body, "secret", sig) is True

    def test_rejects_wrong_signature(self) -> None:
        assert verify_signature(b"{}", "secret", "sha256=wrong") is False

    def test_rejects_signature_without_prefix(self) -> None:
        sig = compute_signature(b"{}", "secret").removeprefix("sha256=")
        assert verify_signature(b"{}", "secret", sig) is False


class TestGenerateSecretKey:
    """Tests for generate_secret_key."""

    def test_default_length_and_alphabet(self) -> None:
        key = generate_secret_key()
        assert len(key) == 32
        assert key.isalnum()

    def test_keys_are_random(self) -> None:
        keys = {generate_secret_key() for _ in range(20)}
        assert len(keys) == 20

    def test_rejects_short_keys(self) -> None:
        with pytest.raises(ValidationError):
            generate_secret_key(8)
