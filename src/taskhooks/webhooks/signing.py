"""HMAC-SHA256 request signing.

The signature covers the literal request body. Callers must finalize and
serialize the envelope first and sign those bytes; re-serializing after
signing would let the signature drift from what is transmitted.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import string

from taskhooks.exceptions import ValidationError

SIGNATURE_PREFIX = "sha256="

_SECRET_ALPHABET = string.ascii_letters + string.digits


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def compute_signature(payload: str | bytes, secret: str) -> str:
    """Compute the HMAC-SHA256 signature header value for a request body.

    Args:
        payload: Body bytes exactly as transmitted (str is UTF-8 encoded).
        secret: Shared secret for HMAC.

    Returns:
        Signature in format "sha256=<hex_digest>".
    """
    digest = hmac.new(
        key=secret.encode("utf-8"),
        msg=_to_bytes(payload),
        digestmod=hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: str | bytes, secret: str, signature: str) -> bool:
    """Verify a signature header value using a constant-time comparison.

    Intended for receivers and for tests of the sending side.
    """
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected, signature)


def generate_secret_key(length: int = 32) -> str:
    """Generate a random alphanumeric signing secret."""
    if length < 16:
        raise ValidationError("length", "secret keys must be at least 16 characters")
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))
