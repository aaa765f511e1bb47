"""Shared helpers for taskhooks models."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def generate_id() -> str:
    """Generate a random UUID4 string.

    Used for delivery ids, which receivers deduplicate on, so they must be
    collision resistant rather than merely unique per process.
    """
    return str(uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)
