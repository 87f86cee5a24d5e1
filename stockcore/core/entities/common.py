"""Shared helpers for domain entities."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)
