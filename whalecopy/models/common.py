"""Common types and helpers shared across models."""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def unix_now() -> int:
    """Whole seconds since the epoch, the unit used on the wire."""
    return int(time.time())
