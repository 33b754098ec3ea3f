"""Freshness check: skips signals older than the allowed age."""

from whalecopy.models.execution import Skipped, SkipReason
from whalecopy.models.signal import TradeSignal


def check(signal: TradeSignal, now: int, max_age_s: int) -> Skipped | None:
    age = now - signal.timestamp
    if age > max_age_s:
        return Skipped(
            SkipReason.STALE, f"trade is {age}s old (max {max_age_s}s)"
        )
    return None
