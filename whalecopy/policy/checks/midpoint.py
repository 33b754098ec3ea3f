"""Midpoint check: near-certain markets are treated as resolved."""

from whalecopy.models.execution import Skipped, SkipReason


def check_trade_price(price: float) -> Skipped | None:
    """A whale fill at 0 or 1 only happens in a settled market."""
    if not 0 < price < 1:
        return Skipped(
            SkipReason.RESOLVED,
            f"trade price {price} is outside (0, 1) (market resolved)",
        )
    return None


def check(midpoint: float, floor: float, ceiling: float) -> Skipped | None:
    if midpoint <= floor or midpoint >= ceiling:
        return Skipped(
            SkipReason.RESOLVED,
            f"midpoint {midpoint} is near 0 or 1 (likely resolved)",
        )
    return None
