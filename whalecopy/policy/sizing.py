"""Replica order sizing: cap, improve, round, then enforce exchange minimums.

Minimums are applied last and win over the caps. An order below the exchange
minimums is rejected at the exchange no matter how it was derived.
"""

import math
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from whalecopy.config.schema import PolicyConfig
from whalecopy.models.execution import Accepted, Skipped, SkipReason
from whalecopy.models.market import MarketSnapshot
from whalecopy.models.signal import CopyTradeConfig, TradeSignal

CENT = Decimal("0.01")


def _dec(value: float) -> Decimal:
    # Shortest repr keeps 0.29 as 0.29 instead of 0.28999999999999998
    return Decimal(repr(float(value)))


def round_to_tick(price: float, tick_size: float) -> float:
    """Round `price` down to a whole number of ticks."""
    if tick_size <= 0:
        raise ValueError(f"tick_size must be positive, got {tick_size}")
    tick = _dec(tick_size)
    ticks = (_dec(price) / tick).to_integral_value(rounding=ROUND_FLOOR)
    return float(ticks * tick)


def round_size(size: float) -> float:
    """Round a share count down to 2 decimals."""
    return float(_dec(size).quantize(CENT, rounding=ROUND_FLOOR))


def ceil_cents(value: float) -> float:
    """Round up to 2 decimals."""
    return float(_dec(value).quantize(CENT, rounding=ROUND_CEILING))


def size_order(
    signal: TradeSignal,
    config: CopyTradeConfig,
    snapshot: MarketSnapshot,
    policy: PolicyConfig,
) -> Accepted | Skipped:
    size = signal.size * config.multiplier
    max_shares_by_usd = config.max_single_trade / signal.price
    size = min(size, max_shares_by_usd)

    price = min(signal.price * (1 + config.price_improvement_pct), policy.max_order_price)
    price = round_to_tick(price, snapshot.tick_size)
    size = round_size(size)

    if price > 0 and size * price < policy.min_order_usd:
        size = ceil_cents(policy.min_order_usd / price)

    if size < snapshot.minimum_order_size:
        size = ceil_cents(snapshot.minimum_order_size)

    if size <= 0 or price <= 0 or not math.isfinite(size):
        return Skipped(
            SkipReason.ZERO_ORDER,
            f"calculated size or price is zero (size={size}, price={price})",
        )

    token = snapshot.find_token(signal.outcome)
    return Accepted(price=price, size=size, token_id=token.token_id if token else "")
