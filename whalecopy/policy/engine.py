"""Validation and sizing policy: short-circuit gates followed by sizing.

The gates run in a fixed order because later gates assume earlier ones passed.
The copy engine calls the three stages separately so it fetches market data
only when a signal survives the cheaper checks. `decide` composes them.
"""

from whalecopy.config.schema import PolicyConfig
from whalecopy.models.execution import Decision, Failed, Skipped
from whalecopy.models.market import MarketSnapshot
from whalecopy.models.signal import CopyTradeConfig, TradeSignal
from whalecopy.policy.checks import drift, freshness, market_open, midpoint, outcome, side
from whalecopy.policy.sizing import size_order


def check_signal(
    signal: TradeSignal, now: int, policy: PolicyConfig
) -> Skipped | None:
    """Gates 1-2: side and freshness. Needs no market data."""
    return side.check(signal) or freshness.check(signal, now, policy.max_trade_age_s)


def check_market(
    signal: TradeSignal, snapshot: MarketSnapshot
) -> Skipped | Failed | None:
    """Gates 3-4: market open and outcome resolution."""
    return market_open.check(snapshot) or outcome.check(signal, snapshot)


def check_price(
    signal: TradeSignal, mid: float, policy: PolicyConfig
) -> Skipped | None:
    """Gates 5-6: resolved prices, midpoint bounds and price drift."""
    return (
        midpoint.check_trade_price(signal.price)
        or midpoint.check(mid, policy.midpoint_floor, policy.midpoint_ceiling)
        or drift.check(mid, signal.price, policy.max_price_drift)
    )


def decide(
    signal: TradeSignal,
    config: CopyTradeConfig,
    snapshot: MarketSnapshot,
    mid: float,
    now: int,
    policy: PolicyConfig | None = None,
) -> Decision:
    policy = policy or PolicyConfig()
    return (
        check_signal(signal, now, policy)
        or check_market(signal, snapshot)
        or check_price(signal, mid, policy)
        or size_order(signal, config, snapshot, policy)
    )
