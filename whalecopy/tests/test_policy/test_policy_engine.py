"""Tests for the composed validation and sizing policy."""

from whalecopy.config.schema import PolicyConfig
from whalecopy.models.execution import Accepted, FailCode, Failed, SkipReason
from whalecopy.models.signal import CopyTradeConfig, Side
from whalecopy.policy.engine import check_market, check_price, check_signal, decide


class TestDecideOutcomes:
    def test_capped_order_raised_to_min_size(self, signal, snapshot, now):
        result = decide(signal, CopyTradeConfig(), snapshot, 0.50, now)
        assert result == Accepted(price=0.51, size=5.0, token_id="tok-yes")

    def test_old_trade_is_stale(self, signal_factory, snapshot, now):
        result = decide(signal_factory(timestamp=now - 120), CopyTradeConfig(), snapshot, 0.50, now)
        assert result.reason == SkipReason.STALE

    def test_extreme_midpoint_is_resolved(self, signal_factory, snapshot, now):
        for price in (0.50, 0.97, 0.99):
            result = decide(signal_factory(price=price), CopyTradeConfig(), snapshot, 0.98, now)
            assert result.reason == SkipReason.RESOLVED

    def test_moved_midpoint_is_price_drift(self, signal, snapshot, now):
        result = decide(signal, CopyTradeConfig(), snapshot, 0.65, now)
        assert result.reason == SkipReason.PRICE_DRIFT

    def test_trade_at_one_is_resolved(self, signal_factory, snapshot, now):
        """A fill at 1.0 means a settled market even when the midpoint looks tradable."""
        result = decide(signal_factory(price=1.0), CopyTradeConfig(), snapshot, 0.90, now)
        assert not isinstance(result, Accepted)
        assert result.reason == SkipReason.RESOLVED

    def test_trade_above_one_is_resolved(self, signal_factory, snapshot, now):
        result = decide(signal_factory(price=1.2), CopyTradeConfig(), snapshot, 0.90, now)
        assert result.reason == SkipReason.RESOLVED


class TestGateOrder:
    def test_sell_always_sell_trade(self, signal_factory, snapshot_factory, now):
        """SELL wins over every other failing condition."""
        signal = signal_factory(side=Side.SELL, timestamp=now - 10_000, outcome="Maybe")
        snapshot = snapshot_factory(accepting_orders=False)
        result = decide(signal, CopyTradeConfig(), snapshot, 0.99, now)
        assert result.reason == SkipReason.SELL_TRADE

    def test_stale_before_market_closed(self, signal_factory, snapshot_factory, now):
        signal = signal_factory(timestamp=now - 120)
        result = decide(signal, CopyTradeConfig(), snapshot_factory(accepting_orders=False), 0.5, now)
        assert result.reason == SkipReason.STALE

    def test_closed_before_outcome(self, signal_factory, snapshot_factory, now):
        signal = signal_factory(outcome="Maybe")
        result = decide(signal, CopyTradeConfig(), snapshot_factory(accepting_orders=False), 0.5, now)
        assert result.reason == SkipReason.MARKET_CLOSED

    def test_outcome_missing_is_failure(self, signal_factory, snapshot, now):
        result = decide(signal_factory(outcome="Maybe"), CopyTradeConfig(), snapshot, 0.5, now)
        assert isinstance(result, Failed)
        assert result.error == FailCode.OUTCOME_NOT_FOUND

    def test_resolved_before_drift(self, signal, snapshot, now):
        result = decide(signal, CopyTradeConfig(), snapshot, 0.02, now)
        assert result.reason == SkipReason.RESOLVED


class TestStages:
    def test_check_signal_passes(self, signal, now):
        assert check_signal(signal, now, PolicyConfig()) is None

    def test_check_signal_uses_policy_age(self, signal_factory, now):
        policy = PolicyConfig(max_trade_age_s=10)
        assert check_signal(signal_factory(timestamp=now - 11), now, policy).reason == SkipReason.STALE

    def test_check_market_passes(self, signal, snapshot):
        assert check_market(signal, snapshot) is None

    def test_check_price_uses_policy_drift(self, signal):
        assert check_price(signal, 0.60, PolicyConfig()) is None
        assert check_price(signal, 0.60, PolicyConfig(max_price_drift=0.1)).reason == SkipReason.PRICE_DRIFT
