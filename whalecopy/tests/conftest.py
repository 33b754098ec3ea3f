"""Shared test fixtures."""

from pathlib import Path

import pytest
import yaml

from whalecopy.config.schema import EngineConfig
from whalecopy.models.market import MarketSnapshot, OutcomeToken
from whalecopy.models.signal import Side, TradeSignal

NOW = 1_760_000_000
WALLET = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def default_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "policy": {"max_trade_age_s": 30},
        "breaker": {"threshold_usd": 5.0},
        "execution": {"mode": "dry-run"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


def make_signal(**overrides) -> TradeSignal:
    fields = {
        "condition_id": "0xcond",
        "title": "Will it rain in NYC?",
        "outcome": "Yes",
        "side": Side.BUY,
        "size": 100.0,
        "price": 0.50,
        "timestamp": NOW,
        "transaction_hash": "0xabc123",
        "wallet_label": "whale-1",
    }
    fields.update(overrides)
    return TradeSignal(**fields)


def make_snapshot(**overrides) -> MarketSnapshot:
    fields = {
        "condition_id": "0xcond",
        "accepting_orders": True,
        "tick_size": 0.01,
        "tick_size_str": "0.01",
        "minimum_order_size": 5.0,
        "neg_risk": False,
        "tokens": [
            OutcomeToken(token_id="tok-yes", outcome="Yes", price=0.50),
            OutcomeToken(token_id="tok-no", outcome="No", price=0.50),
        ],
    }
    fields.update(overrides)
    return MarketSnapshot(**fields)


@pytest.fixture
def signal() -> TradeSignal:
    return make_signal()


@pytest.fixture
def snapshot() -> MarketSnapshot:
    return make_snapshot()


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def signal_factory():
    """Build a TradeSignal with keyword overrides."""
    return make_signal


@pytest.fixture
def snapshot_factory():
    """Build a MarketSnapshot with keyword overrides."""
    return make_snapshot
