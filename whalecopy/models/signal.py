"""Trade signal and per-wallet copy configuration models."""

import math
from dataclasses import dataclass
from enum import StrEnum


class Side(StrEnum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class TradeSignal:
    condition_id: str
    title: str
    outcome: str
    side: Side
    size: float  # shares
    price: float  # 0-1 probability
    timestamp: int  # unix seconds
    transaction_hash: str
    wallet_label: str

    @property
    def label(self) -> str:
        return f"[{self.wallet_label}] {self.title} {self.outcome}"

    def to_message(self) -> dict:
        return {
            "conditionId": self.condition_id,
            "title": self.title,
            "outcome": self.outcome,
            "side": self.side.value,
            "size": self.size,
            "price": self.price,
            "timestamp": self.timestamp,
            "transactionHash": self.transaction_hash,
            "walletLabel": self.wallet_label,
        }


DEFAULT_MULTIPLIER = 0.5
DEFAULT_MAX_SINGLE_TRADE = 1.0
DEFAULT_PRICE_IMPROVEMENT_PCT = 0.02


def _clamp(value: float | None, low: float, high: float, default: float) -> float:
    # Missing, zero and non-finite values fall back to the default before clamping
    if value is None or not math.isfinite(value) or value == 0:
        value = default
    return max(low, min(high, value))


@dataclass(frozen=True)
class CopyTradeConfig:
    multiplier: float = DEFAULT_MULTIPLIER
    max_single_trade: float = DEFAULT_MAX_SINGLE_TRADE  # USD per replica order
    price_improvement_pct: float = DEFAULT_PRICE_IMPROVEMENT_PCT

    @classmethod
    def clamped(
        cls,
        multiplier: float | None = None,
        max_single_trade: float | None = None,
        price_improvement_pct: float | None = None,
        defaults: "CopyTradeConfig | None" = None,
    ) -> "CopyTradeConfig":
        """Build a config from untrusted values, clamping each into its safe range."""
        d = defaults or cls()
        return cls(
            multiplier=_clamp(multiplier, 0.01, 10.0, d.multiplier),
            max_single_trade=_clamp(max_single_trade, 0.5, 10_000.0, d.max_single_trade),
            price_improvement_pct=_clamp(
                price_improvement_pct, 0.0, 0.10, d.price_improvement_pct
            ),
        )
