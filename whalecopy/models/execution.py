"""Order lifecycle, policy decisions and order submission models."""

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias


class OrderStatus(StrEnum):
    DETECTED = "DETECTED"
    VALIDATING = "VALIDATING"
    PLACING = "PLACING"
    FILLED = "FILLED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class SkipReason(StrEnum):
    SELL_TRADE = "sell_trade"
    STALE = "stale"
    MARKET_CLOSED = "market_closed"
    RESOLVED = "resolved"
    PRICE_DRIFT = "price_drift"
    ZERO_ORDER = "zero_order"
    CIRCUIT_BREAKER = "circuit_breaker"


class FailCode(StrEnum):
    OUTCOME_NOT_FOUND = "outcome_not_found"
    NO_CLIENT = "no_client"


@dataclass(frozen=True)
class Accepted:
    price: float
    size: float
    token_id: str = ""


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason
    detail: str


@dataclass(frozen=True)
class Failed:
    error: str
    detail: str


Decision: TypeAlias = Accepted | Skipped | Failed


@dataclass(frozen=True)
class OrderIntent:
    token_id: str
    price: float
    size: float
    side: str  # "BUY"
    tick_size: str
    neg_risk: bool


@dataclass(frozen=True)
class OrderResult:
    success: bool
    order_id: str | None
    error_message: str
    executed_at: str
