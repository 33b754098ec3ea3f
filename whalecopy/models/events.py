"""Outbound lifecycle, balance and engine events."""

from dataclasses import dataclass
from enum import StrEnum

from whalecopy.models.common import unix_now
from whalecopy.models.execution import OrderStatus
from whalecopy.models.signal import TradeSignal


class EngineStatus(StrEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"


@dataclass(frozen=True)
class StatusEvent:
    status: OrderStatus
    message: str
    signal: TradeSignal
    order_id: str | None = None
    reason: str | None = None
    error: str | None = None
    timestamp: int = 0

    def to_message(self) -> dict:
        msg = {
            "type": "status",
            "orderId": self.order_id,
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp or unix_now(),
            "walletLabel": self.signal.wallet_label,
            "trade": self.signal.to_message(),
        }
        if self.reason is not None:
            msg["reason"] = self.reason
        if self.error is not None:
            msg["error"] = self.error
        return msg


@dataclass(frozen=True)
class BalanceEvent:
    usdce: float
    timestamp: int = 0

    def to_message(self) -> dict:
        return {
            "type": "balance",
            "usdce": self.usdce,
            "timestamp": self.timestamp or unix_now(),
        }


@dataclass(frozen=True)
class EngineEvent:
    status: EngineStatus
    message: str

    def to_message(self) -> dict:
        return {"type": "engine", "status": self.status.value, "message": self.message}
