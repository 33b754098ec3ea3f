"""Balance-driven circuit breaker: ACTIVE executes orders, PAUSED skips every signal."""

import logging
from dataclasses import dataclass

from whalecopy.models.events import EngineStatus

logger = logging.getLogger(__name__)

UNKNOWN_BALANCE = -1.0


def is_balance_error(error_text: str) -> bool:
    """Best-effort match for exchange errors caused by missing funds.

    The exchange has no structured error code for this, so unrelated errors that
    mention "balance" also trip the breaker.
    """
    text = error_text.lower()
    return "balance" in text or "insufficient" in text


@dataclass(frozen=True)
class Transition:
    status: EngineStatus
    balance: float


class CircuitBreaker:
    def __init__(self, threshold_usd: float = 2.0):
        self.threshold_usd = threshold_usd
        self.status = EngineStatus.ACTIVE
        self.last_balance = UNKNOWN_BALANCE

    @property
    def is_paused(self) -> bool:
        return self.status == EngineStatus.PAUSED

    @property
    def balance_known(self) -> bool:
        return self.last_balance >= 0

    def observe_balance(self, balance: float) -> Transition | None:
        """Record a sampled balance and return the state change it causes, if any."""
        self.last_balance = balance
        if not self.is_paused and balance < self.threshold_usd:
            return self.trip(f"balance ${balance:.2f} below ${self.threshold_usd:.2f}")
        if self.is_paused and balance >= self.threshold_usd:
            self.status = EngineStatus.ACTIVE
            logger.info("Balance recovered to $%.2f, resuming engine", balance)
            return Transition(EngineStatus.ACTIVE, balance)
        return None

    def trip(self, cause: str) -> Transition | None:
        """Pause the engine. Tripping an already paused breaker is a no-op."""
        if self.is_paused:
            return None
        self.status = EngineStatus.PAUSED
        logger.warning("Circuit breaker activated (%s), pausing copy-trade engine", cause)
        return Transition(EngineStatus.PAUSED, self.last_balance)

    def status_message(self) -> str:
        if self.is_paused:
            return "Copy-trade engine paused (insufficient balance)"
        return "Copy-trade engine running"
