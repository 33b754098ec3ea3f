"""Exchange-side market state captured at decision time."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutcomeToken:
    token_id: str
    outcome: str
    price: float


@dataclass(frozen=True)
class MarketSnapshot:
    condition_id: str
    accepting_orders: bool
    tick_size: float
    tick_size_str: str  # exchange string form, e.g. "0.01", needed for signing
    minimum_order_size: float
    neg_risk: bool
    tokens: list[OutcomeToken] = field(default_factory=list)

    def find_token(self, outcome: str) -> OutcomeToken | None:
        wanted = outcome.lower()
        for token in self.tokens:
            if token.outcome.lower() == wanted:
                return token
        return None
