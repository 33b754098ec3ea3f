"""Market open check: the market must be accepting orders."""

from whalecopy.models.execution import Skipped, SkipReason
from whalecopy.models.market import MarketSnapshot


def check(snapshot: MarketSnapshot) -> Skipped | None:
    if not snapshot.accepting_orders:
        return Skipped(SkipReason.MARKET_CLOSED, "market not accepting orders")
    return None
