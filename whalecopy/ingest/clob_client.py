"""Market snapshot fetcher over the Polymarket CLOB client."""

import asyncio
import logging
import math
from typing import Any

from whalecopy.models.market import MarketSnapshot, OutcomeToken

logger = logging.getLogger(__name__)

DEFAULT_TICK_SIZE = "0.01"


class ExchangeError(Exception):
    """Base class for failed exchange calls."""


class SnapshotFetchError(ExchangeError):
    """Raised when market metadata could not be fetched or parsed."""


class MidpointFetchError(ExchangeError):
    """Raised when the midpoint could not be fetched or parsed."""


def parse_market(condition_id: str, market: dict[str, Any]) -> MarketSnapshot:
    """Build a MarketSnapshot from a CLOB `/markets/{condition_id}` payload."""
    tick_raw = market.get("minimum_tick_size")
    tick_str = str(tick_raw) if tick_raw not in (None, "") else DEFAULT_TICK_SIZE
    tokens = [
        OutcomeToken(
            token_id=str(t.get("token_id", "")),
            outcome=str(t.get("outcome", "")),
            price=float(t.get("price") or 0.0),
        )
        for t in market.get("tokens") or []
    ]
    return MarketSnapshot(
        condition_id=condition_id,
        accepting_orders=bool(market.get("accepting_orders", False)),
        tick_size=float(tick_str),
        tick_size_str=tick_str,
        minimum_order_size=float(market.get("minimum_order_size") or 0.0),
        neg_risk=bool(market.get("neg_risk", False)),
        tokens=tokens,
    )


class MarketSnapshotFetcher:
    """Async view over the synchronous py_clob_client.

    Each call runs in a worker thread so that one slow request does not hold up
    other signals. Nothing is cached: market state can change every second.
    """

    def __init__(self, client: Any):
        self.client = client

    async def fetch(self, condition_id: str) -> MarketSnapshot:
        try:
            market = await asyncio.to_thread(self.client.get_market, condition_id)
        except Exception as e:
            logger.error("Market fetch failed for %s: %s", condition_id, e)
            raise SnapshotFetchError(str(e)) from e
        if not isinstance(market, dict):
            raise SnapshotFetchError(f"Unexpected market payload for {condition_id}")
        try:
            return parse_market(condition_id, market)
        except (TypeError, ValueError) as e:
            raise SnapshotFetchError(f"Malformed market {condition_id}: {e}") from e

    async def midpoint(self, token_id: str) -> float:
        try:
            resp = await asyncio.to_thread(self.client.get_midpoint, token_id)
        except Exception as e:
            logger.error("Midpoint fetch failed for %s: %s", token_id, e)
            raise MidpointFetchError(str(e)) from e
        raw = resp.get("mid") if isinstance(resp, dict) else resp
        try:
            mid = float(raw)
        except (TypeError, ValueError) as e:
            raise MidpointFetchError(f"Bad midpoint {raw!r} for {token_id}") from e
        if not math.isfinite(mid):
            raise MidpointFetchError(f"Bad midpoint {raw!r} for {token_id}")
        return mid
