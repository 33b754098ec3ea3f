"""Live execution adapter: signs and posts GTC limit orders through py_clob_client."""

import asyncio
import logging
from typing import Any

from py_clob_client.clob_types import OrderArgs, PartialCreateOrderOptions

from whalecopy.ingest.clob_client import ExchangeError
from whalecopy.models.common import utc_now_iso
from whalecopy.models.execution import OrderIntent, OrderResult

logger = logging.getLogger(__name__)


class OrderSubmissionError(ExchangeError):
    """Raised when the order call itself blew up (network, signing, HTTP error)."""


class LiveAdapter:
    def __init__(self, client: Any):
        self.client = client

    async def submit(self, intent: OrderIntent) -> OrderResult:
        logger.info(
            "LIVE: %s %.2f@%.4f token=%s tick=%s negRisk=%s",
            intent.side,
            intent.size,
            intent.price,
            intent.token_id,
            intent.tick_size,
            intent.neg_risk,
        )
        order_args = OrderArgs(
            token_id=intent.token_id,
            price=intent.price,
            size=intent.size,
            side=intent.side,
        )
        options = PartialCreateOrderOptions(
            tick_size=intent.tick_size, neg_risk=intent.neg_risk
        )
        try:
            resp = await asyncio.to_thread(
                self.client.create_and_post_order, order_args, options
            )
        except Exception as e:
            logger.error("LIVE FAILED: %s -> %s", intent.token_id, e)
            raise OrderSubmissionError(str(e)) from e

        resp = resp if isinstance(resp, dict) else {}
        if resp.get("success"):
            order_id = resp.get("orderID") or None
            logger.info("LIVE PLACED: %s", order_id or "no-id")
            return OrderResult(
                success=True,
                order_id=order_id,
                error_message="",
                executed_at=utc_now_iso(),
            )

        error = resp.get("errorMsg") or resp.get("status") or "unknown error"
        logger.warning("LIVE REJECTED: %s -> %s", intent.token_id, error)
        return OrderResult(
            success=False,
            order_id=None,
            error_message=str(error),
            executed_at=utc_now_iso(),
        )
