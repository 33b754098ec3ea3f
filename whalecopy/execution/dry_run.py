"""Dry-run execution adapter: logs intent, returns a simulated placement."""

import hashlib
import logging

from whalecopy.models.common import utc_now_iso
from whalecopy.models.execution import OrderIntent, OrderResult

logger = logging.getLogger(__name__)


class DryRunAdapter:
    async def submit(self, intent: OrderIntent) -> OrderResult:
        """Simulate placement: no order leaves the process."""
        logger.info(
            "DRY-RUN: %s %.2f@%.4f token=%s tick=%s negRisk=%s",
            intent.side,
            intent.size,
            intent.price,
            intent.token_id,
            intent.tick_size,
            intent.neg_risk,
        )
        raw = f"{intent.token_id}|{intent.side}|{intent.price:.4f}|{intent.size:.2f}|{utc_now_iso()}"
        order_id = "dry-run-" + hashlib.sha256(raw.encode()).hexdigest()[:16]
        return OrderResult(
            success=True,
            order_id=order_id,
            error_message="",
            executed_at=utc_now_iso(),
        )
