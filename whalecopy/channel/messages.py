"""Inbound signal message contract.

Anything that does not parse into a copy_trade message is transport noise:
it is logged at WARNING and dropped without a reply.
"""

import json
import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from whalecopy.models.signal import CopyTradeConfig, Side, TradeSignal

logger = logging.getLogger(__name__)

COPY_TRADE = "copy_trade"


class TradePayload(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}

    condition_id: str = Field(alias="conditionId", min_length=1)
    title: str = ""
    outcome: str = Field(min_length=1)
    side: Side
    size: float = Field(gt=0, allow_inf_nan=False)
    price: float = Field(gt=0, allow_inf_nan=False)
    timestamp: float = Field(default=0, allow_inf_nan=False)
    transaction_hash: str = Field(default="", alias="transactionHash")
    wallet_label: str = Field(default="", alias="walletLabel")

    @field_validator("side", mode="before")
    @classmethod
    def _upper_side(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    def to_signal(self) -> TradeSignal:
        return TradeSignal(
            condition_id=self.condition_id,
            title=self.title,
            outcome=self.outcome,
            side=self.side,
            size=self.size,
            price=self.price,
            timestamp=int(self.timestamp),
            transaction_hash=self.transaction_hash,
            wallet_label=self.wallet_label,
        )


class ConfigPayload(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}

    multiplier: float | None = None
    max_single_trade: float | None = Field(default=None, alias="maxSingleTrade")
    price_improvement_pct: float | None = Field(default=None, alias="priceImprovementPct")


class CopyTradeMessage(BaseModel):
    model_config = {"extra": "ignore"}

    type: Literal["copy_trade"]
    trade: TradePayload
    config: ConfigPayload


def parse_message(
    raw: str | bytes, defaults: CopyTradeConfig | None = None
) -> tuple[TradeSignal, CopyTradeConfig] | None:
    """Parse one inbound frame. Returns None when the frame must be dropped."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = raw if isinstance(raw, str) else repr(raw)
        logger.warning("Invalid JSON received: %s", text[:200])
        return None

    if not isinstance(data, dict):
        logger.warning("Ignoring non-object message")
        return None
    if data.get("type") != COPY_TRADE:
        logger.warning("Unknown message type: %s", data.get("type"))
        return None
    if not data.get("trade") or not data.get("config"):
        logger.warning("Message missing trade or config")
        return None

    try:
        msg = CopyTradeMessage.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid trade data received: %d errors", e.error_count())
        return None

    config = CopyTradeConfig.clamped(
        multiplier=msg.config.multiplier,
        max_single_trade=msg.config.max_single_trade,
        price_improvement_pct=msg.config.price_improvement_pct,
        defaults=defaults,
    )
    return msg.trade.to_signal(), config
