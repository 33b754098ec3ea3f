"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field


class ExecutionMode(StrEnum):
    DRY_RUN = "dry-run"
    LIVE = "live"


class PolicyConfig(BaseModel):
    model_config = {"extra": "forbid"}

    max_trade_age_s: int = Field(default=60, ge=1)
    midpoint_floor: float = Field(default=0.03, ge=0.0, le=1.0)
    midpoint_ceiling: float = Field(default=0.97, ge=0.0, le=1.0)
    max_price_drift: float = Field(default=0.20, gt=0.0)
    max_order_price: float = Field(default=0.99, gt=0.0, lt=1.0)
    min_order_usd: float = Field(default=1.0, ge=0.0)


class BreakerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    threshold_usd: float = Field(default=2.0, ge=0.0)
    balance_poll_s: float = Field(default=30.0, gt=0.0)
    recovery_poll_s: float = Field(default=60.0, gt=0.0)


class ExchangeConfig(BaseModel):
    model_config = {"extra": "forbid"}

    clob_host: str = "https://clob.polymarket.com"
    chain_id: int = 137  # Polygon


class ChainConfig(BaseModel):
    model_config = {"extra": "forbid"}

    rpc_urls: list[str] = [
        "https://polygon-bor-rpc.publicnode.com",
        "https://polygon.drpc.org",
    ]
    usdc_address: str = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"  # USDC.e
    usdc_decimals: int = Field(default=6, ge=0)
    timeout_s: float = Field(default=10.0, gt=0.0)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=8765, ge=1, le=65535)
    activity_log_size: int = Field(default=500, ge=1)
    observer_queue_size: int = Field(default=1000, ge=1)


class ExecutionConfig(BaseModel):
    model_config = {"extra": "forbid"}

    mode: ExecutionMode = ExecutionMode.LIVE


class DefaultsConfig(BaseModel):
    """Copy parameters used when a message omits or zeroes a field."""

    model_config = {"extra": "forbid"}

    multiplier: float = Field(default=0.5, ge=0.01, le=10.0)
    max_single_trade: float = Field(default=1.0, ge=0.5, le=10_000.0)
    price_improvement_pct: float = Field(default=0.02, ge=0.0, le=0.10)


class EngineConfig(BaseModel):
    model_config = {"extra": "forbid"}

    policy: PolicyConfig = PolicyConfig()
    breaker: BreakerConfig = BreakerConfig()
    exchange: ExchangeConfig = ExchangeConfig()
    chain: ChainConfig = ChainConfig()
    server: ServerConfig = ServerConfig()
    execution: ExecutionConfig = ExecutionConfig()
    defaults: DefaultsConfig = DefaultsConfig()
