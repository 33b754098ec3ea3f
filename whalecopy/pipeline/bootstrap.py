"""Wires config and secrets into a ready-to-start CopyTradeEngine."""

import asyncio
import logging

from whalecopy.config.loader import Secrets, config_hash
from whalecopy.config.schema import EngineConfig, ExecutionMode
from whalecopy.execution.credentials import (
    CredentialError,
    build_public_client,
    build_signing_client,
)
from whalecopy.execution.dry_run import DryRunAdapter
from whalecopy.execution.live_adapter import LiveAdapter
from whalecopy.ingest.balance_oracle import BalanceOracle
from whalecopy.ingest.clob_client import MarketSnapshotFetcher
from whalecopy.pipeline.copy_engine import CopyTradeEngine

logger = logging.getLogger(__name__)


def build_oracle(config: EngineConfig) -> BalanceOracle:
    return BalanceOracle(
        rpc_urls=config.chain.rpc_urls,
        token_address=config.chain.usdc_address,
        decimals=config.chain.usdc_decimals,
        timeout=config.chain.timeout_s,
    )


async def bootstrap(config: EngineConfig, secrets: Secrets) -> CopyTradeEngine:
    """Build the engine. Missing or bad credentials degrade it, never abort startup."""
    logger.info(
        "Copy-trade engine starting (mode=%s, config=%s)",
        config.execution.mode.value,
        config_hash(config),
    )
    oracle = build_oracle(config)

    if config.execution.mode == ExecutionMode.DRY_RUN:
        bundle = build_public_client(config.exchange, secrets)
        logger.info("DRY-RUN mode: orders are logged, not placed")
        return CopyTradeEngine(
            config,
            fetcher=MarketSnapshotFetcher(bundle.client),
            adapter=DryRunAdapter(),
            oracle=oracle,
            wallet_address=bundle.wallet_address,
        )

    if not secrets.private_key:
        logger.warning("PRIVATE_KEY not set, server will start but cannot place orders")
        return CopyTradeEngine(
            config, oracle=oracle, wallet_address=secrets.proxy_address
        )

    try:
        bundle = await asyncio.to_thread(build_signing_client, config.exchange, secrets)
    except CredentialError as e:
        logger.error("Failed to initialize CLOB client: %s", e)
        logger.warning("Server will start but cannot place orders")
        return CopyTradeEngine(
            config, oracle=oracle, wallet_address=secrets.proxy_address
        )

    return CopyTradeEngine(
        config,
        fetcher=MarketSnapshotFetcher(bundle.client),
        adapter=LiveAdapter(bundle.client),
        oracle=oracle,
        wallet_address=bundle.wallet_address,
    )
