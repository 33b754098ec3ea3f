"""Copy-trade engine: runs each signal through the gates, sizes and places the replica.

Signals are processed concurrently with no queue and no per-market lock. Two
signals for the same market can both pass the gates and both place orders.
A pipeline that already passed the circuit-breaker check still completes its
exchange call if the breaker trips meanwhile.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from whalecopy.channel.broadcaster import Broadcaster
from whalecopy.config.schema import EngineConfig, ExecutionMode
from whalecopy.ingest.balance_oracle import BalanceFetchError, BalanceOracle
from whalecopy.ingest.clob_client import (
    ExchangeError,
    MarketSnapshotFetcher,
    MidpointFetchError,
    SnapshotFetchError,
)
from whalecopy.models.common import unix_now
from whalecopy.models.events import BalanceEvent, EngineEvent, EngineStatus, StatusEvent
from whalecopy.models.execution import (
    Accepted,
    FailCode,
    Failed,
    OrderIntent,
    OrderResult,
    OrderStatus,
    Skipped,
    SkipReason,
)
from whalecopy.models.signal import CopyTradeConfig, TradeSignal
from whalecopy.policy.engine import check_market, check_price, check_signal
from whalecopy.policy.sizing import size_order
from whalecopy.reporting.activity_log import ActivityLog
from whalecopy.risk.balance_poller import BalancePoller, PollerMode
from whalecopy.risk.circuit_breaker import CircuitBreaker, Transition, is_balance_error

logger = logging.getLogger(__name__)

DRAIN_TIMEOUT_S = 10.0


class OrderAdapter(Protocol):
    async def submit(self, intent: OrderIntent) -> OrderResult: ...


class CopyTradeEngine:
    def __init__(
        self,
        config: EngineConfig,
        fetcher: MarketSnapshotFetcher | None = None,
        adapter: OrderAdapter | None = None,
        oracle: BalanceOracle | None = None,
        wallet_address: str = "",
        broadcaster: Broadcaster | None = None,
        clock: Callable[[], int] = unix_now,
    ):
        self.config = config
        self.policy = config.policy
        self.fetcher = fetcher
        self.adapter = adapter
        self.oracle = oracle
        self.wallet_address = wallet_address
        self.broadcaster = broadcaster or Broadcaster(config.server.observer_queue_size)
        self.clock = clock
        self.defaults = CopyTradeConfig(
            multiplier=config.defaults.multiplier,
            max_single_trade=config.defaults.max_single_trade,
            price_improvement_pct=config.defaults.price_improvement_pct,
        )
        self.breaker = CircuitBreaker(config.breaker.threshold_usd)
        self.poller = BalancePoller(
            self.poll_balance,
            normal_interval_s=config.breaker.balance_poll_s,
            recovery_interval_s=config.breaker.recovery_poll_s,
        )
        self.activity = ActivityLog(config.server.activity_log_size)
        self._tasks: set[asyncio.Task] = set()

    @property
    def can_execute(self) -> bool:
        return self.fetcher is not None and self.adapter is not None

    @property
    def dry_run(self) -> bool:
        return self.config.execution.mode == ExecutionMode.DRY_RUN

    # --- Lifecycle ---

    async def start(self) -> None:
        """Sample the starting balance, arm the poller and announce engine state."""
        if self.wallet_address and self.oracle is not None:
            try:
                balance = await self.oracle.get_balance(self.wallet_address)
            except (BalanceFetchError, ValueError) as e:
                logger.warning("Initial balance fetch failed: %s", e)
                self.poller.switch(PollerMode.NORMAL)
            else:
                logger.info("USDC.e balance: $%.2f", balance)
                self.publish(BalanceEvent(balance, self.clock()))
                transition = self.breaker.observe_balance(balance)
                if transition is not None:
                    self._apply(transition)
                else:
                    self.poller.switch(PollerMode.NORMAL)
        self.publish(self.engine_event())

    async def stop(self) -> None:
        logger.info("Shutting down copy-trade engine...")
        await self.poller.aclose()
        if self._tasks:
            logger.info("Waiting for %d in-flight signals", len(self._tasks))
            _, pending = await asyncio.wait(set(self._tasks), timeout=DRAIN_TIMEOUT_S)
            if pending:
                logger.warning(
                    "Cancelling %d signals still running after %.0fs",
                    len(pending),
                    DRAIN_TIMEOUT_S,
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)

    # --- Events ---

    def publish(self, event: StatusEvent | BalanceEvent | EngineEvent) -> None:
        message = event.to_message()
        if isinstance(event, StatusEvent):
            self.activity.record(message)
        self.broadcaster.publish(message)

    def engine_event(self) -> EngineEvent:
        return EngineEvent(self.breaker.status, self.breaker.status_message())

    def snapshot_messages(self) -> list[dict]:
        """State a newly connected observer should see before live events."""
        messages = [self.engine_event().to_message()]
        if self.breaker.balance_known:
            messages.append(BalanceEvent(self.breaker.last_balance, self.clock()).to_message())
        return messages

    def status_summary(self) -> dict:
        return {
            "engine": self.breaker.status.value,
            "execution_enabled": self.can_execute,
            "mode": self.config.execution.mode.value,
            "wallet_address": self.wallet_address,
            "balance_usdce": self.breaker.last_balance if self.breaker.balance_known else None,
            "poller": self.poller.mode.value,
            "observers": len(self.broadcaster),
            "in_flight": len(self._tasks),
        }

    # --- Circuit breaker ---

    async def poll_balance(self) -> None:
        """One poller tick. A failed read is not evidence of low balance."""
        if not self.wallet_address or self.oracle is None:
            return
        try:
            balance = await self.oracle.get_balance(self.wallet_address)
        except (BalanceFetchError, ValueError) as e:
            logger.warning("Balance fetch failed: %s", e)
            return
        self.publish(BalanceEvent(balance, self.clock()))
        transition = self.breaker.observe_balance(balance)
        if transition is not None:
            self._apply(transition)

    def _apply(self, transition: Transition) -> None:
        if transition.status == EngineStatus.PAUSED:
            if self.wallet_address and self.oracle is not None:
                self.poller.switch(PollerMode.RECOVERY)
            else:
                self.poller.stop()
            recovery_s = int(self.config.breaker.recovery_poll_s)
            message = (
                f"Insufficient balance ({_fmt_balance(transition.balance)}), "
                f"checking every {recovery_s}s"
            )
        else:
            self.poller.switch(PollerMode.NORMAL)
            message = f"Copy-trade engine resumed (balance: {_fmt_balance(transition.balance)})"
        self.publish(EngineEvent(transition.status, message))

    def _check_balance_error(self, error: str) -> None:
        if is_balance_error(error):
            transition = self.breaker.trip(f"order error: {error}")
            if transition is not None:
                self._apply(transition)

    # --- Signal pipeline ---

    def on_signal(self, signal: TradeSignal, config: CopyTradeConfig) -> asyncio.Task:
        """Schedule a signal and return at once. The caller never waits on it."""
        task = asyncio.create_task(
            self.process_signal(signal, config),
            name=f"copy-trade-{signal.transaction_hash[:12]}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def process_signal(
        self, signal: TradeSignal, config: CopyTradeConfig
    ) -> StatusEvent:
        """Run one signal to its terminal event. Never raises.

        The copy config is clamped again here, so callers other than the
        message parser cannot push it outside its safe ranges.
        """
        try:
            config = CopyTradeConfig.clamped(
                multiplier=config.multiplier,
                max_single_trade=config.max_single_trade,
                price_improvement_pct=config.price_improvement_pct,
                defaults=self.defaults,
            )
            return await self._run(signal, config)
        except Exception as e:
            logger.exception("Unhandled error in copy-trade pipeline: %s", signal.label)
            return self._fail(signal, Failed(str(e), "unexpected error"))

    async def _run(self, signal: TradeSignal, config: CopyTradeConfig) -> StatusEvent:
        label = signal.label
        self._emit(
            signal,
            OrderStatus.DETECTED,
            f"{label}: {signal.side.value} {signal.size}@{signal.price}",
        )
        logger.info(
            "Trade detected: %s %s %s@%s", label, signal.side.value, signal.size, signal.price
        )

        if self.breaker.is_paused:
            return self._skip(
                signal, Skipped(SkipReason.CIRCUIT_BREAKER, "engine paused (circuit breaker)")
            )

        self._emit(signal, OrderStatus.VALIDATING, f"{label}: checking trade validity")

        skipped = check_signal(signal, self.clock(), self.policy)
        if skipped is not None:
            return self._skip(signal, skipped)

        if self.fetcher is None:
            return self._fail(signal, Failed(FailCode.NO_CLIENT, "CLOB client not initialized"))

        try:
            snapshot = await self.fetcher.fetch(signal.condition_id)
        except SnapshotFetchError as e:
            return self._fail(signal, Failed(str(e), "could not fetch market"))

        result = check_market(signal, snapshot)
        if isinstance(result, Skipped):
            return self._skip(signal, result)
        if isinstance(result, Failed):
            return self._fail(signal, result)

        token = snapshot.find_token(signal.outcome)
        try:
            mid = await self.fetcher.midpoint(token.token_id)
        except MidpointFetchError as e:
            return self._fail(signal, Failed(str(e), "could not fetch midpoint"))

        skipped = check_price(signal, mid, self.policy)
        if skipped is not None:
            return self._skip(signal, skipped)

        decision = size_order(signal, config, snapshot, self.policy)
        if isinstance(decision, Skipped):
            return self._skip(signal, decision)

        return await self._place(signal, decision, snapshot.tick_size_str, snapshot.neg_risk)

    async def _place(
        self, signal: TradeSignal, order: Accepted, tick_size: str, neg_risk: bool
    ) -> StatusEvent:
        label = signal.label
        if self.adapter is None:
            return self._fail(signal, Failed(FailCode.NO_CLIENT, "order client not initialized"))

        intent = OrderIntent(
            token_id=order.token_id,
            price=order.price,
            size=order.size,
            side="BUY",
            tick_size=tick_size,
            neg_risk=neg_risk,
        )
        self._emit(
            signal,
            OrderStatus.PLACING,
            f"{label}: BUY {order.size}@{order.price} (whale: {signal.size}@{signal.price})",
        )

        try:
            result = await self.adapter.submit(intent)
        except ExchangeError as e:
            error = str(e)
            event = self._fail(signal, Failed(error, f"order error: {error}"))
            self._check_balance_error(error)
            return event

        if not result.success:
            event = self._fail(
                signal, Failed(result.error_message, f"order rejected: {result.error_message}")
            )
            self._check_balance_error(result.error_message)
            return event

        suffix = " (DRY-RUN)" if self.dry_run else ""
        logger.info("Order placed successfully: %s%s", result.order_id or "no-id", suffix)
        return self._emit(
            signal,
            OrderStatus.FILLED,
            f"{label}: order placed: {order.size}@{order.price}{suffix}",
            order_id=result.order_id,
        )

    def _emit(
        self,
        signal: TradeSignal,
        status: OrderStatus,
        message: str,
        order_id: str | None = None,
        reason: str | None = None,
        error: str | None = None,
    ) -> StatusEvent:
        event = StatusEvent(
            status=status,
            message=message,
            signal=signal,
            order_id=order_id,
            reason=reason,
            error=error,
            timestamp=self.clock(),
        )
        self.publish(event)
        return event

    def _skip(self, signal: TradeSignal, skipped: Skipped) -> StatusEvent:
        level = logging.WARNING if skipped.reason == SkipReason.ZERO_ORDER else logging.INFO
        logger.log(level, "Skipped (%s): %s: %s", skipped.reason.value, signal.label, skipped.detail)
        return self._emit(
            signal,
            OrderStatus.SKIPPED,
            f"{signal.label}: {skipped.detail}",
            reason=skipped.reason.value,
        )

    def _fail(self, signal: TradeSignal, failed: Failed) -> StatusEvent:
        logger.error("Failed: %s: %s (%s)", signal.label, failed.detail, failed.error)
        return self._emit(
            signal,
            OrderStatus.FAILED,
            f"{signal.label}: {failed.detail}",
            error=str(failed.error),
        )


def _fmt_balance(balance: float) -> str:
    return f"${balance:.2f}" if balance >= 0 else "unknown"
