"""Single-task balance poller with NORMAL, RECOVERY and STOPPED modes.

One asyncio task exists at a time, so normal and recovery polling can never
overlap. The mode only sets the cadence. The tick callback decides what a
sampled balance means.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

logger = logging.getLogger(__name__)


class PollerMode(StrEnum):
    NORMAL = "normal"
    RECOVERY = "recovery"
    STOPPED = "stopped"


class BalancePoller:
    def __init__(
        self,
        tick: Callable[[], Awaitable[None]],
        normal_interval_s: float = 30.0,
        recovery_interval_s: float = 60.0,
    ):
        self._tick = tick
        self.intervals = {
            PollerMode.NORMAL: normal_interval_s,
            PollerMode.RECOVERY: recovery_interval_s,
        }
        self.mode = PollerMode.STOPPED
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def switch(self, mode: PollerMode) -> None:
        """Move to `mode`, restarting the timer with the new cadence.

        When called from inside a tick the running loop picks up the new
        cadence on its next sleep instead of being cancelled mid-tick.
        """
        if mode == self.mode and (self.running or mode == PollerMode.STOPPED):
            return
        logger.debug("Balance poller %s -> %s", self.mode, mode)
        self.mode = mode
        in_tick = self._task is not None and asyncio.current_task() is self._task
        if in_tick:
            return
        self._cancel()
        if mode != PollerMode.STOPPED:
            self._task = asyncio.create_task(self._run(), name="balance-poller")

    def stop(self) -> None:
        self.switch(PollerMode.STOPPED)

    async def aclose(self) -> None:
        """Stop and wait for the task to finish."""
        task = self._task
        self.stop()
        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while self.mode != PollerMode.STOPPED:
            await asyncio.sleep(self.intervals[self.mode])
            if self.mode == PollerMode.STOPPED:
                break
            try:
                await self._tick()
            except Exception:
                logger.exception("Balance poll tick failed")
