"""Side check: only BUY trades are replicated."""

from whalecopy.models.execution import Skipped, SkipReason
from whalecopy.models.signal import Side, TradeSignal


def check(signal: TradeSignal) -> Skipped | None:
    if signal.side != Side.BUY:
        return Skipped(SkipReason.SELL_TRADE, "only BUY trades are copied")
    return None
