"""Outcome check: the traded outcome must exist in the market.

A miss here is a data-integrity failure, not a routine skip.
"""

from whalecopy.models.execution import FailCode, Failed
from whalecopy.models.market import MarketSnapshot
from whalecopy.models.signal import TradeSignal


def check(signal: TradeSignal, snapshot: MarketSnapshot) -> Failed | None:
    if snapshot.find_token(signal.outcome) is None:
        return Failed(
            FailCode.OUTCOME_NOT_FOUND,
            f'outcome "{signal.outcome}" not found in market',
        )
    return None
