"""Price drift check: skips when the market moved away from the whale's price."""

from whalecopy.models.execution import Skipped, SkipReason


def check(midpoint: float, whale_price: float, max_drift: float) -> Skipped | None:
    drift = abs(midpoint - whale_price) / whale_price
    if drift > max_drift:
        return Skipped(
            SkipReason.PRICE_DRIFT,
            f"price drifted {drift * 100:.1f}% (mid={midpoint}, whale={whale_price})",
        )
    return None
