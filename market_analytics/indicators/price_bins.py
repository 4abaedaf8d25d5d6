"""Fixed-width price binning over a candle window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from market_analytics.types import Candle

DEFAULT_BIN_COUNT = 50


@dataclass(frozen=True)
class PriceBin:
    """One price level of a profile. ``price`` is the bin midpoint, not an edge."""

    price: float
    volume: float

    def to_dict(self) -> dict[str, Any]:
        return {"price": self.price, "volume": self.volume}


@dataclass(frozen=True)
class BinGrid:
    min_price: float
    max_price: float
    width: float
    prices: tuple[float, ...]

    @property
    def count(self) -> int:
        return len(self.prices)


class PriceBinner:
    """Partition ``[min(low), max(high)]`` of a candle window into equal-width bins."""

    def __init__(self, bin_count: int = DEFAULT_BIN_COUNT):
        if bin_count < 1:
            raise ValueError("bin_count must be >= 1")
        self.bin_count = int(bin_count)

    def build(self, candles: Sequence[Candle]) -> BinGrid | None:
        """Return the bin grid, or None when the window has no positive price range."""
        if not candles:
            return None

        min_price = min(c.low for c in candles)
        max_price = max(c.high for c in candles)
        price_range = max_price - min_price
        if price_range <= 0:
            return None

        width = price_range / self.bin_count
        prices = tuple(min_price + i * width + width / 2 for i in range(self.bin_count))
        return BinGrid(min_price=min_price, max_price=max_price, width=width, prices=prices)
