"""Spread each candle's volume over the price bins its range covers.

The allocation is proportional-overlap: every bin whose midpoint lies inside
``[low, high]`` receives ``volume * width / (high - low)``. The number of
bins that qualify is not used to renormalize, so the binned total generally
differs from the candles' total volume. Downstream thresholds (HVN/LVN
multipliers, value-area share, zone ratios) are calibrated on this scale.
"""

from __future__ import annotations

from typing import Sequence

from market_analytics.types import Candle
from .price_bins import BinGrid, PriceBin


class VolumeDistributor:
    """Allocate traded volume across a :class:`BinGrid`."""

    @staticmethod
    def accumulate(candles: Sequence[Candle], grid: BinGrid) -> list[float]:
        """Return per-bin accumulated volume, in bin order."""
        volumes = [0.0] * grid.count
        for candle in candles:
            high = candle.high
            low = candle.low
            volume = candle.volume or 0.0
            if high <= low or volume <= 0:
                continue

            share = volume * (grid.width / (high - low))
            for i, price in enumerate(grid.prices):
                if low <= price <= high:
                    volumes[i] += share
        return volumes

    @classmethod
    def distribute(cls, candles: Sequence[Candle], grid: BinGrid) -> list[PriceBin]:
        """Return a fresh list of populated bins (zero-volume bins included)."""
        volumes = cls.accumulate(candles, grid)
        return [PriceBin(price=p, volume=v) for p, v in zip(grid.prices, volumes)]
