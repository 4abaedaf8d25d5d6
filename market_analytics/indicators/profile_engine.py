"""Profile key levels: POC, value area (VAH/VAL) and high/low volume nodes.

Value area expansion here is *ranked*, not adjacent-pair:

- Start at the POC bin.
- Visit every other bin ordered by volume (desc), then by index distance from
  the POC (asc). Volumes within ``VOLUME_TIE_TOLERANCE`` rank as equal.
- Add volumes until the running total reaches ``value_area_pct`` of the total.
- VAL/VAH are the lowest/highest bin indices touched on each side of the POC.

Because only the extremal index per side is tracked, a heavy bin far from the
POC can stretch VAH/VAL over untouched light bins in between: the reported
band is not guaranteed to be contiguous.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Sequence

from .price_bins import PriceBin

VOLUME_TIE_TOLERANCE = 0.01


def _as_fraction(value_area_pct: float | None) -> float:
    """Normalize value_area_pct to a 0-1 fraction."""
    if value_area_pct is None:
        return 0.7
    pct = float(value_area_pct)
    return pct / 100.0 if pct > 1 else pct


@dataclass(frozen=True)
class ProfileLevels:
    poc_index: int
    val_index: int
    vah_index: int
    poc: float
    vah: float
    val: float
    hvn: list[PriceBin]
    lvn: list[PriceBin]
    profile: list[PriceBin]
    total_volume: float
    value_area_volume: float


class ValueAreaCalculator:
    """POC and ranked value-area expansion over an ordered bin volume list."""

    @staticmethod
    def poc_index(volumes: Sequence[float]) -> int:
        """Index of the strictly greatest volume; the first bin wins ties."""
        max_volume = 0.0
        index = 0
        for i, v in enumerate(volumes):
            if v > max_volume:
                max_volume = v
                index = i
        return index

    @staticmethod
    def expansion_order(volumes: Sequence[float], poc_index: int) -> list[int]:
        """Bin indices in the order the value area absorbs them (POC included)."""

        def _compare(a: int, b: int) -> int:
            diff = volumes[b] - volumes[a]
            if abs(diff) > VOLUME_TIE_TOLERANCE:
                return -1 if diff < 0 else 1
            return abs(a - poc_index) - abs(b - poc_index)

        return sorted(range(len(volumes)), key=cmp_to_key(_compare))

    @classmethod
    def compute(
        cls,
        volumes: Sequence[float],
        value_area_pct: float = 70.0,
    ) -> tuple[int, int, int, float]:
        """Return ``(poc_index, val_index, vah_index, accumulated_volume)``."""
        if not volumes:
            raise ValueError("volumes must not be empty")

        fraction = _as_fraction(value_area_pct)
        total = float(sum(volumes))
        target = total * fraction

        poc = cls.poc_index(volumes)
        accumulated = float(volumes[poc])
        val_idx = vah_idx = poc

        for idx in cls.expansion_order(volumes, poc):
            if accumulated >= target:
                break
            if idx == poc:
                continue
            accumulated += volumes[idx]
            if idx < poc and idx < val_idx:
                val_idx = idx
            elif idx > poc and idx > vah_idx:
                vah_idx = idx

        # Nothing absorbed on a side: fall back to the profile edge.
        last = len(volumes) - 1
        if val_idx == poc and poc > 0:
            val_idx = 0
        if vah_idx == poc and poc < last:
            vah_idx = last

        return poc, val_idx, vah_idx, accumulated


class ProfileAggregator:
    """Derive POC/VAH/VAL and HVN/LVN from a populated bin list."""

    def __init__(
        self,
        *,
        value_area_pct: float = 70.0,
        hvn_multiplier: float = 1.5,
        lvn_multiplier: float = 0.5,
        node_limit: int = 5,
    ):
        self.value_area_pct = _as_fraction(value_area_pct)
        self.hvn_multiplier = float(hvn_multiplier)
        self.lvn_multiplier = float(lvn_multiplier)
        self.node_limit = int(node_limit)

    def high_volume_nodes(self, bins: Sequence[PriceBin], total_volume: float) -> list[PriceBin]:
        threshold = (total_volume / len(bins)) * self.hvn_multiplier
        nodes = [b for b in bins if b.volume > threshold]
        nodes.sort(key=lambda b: b.volume, reverse=True)
        return nodes[: self.node_limit]

    def low_volume_nodes(self, bins: Sequence[PriceBin], total_volume: float) -> list[PriceBin]:
        threshold = (total_volume / len(bins)) * self.lvn_multiplier
        nodes = [b for b in bins if 0 < b.volume < threshold]
        nodes.sort(key=lambda b: b.volume)
        return nodes[: self.node_limit]

    def aggregate(self, bins: Sequence[PriceBin]) -> ProfileLevels:
        if not bins:
            raise ValueError("cannot aggregate an empty bin list")

        volumes = [b.volume for b in bins]
        total_volume = float(sum(volumes))
        poc_idx, val_idx, vah_idx, accumulated = ValueAreaCalculator.compute(volumes, self.value_area_pct)

        return ProfileLevels(
            poc_index=poc_idx,
            val_index=val_idx,
            vah_index=vah_idx,
            poc=bins[poc_idx].price,
            vah=bins[vah_idx].price,
            val=bins[val_idx].price,
            hvn=self.high_volume_nodes(bins, total_volume),
            lvn=self.low_volume_nodes(bins, total_volume),
            profile=[b for b in bins if b.volume > 0],
            total_volume=total_volume,
            value_area_volume=accumulated,
        )


__all__ = ["ProfileAggregator", "ProfileLevels", "ValueAreaCalculator", "VOLUME_TIE_TOLERANCE"]
