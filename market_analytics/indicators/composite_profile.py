"""Composite Range Volume Profile with accumulation/distribution and balance zones.

The composite profile is a session profile built over a longer trailing
window (a week or a month of hourly candles), plus:

- Accumulation zone: more than 55% of the profile's volume sits below the
  current price (bullish positioning).
- Distribution zone: more than 55% sits above it (bearish positioning).
- Balance zones: runs of adjacent bins with similar volume, i.e. prices the
  market spent meaningful time at.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from market_analytics.config import Settings, get_settings
from market_analytics.types import Candle
from market_analytics.utils import Clock, get_logger, is_positive_price
from .price_bins import PriceBin
from .volume_profile import SessionProfileBuilder, VolumeProfile

# Trailing window length (candles) per time range
TIME_RANGE_WINDOWS = {
    "weekly": 168,
    "monthly": 720,
}

ZONE_RATIO_THRESHOLD = 0.55
BALANCE_GAP_PCT = 0.02
BALANCE_VOLUME_CHANGE = 0.30
BALANCE_MIN_SPAN_PCT = 0.01


@dataclass(frozen=True)
class VolumeZone:
    price_range: tuple[float, float]
    volume_ratio: float
    strength: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceRange": list(self.price_range),
            "volumeRatio": self.volume_ratio,
            "strength": self.strength,
        }


@dataclass(frozen=True)
class BalanceZone:
    price_range: tuple[float, float]
    volume: float
    center: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceRange": list(self.price_range),
            "volume": self.volume,
            "center": self.center,
        }


@dataclass(frozen=True)
class CompositeVolumeProfile(VolumeProfile):
    time_range: str = "weekly"
    accumulation_zone: VolumeZone | None = None
    distribution_zone: VolumeZone | None = None
    balance_zones: tuple[BalanceZone, ...] = ()
    composite_poc: float = 0.0
    composite_vah: float = 0.0
    composite_val: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(
            {
                "timeRange": self.time_range,
                "accumulationZone": self.accumulation_zone.to_dict() if self.accumulation_zone else None,
                "distributionZone": self.distribution_zone.to_dict() if self.distribution_zone else None,
                "balanceZones": [z.to_dict() for z in self.balance_zones],
                "compositePoc": self.composite_poc,
                "compositeVah": self.composite_vah,
                "compositeVal": self.composite_val,
            }
        )
        return out


def select_window(candles: Sequence[Candle], time_range: str) -> Sequence[Candle]:
    """Trailing window for ``time_range``; the full input when it is shorter."""
    size = TIME_RANGE_WINDOWS.get(time_range)
    if size is not None and len(candles) >= size:
        return candles[-size:]
    return candles


def detect_volume_zones(
    profile: Sequence[PriceBin],
    current_price: float,
) -> tuple[VolumeZone | None, VolumeZone | None]:
    """Return ``(accumulation_zone, distribution_zone)``; at most one is set.

    Bins priced exactly at ``current_price`` belong to neither side.
    """
    lower = [b for b in profile if b.price < current_price]
    upper = [b for b in profile if b.price > current_price]
    lower_volume = sum(b.volume for b in lower)
    upper_volume = sum(b.volume for b in upper)
    total = lower_volume + upper_volume
    if total <= 0:
        return None, None

    lower_ratio = lower_volume / total
    upper_ratio = upper_volume / total

    accumulation = None
    distribution = None
    if lower_ratio > ZONE_RATIO_THRESHOLD:
        prices = [b.price for b in lower]
        accumulation = VolumeZone(price_range=(min(prices), max(prices)), volume_ratio=lower_ratio, strength="strong")
    if upper_ratio > ZONE_RATIO_THRESHOLD:
        prices = [b.price for b in upper]
        distribution = VolumeZone(price_range=(min(prices), max(prices)), volume_ratio=upper_ratio, strength="strong")
    return accumulation, distribution


def detect_balance_zones(profile: Sequence[PriceBin], current_price: float) -> list[BalanceZone]:
    """Greedy scan for bands of adjacent bins with consistent volume.

    A run is extended while the gap to the next bin is under 2% of the current
    price and that bin's volume differs by less than 30% from the run's
    accumulated volume. Runs spanning more than 1% of the current price are kept.
    """
    if not profile:
        return []

    max_gap = current_price * BALANCE_GAP_PCT
    min_span = current_price * BALANCE_MIN_SPAN_PCT
    ordered = sorted(profile, key=lambda b: b.price)

    zones: list[BalanceZone] = []

    def _flush(start: float, end: float, volume: float) -> None:
        if end - start > min_span:
            zones.append(BalanceZone(price_range=(start, end), volume=volume, center=(start + end) / 2))

    start = end = ordered[0].price
    volume = ordered[0].volume
    for b in ordered[1:]:
        gap = b.price - end
        change = abs(b.volume - volume) / volume if volume > 0 else 1.0
        if gap < max_gap and change < BALANCE_VOLUME_CHANGE:
            end = b.price
            volume += b.volume
        else:
            _flush(start, end, volume)
            start = end = b.price
            volume = b.volume

    _flush(start, end, volume)
    return zones


class CompositeProfileBuilder:
    """Build a :class:`CompositeVolumeProfile` over a trailing multi-session window."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session_builder: SessionProfileBuilder | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger("indicators.composite_profile")
        self.min_candles = self.settings.composite_min_candles
        self.session_builder = session_builder or SessionProfileBuilder(self.settings, clock=clock)

    def build(
        self,
        candles: Sequence[Candle],
        current_price: float,
        time_range: str = "weekly",
    ) -> CompositeVolumeProfile | None:
        if not candles or len(candles) < self.min_candles:
            self.logger.debug(
                "composite_profile_insufficient_data",
                candles=len(candles) if candles else 0,
                required=self.min_candles,
            )
            return None
        if not is_positive_price(current_price):
            self.logger.debug("composite_profile_invalid_price", current_price=current_price)
            return None

        window = select_window(candles, time_range)
        session = self.session_builder.build(window, current_price, time_range)
        if session is None:
            return None

        price = float(current_price)
        accumulation, distribution = detect_volume_zones(session.profile, price)
        balance = detect_balance_zones(session.profile, price)

        self.logger.debug(
            "composite_profile_built",
            time_range=time_range,
            window=len(window),
            accumulation=accumulation is not None,
            distribution=distribution is not None,
            balance_zones=len(balance),
        )

        return CompositeVolumeProfile(
            poc=session.poc,
            vah=session.vah,
            val=session.val,
            hvn=session.hvn,
            lvn=session.lvn,
            profile=session.profile,
            total_volume=session.total_volume,
            session_type=session.session_type,
            timestamp=session.timestamp,
            time_range=time_range,
            accumulation_zone=accumulation,
            distribution_zone=distribution,
            balance_zones=tuple(balance),
            composite_poc=session.poc,
            composite_vah=session.vah,
            composite_val=session.val,
        )


def calculate_composite_volume_profile(
    candles: Sequence[Candle],
    current_price: float,
    time_range: str = "weekly",
) -> CompositeVolumeProfile | None:
    """Convenience wrapper using the global settings."""
    return CompositeProfileBuilder().build(candles, current_price, time_range)
