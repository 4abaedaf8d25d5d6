"""Session Volume Profile (POC, VAH, VAL, HVN, LVN)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from market_analytics.config import Settings, get_settings
from market_analytics.types import Candle
from market_analytics.utils import Clock, get_logger, is_positive_price, timestamp_ms
from .price_bins import PriceBin, PriceBinner
from .profile_engine import ProfileAggregator
from .volume_distribution import VolumeDistributor


@dataclass(frozen=True)
class VolumeProfile:
    """Volume distribution of one candle window and its key levels."""

    poc: float
    vah: float
    val: float
    hvn: list[PriceBin]
    lvn: list[PriceBin]
    profile: list[PriceBin]
    total_volume: float
    session_type: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "poc": self.poc,
            "vah": self.vah,
            "val": self.val,
            "hvn": [n.to_dict() for n in self.hvn],
            "lvn": [n.to_dict() for n in self.lvn],
            "profile": [n.to_dict() for n in self.profile],
            "totalVolume": self.total_volume,
            "sessionType": self.session_type,
            "timestamp": self.timestamp,
        }


class SessionProfileBuilder:
    """Build a :class:`VolumeProfile` over the full supplied candle slice.

    Returns None (never raises) when the window is too short, the current
    price is not positive, or the window has no price range.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        bin_count: int | None = None,
        clock: Clock | None = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger("indicators.volume_profile")
        self.clock: Clock = clock or timestamp_ms
        self.min_candles = self.settings.session_min_candles
        self.binner = PriceBinner(bin_count if bin_count is not None else self.settings.profile_bins)
        self.aggregator = ProfileAggregator(
            value_area_pct=self.settings.value_area_fraction,
            hvn_multiplier=self.settings.hvn_multiplier,
            lvn_multiplier=self.settings.lvn_multiplier,
            node_limit=self.settings.node_limit,
        )

    def build(
        self,
        candles: Sequence[Candle],
        current_price: float,
        session_type: str = "daily",
    ) -> VolumeProfile | None:
        if not candles or len(candles) < self.min_candles:
            self.logger.debug(
                "session_profile_insufficient_data",
                candles=len(candles) if candles else 0,
                required=self.min_candles,
            )
            return None
        if not is_positive_price(current_price):
            self.logger.debug("session_profile_invalid_price", current_price=current_price)
            return None

        grid = self.binner.build(candles)
        if grid is None:
            self.logger.debug("session_profile_flat_range", candles=len(candles))
            return None

        bins = VolumeDistributor.distribute(candles, grid)
        levels = self.aggregator.aggregate(bins)

        return VolumeProfile(
            poc=levels.poc,
            vah=levels.vah,
            val=levels.val,
            hvn=levels.hvn,
            lvn=levels.lvn,
            profile=levels.profile,
            total_volume=levels.total_volume,
            session_type=session_type,
            timestamp=self.clock(),
        )


def calculate_session_volume_profile(
    candles: Sequence[Candle],
    current_price: float,
    session_type: str = "daily",
) -> VolumeProfile | None:
    """Convenience wrapper using the global settings."""
    return SessionProfileBuilder().build(candles, current_price, session_type)
