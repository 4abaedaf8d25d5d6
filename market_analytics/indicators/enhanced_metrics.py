"""Volume trend, volatility regime and volume/price divergence from raw candles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, Sequence

from market_analytics.types import Candle
from market_analytics.utils import Clock, get_logger, mean, timestamp_ms

VolumeTrend = Literal["increasing", "decreasing", "stable"]
VolatilityPattern = Literal["high", "low", "normal"]

MIN_CANDLES = 14
TREND_MIN_CANDLES = 20
WINDOW = 10


@dataclass(frozen=True)
class EnhancedMetrics:
    volume_trend: VolumeTrend
    volatility_pattern: VolatilityPattern
    volume_price_divergence: float
    volume_change_percent: float
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "volumeTrend": self.volume_trend,
            "volatilityPattern": self.volatility_pattern,
            "volumePriceDivergence": self.volume_price_divergence,
            "volumeChangePercent": self.volume_change_percent,
            "timestamp": self.timestamp,
        }


def classify_volume_trend(recent_avg: float, mid_avg: float, older_avg: float) -> VolumeTrend:
    """Compare the last three 10-bar volume averages.

    Agreement between the two changes is the strong signal; a 10% move in the
    latest window alone also counts; any move above 2% is a weak signal.
    """
    if older_avg > 0 and mid_avg > 0:
        recent_change = (recent_avg - mid_avg) / mid_avg
        mid_change = (mid_avg - older_avg) / older_avg

        if recent_change > 0.05 and mid_change > 0.02:
            return "increasing"
        if recent_change < -0.05 and mid_change < -0.02:
            return "decreasing"
        if recent_change > 0.10:
            return "increasing"
        if recent_change < -0.10:
            return "decreasing"
        if abs(recent_change) > 0.02:
            return "increasing" if recent_change > 0 else "decreasing"
        return "stable"

    if recent_avg > 0 and mid_avg == 0:
        return "increasing"
    return "stable"


def classify_volatility(closes: Sequence[float]) -> tuple[VolatilityPattern, float, float]:
    """Return ``(pattern, avg_abs_change, std_dev)`` over the given closes."""
    changes = [
        abs((closes[i] - closes[i - 1]) / closes[i - 1])
        for i in range(1, len(closes))
        if closes[i - 1] > 0
    ]
    avg = mean(changes)
    if len(changes) > 1:
        std_dev = math.sqrt(sum((c - avg) ** 2 for c in changes) / len(changes))
    else:
        std_dev = 0.0

    if avg > 0.05 or std_dev > 0.03:
        return "high", avg, std_dev
    if avg < 0.01 and std_dev < 0.005:
        return "low", avg, std_dev
    return "normal", avg, std_dev


def volume_price_divergence(price_change: float, volume_change: float) -> float:
    """Score in [-2, 2]: negative is bearish divergence, positive bullish.

    Opposite moves (price up on falling volume, or down on rising volume)
    score 1-2 in magnitude; same-direction moves with strong volume get a
    +/-0.5 confirmation nudge.
    """
    if abs(price_change) <= 0.005 or abs(volume_change) <= 0.02:
        return 0.0

    if price_change > 0 and volume_change < -0.05:
        return max(-2.0, -1.0 - abs(volume_change))
    if price_change < 0 and volume_change > 0.05:
        return min(2.0, 1.0 + abs(volume_change))
    if price_change > 0 and volume_change > 0.1:
        return 0.5
    if price_change < 0 and volume_change < -0.1:
        return -0.5
    return 0.0


class EnhancedMetricsCalculator:
    """Lightweight candle analysis independent of the volume profile."""

    def __init__(self, *, clock: Clock | None = None):
        self.clock: Clock = clock or timestamp_ms
        self.logger = get_logger("indicators.enhanced_metrics")

    def _neutral(self) -> EnhancedMetrics:
        return EnhancedMetrics(
            volume_trend="stable",
            volatility_pattern="normal",
            volume_price_divergence=0.0,
            volume_change_percent=0.0,
            timestamp=self.clock(),
        )

    def compute(self, candles: Sequence[Candle]) -> EnhancedMetrics | None:
        if not candles or len(candles) < MIN_CANDLES:
            self.logger.debug(
                "enhanced_metrics_insufficient_data",
                candles=len(candles) if candles else 0,
                required=MIN_CANDLES,
            )
            return None

        if len(candles) < TREND_MIN_CANDLES:
            return self._neutral()

        closes = [c.close for c in candles]
        volumes = [c.volume or 0.0 for c in candles]

        recent = volumes[-WINDOW:]
        mid = volumes[-2 * WINDOW:-WINDOW]
        older = volumes[-3 * WINDOW:-2 * WINDOW] if len(volumes) >= 3 * WINDOW else mid

        recent_avg = mean(recent)
        mid_avg = mean(mid) if mid else recent_avg
        older_avg = mean(older) if older else mid_avg

        volume_trend = classify_volume_trend(recent_avg, mid_avg, older_avg)
        volatility_pattern, _, _ = classify_volatility(closes[-WINDOW:])

        old_price = closes[-WINDOW]
        price_change = (closes[-1] - old_price) / old_price if old_price > 0 else 0.0

        if mid_avg > 0:
            volume_change = (recent_avg - mid_avg) / mid_avg
        else:
            volume_change = 1.0 if recent_avg > 0 else 0.0

        return EnhancedMetrics(
            volume_trend=volume_trend,
            volatility_pattern=volatility_pattern,
            volume_price_divergence=volume_price_divergence(price_change, volume_change),
            volume_change_percent=volume_change * 100,
            timestamp=self.clock(),
        )


def calculate_enhanced_metrics(candles: Sequence[Candle]) -> EnhancedMetrics | None:
    return EnhancedMetricsCalculator().compute(candles)
