"""Per-ticker analytics block: session/composite volume profile and enhanced metrics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from market_analytics.config import Settings, get_settings
from market_analytics.indicators import (
    CompositeProfileBuilder,
    CompositeVolumeProfile,
    EnhancedMetrics,
    EnhancedMetricsCalculator,
    SessionProfileBuilder,
    VolumeProfile,
)
from market_analytics.types import coerce_candles
from market_analytics.utils import Clock, get_logger, timestamp_ms

NEUTRAL_VOLUME_FIELDS = {
    "volumePriceDivergence": 0.0,
    "volumeTrend": "stable",
    "volumeChangePercent": 0.0,
}


@dataclass(frozen=True)
class MarketAnalysis:
    symbol: str
    session_profile: VolumeProfile | None = None
    composite_profile: CompositeVolumeProfile | None = None
    enhanced_metrics: EnhancedMetrics | None = None

    def volume_fields(self) -> dict[str, Any]:
        """Fields merged into the upstream indicator bag (neutral when metrics are off)."""
        m = self.enhanced_metrics
        if m is None:
            return dict(NEUTRAL_VOLUME_FIELDS)
        return {
            "volumePriceDivergence": m.volume_price_divergence,
            "volumeTrend": m.volume_trend,
            "volumeChangePercent": m.volume_change_percent,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "sessionVolumeProfile": self.session_profile.to_dict() if self.session_profile else None,
            "compositeVolumeProfile": self.composite_profile.to_dict() if self.composite_profile else None,
            "enhancedMetrics": self.enhanced_metrics.to_dict() if self.enhanced_metrics else None,
        }


class MarketAnalyzer:
    """Run the enabled analytics for one or many tickers.

    Holds no per-call state; one instance may serve concurrent callers.
    """

    def __init__(self, settings: Settings | None = None, *, clock: Clock | None = None):
        self.settings = settings or get_settings()
        self.logger = get_logger("analyzer")
        clock = clock or timestamp_ms
        self.session_builder = SessionProfileBuilder(self.settings, clock=clock)
        self.composite_builder = CompositeProfileBuilder(self.settings, session_builder=self.session_builder)
        self.metrics = EnhancedMetricsCalculator(clock=clock)

    def analyze(
        self,
        symbol: str,
        candles: Sequence[Any],
        current_price: float,
    ) -> MarketAnalysis:
        symbol = symbol.upper()
        rows = coerce_candles(candles)
        s = self.settings

        session = None
        if s.use_volume_profile and len(rows) >= s.session_min_candles:
            session = self.session_builder.build(rows, current_price, "daily")

        composite = None
        if s.use_composite_volume_profile and len(rows) >= s.composite_min_candles:
            composite = self.composite_builder.build(rows, current_price, s.composite_time_range)

        metrics = self.metrics.compute(rows) if s.use_enhanced_metrics else None

        self.logger.debug(
            "market_analysis_done",
            symbol=symbol,
            candles=len(rows),
            session=session is not None,
            composite=composite is not None,
            metrics=metrics is not None,
        )
        return MarketAnalysis(
            symbol=symbol,
            session_profile=session,
            composite_profile=composite,
            enhanced_metrics=metrics,
        )

    def analyze_many(
        self,
        batch: Mapping[str, tuple[Iterable[Any], float]],
    ) -> dict[str, MarketAnalysis]:
        """Analyze a batch; a bad ticker yields an empty analysis instead of aborting."""
        out: dict[str, MarketAnalysis] = {}
        for symbol, entry in batch.items():
            key = str(symbol).upper()
            try:
                candles, price = entry
                out[key] = self.analyze(key, list(candles or []), price)
            except (ValueError, TypeError) as e:
                self.logger.warning("market_analysis_failed", symbol=key, error=str(e))
                out[key] = MarketAnalysis(symbol=key)
        return out
