"""Typed view of the per-asset market data bag consumed by the reward scorer.

Upstream hands over a loosely nested, camelCase bag::

    {
        "indicators": {"price": ..., "ema20": ..., "aroon": {"up": ..., "down": ...}, ...},
        "trendAlignment": {"trend": "uptrend"},
        "externalData": {
            "futures": {"liquidation": {...}, "btcCorrelation": {...}, ...},
            "comprehensiveVolumeAnalysis": {"volumeConfirmation": {...}},
        },
    }

(any section may also sit under a top-level ``data`` key). Every field here is
optional; a field that is missing, non-numeric or non-finite is ``None`` so the
check depending on it simply does not fire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from market_analytics.utils import finite_or_none


def _get(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _section(bag: Any, key: str) -> Any:
    """``bag[key]`` falling back to ``bag['data'][key]``."""
    value = _get(bag, key)
    if value:
        return value
    return _get(_get(bag, "data"), key)


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class Indicators:
    price: float | None = None
    ema20: float | None = None
    ema50: float | None = None
    aroon_up: float | None = None
    aroon_down: float | None = None
    adx: float | None = None
    bb_upper: float | None = None
    bb_middle: float | None = None
    bb_lower: float | None = None
    rsi14: float | None = None
    macd_histogram: float | None = None

    @property
    def bb_width(self) -> float | None:
        """Relative Bollinger band width, or None when the bands are unusable."""
        if self.bb_upper is None or self.bb_lower is None or self.bb_middle is None:
            return None
        if self.bb_middle <= 0:
            return None
        return (self.bb_upper - self.bb_lower) / self.bb_middle

    @classmethod
    def from_mapping(cls, raw: Any) -> "Indicators":
        if not raw:
            return cls()
        adx = _get(raw, "adx")
        if not isinstance(adx, (int, float)):
            adx = _get(adx, "adx")
        aroon = _get(raw, "aroon")
        bb = _get(raw, "bollingerBands")
        macd = _get(raw, "macd")
        return cls(
            price=finite_or_none(_get(raw, "price")),
            ema20=finite_or_none(_get(raw, "ema20")),
            ema50=finite_or_none(_get(raw, "ema50")),
            aroon_up=finite_or_none(_get(aroon, "up")),
            aroon_down=finite_or_none(_get(aroon, "down")),
            adx=finite_or_none(adx),
            bb_upper=finite_or_none(_get(bb, "upper")),
            bb_middle=finite_or_none(_get(bb, "middle")),
            bb_lower=finite_or_none(_get(bb, "lower")),
            rsi14=finite_or_none(_get(raw, "rsi14")),
            macd_histogram=finite_or_none(_get(macd, "histogram")),
        )


@dataclass(frozen=True)
class TrendAlignment:
    trend: str | None = None

    @classmethod
    def from_mapping(cls, raw: Any) -> "TrendAlignment":
        return cls(trend=_text(_get(raw, "trend")))


@dataclass(frozen=True)
class VolumeConfirmation:
    is_valid: bool = False
    strength: str | None = None


@dataclass(frozen=True)
class ComprehensiveVolumeAnalysis:
    volume_confirmation: VolumeConfirmation | None = None

    @classmethod
    def from_mapping(cls, raw: Any) -> "ComprehensiveVolumeAnalysis":
        vc = _get(raw, "volumeConfirmation")
        if not vc:
            return cls()
        strength = _get(vc, "strength")
        return cls(
            volume_confirmation=VolumeConfirmation(
                is_valid=bool(_get(vc, "isValid")),
                strength=str(strength) if strength is not None else None,
            )
        )


@dataclass(frozen=True)
class FuturesData:
    liquidation_distance: float | None = None
    btc_correlation_7d: float | None = None
    premium_pct: float | None = None
    premium_divergence: float | None = None
    funding_rate: float | None = None
    open_interest_trend: str | None = None

    @classmethod
    def from_mapping(cls, raw: Any) -> "FuturesData":
        if not raw:
            return cls()
        premium = _get(raw, "premiumIndex")
        return cls(
            liquidation_distance=finite_or_none(_get(_get(raw, "liquidation"), "liquidationDistance")),
            btc_correlation_7d=finite_or_none(_get(_get(raw, "btcCorrelation"), "correlation7d")),
            premium_pct=finite_or_none(_get(premium, "premiumPct")),
            premium_divergence=finite_or_none(_get(premium, "divergence")),
            funding_rate=finite_or_none(_get(_get(raw, "fundingRate"), "current")),
            open_interest_trend=_text(_get(_get(raw, "openInterest"), "trend")),
        )


@dataclass(frozen=True)
class MarketData:
    indicators: Indicators = field(default_factory=Indicators)
    trend_alignment: TrendAlignment = field(default_factory=TrendAlignment)
    futures: FuturesData = field(default_factory=FuturesData)
    volume_analysis: ComprehensiveVolumeAnalysis = field(default_factory=ComprehensiveVolumeAnalysis)

    @classmethod
    def from_mapping(cls, bag: Any) -> "MarketData":
        """Build from the nested upstream bag; never raises on malformed content."""
        if bag is None:
            return cls()
        external = _section(bag, "externalData")
        return cls(
            indicators=Indicators.from_mapping(_section(bag, "indicators")),
            trend_alignment=TrendAlignment.from_mapping(_section(bag, "trendAlignment")),
            futures=FuturesData.from_mapping(_get(external, "futures")),
            volume_analysis=ComprehensiveVolumeAnalysis.from_mapping(
                _get(external, "comprehensiveVolumeAnalysis")
            ),
        )
