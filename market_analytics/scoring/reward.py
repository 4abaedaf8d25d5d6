"""Reward bonuses for coherent, low-risk market conditions.

Each check is independent and order-free; a satisfied check adds its weight
and one reason. The total is clamped to ``reward_cap`` once, after all checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from market_analytics.config import RewardWeights, get_settings
from market_analytics.utils import get_logger
from .market_data import MarketData


@dataclass
class RewardBonusResult:
    reward: float = 0.0
    reasons: list[str] = field(default_factory=list)
    flags: int = 0

    def add(self, amount: float, reason: str) -> None:
        self.reward += amount
        self.reasons.append(reason)
        self.flags += 1

    def to_dict(self) -> dict[str, Any]:
        return {"reward": self.reward, "reasons": list(self.reasons), "flags": self.flags}


class RewardScorer:
    """Additive confidence bonus over precomputed indicators and futures context."""

    def __init__(self, weights: RewardWeights | None = None):
        self.weights = weights or get_settings().reward_weights()
        self.logger = get_logger("scoring.reward")

    def score(self, asset: str, market_data: MarketData | Mapping[str, Any] | None) -> RewardBonusResult:
        data = market_data if isinstance(market_data, MarketData) else MarketData.from_mapping(market_data)
        result = RewardBonusResult()

        self._trend_ema_aroon(data, result)
        self._volume_confirmation(data, result)
        self._regime(data, result)
        self._liquidation_safety(data, result)
        self._rsi_momentum(data, result)
        self._btc_alignment(data, result)
        self._premium(data, result)
        self._futures_coherence(data, result)

        if result.reward > self.weights.reward_cap:
            result.reward = self.weights.reward_cap

        self.logger.debug("reward_scored", asset=asset, reward=result.reward, flags=result.flags)
        return result

    def _trend_ema_aroon(self, data: MarketData, result: RewardBonusResult) -> None:
        ind = data.indicators
        trend = data.trend_alignment.trend
        if None in (ind.price, ind.ema20, ind.ema50):
            return
        if ind.aroon_up is None or ind.aroon_down is None:
            return

        up = trend == "uptrend" and ind.price > ind.ema20 > ind.ema50 and ind.aroon_up - ind.aroon_down > 30
        down = trend == "downtrend" and ind.price < ind.ema20 < ind.ema50 and ind.aroon_down - ind.aroon_up > 30
        if up or down:
            result.add(self.weights.trend_ema_aroon, "Trend×EMA×Aroon coherence")

    def _volume_confirmation(self, data: MarketData, result: RewardBonusResult) -> None:
        vc = data.volume_analysis.volume_confirmation
        if vc is None or not vc.is_valid:
            return
        amount = self.weights.vol_delta if vc.strength == "strong" else self.weights.vol_delta_partial
        result.add(amount, f"Volume confirms ({vc.strength})")

    def _regime(self, data: MarketData, result: RewardBonusResult) -> None:
        adx = data.indicators.adx
        width = data.indicators.bb_width
        if adx is None or width is None:
            return
        if adx >= 25 and 0.02 <= width <= 0.06:
            result.add(self.weights.regime_strong, "Strong regime (ADX≥25 & BB width 2–6%)")
        elif adx >= 20 and 0.015 <= width <= 0.08:
            result.add(self.weights.regime_mod, "Moderate regime")

    def _liquidation_safety(self, data: MarketData, result: RewardBonusResult) -> None:
        distance = data.futures.liquidation_distance
        if distance is None:
            return
        if distance >= 7:
            result.add(self.weights.liq_safe_7, "Liquidation distance ≥7% (safe)")
        elif distance >= 5:
            result.add(self.weights.liq_safe_5, "Liquidation distance ≥5% (safer)")

    def _rsi_momentum(self, data: MarketData, result: RewardBonusResult) -> None:
        rsi = data.indicators.rsi14
        hist = data.indicators.macd_histogram
        if rsi is None or hist is None:
            return
        if (rsi > 55 and hist > 0) or (rsi < 45 and hist < 0):
            result.add(self.weights.rsi_momo, "RSI confirms momentum")

    def _btc_alignment(self, data: MarketData, result: RewardBonusResult) -> None:
        corr = data.futures.btc_correlation_7d
        if corr is None:
            return
        if abs(corr) >= 0.6:
            result.add(self.weights.btc_align, "BTC alignment strong")
        elif abs(corr) >= 0.5:
            result.add(self.weights.btc_mod, "BTC alignment moderate")

    def _premium(self, data: MarketData, result: RewardBonusResult) -> None:
        premium = data.futures.premium_pct
        divergence = data.futures.premium_divergence
        if premium is not None and abs(premium) < 0.0005:
            result.add(self.weights.premium_tight, "Premium tight")
        if divergence is not None and abs(divergence) < 0.5:
            result.add(self.weights.div_low, "Divergence low")

    def _futures_coherence(self, data: MarketData, result: RewardBonusResult) -> None:
        funding = data.futures.funding_rate
        if funding is None:
            return
        if abs(funding) < 0.0006 and data.futures.open_interest_trend == "rising":
            result.add(self.weights.futures_coh, "Futures coherence (neutral funding + OI rising)")


def compute_reward_bonuses(asset: str, market_data: MarketData | Mapping[str, Any] | None) -> RewardBonusResult:
    """Score with weights from the global settings."""
    return RewardScorer().score(asset, market_data)
