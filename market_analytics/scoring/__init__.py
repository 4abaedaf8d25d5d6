"""Signal-quality scoring."""

from .market_data import (
    ComprehensiveVolumeAnalysis,
    FuturesData,
    Indicators,
    MarketData,
    TrendAlignment,
    VolumeConfirmation,
)
from .reward import RewardBonusResult, RewardScorer, compute_reward_bonuses

__all__ = [
    "ComprehensiveVolumeAnalysis",
    "FuturesData",
    "Indicators",
    "MarketData",
    "TrendAlignment",
    "VolumeConfirmation",
    "RewardBonusResult",
    "RewardScorer",
    "compute_reward_bonuses",
]
