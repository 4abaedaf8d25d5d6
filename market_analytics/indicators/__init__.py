"""Volume profile and candle-derived indicators."""

from .price_bins import PriceBin, PriceBinner, BinGrid
from .volume_distribution import VolumeDistributor
from .profile_engine import ProfileAggregator, ProfileLevels, ValueAreaCalculator
from .volume_profile import SessionProfileBuilder, VolumeProfile, calculate_session_volume_profile
from .composite_profile import (
    BalanceZone,
    CompositeProfileBuilder,
    CompositeVolumeProfile,
    VolumeZone,
    calculate_composite_volume_profile,
)
from .enhanced_metrics import EnhancedMetrics, EnhancedMetricsCalculator, calculate_enhanced_metrics

__all__ = [
    "PriceBin",
    "PriceBinner",
    "BinGrid",
    "VolumeDistributor",
    "ProfileAggregator",
    "ProfileLevels",
    "ValueAreaCalculator",
    "SessionProfileBuilder",
    "VolumeProfile",
    "calculate_session_volume_profile",
    "BalanceZone",
    "CompositeProfileBuilder",
    "CompositeVolumeProfile",
    "VolumeZone",
    "calculate_composite_volume_profile",
    "EnhancedMetrics",
    "EnhancedMetricsCalculator",
    "calculate_enhanced_metrics",
]
