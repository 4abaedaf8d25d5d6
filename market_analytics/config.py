"""Configuration management for Market Analytics Core."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RewardWeights:
    """Per-check bonus weights for :class:`~market_analytics.scoring.RewardScorer`.

    Built once from :class:`Settings` and passed to the scorer so a batch of
    concurrent scoring calls all see the same values.
    """

    trend_ema_aroon: float = 40.0
    vol_delta: float = 25.0
    vol_delta_partial: float = 10.0
    regime_strong: float = 20.0
    regime_mod: float = 10.0
    liq_safe_7: float = 25.0
    liq_safe_5: float = 15.0
    rsi_momo: float = 10.0
    btc_align: float = 20.0
    btc_mod: float = 10.0
    premium_tight: float = 10.0
    div_low: float = 10.0
    futures_coh: float = 10.0
    reward_cap: float = 60.0


# Settings field -> RewardWeights attribute
_REWARD_FIELDS = {
    "rew_trend_ema_aroon": "trend_ema_aroon",
    "rew_vol_delta": "vol_delta",
    "rew_vol_delta_partial": "vol_delta_partial",
    "rew_regime_strong": "regime_strong",
    "rew_regime_mod": "regime_mod",
    "rew_liq_safe_7": "liq_safe_7",
    "rew_liq_safe_5": "liq_safe_5",
    "rew_rsi_momo": "rsi_momo",
    "rew_btc_align": "btc_align",
    "rew_btc_mod": "btc_mod",
    "rew_premium_tight": "premium_tight",
    "rew_div_low": "div_low",
    "rew_futures_coh": "futures_coh",
    "reward_cap": "reward_cap",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_json: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Volume profile
    #
    # The node multipliers and the value area share were tuned against the
    # proportional-overlap distribution (which does not conserve volume).
    # Change them together with the distribution, not independently.
    # ------------------------------------------------------------------
    profile_bins: int = Field(default=50, ge=1, description="Number of price bins per profile")
    value_area_pct: float = Field(
        default=70.0,
        gt=0,
        le=100,
        description="Value area share, either as percent (70) or fraction (0.7)",
    )
    hvn_multiplier: float = Field(default=1.5, description="HVN threshold as a multiple of average bin volume")
    lvn_multiplier: float = Field(default=0.5, description="LVN threshold as a multiple of average bin volume")
    node_limit: int = Field(default=5, ge=0, description="Max HVN/LVN nodes reported")
    session_min_candles: int = Field(default=20, ge=1)
    composite_min_candles: int = Field(default=50, ge=1)

    # Feature toggles for the per-ticker analysis block
    use_volume_profile: bool = Field(default=True)
    use_composite_volume_profile: bool = Field(default=True)
    use_enhanced_metrics: bool = Field(default=True)
    composite_time_range: Literal["weekly", "monthly"] = Field(default="weekly")

    # ------------------------------------------------------------------
    # Reward bonuses. Env names match the historical REW_* variables.
    # Non-numeric values fall back to the default instead of failing startup.
    # ------------------------------------------------------------------
    rew_trend_ema_aroon: float = Field(default=40.0)
    rew_vol_delta: float = Field(default=25.0)
    rew_vol_delta_partial: float = Field(default=10.0)
    rew_regime_strong: float = Field(default=20.0)
    rew_regime_mod: float = Field(default=10.0)
    rew_liq_safe_7: float = Field(default=25.0)
    rew_liq_safe_5: float = Field(default=15.0)
    rew_rsi_momo: float = Field(default=10.0)
    rew_btc_align: float = Field(default=20.0)
    rew_btc_mod: float = Field(default=10.0)
    rew_premium_tight: float = Field(default=10.0)
    rew_div_low: float = Field(default=10.0)
    rew_futures_coh: float = Field(default=10.0)
    reward_cap: float = Field(default=60.0)

    @field_validator(*_REWARD_FIELDS.keys(), mode="before")
    @classmethod
    def _lenient_number(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if isinstance(value, bool):
            return default
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            return default
        if not math.isfinite(parsed):
            return default
        return parsed

    @property
    def value_area_fraction(self) -> float:
        """Value area share normalized to 0-1."""
        pct = float(self.value_area_pct)
        return pct / 100.0 if pct > 1 else pct

    def reward_weights(self) -> RewardWeights:
        """Snapshot the reward tunables into an immutable weights object."""
        return RewardWeights(**{attr: float(getattr(self, name)) for name, attr in _REWARD_FIELDS.items()})


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
