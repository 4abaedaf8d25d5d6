"""Tests for settings and reward weight loading."""

import pytest

from market_analytics.config import RewardWeights, Settings, get_settings


def test_defaults_match_reward_weights(settings):
    assert settings.reward_weights() == RewardWeights()
    assert settings.profile_bins == 50
    assert settings.value_area_fraction == pytest.approx(0.7)


def test_env_override(monkeypatch):
    monkeypatch.setenv("REW_VOL_DELTA", "30")
    monkeypatch.setenv("REWARD_CAP", "100")

    weights = Settings(_env_file=None).reward_weights()

    assert weights.vol_delta == 30
    assert weights.reward_cap == 100
    assert weights.trend_ema_aroon == 40


@pytest.mark.parametrize("raw", ["abc", "nan", "inf", "true"])
def test_non_numeric_weight_falls_back_to_default(monkeypatch, raw):
    monkeypatch.setenv("REW_TREND_EMA_AROON", raw)

    assert Settings(_env_file=None).rew_trend_ema_aroon == 40


def test_empty_env_is_ignored(monkeypatch):
    monkeypatch.setenv("REW_BTC_ALIGN", "")
    assert Settings(_env_file=None).rew_btc_align == 20


def test_value_area_accepts_fraction():
    assert Settings(_env_file=None, value_area_pct=0.65).value_area_fraction == pytest.approx(0.65)
    assert Settings(_env_file=None, value_area_pct=68).value_area_fraction == pytest.approx(0.68)


def test_weights_are_immutable(settings):
    weights = settings.reward_weights()
    with pytest.raises(Exception):
        weights.reward_cap = 1  # type: ignore[misc]


def test_get_settings_is_shared():
    assert get_settings() is get_settings()
