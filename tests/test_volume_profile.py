"""Tests for price binning, volume distribution and session volume profiles."""

import pytest

from market_analytics.indicators import (
    PriceBin,
    PriceBinner,
    ProfileAggregator,
    SessionProfileBuilder,
    ValueAreaCalculator,
    VolumeDistributor,
)
from market_analytics.types import Candle

from factories import FIXED_TS, fixed_clock, flat_series, make_candle


def _worked_candles():
    return [
        make_candle(10, 12, 100),
        make_candle(14, 16, 100),
        make_candle(18, 20, 100),
        make_candle(22, 24, 400),
    ]


class TestPriceBinner:
    """Bin grid construction."""

    def test_bin_midpoints(self):
        grid = PriceBinner(4).build(_worked_candles())

        assert grid is not None
        assert grid.min_price == 10
        assert grid.max_price == 24
        assert grid.width == pytest.approx(3.5)
        assert grid.prices == pytest.approx((11.75, 15.25, 18.75, 22.25))

    def test_flat_range_returns_none(self):
        candles = [make_candle(100, 100, 10) for _ in range(25)]
        assert PriceBinner().build(candles) is None

    def test_empty_returns_none(self):
        assert PriceBinner().build([]) is None

    def test_rejects_zero_bins(self):
        with pytest.raises(ValueError):
            PriceBinner(0)


class TestVolumeDistributor:
    """Proportional-overlap allocation."""

    def test_worked_scenario_allocation(self):
        candles = _worked_candles()
        grid = PriceBinner(4).build(candles)

        bins = VolumeDistributor.distribute(candles, grid)

        assert [b.volume for b in bins] == pytest.approx([175.0, 175.0, 175.0, 700.0])

    def test_skips_zero_range_and_zero_volume(self):
        candles = [
            make_candle(10, 20, 100),
            make_candle(15, 15, 500),  # high == low
            make_candle(10, 20, 0),
        ]
        grid = PriceBinner(2).build(candles)

        volumes = VolumeDistributor.accumulate(candles, grid)

        assert volumes == pytest.approx([50.0, 50.0])

    def test_total_is_not_conserved(self):
        # The wide candle spreads exactly its volume over four bins; the narrow
        # one covers a single midpoint and credits it twice what it traded.
        candles = [make_candle(0, 8, 80), make_candle(2.5, 3.5, 10)]
        grid = PriceBinner(4).build(candles)

        volumes = VolumeDistributor.accumulate(candles, grid)

        assert sum(volumes) != pytest.approx(90.0)
        assert volumes[1] == pytest.approx(20.0 + 20.0)


class TestValueAreaCalculator:
    """POC selection and ranked value-area expansion."""

    def test_poc_first_bin_wins_ties(self):
        assert ValueAreaCalculator.poc_index([5.0, 9.0, 9.0, 1.0]) == 1

    def test_expansion_order_uses_distance_for_near_equal_volumes(self):
        volumes = [5.0, 5.005, 9.0, 5.001]

        order = ValueAreaCalculator.expansion_order(volumes, 2)

        assert order == [2, 1, 3, 0]

    def test_value_area_reaches_seventy_percent(self):
        volumes = [10.0, 15.0, 30.0, 25.0, 20.0]

        poc, val_idx, vah_idx, accumulated = ValueAreaCalculator.compute(volumes, 70.0)

        assert poc == 2
        assert accumulated >= 0.7 * sum(volumes)
        assert val_idx <= poc <= vah_idx

    def test_value_area_is_not_necessarily_contiguous(self):
        # The 50 at index 0 is absorbed before the light bins 1 and 2, so VAL
        # jumps over them. Nothing above POC is absorbed -> VAH falls back to
        # the last bin.
        volumes = [50.0, 1.0, 1.0, 100.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0]

        poc, val_idx, vah_idx, accumulated = ValueAreaCalculator.compute(volumes, 70.0)

        assert poc == 3
        assert val_idx == 0
        assert vah_idx == len(volumes) - 1
        assert accumulated == pytest.approx(150.0)

    def test_val_falls_back_to_first_bin_when_nothing_below_poc_absorbed(self):
        # 100 + 50 already covers 70% of 153, so no bin under the POC is touched.
        volumes = [1.0, 1.0, 100.0, 50.0, 1.0]

        poc, val_idx, vah_idx, accumulated = ValueAreaCalculator.compute(volumes, 70.0)

        assert poc == 2
        assert val_idx == 0
        assert vah_idx == 3
        assert accumulated == pytest.approx(150.0)

    def test_accepts_fraction(self):
        volumes = [10.0, 15.0, 30.0, 25.0, 20.0]
        assert ValueAreaCalculator.compute(volumes, 0.7) == ValueAreaCalculator.compute(volumes, 70.0)

    def test_empty_volumes_raise(self):
        with pytest.raises(ValueError):
            ValueAreaCalculator.compute([], 70.0)


class TestProfileAggregator:
    """Key levels and volume nodes."""

    def test_worked_scenario(self):
        candles = _worked_candles()
        bins = VolumeDistributor.distribute(candles, PriceBinner(4).build(candles))

        levels = ProfileAggregator().aggregate(bins)

        assert levels.poc_index == 3
        assert levels.poc == pytest.approx(22.25)
        assert levels.total_volume == pytest.approx(1225.0)
        assert levels.value_area_volume >= 0.7 * levels.total_volume
        # POC is the top bin, one step down covers the rest of the 70%.
        assert levels.val == pytest.approx(18.75)
        assert levels.vah == pytest.approx(22.25)

    def test_hvn_lvn_thresholds_and_limits(self):
        volumes = [1, 2, 3, 4, 5, 6, 100, 90, 80, 70, 60, 50] + [0] * 8
        bins = [PriceBin(price=100.0 + i, volume=float(v)) for i, v in enumerate(volumes)]

        levels = ProfileAggregator().aggregate(bins)

        assert [n.volume for n in levels.hvn] == [100, 90, 80, 70, 60]
        assert [n.volume for n in levels.lvn] == [1, 2, 3, 4, 5]
        assert not {n.price for n in levels.hvn} & {n.price for n in levels.lvn}

    def test_node_thresholds_are_strict(self):
        # Average is 10: a bin at exactly 15 or 5 is neither HVN nor LVN.
        at_threshold = [PriceBin(price=float(i), volume=v) for i, v in enumerate([15.0, 5.0, 10.0, 10.0])]
        past_threshold = [PriceBin(price=float(i), volume=v) for i, v in enumerate([16.0, 4.0, 10.0, 10.0])]

        at = ProfileAggregator().aggregate(at_threshold)
        past = ProfileAggregator().aggregate(past_threshold)

        assert at.hvn == []
        assert at.lvn == []
        assert [n.volume for n in past.hvn] == [16.0]
        assert [n.volume for n in past.lvn] == [4.0]

    def test_profile_drops_empty_bins(self):
        bins = [PriceBin(price=1.0, volume=0.0), PriceBin(price=2.0, volume=3.0), PriceBin(price=3.0, volume=0.0)]

        levels = ProfileAggregator().aggregate(bins)

        assert [b.price for b in levels.profile] == [2.0]

    def test_empty_bins_raise(self):
        with pytest.raises(ValueError):
            ProfileAggregator().aggregate([])


class TestSessionProfileBuilder:
    """End-to-end session profile."""

    def test_too_few_candles(self, settings):
        builder = SessionProfileBuilder(settings, clock=fixed_clock)
        assert builder.build(flat_series(19), 100.0) is None

    def test_flat_range(self, settings):
        candles = [make_candle(100, 100, 10) for _ in range(30)]
        builder = SessionProfileBuilder(settings, clock=fixed_clock)
        assert builder.build(candles, 100.0) is None

    @pytest.mark.parametrize("price", [0, -5, None, float("nan"), float("inf")])
    def test_invalid_current_price(self, settings, price):
        builder = SessionProfileBuilder(settings, clock=fixed_clock)
        assert builder.build(flat_series(30), price) is None

    def test_uniform_candles_resolve_poc_to_lowest_bin(self, settings):
        candles = [make_candle(100, 110, 10) for _ in range(20)]

        profile = SessionProfileBuilder(settings, clock=fixed_clock).build(candles, 105.0)

        assert profile is not None
        assert len(profile.profile) == 50
        assert profile.poc == pytest.approx(100.1)
        assert profile.val == profile.poc
        assert profile.vah > profile.poc
        assert profile.hvn == []
        assert profile.lvn == []

    def test_profile_fields(self, settings):
        candles = [make_candle(100, 110, 10) for _ in range(15)]
        candles += [make_candle(104, 106, 200) for _ in range(10)]

        profile = SessionProfileBuilder(settings, clock=fixed_clock).build(candles, 105.0, "intraday")

        assert profile.session_type == "intraday"
        assert profile.timestamp == FIXED_TS
        assert 104 <= profile.poc <= 106
        assert profile.val <= profile.poc <= profile.vah
        assert profile.hvn and all(104 <= n.price <= 106 for n in profile.hvn)
        assert profile.total_volume == pytest.approx(sum(b.volume for b in profile.profile))

    def test_custom_bin_count(self, settings):
        candles = [make_candle(100, 110, 10) for _ in range(20)]

        profile = SessionProfileBuilder(settings, bin_count=10, clock=fixed_clock).build(candles, 105.0)

        assert len(profile.profile) == 10

    def test_zero_bin_count_is_rejected(self, settings):
        with pytest.raises(ValueError):
            SessionProfileBuilder(settings, bin_count=0)

    def test_to_dict_uses_camel_case(self, settings):
        candles = [make_candle(100, 110, 10) for _ in range(20)]
        profile = SessionProfileBuilder(settings, clock=fixed_clock).build(candles, 105.0)

        out = profile.to_dict()

        assert set(out) == {
            "poc", "vah", "val", "hvn", "lvn", "profile", "totalVolume", "sessionType", "timestamp",
        }
        assert out["profile"][0] == {"price": profile.profile[0].price, "volume": profile.profile[0].volume}

    def test_same_inputs_same_output(self, settings):
        candles = [make_candle(100 + (i % 5), 105 + (i % 7), 10 + i) for i in range(40)]
        builder = SessionProfileBuilder(settings, clock=fixed_clock)

        assert builder.build(candles, 104.0) == builder.build(list(candles), 104.0)


def test_candle_is_immutable():
    candle = make_candle(1, 2, 3)
    with pytest.raises(Exception):
        candle.high = 5  # type: ignore[misc]
    assert isinstance(candle, Candle)
