"""Tests for Black-Scholes Greeks and the modelled options chain."""

import pytest

from core.options import (
    build_options_chain,
    call_delta,
    d1,
    dominant_sentiment,
    gamma,
    normal_cdf,
    put_delta,
    strike_ladder,
    theta,
    vega,
    volume_multiplier,
)

# Textbook case: S = K = 100, one year, r = 5%, sigma = 20%
ATM = (100.0, 100.0, 1.0, 0.05, 0.2)


class TestGreeks:
    def test_d1(self):
        assert d1(*ATM) == pytest.approx(0.35)

    def test_normal_cdf(self):
        assert normal_cdf(0.0) == 0.5
        assert normal_cdf(1.96) == pytest.approx(0.975, abs=1e-4)

    def test_call_delta(self):
        assert call_delta(*ATM) == pytest.approx(0.63683, abs=1e-5)

    def test_put_call_delta_parity(self):
        assert call_delta(*ATM) - put_delta(*ATM) == pytest.approx(1.0)
        assert put_delta(*ATM) == pytest.approx(-0.36317, abs=1e-5)

    def test_gamma(self):
        assert gamma(*ATM) == pytest.approx(0.018762, abs=1e-6)

    def test_vega_per_vol_point(self):
        assert vega(*ATM) == pytest.approx(0.37524, abs=1e-5)

    def test_daily_theta(self):
        assert theta(*ATM, is_call=True) == pytest.approx(-6.4140 / 365, abs=1e-5)
        assert theta(*ATM, is_call=False) == pytest.approx(-1.6579 / 365, abs=1e-5)

    def test_deep_in_the_money(self):
        assert call_delta(300.0, 100.0, 30 / 365, 0.045, 1.2) > 0.99
        assert put_delta(30.0, 100.0, 30 / 365, 0.045, 1.2) < -0.99

    @pytest.mark.parametrize(
        "args",
        [
            (0.0, 100.0, 1.0, 0.05, 0.2),
            (100.0, -5.0, 1.0, 0.05, 0.2),
            (100.0, 100.0, 0.0, 0.05, 0.2),
            (100.0, 100.0, 1.0, 0.05, 0.0),
        ],
    )
    def test_invalid_inputs_raise(self, args):
        with pytest.raises(ValueError):
            call_delta(*args)


class TestStrikeLadder:
    def test_nine_strikes_around_price(self):
        assert strike_ladder(133.88) == [90, 100, 110, 120, 130, 140, 150, 160, 170]

    def test_center_rounds_half_up(self):
        assert strike_ladder(135.0)[4] == 140

    def test_non_positive_strikes_dropped(self):
        assert strike_ladder(4.0) == [10, 20, 30, 40]


class TestVolumeModel:
    def test_multiplier_peaks_at_the_money(self):
        assert volume_multiplier(100.0, 100.0) == 1.0
        assert volume_multiplier(100.0, 110.0) == pytest.approx(0.7)

    def test_multiplier_floor(self):
        assert volume_multiplier(100.0, 150.0) == 0.1

    @pytest.mark.parametrize(
        "calls,puts,expected",
        [
            (2000, 1000, "BULLISH"),
            (600, 1000, "BEARISH"),
            (1400, 1000, "BULLISH"),
            (1000, 1400, "BEARISH"),
            (1000, 1000, "NEUTRAL"),
            (1200, 1000, "NEUTRAL"),
            (500, 0, "NEUTRAL"),
        ],
    )
    def test_dominant_sentiment(self, calls, puts, expected):
        assert dominant_sentiment(calls, puts) == expected


class TestBuildOptionsChain:
    def test_same_seed_same_chain(self):
        assert build_options_chain(133.88, seed=42) == build_options_chain(133.88, seed=42)

    def test_seed_changes_volumes(self):
        a, _ = build_options_chain(133.88, seed=1)
        b, _ = build_options_chain(133.88, seed=2)
        assert [c.volume for c in a] != [c.volume for c in b]

    def test_chain_shape(self):
        chain, _ = build_options_chain(133.88, seed=7)

        assert len(chain) == 18
        assert [c.type for c in chain[:4]] == ["CALL", "PUT", "CALL", "PUT"]
        assert all(c.delta <= 0 for c in chain if c.type == "PUT")
        assert all(0 <= c.delta <= 1 for c in chain if c.type == "CALL")
        assert all(c.open_interest >= 2 * c.volume for c in chain)
        assert all(abs(c.implied_volatility - 1.2) <= 0.05 for c in chain)

    def test_call_delta_falls_with_strike(self):
        chain, _ = build_options_chain(133.88, seed=7)
        deltas = [c.delta for c in chain if c.type == "CALL"]
        assert deltas == sorted(deltas, reverse=True)

    def test_volumes_within_model_bounds(self):
        chain, _ = build_options_chain(100.0, seed=3)
        atm_call, atm_put = [c for c in chain if c.strike == 100.0]
        assert 500 <= atm_call.volume <= 1500
        assert 300 <= atm_put.volume <= 1100

    def test_summary_totals(self):
        chain, summary = build_options_chain(133.88, seed=7)

        calls = sum(c.volume for c in chain if c.type == "CALL")
        puts = sum(c.volume for c in chain if c.type == "PUT")
        assert summary.total_call_volume == calls
        assert summary.total_put_volume == puts
        assert summary.call_put_ratio == round(calls / puts, 2)
        assert summary.dominant_sentiment == dominant_sentiment(calls, puts)
        assert 0 < summary.avg_call_delta < 1
        assert -1 < summary.avg_put_delta < 0

    def test_non_positive_spot_raises(self):
        with pytest.raises(ValueError):
            build_options_chain(0.0, seed=1)
