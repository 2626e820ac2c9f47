"""Tests for coolingtco.services.pue: PUE model and arithmetic guards."""

from __future__ import annotations

import pytest

from coolingtco.services.pue import (
    MIN_PUE,
    air_cooling_pue,
    clamp_non_negative,
    clamp_pue,
    immersion_cooling_pue,
    improvement_percent,
    pue_from_efficiencies,
    round_currency,
)


class TestClamps:
    def test_pue_below_one_is_floored(self):
        assert clamp_pue(0.7) == MIN_PUE

    def test_pue_above_one_untouched(self):
        assert clamp_pue(1.42) == 1.42

    def test_negative_savings_floored_at_zero(self):
        assert clamp_non_negative(-12.5) == 0.0

    def test_positive_value_untouched(self):
        assert clamp_non_negative(3.0) == 3.0


class TestRoundCurrency:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (1.49, 1), (2.5, 3), (-0.4, 0), (-2.5, -2), (1234.5678, 1235)],
    )
    def test_half_up(self, value, expected):
        assert round_currency(value) == expected

    def test_returns_int(self):
        assert isinstance(round_currency(10.2), int)


class TestPueModel:
    def test_perfect_chain_is_one(self):
        assert pue_from_efficiencies(1.0, 1.0) == 1.0

    def test_reciprocal_of_product(self):
        assert pue_from_efficiencies(0.5, 0.8) == pytest.approx(2.5)

    def test_immersion_reference_efficiencies(self):
        assert immersion_cooling_pue(0.92, 0.95) == pytest.approx(1.0 / 0.874)

    def test_air_includes_catalog_losses(self):
        assert air_cooling_pue(0.83, 0.94) == pytest.approx(1.870418, rel=1e-6)

    def test_air_always_worse_than_user_chain_alone(self):
        assert air_cooling_pue(0.9, 0.9) > pue_from_efficiencies(0.9, 0.9)


class TestImprovementPercent:
    def test_reference_improvement(self):
        assert improvement_percent(1.870418, 1.144165) == pytest.approx(38.83, abs=0.01)

    def test_never_negative(self):
        assert improvement_percent(1.2, 1.5) == 0.0

    def test_equal_pue_is_zero(self):
        assert improvement_percent(1.3, 1.3) == 0.0
