"""Tests for coolingtco.services.opex: multi-year operating cost projection."""

from __future__ import annotations

import numpy as np
import pytest

from coolingtco.catalog import Currency
from coolingtco.schemas import (
    AirCoolingRackCount,
    FinancialConfig,
    ImmersionAutoOptimize,
)
from coolingtco.services.opex import (
    OpexAssumptions,
    OpexCosts,
    OpexYear,
    escalation_factors,
    project_opex,
)
from coolingtco.services.sizing import size_air_cooling, size_immersion_cooling


def _systems(load_factor: float = 0.15):
    air = size_air_cooling(
        AirCoolingRackCount(input_method="rack_count", rack_count=77, power_per_rack_kw=15.5),
        load_factor,
    )
    immersion = size_immersion_cooling(
        ImmersionAutoOptimize(input_method="auto_optimize", target_power_kw=1193.5),
        load_factor,
    )
    return air, immersion


def _assumptions(**overrides) -> OpexAssumptions:
    financial = FinancialConfig(analysis_years=5, region="US", **overrides)
    return OpexAssumptions.from_financial(financial)


class TestEscalationFactors:
    def test_first_year_is_unescalated(self):
        factors = escalation_factors(0.03, 3)
        assert factors[0] == 1.0
        np.testing.assert_allclose(factors, [1.0, 1.03, 1.0609])

    def test_negative_rate_deflates(self):
        assert escalation_factors(-0.1, 2)[1] == pytest.approx(0.9)


class TestOpexAssumptions:
    def test_regional_defaults(self):
        assumptions = _assumptions()
        assert assumptions.energy_cost_kwh == 0.12
        assert assumptions.labor_cost_per_hour == 75.0

    def test_defaults_converted_to_currency(self):
        assumptions = _assumptions(currency="EUR")
        assert assumptions.currency is Currency.EUR
        assert assumptions.labor_cost_per_hour == pytest.approx(75.0 * 0.85)

    def test_explicit_values_win(self):
        assumptions = _assumptions(custom_energy_cost=0.2, custom_labor_cost=90.0)
        assert assumptions.energy_cost_kwh == 0.2
        assert assumptions.labor_cost_per_hour == 90.0


class TestProjectOpex:
    def test_one_entry_per_year(self):
        air, immersion = _systems()
        projection = project_opex(air, immersion, _assumptions())
        assert [year.year for year in projection] == [1, 2, 3, 4, 5]

    def test_energy_cost_uses_average_facility_power(self):
        air, immersion = _systems()
        first = project_opex(air, immersion, _assumptions())[0]
        assert first.air_cooling.energy == pytest.approx(air.average_facility_power_kw * 8760 * 0.12)

    def test_energy_escalates(self):
        air, immersion = _systems()
        projection = project_opex(air, immersion, _assumptions(energy_escalation_rate=0.05))
        assert projection[1].air_cooling.energy == pytest.approx(projection[0].air_cooling.energy * 1.05)

    def test_coolant_only_in_replacement_years(self):
        air, immersion = _systems()
        projection = project_opex(air, immersion, _assumptions())
        assert projection[0].immersion_cooling.coolant == 0.0
        assert projection[1].immersion_cooling.coolant > 0.0
        assert projection[0].air_cooling.coolant is None

    def test_immersion_is_cheaper_to_run(self):
        air, immersion = _systems()
        for year in project_opex(air, immersion, _assumptions()):
            assert year.savings > 0
            assert 0 < year.savings_percent < 100

    def test_savings_percent_with_zero_air_cost(self):
        year_costs = OpexCosts(energy=0.0, maintenance=0.0, labor=0.0)
        year = OpexYear(year=1, air_cooling=year_costs, immersion_cooling=year_costs)
        assert year.savings_percent == 0.0
