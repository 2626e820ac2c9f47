"""Tests for coolingtco.services.capex: capital cost for both systems."""

from __future__ import annotations

import pytest

from coolingtco.catalog import Currency
from coolingtco.schemas import AirCoolingRackCount, ImmersionManualConfig
from coolingtco.services.capex import (
    CapexCosts,
    air_cooling_capex,
    immersion_cooling_capex,
    immersion_tank_cost,
)
from coolingtco.services.sizing import size_air_cooling, size_immersion_cooling


def _air_system(rack_count: int = 10, power_per_rack_kw: float = 15.0):
    config = AirCoolingRackCount(
        input_method="rack_count",
        rack_count=rack_count,
        power_per_rack_kw=power_per_rack_kw,
    )
    return size_air_cooling(config, load_factor=0.15)


def _immersion_system():
    config = ImmersionManualConfig(
        input_method="manual_config",
        tank_configurations=[{"size": "23U", "quantity": 2}],
    )
    return size_immersion_cooling(config, load_factor=0.15)


class TestCapexCosts:
    def test_total_without_coolant(self):
        assert CapexCosts(1.0, 2.0, 3.0).total == 6.0

    def test_total_with_coolant(self):
        assert CapexCosts(1.0, 2.0, 3.0, coolant=4.0).total == 10.0


class TestAirCoolingCapex:
    def test_rack_costs(self):
        costs = air_cooling_capex(_air_system())
        assert costs.equipment == pytest.approx(25_000.0)
        assert costs.installation == pytest.approx(10_000.0)
        assert costs.coolant is None

    def test_infrastructure_covers_hvac_and_power_plant(self):
        system = _air_system()
        costs = air_cooling_capex(system)
        expected = system.hvac_units * 33_000.0 + system.design_facility_power_kw * 500.0
        assert costs.infrastructure == pytest.approx(expected)

    def test_currency_conversion_scales_everything(self):
        system = _air_system()
        usd = air_cooling_capex(system, Currency.USD)
        eur = air_cooling_capex(system, Currency.EUR)
        assert eur.total == pytest.approx(usd.total * 0.85)

    def test_more_racks_cost_more(self):
        assert air_cooling_capex(_air_system(20)).total > air_cooling_capex(_air_system(10)).total


class TestImmersionCoolingCapex:
    def test_tank_list_price(self):
        assert immersion_tank_cost(_immersion_system()) == pytest.approx(70_000.0)

    def test_breakdown(self):
        system = _immersion_system()
        costs = immersion_cooling_capex(system)
        assert costs.equipment == pytest.approx(70_000.0 + 2 * 800.0 + 2 * 5000.0 / 15)
        assert costs.installation == pytest.approx(17_500.0)
        assert costs.infrastructure == pytest.approx(system.design_facility_power_kw * 200.0)
        assert costs.coolant == pytest.approx(2 * 575 * 25.0)

    def test_total_is_sum_of_parts(self):
        costs = immersion_cooling_capex(_immersion_system(), Currency.SAR)
        parts = costs.equipment + costs.installation + costs.infrastructure + costs.coolant
        assert costs.total == pytest.approx(parts)
