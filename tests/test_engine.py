"""Tests for coolingtco.services.engine: end-to-end calculation properties."""

from __future__ import annotations

import logging
import math

import pytest

from coolingtco.config import CALCULATION_VERSION
from coolingtco.errors import ConfigurationError, ValidationError
from coolingtco.services.engine import TCOCalculationEngine, calculate, configuration_hash
from coolingtco.services.validator import parse_configuration


def _configuration(
    rack_count: int = 77,
    power_per_rack_kw: float = 15.5,
    target_power_kw: float = 1193.5,
    region: str = "US",
    analysis_years: int = 5,
) -> dict:
    """Build a raw configuration around the reference 77-rack deployment."""
    return {
        "air_cooling": {
            "input_method": "rack_count",
            "rack_count": rack_count,
            "power_per_rack_kw": power_per_rack_kw,
            "hvac_efficiency": 0.83,
            "power_distribution_efficiency": 0.94,
        },
        "immersion_cooling": {
            "input_method": "auto_optimize",
            "target_power_kw": target_power_kw,
            "pumping_efficiency": 0.92,
            "heat_exchanger_efficiency": 0.95,
        },
        "financial": {"analysis_years": analysis_years, "region": region, "energy_cost_kwh": 0.12},
    }


def _numbers(value):
    """Yield every numeric leaf of a dumped result tree."""
    if isinstance(value, dict):
        for item in value.values():
            yield from _numbers(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _numbers(item)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        yield value


class TestReferenceDeployment:
    def test_pue_improvement(self):
        results = calculate(_configuration())
        assert 35 < results.pue_analysis.improvement_percent < 42

    def test_energy_savings_mwh(self):
        results = calculate(_configuration())
        assert 1000 < results.environmental.energy_savings_kwh_annual / 1000 < 1300

    def test_carbon_savings_tons(self):
        results = calculate(_configuration())
        assert 400 < results.environmental.carbon_savings_kg_co2_annual / 1000 < 520

    def test_tank_layout(self):
        system = calculate(_configuration()).breakdown.system
        assert [(t.size, t.quantity) for t in system.immersion_tanks] == [("23U", 25), ("22U", 1)]
        assert system.air_rack_count == 77

    def test_immersion_saves_money(self):
        summary = calculate(_configuration()).summary
        assert summary.total_savings > 0
        assert summary.tco_air_cooling > summary.tco_immersion_cooling
        assert summary.payback_achievable

    def test_identity_fields(self):
        results = calculate(_configuration())
        assert results.calculation_version == CALCULATION_VERSION
        assert len(results.configuration_hash) == 64
        assert results.calculated_at.tzinfo is not None


class TestInvariants:
    @pytest.mark.parametrize("years", [1, 5, 10])
    def test_series_lengths_match_years(self, years):
        results = calculate(_configuration(analysis_years=years))
        assert len(results.breakdown.opex_annual) == years
        assert len(results.charts.tco_progression) == years
        assert len(results.breakdown.tco_cumulative) == years
        assert len(results.breakdown.maintenance_schedule) == years

    def test_energy_savings_exactly_equal(self):
        results = calculate(_configuration())
        assert results.environmental.energy_savings_kwh_annual == results.pue_analysis.energy_savings_kwh_annual

    def test_pue_bounds(self):
        results = calculate(_configuration())
        assert results.pue_analysis.air_cooling >= 1.0
        assert results.pue_analysis.immersion_cooling >= 1.0
        assert 0 <= results.pue_analysis.improvement_percent < 100

    def test_capex_totals_are_sums(self):
        capex = calculate(_configuration()).breakdown.capex
        air = capex.air_cooling
        immersion = capex.immersion_cooling
        assert abs(air.total - (air.equipment + air.installation + air.infrastructure)) <= 2
        parts = immersion.equipment + immersion.installation + immersion.infrastructure + immersion.coolant
        assert abs(immersion.total - parts) <= 2

    def test_major_overhaul_in_fifth_year(self):
        schedule = calculate(_configuration()).breakdown.maintenance_schedule
        assert [year.major_overhauls > 0 for year in schedule] == [False, False, False, False, True]

    def test_chart_cumulative_savings_match_tco(self):
        results = calculate(_configuration())
        last = results.charts.tco_progression[-1]
        assert last.cumulative_savings == results.breakdown.tco_cumulative[-1].savings


class TestMonotonicity:
    def test_more_racks_never_reduce_environmental_savings(self):
        previous = None
        for rack_count in (20, 40, 77, 120, 300):
            environmental = calculate(_configuration(rack_count=rack_count)).environmental
            if previous is not None:
                assert environmental.energy_savings_kwh_annual >= previous.energy_savings_kwh_annual
                assert environmental.carbon_savings_kg_co2_annual >= previous.carbon_savings_kg_co2_annual
                assert environmental.water_savings_gallons_annual >= previous.water_savings_gallons_annual
            previous = environmental


class TestRegionalSensitivity:
    def test_carbon_ordering(self):
        carbon = {
            region: calculate(_configuration(region=region)).environmental.carbon_savings_kg_co2_annual
            for region in ("US", "EU", "ME")
        }
        assert carbon["ME"] > carbon["US"] > carbon["EU"]

    def test_unknown_region_behaves_like_us(self):
        us = calculate(_configuration(region="US"))
        unknown = calculate(_configuration(region="ATLANTIS"))
        assert unknown.environmental == us.environmental
        assert unknown.summary == us.summary


class TestIdempotence:
    def test_same_input_same_output(self):
        first = calculate(_configuration())
        second = calculate(_configuration())
        assert first.summary == second.summary
        assert first.breakdown == second.breakdown
        assert first.environmental == second.environmental
        assert first.pue_analysis == second.pue_analysis
        assert first.configuration_hash == second.configuration_hash
        assert first.calculation_id != second.calculation_id

    def test_hash_ignores_key_order(self):
        raw = _configuration()
        reordered = {key: raw[key] for key in reversed(list(raw))}
        assert configuration_hash(parse_configuration(raw)) == configuration_hash(parse_configuration(reordered))


_SIGNED_SUMMARY_FIELDS = {"total_savings", "total_opex_savings", "annual_opex_savings", "npv_savings", "roi_percent"}


class TestEdgeScenarios:
    def test_small_matching_deployment(self):
        results = calculate(_configuration(rack_count=1, power_per_rack_kw=0.1, target_power_kw=0.1))
        summary = results.summary.model_dump(mode="json")
        assert all(math.isfinite(value) and value >= 0 for value in _numbers(summary))
        assert all(value >= 0 for value in _numbers(results.environmental.model_dump()))
        assert all(value >= 0 for value in _numbers(results.pue_analysis.model_dump()))
        assert results.summary.payback_months == 0.0

    def test_single_small_rack_against_reference_immersion(self):
        results = calculate(_configuration(rack_count=1, power_per_rack_kw=0.1))
        summary = results.summary.model_dump(mode="json")
        assert all(math.isfinite(value) for value in _numbers(results.model_dump(mode="json")))
        unsigned = {key: value for key, value in summary.items() if key not in _SIGNED_SUMMARY_FIELDS}
        assert all(value >= 0 for value in _numbers(unsigned))
        assert results.summary.payback_achievable is False
        assert results.summary.payback_months == 5 * 12
        assert results.summary.total_savings < 0
        assert results.pue_analysis.air_cooling >= 1.0
        assert results.pue_analysis.immersion_cooling >= 1.0
        assert all(value >= 0 for value in _numbers(results.environmental.model_dump()))

    def test_extreme_deployment(self):
        results = calculate(_configuration(rack_count=10_000, power_per_rack_kw=100.0, target_power_kw=1_000_000.0))
        dumped = results.model_dump(mode="json")
        assert all(math.isfinite(value) for value in _numbers(dumped))

    def test_invalid_mapping_raises_before_computing(self):
        raw = _configuration()
        raw["financial"]["analysis_years"] = 0
        with pytest.raises(ValidationError):
            calculate(raw)

    def test_unsupported_manual_tank_raises_configuration_error(self):
        raw = _configuration()
        raw["immersion_cooling"] = {
            "input_method": "manual_config",
            "tank_configurations": [{"size": "7U", "quantity": 1}],
        }
        with pytest.raises(ConfigurationError):
            calculate(raw)


class TestCurrency:
    def test_eur_amounts_are_scaled(self):
        usd = calculate(_configuration())
        raw = _configuration()
        raw["financial"]["currency"] = "EUR"
        raw["financial"]["energy_cost_kwh"] = 0.12 * 0.85
        eur = calculate(raw)
        assert eur.summary.currency.value == "EUR"
        assert eur.summary.tco_air_cooling == pytest.approx(usd.summary.tco_air_cooling * 0.85, rel=1e-4)


class TestLogging:
    def test_logs_processing_time(self, caplog):
        with caplog.at_level(logging.INFO, logger="coolingtco.services.engine"):
            results = calculate(_configuration())
        assert results.calculation_id in caplog.text

    def test_slow_calculation_warns(self, caplog):
        engine = TCOCalculationEngine(slow_calculation_ms=0.0)
        with caplog.at_level(logging.WARNING, logger="coolingtco.services.engine"):
            engine.calculate(_configuration())
        assert "exceeded" in caplog.text
