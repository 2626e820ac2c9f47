"""PUE comparison and the environmental metrics derived from it."""

from __future__ import annotations

from ..catalog import Region
from ..config import HOURS_PER_YEAR
from ..schemas import EnvironmentalImpact, PueAnalysis
from .pue import clamp_non_negative, improvement_percent
from .regional import regional_factors
from .sizing import AirCoolingSystem, ImmersionCoolingSystem


def analyze_pue(air: AirCoolingSystem, immersion: ImmersionCoolingSystem) -> PueAnalysis:
    """Compare both systems' PUE and annual facility energy."""
    energy_savings = clamp_non_negative(
        (air.average_facility_power_kw - immersion.average_facility_power_kw) * HOURS_PER_YEAR
    )
    return PueAnalysis(
        air_cooling=air.pue,
        immersion_cooling=immersion.pue,
        improvement_percent=improvement_percent(air.pue, immersion.pue),
        energy_savings_kwh_annual=energy_savings,
        immersion_exceeds_air=immersion.pue > air.pue,
    )


def environmental_impact(pue: PueAnalysis, region: Region | str) -> EnvironmentalImpact:
    """Translate annual energy savings into carbon and water savings for *region*.

    ``carbon_footprint_reduction_percent`` is ``improvement_percent / PUE_air * 100``.
    """
    factors = regional_factors(region)
    energy_savings = pue.energy_savings_kwh_annual
    return EnvironmentalImpact(
        carbon_savings_kg_co2_annual=energy_savings * factors.carbon_factor_kg_per_kwh,
        water_savings_gallons_annual=energy_savings * factors.water_factor_gal_per_kwh,
        energy_savings_kwh_annual=energy_savings,
        carbon_footprint_reduction_percent=pue.improvement_percent / pue.air_cooling * 100.0,
    )
