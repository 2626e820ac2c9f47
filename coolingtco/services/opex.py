"""Year-by-year operating cost projection with escalation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..catalog import DEFAULT_CATALOG, Currency, EquipmentCatalog
from ..config import HOURS_PER_YEAR
from ..schemas import FinancialConfig
from .capex import immersion_tank_cost
from .regional import convert_from_usd, exchange_rate, regional_factors
from .sizing import AirCoolingSystem, ImmersionCoolingSystem


@dataclass(frozen=True)
class OpexCosts:
    energy: float
    maintenance: float
    labor: float
    coolant: float | None = None

    @property
    def total(self) -> float:
        return self.energy + self.maintenance + self.labor + (self.coolant or 0.0)


@dataclass(frozen=True)
class OpexYear:
    year: int
    air_cooling: OpexCosts
    immersion_cooling: OpexCosts

    @property
    def savings(self) -> float:
        return self.air_cooling.total - self.immersion_cooling.total

    @property
    def savings_percent(self) -> float:
        if self.air_cooling.total == 0:
            return 0.0
        return self.savings / self.air_cooling.total * 100.0


@dataclass(frozen=True)
class OpexAssumptions:
    """Operating rates in the requested currency."""

    analysis_years: int
    currency: Currency
    energy_cost_kwh: float
    labor_cost_per_hour: float
    energy_escalation_rate: float
    maintenance_escalation_rate: float
    labor_escalation_rate: float

    @classmethod
    def from_financial(cls, financial: FinancialConfig) -> "OpexAssumptions":
        """Fill regional defaults for energy and labor rates the user left out."""
        region = regional_factors(financial.region)
        energy_cost = financial.energy_cost_kwh
        if energy_cost is None:
            energy_cost = convert_from_usd(region.default_energy_cost, financial.currency)
        labor_cost = financial.labor_cost_per_hour
        if labor_cost is None:
            labor_cost = convert_from_usd(region.labor_cost_per_hour, financial.currency)
        return cls(
            analysis_years=financial.analysis_years,
            currency=financial.currency,
            energy_cost_kwh=energy_cost,
            labor_cost_per_hour=labor_cost,
            energy_escalation_rate=financial.energy_escalation_rate,
            maintenance_escalation_rate=financial.maintenance_escalation_rate,
            labor_escalation_rate=financial.labor_escalation_rate,
        )


def escalation_factors(rate: float, years: int) -> np.ndarray:
    """``(1 + rate) ** (year - 1)`` for years ``1..years``."""
    return np.power(1.0 + rate, np.arange(years, dtype=float))


def annual_energy_kwh(average_facility_power_kw: float) -> float:
    return average_facility_power_kw * HOURS_PER_YEAR


def project_opex(
    air: AirCoolingSystem,
    immersion: ImmersionCoolingSystem,
    assumptions: OpexAssumptions,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> tuple[OpexYear, ...]:
    """Project both systems' operating costs for every analysis year.

    Each year depends only on the base amounts and its own escalation term.
    """
    rate = exchange_rate(assumptions.currency)
    years = assumptions.analysis_years
    energy_growth = escalation_factors(assumptions.energy_escalation_rate, years)
    maintenance_growth = escalation_factors(assumptions.maintenance_escalation_rate, years)
    labor_growth = escalation_factors(assumptions.labor_escalation_rate, years)

    air_energy = annual_energy_kwh(air.average_facility_power_kw) * assumptions.energy_cost_kwh
    air_equipment_usd = air.rack_count * air.rack.unit_cost + air.hvac_units * air.hvac.unit_cost
    air_maintenance = air_equipment_usd * catalog.air.maintenance_fraction * rate
    air_labor = air.rack_count * catalog.air.labor_hours_per_rack * assumptions.labor_cost_per_hour

    factors = catalog.immersion
    immersion_energy = annual_energy_kwh(immersion.average_facility_power_kw) * assumptions.energy_cost_kwh
    immersion_maintenance = immersion_tank_cost(immersion) * factors.maintenance_fraction * rate
    immersion_labor = immersion.tank_count * factors.labor_hours_per_tank * assumptions.labor_cost_per_hour
    coolant_top_up = (
        immersion.coolant_liters * immersion.coolant.cost_per_liter * factors.coolant_replacement_fraction * rate
    )

    projection: list[OpexYear] = []
    for index in range(years):
        year = index + 1
        replacement_year = year % factors.coolant_replacement_cycle_years == 0
        projection.append(
            OpexYear(
                year=year,
                air_cooling=OpexCosts(
                    energy=air_energy * float(energy_growth[index]),
                    maintenance=air_maintenance * float(maintenance_growth[index]),
                    labor=air_labor * float(labor_growth[index]),
                ),
                immersion_cooling=OpexCosts(
                    energy=immersion_energy * float(energy_growth[index]),
                    maintenance=immersion_maintenance * float(maintenance_growth[index]),
                    labor=immersion_labor * float(labor_growth[index]),
                    coolant=coolant_top_up * float(maintenance_growth[index]) if replacement_year else 0.0,
                ),
            )
        )
    return tuple(projection)
