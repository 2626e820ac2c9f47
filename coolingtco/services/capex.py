"""Capital expenditure for the air-cooled baseline and the immersion system."""

from __future__ import annotations

from dataclasses import dataclass

from ..catalog import DEFAULT_CATALOG, Currency, EquipmentCatalog
from .regional import exchange_rate
from .sizing import AirCoolingSystem, ImmersionCoolingSystem


@dataclass(frozen=True)
class CapexCosts:
    """Unrounded capital cost split in the requested currency."""

    equipment: float
    installation: float
    infrastructure: float
    coolant: float | None = None

    @property
    def total(self) -> float:
        return self.equipment + self.installation + self.infrastructure + (self.coolant or 0.0)


def air_cooling_capex(
    system: AirCoolingSystem,
    currency: Currency = Currency.USD,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> CapexCosts:
    """Racks plus HVAC plant and power infrastructure sized on design facility load."""
    rate = exchange_rate(currency)
    hvac_plant = system.hvac_units * (system.hvac.unit_cost + system.hvac.installation_cost)
    power_plant = system.design_facility_power_kw * catalog.air.power_infrastructure_cost_per_kw
    return CapexCosts(
        equipment=system.rack_count * system.rack.unit_cost * rate,
        installation=system.rack_count * system.rack.installation_cost * rate,
        infrastructure=(hvac_plant + power_plant) * rate,
    )


def immersion_tank_cost(system: ImmersionCoolingSystem) -> float:
    """List price of all tanks in USD."""
    return sum(selection.quantity * selection.spec.unit_cost for selection in system.tanks)


def immersion_cooling_capex(
    system: ImmersionCoolingSystem,
    currency: Currency = Currency.USD,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> CapexCosts:
    """Tanks, pumps and heat exchangers, first coolant fill and lighter infrastructure."""
    rate = exchange_rate(currency)
    factors = catalog.immersion
    tanks = immersion_tank_cost(system)
    pumps = system.tank_count * factors.pump_system_cost_per_tank
    heat_exchangers = system.tank_count * factors.heat_exchanger_cost_per_tank
    return CapexCosts(
        equipment=(tanks + pumps + heat_exchangers) * rate,
        installation=tanks * factors.installation_fraction * rate,
        infrastructure=system.design_facility_power_kw * factors.infrastructure_cost_per_kw * rate,
        coolant=system.coolant_liters * system.coolant.cost_per_liter * rate,
    )
