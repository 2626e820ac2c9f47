"""Physical sizing of both cooling systems ahead of costing."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ..catalog import DEFAULT_CATALOG, CoolantSpec, EquipmentCatalog, HvacSpec, RackSpec, TankSpec
from ..errors import ConfigurationError
from ..schemas import (
    AirCoolingRackCount,
    AirCoolingTotalPower,
    ImmersionAutoOptimize,
    ImmersionManualConfig,
)
from .pue import air_cooling_pue, immersion_cooling_pue

logger = logging.getLogger(__name__)

_POWER_TOLERANCE_KW = 1e-9


@dataclass(frozen=True)
class AirCoolingSystem:
    it_power_kw: float
    rack_count: int
    rack: RackSpec
    hvac: HvacSpec
    hvac_units: int
    pue: float
    load_factor: float

    @property
    def design_facility_power_kw(self) -> float:
        """Facility power at full nameplate load; sizes the electrical plant."""
        return self.it_power_kw * self.pue

    @property
    def average_facility_power_kw(self) -> float:
        """Facility power at the average IT load; drives energy use."""
        return self.it_power_kw * self.load_factor * self.pue


@dataclass(frozen=True)
class TankSelection:
    spec: TankSpec
    quantity: int
    power_kw: float


@dataclass(frozen=True)
class ImmersionCoolingSystem:
    it_power_kw: float
    tanks: tuple[TankSelection, ...]
    coolant: CoolantSpec
    pue: float
    load_factor: float

    @property
    def tank_count(self) -> int:
        return sum(selection.quantity for selection in self.tanks)

    @property
    def coolant_liters(self) -> float:
        return sum(selection.quantity * selection.spec.coolant_liters for selection in self.tanks)

    @property
    def design_facility_power_kw(self) -> float:
        return self.it_power_kw * self.pue

    @property
    def average_facility_power_kw(self) -> float:
        return self.it_power_kw * self.load_factor * self.pue


def size_air_cooling(
    config: AirCoolingRackCount | AirCoolingTotalPower,
    load_factor: float,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> AirCoolingSystem:
    """Derive rack count, IT load and HVAC plant for the air-cooled baseline."""
    rack = catalog.rack(config.rack_type)
    if isinstance(config, AirCoolingRackCount):
        rack_count = config.rack_count
        it_power_kw = config.rack_count * config.power_per_rack_kw
    else:
        it_power_kw = config.total_power_kw
        rack_count = math.ceil(it_power_kw / rack.power_capacity_kw)

    hvac = catalog.hvac(config.hvac_class)
    hvac_units = max(1, math.ceil(it_power_kw / hvac.cooling_capacity_kw))
    return AirCoolingSystem(
        it_power_kw=it_power_kw,
        rack_count=rack_count,
        rack=rack,
        hvac=hvac,
        hvac_units=hvac_units,
        pue=air_cooling_pue(config.hvac_efficiency, config.power_distribution_efficiency, catalog),
        load_factor=load_factor,
    )


def optimize_tank_configuration(
    target_power_kw: float,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> tuple[TankSelection, ...]:
    """Pick the fewest tanks whose combined capacity covers *target_power_kw*.

    Largest tanks are placed first; any remainder is covered by the single
    cheapest tank able to hold it, so the count stays minimal and ties go to
    the lowest cost.

    Raises:
        ConfigurationError: The catalog has no tanks or the required count
            exceeds the catalog's tank limit.
    """
    if not catalog.tanks:
        raise ConfigurationError(
            "No immersion tanks are available in the equipment catalog",
            hint="Supply a catalog with at least one tank size",
        )

    largest = max(catalog.tanks, key=lambda spec: (spec.max_power_kw, -spec.unit_cost))
    full_tanks, remainder_kw = divmod(target_power_kw, largest.max_power_kw)
    full_tanks = int(full_tanks)

    filler: TankSpec | None = None
    if remainder_kw > _POWER_TOLERANCE_KW:
        fitting = [spec for spec in catalog.tanks if spec.max_power_kw >= remainder_kw]
        filler = min(fitting, key=lambda spec: (spec.unit_cost, spec.max_power_kw))
        if filler == largest:
            full_tanks += 1
            filler = None

    tank_count = full_tanks + (1 if filler else 0)
    limit = catalog.immersion.max_tank_count
    if limit is not None and tank_count > limit:
        raise ConfigurationError(
            f"Target power {target_power_kw:g} kW needs {tank_count} tanks, above the limit of {limit}",
            hint="Reduce target_power_kw or describe the layout with manual_config",
        )

    selections: list[TankSelection] = []
    if full_tanks:
        selections.append(TankSelection(largest, full_tanks, full_tanks * largest.max_power_kw))
    if filler is not None:
        selections.append(TankSelection(filler, 1, filler.max_power_kw))
    logger.debug(
        "Auto-sized %.1f kW onto %s",
        target_power_kw,
        ", ".join(f"{s.quantity}x{s.spec.size}" for s in selections),
    )
    return tuple(selections)


def manual_tank_selection(
    config: ImmersionManualConfig,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> tuple[TankSelection, ...]:
    """Resolve manual tank rows against the catalog, preserving their order."""
    selections: list[TankSelection] = []
    for row in config.tank_configurations:
        spec = catalog.tank(row.size)
        if spec is None:
            raise ConfigurationError(
                f"Unsupported tank size {row.size}",
                hint=f"Use one of: {', '.join(catalog.tank_sizes)}",
            )
        power_kw = spec.height_units * row.power_density_kw_per_u * row.quantity
        selections.append(TankSelection(spec, row.quantity, power_kw))
    return tuple(selections)


def size_immersion_cooling(
    config: ImmersionAutoOptimize | ImmersionManualConfig,
    load_factor: float,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> ImmersionCoolingSystem:
    """Resolve the tank layout and IT load for the immersion system."""
    if isinstance(config, ImmersionAutoOptimize):
        tanks = optimize_tank_configuration(config.target_power_kw, catalog)
        it_power_kw = config.target_power_kw
    else:
        tanks = manual_tank_selection(config, catalog)
        it_power_kw = sum(selection.power_kw for selection in tanks)

    return ImmersionCoolingSystem(
        it_power_kw=it_power_kw,
        tanks=tanks,
        coolant=catalog.coolant(config.coolant_type),
        pue=immersion_cooling_pue(config.pumping_efficiency, config.heat_exchanger_efficiency),
        load_factor=load_factor,
    )
