"""Versioned static lookup tables: equipment pricing, regional factors, currencies.

All prices are USD list prices; conversion to the requested currency happens
in :mod:`coolingtco.services.regional`. Tables are frozen dataclasses built
once at import and shared read-only between calculations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, TypeVar

from .errors import ConfigurationError

_Spec = TypeVar("_Spec")


class Region(str, Enum):
    US = "US"
    EU = "EU"
    ME = "ME"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    SAR = "SAR"
    AED = "AED"


class RackType(str, Enum):
    STANDARD_42U = "42U_STANDARD"
    HIGH_DENSITY_42U = "42U_HIGH_DENSITY"
    STANDARD_45U = "45U_STANDARD"


class HvacClass(str, Enum):
    CRAC_30KW = "crac_30kw"
    CRAH_60KW = "crah_60kw"


class CoolantType(str, Enum):
    SYNTHETIC = "synthetic"
    MINERAL_OIL = "mineral_oil"
    FLUORINATED = "fluorinated"


DEFAULT_REGION = Region.US
DEFAULT_CURRENCY = Currency.USD


@dataclass(frozen=True)
class RackSpec:
    rack_type: RackType
    height_units: int
    power_capacity_kw: float
    unit_cost: float
    installation_cost: float


@dataclass(frozen=True)
class HvacSpec:
    hvac_class: HvacClass
    cooling_capacity_kw: float
    unit_cost: float
    installation_cost: float


@dataclass(frozen=True)
class TankSpec:
    size: str
    height_units: int
    max_power_kw: float
    coolant_liters: float
    unit_cost: float


@dataclass(frozen=True)
class CoolantSpec:
    coolant_type: CoolantType
    cost_per_liter: float


@dataclass(frozen=True)
class AirCoolingFactors:
    """Air-side losses that apply on top of the user supplied efficiencies."""

    ups_efficiency: float = 0.94
    cooling_distribution_efficiency: float = 0.90
    airflow_efficiency: float = 0.81
    power_infrastructure_cost_per_kw: float = 500.0
    maintenance_fraction: float = 0.08
    labor_hours_per_rack: float = 24.0


@dataclass(frozen=True)
class ImmersionFactors:
    installation_fraction: float = 0.25
    pump_system_cost_per_tank: float = 800.0
    heat_exchanger_cost_per_tank: float = 5000.0 / 15
    infrastructure_cost_per_kw: float = 200.0
    maintenance_fraction: float = 0.03
    labor_hours_per_tank: float = 8.0
    coolant_replacement_cycle_years: int = 2
    coolant_replacement_fraction: float = 0.10
    major_overhaul_years: int = 5
    max_tank_count: int | None = None


@dataclass(frozen=True)
class RegionalFactors:
    region: Region
    carbon_factor_kg_per_kwh: float
    default_energy_cost: float
    water_factor_gal_per_kwh: float
    labor_cost_per_hour: float


@dataclass(frozen=True)
class EquipmentCatalog:
    """One published revision of the equipment price book."""

    version: str
    racks: tuple[RackSpec, ...]
    hvac_units: tuple[HvacSpec, ...]
    tanks: tuple[TankSpec, ...]
    coolants: tuple[CoolantSpec, ...]
    air: AirCoolingFactors = AirCoolingFactors()
    immersion: ImmersionFactors = ImmersionFactors()

    def rack(self, rack_type: RackType) -> RackSpec:
        return _lookup("rack type", rack_type, self.racks, lambda spec: spec.rack_type)

    def hvac(self, hvac_class: HvacClass) -> HvacSpec:
        return _lookup("HVAC class", hvac_class, self.hvac_units, lambda spec: spec.hvac_class)

    def coolant(self, coolant_type: CoolantType) -> CoolantSpec:
        return _lookup("coolant type", coolant_type, self.coolants, lambda spec: spec.coolant_type)

    def tank(self, size: str) -> TankSpec | None:
        """Return the tank spec for *size* (e.g. ``"23U"``) or ``None``."""
        return next((spec for spec in self.tanks if spec.size == size), None)

    @property
    def tank_sizes(self) -> list[str]:
        return [spec.size for spec in self.tanks]


def _lookup(kind: str, key: Enum, specs: tuple[_Spec, ...], key_of) -> _Spec:
    """Find the catalog row for *key* or raise :class:`ConfigurationError`."""
    spec = next((spec for spec in specs if key_of(spec) == key), None)
    if spec is None:
        available = ", ".join(key_of(row).value for row in specs) or "none"
        raise ConfigurationError(f"Unsupported {kind} {key.value}", hint=f"Catalog offers: {available}")
    return spec


_TANK_COST_PER_U = 35_000.0 / 23
_TANK_HEIGHTS = (1, 2, 4, 6, 8, 10, 12, 14, 16, 18, 20, 22, 23)

DEFAULT_CATALOG = EquipmentCatalog(
    version="2024.1",
    racks=(
        RackSpec(RackType.STANDARD_42U, 42, 15.0, 2500.0, 1000.0),
        RackSpec(RackType.HIGH_DENSITY_42U, 42, 25.0, 3500.0, 1200.0),
        RackSpec(RackType.STANDARD_45U, 45, 18.0, 2800.0, 1100.0),
    ),
    hvac_units=(
        HvacSpec(HvacClass.CRAC_30KW, 30.0, 25_000.0, 8000.0),
        HvacSpec(HvacClass.CRAH_60KW, 60.0, 42_000.0, 12_000.0),
    ),
    tanks=tuple(
        TankSpec(
            size=f"{height}U",
            height_units=height,
            max_power_kw=2.0 * height,
            coolant_liters=25.0 * height,
            unit_cost=_TANK_COST_PER_U * height,
        )
        for height in _TANK_HEIGHTS
    ),
    coolants=(
        CoolantSpec(CoolantType.SYNTHETIC, 25.0),
        CoolantSpec(CoolantType.MINERAL_OIL, 10.0),
        CoolantSpec(CoolantType.FLUORINATED, 95.0),
    ),
)

REGIONAL_FACTORS: tuple[RegionalFactors, ...] = (
    RegionalFactors(Region.US, 0.4, 0.12, 0.5, 75.0),
    RegionalFactors(Region.EU, 0.3, 0.28, 0.4, 65.0),
    RegionalFactors(Region.ME, 0.5, 0.08, 0.7, 45.0),
)

# Units of each currency per 1 USD. Static rates; no live lookups.
EXCHANGE_RATES_FROM_USD: Mapping[Currency, float] = MappingProxyType(
    {
        Currency.USD: 1.0,
        Currency.EUR: 0.85,
        Currency.SAR: 3.75,
        Currency.AED: 3.67,
    }
)
