"""PUE model and the arithmetic guards shared by every calculator stage."""

from __future__ import annotations

import math
from functools import reduce

from ..catalog import DEFAULT_CATALOG, EquipmentCatalog

MIN_PUE = 1.0


def clamp_pue(value: float) -> float:
    """Floor a PUE at 1.0; anything lower is physically impossible."""
    return max(value, MIN_PUE)


def clamp_non_negative(value: float) -> float:
    """Floor a savings-style quantity at zero."""
    return max(value, 0.0)


def round_currency(value: float) -> int:
    """Round a monetary amount half-up to whole currency units."""
    return int(math.floor(value + 0.5))


def pue_from_efficiencies(*efficiencies: float) -> float:
    """PUE as the reciprocal of the efficiency chain, floored at 1.0."""
    product = reduce(lambda acc, factor: acc * factor, efficiencies, 1.0)
    return clamp_pue(1.0 / product)


def air_cooling_pue(
    hvac_efficiency: float,
    power_distribution_efficiency: float,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> float:
    """Air PUE: user efficiencies times the catalog's UPS, distribution and airflow losses."""
    factors = catalog.air
    return pue_from_efficiencies(
        hvac_efficiency,
        power_distribution_efficiency,
        factors.ups_efficiency,
        factors.cooling_distribution_efficiency,
        factors.airflow_efficiency,
    )


def immersion_cooling_pue(pumping_efficiency: float, heat_exchanger_efficiency: float) -> float:
    return pue_from_efficiencies(pumping_efficiency, heat_exchanger_efficiency)


def improvement_percent(pue_air: float, pue_immersion: float) -> float:
    """Relative PUE reduction, never reported below zero."""
    return clamp_non_negative((pue_air - pue_immersion) / pue_air * 100.0)
