"""Discounted total cost of ownership, savings, ROI and payback."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .capex import CapexCosts
from .opex import OpexYear

_SAVINGS_EPSILON = 1e-6


@dataclass(frozen=True)
class TcoYearValues:
    year: int
    air_cooling: float
    immersion_cooling: float
    savings: float
    npv_savings: float


@dataclass(frozen=True)
class TcoAnalysis:
    tco_air_cooling: float
    tco_immersion_cooling: float
    total_savings: float
    capex_difference: float
    total_opex_savings: float
    annual_opex_savings: float
    npv_savings: float
    roi_percent: float
    payback_months: float
    payback_achievable: bool
    progression: tuple[TcoYearValues, ...]


def discount_factors(rate: float, years: int) -> np.ndarray:
    """``1 / (1 + rate) ** year`` for years ``1..years``."""
    return 1.0 / np.power(1.0 + rate, np.arange(1, years + 1, dtype=float))


def payback_period_months(
    capex_difference: float,
    annual_opex_savings: float,
    analysis_years: int,
) -> tuple[float, bool]:
    """Months of OPEX savings needed to recover the extra immersion CAPEX.

    Returns ``(months, achievable)``. No extra CAPEX means immediate payback.
    When savings never recover the extra CAPEX the whole analysis horizon
    (``analysis_years * 12``) is reported with ``achievable=False``.
    """
    if capex_difference <= 0:
        return 0.0, True
    if annual_opex_savings <= _SAVINGS_EPSILON:
        return float(analysis_years * 12), False
    return abs(capex_difference / (annual_opex_savings / 12.0)), True


def aggregate_tco(
    capex_air: CapexCosts,
    capex_immersion: CapexCosts,
    opex: tuple[OpexYear, ...],
    discount_rate: float,
) -> TcoAnalysis:
    """Combine CAPEX with discounted OPEX into TCO and derived metrics."""
    factors = discount_factors(discount_rate, len(opex))
    air_discounted = np.array([year.air_cooling.total for year in opex]) * factors
    immersion_discounted = np.array([year.immersion_cooling.total for year in opex]) * factors
    air_cumulative = capex_air.total + np.cumsum(air_discounted)
    immersion_cumulative = capex_immersion.total + np.cumsum(immersion_discounted)

    progression = tuple(
        TcoYearValues(
            year=year.year,
            air_cooling=float(air_cumulative[index]),
            immersion_cooling=float(immersion_cumulative[index]),
            savings=float(air_cumulative[index] - immersion_cumulative[index]),
            npv_savings=float(air_discounted[index] - immersion_discounted[index]),
        )
        for index, year in enumerate(opex)
    )

    tco_air = float(air_cumulative[-1])
    tco_immersion = float(immersion_cumulative[-1])
    total_savings = tco_air - tco_immersion
    capex_difference = capex_immersion.total - capex_air.total
    total_opex_savings = sum(year.savings for year in opex)
    annual_opex_savings = total_opex_savings / len(opex)
    payback_months, achievable = payback_period_months(capex_difference, annual_opex_savings, len(opex))
    roi_percent = total_savings / capex_immersion.total * 100.0 if capex_immersion.total else 0.0

    return TcoAnalysis(
        tco_air_cooling=tco_air,
        tco_immersion_cooling=tco_immersion,
        total_savings=total_savings,
        capex_difference=capex_difference,
        total_opex_savings=total_opex_savings,
        annual_opex_savings=annual_opex_savings,
        npv_savings=float(np.sum(air_discounted - immersion_discounted)),
        roi_percent=roi_percent,
        payback_months=payback_months,
        payback_achievable=achievable,
        progression=progression,
    )
