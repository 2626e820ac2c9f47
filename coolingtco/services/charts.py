"""Chart-ready series built from the cost projections."""

from __future__ import annotations

from ..schemas import (
    CategoryComparison,
    ChartData,
    CostCategoryYear,
    PueAnalysis,
    PueComparison,
    TcoProgressionPoint,
)
from .capex import CapexCosts
from .opex import OpexYear
from .pue import round_currency
from .tco import TcoAnalysis


def compare(air_cooling: float | None, immersion_cooling: float | None) -> CategoryComparison:
    air = air_cooling or 0.0
    immersion = immersion_cooling or 0.0
    return CategoryComparison(
        air_cooling=round_currency(air),
        immersion_cooling=round_currency(immersion),
        difference=round_currency(air - immersion),
    )


def build_chart_data(
    capex_air: CapexCosts,
    capex_immersion: CapexCosts,
    opex: tuple[OpexYear, ...],
    tco: TcoAnalysis,
    pue: PueAnalysis,
) -> ChartData:
    """One TCO point and one cost-category entry per analysis year."""
    tco_progression = tuple(
        TcoProgressionPoint(
            year=point.year,
            air_cooling=round_currency(point.air_cooling),
            immersion_cooling=round_currency(point.immersion_cooling),
            savings=round_currency(year.savings),
            cumulative_savings=round_currency(point.savings),
        )
        for point, year in zip(tco.progression, opex)
    )
    cost_categories = tuple(
        CostCategoryYear(
            year=year.year,
            energy=compare(year.air_cooling.energy, year.immersion_cooling.energy),
            maintenance=compare(year.air_cooling.maintenance, year.immersion_cooling.maintenance),
            labor=compare(year.air_cooling.labor, year.immersion_cooling.labor),
            coolant=compare(year.air_cooling.coolant, year.immersion_cooling.coolant),
        )
        for year in opex
    )
    capex_categories = {
        "equipment": compare(capex_air.equipment, capex_immersion.equipment),
        "installation": compare(capex_air.installation, capex_immersion.installation),
        "infrastructure": compare(capex_air.infrastructure, capex_immersion.infrastructure),
        "coolant": compare(capex_air.coolant, capex_immersion.coolant),
    }
    return ChartData(
        tco_progression=tco_progression,
        cost_categories=cost_categories,
        pue_comparison=PueComparison(air_cooling=pue.air_cooling, immersion_cooling=pue.immersion_cooling),
        capex_categories=capex_categories,
    )
