"""Tabular views of calculation results for CSV export."""

from __future__ import annotations

import pandas as pd

from ..schemas import CalculationResults

ANNUAL_COLUMNS: tuple[str, ...] = (
    "year",
    "air_energy",
    "air_maintenance",
    "air_labor",
    "air_total",
    "immersion_energy",
    "immersion_maintenance",
    "immersion_labor",
    "immersion_coolant",
    "immersion_total",
    "opex_savings",
    "opex_savings_percent",
    "tco_air_cooling",
    "tco_immersion_cooling",
    "tco_savings",
    "npv_savings",
)


def annual_table(results: CalculationResults) -> pd.DataFrame:
    """One row per analysis year joining OPEX and cumulative TCO.

    Args:
        results: Output of a completed calculation.

    Returns:
        A frame with ``ANNUAL_COLUMNS``, indexed from zero, ordered by year.
    """
    opex = pd.DataFrame(
        [
            {
                "year": row.year,
                "air_energy": row.air_cooling.energy,
                "air_maintenance": row.air_cooling.maintenance,
                "air_labor": row.air_cooling.labor,
                "air_total": row.air_cooling.total,
                "immersion_energy": row.immersion_cooling.energy,
                "immersion_maintenance": row.immersion_cooling.maintenance,
                "immersion_labor": row.immersion_cooling.labor,
                "immersion_coolant": row.immersion_cooling.coolant or 0,
                "immersion_total": row.immersion_cooling.total,
                "opex_savings": row.savings,
                "opex_savings_percent": round(row.savings_percent, 2),
            }
            for row in results.breakdown.opex_annual
        ]
    )
    tco = pd.DataFrame(
        [
            {
                "year": row.year,
                "tco_air_cooling": row.air_cooling,
                "tco_immersion_cooling": row.immersion_cooling,
                "tco_savings": row.savings,
                "npv_savings": row.npv_savings,
            }
            for row in results.breakdown.tco_cumulative
        ]
    )
    table = opex.merge(tco, on="year", how="inner").sort_values("year").reset_index(drop=True)
    return table.loc[:, list(ANNUAL_COLUMNS)]

