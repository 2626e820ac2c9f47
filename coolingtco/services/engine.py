"""TCO calculation engine: sizing, costing and impact analysis in one pure call."""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Mapping

from ..catalog import DEFAULT_CATALOG, Currency, EquipmentCatalog
from ..config import CALCULATION_VERSION
from ..schemas import (
    AnnualCosts,
    CalculationBreakdown,
    CalculationConfiguration,
    CalculationResults,
    CalculationSummary,
    CapexBreakdown,
    CapexComparison,
    MaintenanceYear,
    OpexBreakdown,
    PueAnalysis,
    SystemSizing,
    TankAllocation,
    TcoYear,
)
from .capex import CapexCosts, air_cooling_capex, immersion_cooling_capex
from .charts import build_chart_data
from .environmental import analyze_pue, environmental_impact
from .opex import OpexAssumptions, OpexCosts, OpexYear, project_opex
from .pue import round_currency
from .sizing import AirCoolingSystem, ImmersionCoolingSystem, size_air_cooling, size_immersion_cooling
from .tco import TcoAnalysis, aggregate_tco
from .validator import parse_configuration

logger = logging.getLogger(__name__)


def configuration_hash(config: CalculationConfiguration) -> str:
    """Stable SHA-256 of the normalized configuration, usable as a cache key."""
    canonical = json.dumps(config.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _capex_breakdown(costs: CapexCosts) -> CapexBreakdown:
    return CapexBreakdown(
        equipment=round_currency(costs.equipment),
        installation=round_currency(costs.installation),
        infrastructure=round_currency(costs.infrastructure),
        coolant=None if costs.coolant is None else round_currency(costs.coolant),
        total=round_currency(costs.total),
    )


def _opex_breakdown(costs: OpexCosts) -> OpexBreakdown:
    return OpexBreakdown(
        energy=round_currency(costs.energy),
        maintenance=round_currency(costs.maintenance),
        labor=round_currency(costs.labor),
        coolant=None if costs.coolant is None else round_currency(costs.coolant),
        total=round_currency(costs.total),
    )


def _maintenance_schedule(opex: tuple[OpexYear, ...], overhaul_years: int) -> tuple[MaintenanceYear, ...]:
    schedule = []
    for year in opex:
        air = year.air_cooling.maintenance
        immersion = year.immersion_cooling.maintenance
        overhaul = 2.0 * (air + immersion) if year.year % overhaul_years == 0 else 0.0
        schedule.append(
            MaintenanceYear(
                year=year.year,
                air_cooling_maintenance=round_currency(air),
                immersion_cooling_maintenance=round_currency(immersion),
                major_overhauls=round_currency(overhaul),
            )
        )
    return tuple(schedule)


def _system_sizing(air: AirCoolingSystem, immersion: ImmersionCoolingSystem) -> SystemSizing:
    return SystemSizing(
        air_it_power_kw=air.it_power_kw,
        air_rack_count=air.rack_count,
        air_hvac_units=air.hvac_units,
        air_facility_power_kw=air.average_facility_power_kw,
        immersion_it_power_kw=immersion.it_power_kw,
        immersion_tank_count=immersion.tank_count,
        immersion_tanks=tuple(
            TankAllocation(size=s.spec.size, quantity=s.quantity, power_kw=s.power_kw) for s in immersion.tanks
        ),
        immersion_coolant_liters=immersion.coolant_liters,
        immersion_facility_power_kw=immersion.average_facility_power_kw,
    )


def _summary(
    currency: Currency,
    air: AirCoolingSystem,
    immersion: ImmersionCoolingSystem,
    capex_air: CapexCosts,
    capex_immersion: CapexCosts,
    tco: TcoAnalysis,
    pue: PueAnalysis,
) -> CalculationSummary:
    return CalculationSummary(
        currency=currency,
        total_savings=round_currency(tco.total_savings),
        tco_air_cooling=round_currency(tco.tco_air_cooling),
        tco_immersion_cooling=round_currency(tco.tco_immersion_cooling),
        total_opex_savings=round_currency(tco.total_opex_savings),
        annual_opex_savings=round_currency(tco.annual_opex_savings),
        npv_savings=round_currency(tco.npv_savings),
        roi_percent=tco.roi_percent,
        payback_months=tco.payback_months,
        payback_achievable=tco.payback_achievable,
        pue_air_cooling=pue.air_cooling,
        pue_immersion_cooling=pue.immersion_cooling,
        efficiency_improvement_percent=pue.improvement_percent,
        cost_per_kw_air_cooling=round_currency(capex_air.total / air.it_power_kw),
        cost_per_kw_immersion_cooling=round_currency(capex_immersion.total / immersion.it_power_kw),
        cost_per_rack_equivalent=round_currency(capex_immersion.total / air.rack_count),
    )


@dataclass
class TCOCalculationEngine:
    """Stateless engine comparing an air-cooled baseline with immersion cooling."""

    catalog: EquipmentCatalog = DEFAULT_CATALOG
    slow_calculation_ms: float = 1000.0

    def calculate(self, configuration: CalculationConfiguration | Mapping[str, Any]) -> CalculationResults:
        """Run the full calculation for one configuration.

        Raises:
            ValidationError: *configuration* is structurally invalid.
            ConfigurationError: No equipment layout satisfies the configuration.
        """
        started = time.perf_counter()
        config = (
            configuration
            if isinstance(configuration, CalculationConfiguration)
            else parse_configuration(configuration)
        )
        financial = config.financial

        air = size_air_cooling(config.air_cooling, financial.it_load_factor, self.catalog)
        immersion = size_immersion_cooling(config.immersion_cooling, financial.it_load_factor, self.catalog)

        capex_air = air_cooling_capex(air, financial.currency, self.catalog)
        capex_immersion = immersion_cooling_capex(immersion, financial.currency, self.catalog)
        opex = project_opex(air, immersion, OpexAssumptions.from_financial(financial), self.catalog)
        tco = aggregate_tco(capex_air, capex_immersion, opex, financial.discount_rate)

        pue = analyze_pue(air, immersion)
        environmental = environmental_impact(pue, financial.region)

        capex = CapexComparison(
            air_cooling=_capex_breakdown(capex_air),
            immersion_cooling=_capex_breakdown(capex_immersion),
            capex_difference=round_currency(tco.capex_difference),
            savings=round_currency(-tco.capex_difference),
            savings_percent=-tco.capex_difference / capex_air.total * 100.0,
        )
        breakdown = CalculationBreakdown(
            capex=capex,
            opex_annual=tuple(
                AnnualCosts(
                    year=year.year,
                    air_cooling=_opex_breakdown(year.air_cooling),
                    immersion_cooling=_opex_breakdown(year.immersion_cooling),
                    savings=round_currency(year.savings),
                    savings_percent=year.savings_percent,
                )
                for year in opex
            ),
            tco_cumulative=tuple(
                TcoYear(
                    year=point.year,
                    air_cooling=round_currency(point.air_cooling),
                    immersion_cooling=round_currency(point.immersion_cooling),
                    savings=round_currency(point.savings),
                    npv_savings=round_currency(point.npv_savings),
                )
                for point in tco.progression
            ),
            maintenance_schedule=_maintenance_schedule(opex, self.catalog.immersion.major_overhaul_years),
            system=_system_sizing(air, immersion),
        )

        results = CalculationResults(
            summary=_summary(financial.currency, air, immersion, capex_air, capex_immersion, tco, pue),
            breakdown=breakdown,
            environmental=environmental,
            pue_analysis=pue,
            charts=build_chart_data(capex_air, capex_immersion, opex, tco, pue),
            calculation_id=str(uuid.uuid4()),
            calculated_at=datetime.now(UTC),
            configuration_hash=configuration_hash(config),
            calculation_version=CALCULATION_VERSION,
        )

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            "Calculation %s finished in %.1f ms (%d years, %s).",
            results.calculation_id,
            elapsed_ms,
            financial.analysis_years,
            financial.currency.value,
        )
        if elapsed_ms > self.slow_calculation_ms:
            logger.warning("Calculation %s exceeded %.0f ms.", results.calculation_id, self.slow_calculation_ms)
        return results


_DEFAULT_ENGINE = TCOCalculationEngine()


def calculate(configuration: CalculationConfiguration | Mapping[str, Any]) -> CalculationResults:
    """Calculate with the default catalog."""
    return _DEFAULT_ENGINE.calculate(configuration)
