"""Runtime settings and business constants for the TCO calculator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

CALCULATION_VERSION = "1.0"
HOURS_PER_YEAR = 8760


@dataclass(frozen=True)
class Settings:
    """Process-level settings read from the environment."""

    log_level: str = "INFO"
    slow_calculation_ms: float = 1000.0
    api_title: str = "Immersion Cooling TCO API"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``TCO_*`` environment variables (``.env`` aware)."""
        load_dotenv()
        return cls(
            log_level=os.getenv("TCO_LOG_LEVEL", cls.log_level).upper(),
            slow_calculation_ms=float(os.getenv("TCO_SLOW_CALCULATION_MS", cls.slow_calculation_ms)),
            api_title=os.getenv("TCO_API_TITLE", cls.api_title),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure console logging for the API and CLI entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


@dataclass(frozen=True)
class FinancialDefaults:
    """Financial assumptions used when the configuration omits them."""

    discount_rate: float = 0.08
    energy_escalation_rate: float = 0.03
    maintenance_escalation_rate: float = 0.025
    labor_escalation_rate: float = 0.04
    it_load_factor: float = 0.15


@dataclass(frozen=True)
class Range:
    """Inclusive numeric bounds."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class ValidationLimits:
    """Deployment bounds enforced by the configuration validator."""

    rack_count: Range = Range(1, 1000)
    power_per_rack_kw: Range = Range(0.1, 100.0)
    total_power_kw: Range = Range(1.0, 50_000.0)
    analysis_years: Range = Range(1, 10)
    discount_rate: Range = Range(0.01, 0.30)
    energy_cost_kwh: Range = Range(0.01, 1.0)
    escalation_rate: Range = Range(-0.10, 0.20)
    labor_cost_per_hour: Range = Range(10.0, 200.0)
    tank_quantity: Range = Range(1, 500)
    power_density_kw_per_u: Range = Range(0.5, 5.0)
    max_tank_rows: int = 50
    high_rack_count_warning: int = 500
    long_analysis_warning_years: int = 7


FINANCIAL_DEFAULTS = FinancialDefaults()
VALIDATION_LIMITS = ValidationLimits()
