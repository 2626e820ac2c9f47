"""Pydantic models for calculator input, results and HTTP payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .catalog import CoolantType, Currency, HvacClass, RackType, Region
from .config import FINANCIAL_DEFAULTS
from .services.regional import resolve_currency, resolve_region

_FROZEN = ConfigDict(frozen=True, allow_inf_nan=False)


# --- Configuration ----------------------------------------------------------


class _AirCoolingBase(BaseModel):
    """Efficiency and equipment choices shared by both air-cooling inputs."""

    model_config = _FROZEN

    rack_type: RackType = RackType.STANDARD_42U
    hvac_class: HvacClass = HvacClass.CRAC_30KW
    hvac_efficiency: float = Field(default=0.85, gt=0.0, le=1.0)
    power_distribution_efficiency: float = Field(default=0.95, gt=0.0, le=1.0)


class AirCoolingRackCount(_AirCoolingBase):
    input_method: Literal["rack_count"]
    rack_count: int = Field(..., gt=0, strict=True, examples=[77])
    power_per_rack_kw: float = Field(..., gt=0.0, examples=[15.5])


class AirCoolingTotalPower(_AirCoolingBase):
    input_method: Literal["total_power"]
    total_power_kw: float = Field(..., gt=0.0)


AirCoolingConfig = Annotated[
    Union[AirCoolingRackCount, AirCoolingTotalPower],
    Field(discriminator="input_method"),
]


class TankConfiguration(BaseModel):
    """One row of a manual tank layout."""

    model_config = _FROZEN

    size: str = Field(..., pattern=r"^\d+U$", examples=["23U"])
    quantity: int = Field(..., gt=0, strict=True)
    power_density_kw_per_u: float = Field(default=2.0, gt=0.0)


class _ImmersionCoolingBase(BaseModel):
    model_config = _FROZEN

    coolant_type: CoolantType = CoolantType.SYNTHETIC
    pumping_efficiency: float = Field(default=0.92, gt=0.0, le=1.0)
    heat_exchanger_efficiency: float = Field(default=0.95, gt=0.0, le=1.0)


class ImmersionAutoOptimize(_ImmersionCoolingBase):
    input_method: Literal["auto_optimize"]
    target_power_kw: float = Field(..., gt=0.0, examples=[1193.5])


class ImmersionManualConfig(_ImmersionCoolingBase):
    input_method: Literal["manual_config"]
    tank_configurations: tuple[TankConfiguration, ...] = Field(..., min_length=1)


ImmersionCoolingConfig = Annotated[
    Union[ImmersionAutoOptimize, ImmersionManualConfig],
    Field(discriminator="input_method"),
]


class FinancialConfig(BaseModel):
    model_config = _FROZEN

    analysis_years: int = Field(..., ge=1, le=10, strict=True)
    currency: Currency = Currency.USD
    region: Region = Region.US
    discount_rate: float = Field(
        default=FINANCIAL_DEFAULTS.discount_rate,
        gt=0.0,
        lt=1.0,
        validation_alias=AliasChoices("discount_rate", "custom_discount_rate"),
    )
    energy_cost_kwh: float | None = Field(
        default=None,
        gt=0.0,
        validation_alias=AliasChoices("energy_cost_kwh", "custom_energy_cost"),
    )
    energy_escalation_rate: float = Field(default=FINANCIAL_DEFAULTS.energy_escalation_rate, gt=-1.0)
    maintenance_escalation_rate: float = Field(default=FINANCIAL_DEFAULTS.maintenance_escalation_rate, gt=-1.0)
    labor_escalation_rate: float = Field(default=FINANCIAL_DEFAULTS.labor_escalation_rate, gt=-1.0)
    labor_cost_per_hour: float | None = Field(
        default=None,
        gt=0.0,
        validation_alias=AliasChoices("labor_cost_per_hour", "custom_labor_cost"),
    )
    it_load_factor: float = Field(default=FINANCIAL_DEFAULTS.it_load_factor, gt=0.0, le=1.0)

    @field_validator("region", mode="before")
    @classmethod
    def _fallback_region(cls, value: Any) -> Region:
        return resolve_region(value)

    @field_validator("currency", mode="before")
    @classmethod
    def _fallback_currency(cls, value: Any) -> Currency:
        return resolve_currency(value)


class CalculationConfiguration(BaseModel):
    """Complete calculator input."""

    model_config = _FROZEN

    air_cooling: AirCoolingConfig
    immersion_cooling: ImmersionCoolingConfig
    financial: FinancialConfig


# --- Results ----------------------------------------------------------------


class CapexBreakdown(BaseModel):
    model_config = _FROZEN

    equipment: int
    installation: int
    infrastructure: int
    coolant: int | None = None
    total: int


class CapexComparison(BaseModel):
    model_config = _FROZEN

    air_cooling: CapexBreakdown
    immersion_cooling: CapexBreakdown
    capex_difference: int
    savings: int
    savings_percent: float


class OpexBreakdown(BaseModel):
    model_config = _FROZEN

    energy: int
    maintenance: int
    labor: int
    coolant: int | None = None
    total: int


class AnnualCosts(BaseModel):
    model_config = _FROZEN

    year: int
    air_cooling: OpexBreakdown
    immersion_cooling: OpexBreakdown
    savings: int
    savings_percent: float


class TcoYear(BaseModel):
    model_config = _FROZEN

    year: int
    air_cooling: int
    immersion_cooling: int
    savings: int
    npv_savings: int


class MaintenanceYear(BaseModel):
    model_config = _FROZEN

    year: int
    air_cooling_maintenance: int
    immersion_cooling_maintenance: int
    major_overhauls: int


class TankAllocation(BaseModel):
    model_config = _FROZEN

    size: str
    quantity: int
    power_kw: float


class SystemSizing(BaseModel):
    """Physical sizing facts the costs were derived from."""

    model_config = _FROZEN

    air_it_power_kw: float
    air_rack_count: int
    air_hvac_units: int
    air_facility_power_kw: float
    immersion_it_power_kw: float
    immersion_tank_count: int
    immersion_tanks: tuple[TankAllocation, ...]
    immersion_coolant_liters: float
    immersion_facility_power_kw: float


class CalculationBreakdown(BaseModel):
    model_config = _FROZEN

    capex: CapexComparison
    opex_annual: tuple[AnnualCosts, ...]
    tco_cumulative: tuple[TcoYear, ...]
    maintenance_schedule: tuple[MaintenanceYear, ...]
    system: SystemSizing


class CalculationSummary(BaseModel):
    model_config = _FROZEN

    currency: Currency
    total_savings: int
    tco_air_cooling: int
    tco_immersion_cooling: int
    total_opex_savings: int
    annual_opex_savings: int
    npv_savings: int
    roi_percent: float
    payback_months: float
    payback_achievable: bool
    pue_air_cooling: float
    pue_immersion_cooling: float
    efficiency_improvement_percent: float
    cost_per_kw_air_cooling: int
    cost_per_kw_immersion_cooling: int
    cost_per_rack_equivalent: int


class EnvironmentalImpact(BaseModel):
    model_config = _FROZEN

    carbon_savings_kg_co2_annual: float
    water_savings_gallons_annual: float
    energy_savings_kwh_annual: float
    carbon_footprint_reduction_percent: float


class PueAnalysis(BaseModel):
    model_config = _FROZEN

    air_cooling: float = Field(..., ge=1.0)
    immersion_cooling: float = Field(..., ge=1.0)
    improvement_percent: float
    energy_savings_kwh_annual: float
    immersion_exceeds_air: bool = False


class TcoProgressionPoint(BaseModel):
    model_config = _FROZEN

    year: int
    air_cooling: int
    immersion_cooling: int
    savings: int
    cumulative_savings: int


class CategoryComparison(BaseModel):
    model_config = _FROZEN

    air_cooling: int
    immersion_cooling: int
    difference: int


class CostCategoryYear(BaseModel):
    model_config = _FROZEN

    year: int
    energy: CategoryComparison
    maintenance: CategoryComparison
    labor: CategoryComparison
    coolant: CategoryComparison


class PueComparison(BaseModel):
    model_config = _FROZEN

    air_cooling: float
    immersion_cooling: float


class ChartData(BaseModel):
    model_config = _FROZEN

    tco_progression: tuple[TcoProgressionPoint, ...]
    cost_categories: tuple[CostCategoryYear, ...]
    pue_comparison: PueComparison
    capex_categories: dict[str, CategoryComparison]


class CalculationResults(BaseModel):
    """Immutable output of one engine invocation."""

    model_config = _FROZEN

    summary: CalculationSummary
    breakdown: CalculationBreakdown
    environmental: EnvironmentalImpact
    pue_analysis: PueAnalysis
    charts: ChartData
    calculation_id: str
    calculated_at: datetime
    configuration_hash: str
    calculation_version: str


# --- HTTP payloads ----------------------------------------------------------

Locale = Literal["en", "ar"]


class ValidationWarning(BaseModel):
    """Non-fatal observation about an otherwise valid configuration."""

    model_config = _FROZEN

    field: str
    message: str
    suggestion: str | None = None


class ValidationRequest(BaseModel):
    configuration: dict[str, Any]
    locale: Locale = "en"


class ValidationResponse(BaseModel):
    valid: bool
    warnings: list[ValidationWarning]
    estimated_processing_time_ms: int
    estimated_pue: PueComparison | None = None


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: list[FieldErrorDetail] = Field(default_factory=list)
    hint: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


class CalculationRequest(BaseModel):
    configuration: dict[str, Any]
    locale: Locale = "en"
    save_session: bool = False


class ResponseMeta(BaseModel):
    processing_time_ms: float
    locale: Locale
    currency: Currency
    version: str
    session_saved: bool = False
    warnings: list[ValidationWarning] = Field(default_factory=list)


class CalculationResponse(CalculationResults):
    meta: ResponseMeta
