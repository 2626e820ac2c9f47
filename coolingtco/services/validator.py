"""Structural, range and business-rule checks for calculator input."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..catalog import DEFAULT_CATALOG, EquipmentCatalog
from ..config import VALIDATION_LIMITS, Range, ValidationLimits
from ..errors import FieldError, ValidationError
from ..schemas import (
    AirCoolingRackCount,
    AirCoolingTotalPower,
    CalculationConfiguration,
    ImmersionAutoOptimize,
    ImmersionManualConfig,
    PueComparison,
    ValidationWarning,
)
from .pue import air_cooling_pue, immersion_cooling_pue
from .regional import is_known_currency, is_known_region

logger = logging.getLogger(__name__)

_TAGGED_SECTIONS = ("air_cooling", "immersion_cooling")

_MISSING_FIELD_MESSAGES = {
    ("air_cooling", "rack_count"): "Rack count and power per rack are required for rack count input method",
    ("air_cooling", "power_per_rack_kw"): "Rack count and power per rack are required for rack count input method",
    ("air_cooling", "total_power_kw"): "Total power is required for total power input method",
    ("immersion_cooling", "target_power_kw"): "Target power is required for auto optimize input method",
    ("immersion_cooling", "tank_configurations"): (
        "At least one tank configuration is required for manual config input method"
    ),
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    field_errors: list[FieldError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)
    configuration: CalculationConfiguration | None = None

    @property
    def errors(self) -> list[str]:
        return [str(error) for error in self.field_errors]


def _field_path(loc: tuple[Any, ...]) -> str:
    parts = list(loc)
    # Discriminated unions report the tag as the second path element.
    if len(parts) > 2 and parts[0] in _TAGGED_SECTIONS:
        del parts[1]
    return ".".join(str(part) for part in parts)


def field_errors_from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    """Flatten pydantic's error list into dotted-path field errors."""
    errors: list[FieldError] = []
    for error in exc.errors():
        loc = tuple(error["loc"])
        kind = error["type"]
        if kind == "union_tag_not_found":
            errors.append(FieldError(_field_path(loc + ("input_method",)), "Input method is required"))
            continue
        if kind == "union_tag_invalid":
            ctx = error.get("ctx", {})
            errors.append(
                FieldError(
                    _field_path(loc + ("input_method",)),
                    f"Unsupported input method {ctx.get('tag')!r}, expected one of {ctx.get('expected_tags')}",
                )
            )
            continue

        path = _field_path(loc)
        section, _, name = path.partition(".")
        message = error["msg"]
        if kind in ("missing", "too_short") and (section, name) in _MISSING_FIELD_MESSAGES:
            message = _MISSING_FIELD_MESSAGES[(section, name)]
        elif kind == "missing" and len(loc) == 1:
            message = f"{section.replace('_', ' ').capitalize()} configuration is required"
        errors.append(FieldError(path, message))
    return errors


def parse_configuration(raw: Mapping[str, Any]) -> CalculationConfiguration:
    """Parse and structurally validate a raw configuration mapping.

    Raises:
        ValidationError: The mapping does not describe a configuration.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError([FieldError("", "Configuration must be an object")])
    try:
        return CalculationConfiguration.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise ValidationError(field_errors_from_pydantic(exc)) from exc


def _check_range(errors: list[FieldError], path: str, value: float | None, bounds: Range) -> None:
    if value is not None and not bounds.contains(value):
        errors.append(FieldError(path, f"Must be between {bounds.min:g} and {bounds.max:g}"))


def range_errors(
    config: CalculationConfiguration,
    limits: ValidationLimits = VALIDATION_LIMITS,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> list[FieldError]:
    """Checks against deployment limits and the equipment catalog."""
    errors: list[FieldError] = []

    air = config.air_cooling
    if isinstance(air, AirCoolingRackCount):
        _check_range(errors, "air_cooling.rack_count", air.rack_count, limits.rack_count)
        _check_range(errors, "air_cooling.power_per_rack_kw", air.power_per_rack_kw, limits.power_per_rack_kw)
    elif isinstance(air, AirCoolingTotalPower):
        _check_range(errors, "air_cooling.total_power_kw", air.total_power_kw, limits.total_power_kw)

    immersion = config.immersion_cooling
    if isinstance(immersion, ImmersionAutoOptimize):
        _check_range(errors, "immersion_cooling.target_power_kw", immersion.target_power_kw, limits.total_power_kw)
    elif isinstance(immersion, ImmersionManualConfig):
        rows = immersion.tank_configurations
        if len(rows) > limits.max_tank_rows:
            errors.append(
                FieldError(
                    "immersion_cooling.tank_configurations",
                    f"At most {limits.max_tank_rows} tank configurations are supported",
                )
            )
        for index, row in enumerate(rows):
            prefix = f"immersion_cooling.tank_configurations.{index}"
            if catalog.tank(row.size) is None:
                errors.append(
                    FieldError(
                        f"{prefix}.size",
                        f"Unsupported tank size {row.size}, expected one of {', '.join(catalog.tank_sizes)}",
                    )
                )
            _check_range(errors, f"{prefix}.quantity", row.quantity, limits.tank_quantity)
            _check_range(
                errors, f"{prefix}.power_density_kw_per_u", row.power_density_kw_per_u, limits.power_density_kw_per_u
            )

    financial = config.financial
    _check_range(errors, "financial.analysis_years", financial.analysis_years, limits.analysis_years)
    _check_range(errors, "financial.discount_rate", financial.discount_rate, limits.discount_rate)
    _check_range(errors, "financial.energy_cost_kwh", financial.energy_cost_kwh, limits.energy_cost_kwh)
    _check_range(errors, "financial.labor_cost_per_hour", financial.labor_cost_per_hour, limits.labor_cost_per_hour)
    for name in ("energy_escalation_rate", "maintenance_escalation_rate", "labor_escalation_rate"):
        _check_range(errors, f"financial.{name}", getattr(financial, name), limits.escalation_rate)
    return errors


def _fallback_warnings(raw: Mapping[str, Any]) -> list[ValidationWarning]:
    financial = raw.get("financial")
    if not isinstance(financial, Mapping):
        return []
    warnings = []
    region = financial.get("region")
    if region is not None and not is_known_region(region):
        warnings.append(
            ValidationWarning(
                field="financial.region",
                message=f"Unsupported region {region!r}, US factors will be used",
                suggestion="Use one of US, EU, ME",
            )
        )
    currency = financial.get("currency")
    if currency is not None and not is_known_currency(currency):
        warnings.append(
            ValidationWarning(
                field="financial.currency",
                message=f"Unsupported currency {currency!r}, amounts will be in USD",
                suggestion="Use one of USD, EUR, SAR, AED",
            )
        )
    return warnings


def estimated_pue(
    config: CalculationConfiguration,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> PueComparison:
    """PUE the engine will use for each system.

    Air cooling includes the catalog's UPS, cooling distribution and airflow
    losses on top of the two user-supplied efficiencies.
    """
    air = config.air_cooling
    immersion = config.immersion_cooling
    return PueComparison(
        air_cooling=air_cooling_pue(air.hvac_efficiency, air.power_distribution_efficiency, catalog),
        immersion_cooling=immersion_cooling_pue(immersion.pumping_efficiency, immersion.heat_exchanger_efficiency),
    )


def configuration_warnings(
    config: CalculationConfiguration,
    limits: ValidationLimits = VALIDATION_LIMITS,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> list[ValidationWarning]:
    """Non-fatal observations about a structurally valid configuration."""
    warnings: list[ValidationWarning] = []
    air = config.air_cooling

    pue = estimated_pue(config, catalog)
    pue_air, pue_immersion = pue.air_cooling, pue.immersion_cooling
    if pue_immersion > pue_air:
        warnings.append(
            ValidationWarning(
                field="immersion_cooling",
                message=f"Immersion PUE {pue_immersion:.2f} is higher than air cooling PUE {pue_air:.2f}",
                suggestion="Check pumping and heat exchanger efficiencies",
            )
        )
    if isinstance(air, AirCoolingRackCount) and air.rack_count > limits.high_rack_count_warning:
        warnings.append(
            ValidationWarning(
                field="air_cooling.rack_count",
                message=f"Rack count above {limits.high_rack_count_warning} is an unusually large deployment",
                suggestion="Consider splitting the analysis by data hall",
            )
        )
    if config.financial.analysis_years > limits.long_analysis_warning_years:
        warnings.append(
            ValidationWarning(
                field="financial.analysis_years",
                message=f"Projections beyond {limits.long_analysis_warning_years} years carry high uncertainty",
            )
        )
    return warnings


def validate_configuration(
    configuration: CalculationConfiguration | Mapping[str, Any],
    limits: ValidationLimits = VALIDATION_LIMITS,
    catalog: EquipmentCatalog = DEFAULT_CATALOG,
) -> ValidationResult:
    """Validate *configuration* without raising.

    Args:
        configuration: A parsed model or the raw mapping received from a client.
        limits: Deployment bounds to enforce.
        catalog: Equipment catalog manual tank sizes are checked against.

    Returns:
        A ``ValidationResult``; ``configuration`` is set whenever parsing succeeded.
    """
    warnings: list[ValidationWarning] = []
    if isinstance(configuration, CalculationConfiguration):
        config = configuration
    else:
        try:
            config = parse_configuration(configuration)
        except ValidationError as exc:
            logger.debug("Configuration rejected: %s", exc)
            return ValidationResult(valid=False, field_errors=exc.field_errors)
        warnings.extend(_fallback_warnings(configuration))

    errors = range_errors(config, limits, catalog)
    warnings.extend(configuration_warnings(config, limits, catalog))
    return ValidationResult(valid=not errors, field_errors=errors, warnings=warnings, configuration=config)


def estimate_processing_time_ms(config: CalculationConfiguration) -> int:
    """Rough processing estimate: grows with tank rows and analysis years, capped at 5 s."""
    estimate = 100
    if isinstance(config.immersion_cooling, ImmersionManualConfig):
        estimate += 10 * len(config.immersion_cooling.tank_configurations)
    estimate += 20 * config.financial.analysis_years
    return min(estimate, 5000)
