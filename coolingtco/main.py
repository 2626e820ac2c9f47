"""FastAPI service exposing the immersion vs air cooling TCO calculator."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .catalog import DEFAULT_CURRENCY, EXCHANGE_RATES_FROM_USD, REGIONAL_FACTORS
from .config import CALCULATION_VERSION, Settings, configure_logging
from .errors import ConfigurationError, ValidationError
from .schemas import (
    CalculationRequest,
    CalculationResponse,
    ErrorBody,
    ErrorResponse,
    FieldErrorDetail,
    ResponseMeta,
    ValidationRequest,
    ValidationResponse,
)
from .services.engine import TCOCalculationEngine
from .services.validator import estimate_processing_time_ms, estimated_pue, validate_configuration

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.api_title, version=CALCULATION_VERSION)
engine = TCOCalculationEngine(slow_calculation_ms=settings.slow_calculation_ms)


@app.exception_handler(ValidationError)
def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected %s: %d field error(s)", request.url.path, len(exc.field_errors))
    body = ErrorResponse(
        error=ErrorBody(
            code="VALIDATION_ERROR",
            message="Invalid configuration",
            details=[FieldErrorDetail(field=e.field, message=e.message) for e in exc.field_errors],
        )
    )
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        FieldErrorDetail(field=_request_field(error["loc"]), message=error["msg"]) for error in exc.errors()
    ]
    logger.info("Rejected %s: malformed request body", request.url.path)
    body = ErrorResponse(error=ErrorBody(code="VALIDATION_ERROR", message="Invalid request", details=details))
    return JSONResponse(status_code=400, content=body.model_dump())


def _request_field(loc: tuple[Any, ...]) -> str:
    """Dotted field path of a request error, without the leading ``body`` marker."""
    parts = list(loc[1:]) if loc and loc[0] == "body" else list(loc)
    return ".".join(str(part) for part in parts) or "body"


@app.exception_handler(ConfigurationError)
def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.warning("Unsatisfiable configuration on %s: %s", request.url.path, exc)
    body = ErrorResponse(error=ErrorBody(code="CONFIGURATION_ERROR", message=exc.message, hint=exc.hint))
    return JSONResponse(status_code=422, content=body.model_dump())


@app.get("/health")
def health() -> dict[str, str]:
    """Service health endpoint."""
    return {"status": "ok", "version": CALCULATION_VERSION}


@app.post("/calculations/validate", response_model=ValidationResponse)
def validate(request: ValidationRequest) -> ValidationResponse:
    """Check a configuration without running the calculation."""
    result = validate_configuration(request.configuration, catalog=engine.catalog)
    if not result.valid:
        raise ValidationError(result.field_errors)
    return ValidationResponse(
        valid=True,
        warnings=result.warnings,
        estimated_processing_time_ms=estimate_processing_time_ms(result.configuration),
        estimated_pue=estimated_pue(result.configuration, engine.catalog),
    )


@app.post("/calculations/calculate", response_model=CalculationResponse)
def calculate(request: CalculationRequest) -> CalculationResponse:
    """Validate, then run the full TCO comparison."""
    started = time.perf_counter()
    result = validate_configuration(request.configuration, catalog=engine.catalog)
    if not result.valid:
        raise ValidationError(result.field_errors)

    results = engine.calculate(result.configuration)
    if request.save_session:
        logger.info("Session persistence is not available; %s was not saved.", results.calculation_id)

    meta = ResponseMeta(
        processing_time_ms=round((time.perf_counter() - started) * 1000.0, 2),
        locale=request.locale,
        currency=results.summary.currency,
        version=CALCULATION_VERSION,
        session_saved=False,
        warnings=result.warnings,
    )
    return CalculationResponse(**results.model_dump(), meta=meta)


@app.get("/config/equipment")
def equipment() -> dict[str, Any]:
    """Equipment price book the calculator costs against (USD)."""
    return asdict(engine.catalog)


@app.get("/config/regions")
def regions() -> list[dict[str, Any]]:
    """Carbon, water, energy and labor factors per region."""
    return [asdict(row) for row in REGIONAL_FACTORS]


@app.get("/config/exchange-rates")
def exchange_rates() -> dict[str, Any]:
    """Static conversion rates from USD."""
    return {
        "base": DEFAULT_CURRENCY.value,
        "rates": {currency.value: rate for currency, rate in EXCHANGE_RATES_FROM_USD.items()},
    }
