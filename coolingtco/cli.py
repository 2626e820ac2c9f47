"""Command-line entrypoint: run a TCO calculation from a JSON configuration file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .config import Settings, configure_logging
from .errors import ConfigurationError, ValidationError
from .services.engine import TCOCalculationEngine
from .services.tables import annual_table
from .services.validator import estimate_processing_time_ms, estimated_pue, validate_configuration

logger = logging.getLogger(__name__)


def _load_configuration(path: Path) -> dict[str, Any]:
    """Read *path* as a JSON object; exits on unreadable or malformed files."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.error("Cannot read configuration '%s': %s", path, exc)
        sys.exit(1)
    except json.JSONDecodeError as exc:
        logger.error("Configuration '%s' is not valid JSON: %s", path, exc)
        sys.exit(1)
    # Accept both a bare configuration and a request envelope.
    if isinstance(payload, dict) and "configuration" in payload:
        payload = payload["configuration"]
    return payload


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="coolingtco", description="Immersion vs air cooling TCO calculator.")
    p.add_argument("--config", required=True, type=Path, metavar="FILE",
                   help="JSON file holding the calculation configuration.")
    p.add_argument("--validate-only", action="store_true",
                   help="Validate the configuration and print warnings without calculating.")
    p.add_argument("--format", choices=["json", "csv"], default="json",
                   help="json prints the full results; csv prints the annual cost table.")
    p.add_argument("--log-level", default=None, help="Overrides TCO_LOG_LEVEL.")
    return p


def run(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = _build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    raw = _load_configuration(args.config)
    engine = TCOCalculationEngine(slow_calculation_ms=settings.slow_calculation_ms)
    result = validate_configuration(raw, catalog=engine.catalog)
    for warning in result.warnings:
        logger.warning("%s: %s", warning.field, warning.message)
    if not result.valid:
        for error in result.errors:
            logger.error("Invalid configuration: %s", error)
        return 1

    if args.validate_only:
        report = {
            "valid": True,
            "warnings": [warning.model_dump() for warning in result.warnings],
            "estimated_processing_time_ms": estimate_processing_time_ms(result.configuration),
            "estimated_pue": estimated_pue(result.configuration, engine.catalog).model_dump(),
        }
        print(json.dumps(report, indent=2))
        return 0

    try:
        results = engine.calculate(result.configuration)
    except (ValidationError, ConfigurationError) as exc:
        logger.error("Calculation failed: %s", exc)
        return 1

    if args.format == "csv":
        sys.stdout.write(annual_table(results).to_csv(index=False))
    else:
        print(results.model_dump_json(indent=2))
    return 0


def main() -> None:
    """Console-script entrypoint."""
    sys.exit(run())


if __name__ == "__main__":
    main()
