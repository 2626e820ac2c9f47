"""Regional and currency lookups feeding the cost and environmental models."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from ..catalog import (
    DEFAULT_CURRENCY,
    DEFAULT_REGION,
    EXCHANGE_RATES_FROM_USD,
    REGIONAL_FACTORS,
    Currency,
    Region,
    RegionalFactors,
)

logger = logging.getLogger(__name__)

_FACTORS_BY_REGION: Mapping[Region, RegionalFactors] = MappingProxyType(
    {row.region: row for row in REGIONAL_FACTORS}
)


def is_known_region(value: Any) -> bool:
    return isinstance(value, str) and value.strip().upper() in Region.__members__


def is_known_currency(value: Any) -> bool:
    return isinstance(value, str) and value.strip().upper() in Currency.__members__


def resolve_region(value: Any) -> Region:
    """Map *value* onto a supported region, falling back to US."""
    if isinstance(value, Region):
        return value
    if is_known_region(value):
        return Region(value.strip().upper())
    if value is not None:
        logger.warning("Unsupported region %r, falling back to %s.", value, DEFAULT_REGION.value)
    return DEFAULT_REGION


def resolve_currency(value: Any) -> Currency:
    """Map *value* onto a supported currency, falling back to USD."""
    if isinstance(value, Currency):
        return value
    if is_known_currency(value):
        return Currency(value.strip().upper())
    if value is not None:
        logger.warning("Unsupported currency %r, falling back to %s.", value, DEFAULT_CURRENCY.value)
    return DEFAULT_CURRENCY


def regional_factors(region: Any) -> RegionalFactors:
    """Return the factor row for *region*; unknown regions resolve to US."""
    return _FACTORS_BY_REGION[resolve_region(region)]


def exchange_rate(currency: Any) -> float:
    """Units of *currency* per 1 USD."""
    return EXCHANGE_RATES_FROM_USD[resolve_currency(currency)]


def convert_from_usd(amount_usd: float, currency: Any) -> float:
    return amount_usd * exchange_rate(currency)


def convert(amount: float, from_currency: Any, to_currency: Any) -> float:
    """Convert between any two supported currencies through USD."""
    source = resolve_currency(from_currency)
    target = resolve_currency(to_currency)
    if source == target:
        return amount
    return amount / EXCHANGE_RATES_FROM_USD[source] * EXCHANGE_RATES_FROM_USD[target]
