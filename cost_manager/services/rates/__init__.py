"""Exchange rates services package."""

from cost_manager.services.rates.client import (
    RatesCache,
    RatesClient,
    parse_rates_table,
)

__all__ = [
    "RatesCache",
    "RatesClient",
    "parse_rates_table",
]
