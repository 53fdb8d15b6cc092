"""Exchange-rate table types."""

from decimal import Decimal

# Currency code -> units of that currency per 1 USD.
RatesTable = dict[str, Decimal]

BASE_CURRENCY = "USD"
