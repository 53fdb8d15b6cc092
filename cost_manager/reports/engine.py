"""
Report Engine

DESIGN DECISION: Report generation is a pure composition over the store
and the rates client. The engine owns no state.

Flow for one report:
1. Read all entries and the current rate table (concurrently)
2. Keep entries created in the requested year/month
3. Convert each sum into the target currency and add it up
4. Round the aggregate to 2 places, half away from zero

GUARANTEES:
- Line items keep the amount and currency they were recorded with
- Line items keep store order (ascending id)
- Any failure (storage, rates, a missing rate) fails the whole report
"""

import asyncio
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from cost_manager.errors import MissingRateError, ValidationError
from cost_manager.log import get_logger
from cost_manager.models.cost import CostEntry
from cost_manager.models.rates import RatesTable
from cost_manager.models.report import (
    CategoryBreakdown,
    CategoryTotal,
    MonthlyTotal,
    Report,
    ReportLineItem,
    ReportTotal,
    YearlySummary,
)
from cost_manager.services.rates import RatesClient
from cost_manager.services.storage import CostStorageInterface


Amount = Union[Decimal, int, float]

CENTS = Decimal("0.01")


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


async def _gather_or_cancel(*coros):
    """
    Run coroutines concurrently; on the first failure cancel the rest.

    Results come back in argument order. Siblings are awaited after being
    cancelled so none is left running once the error propagates.
    """
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def round_money(value: Amount) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return _to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def convert(
    amount: Amount,
    from_currency: str,
    to_currency: str,
    rates: RatesTable,
) -> Amount:
    """
    Convert `amount` between currencies through USD.

    Returns `amount` unchanged when the currencies match, whatever the
    table holds.

    Raises:
        MissingRateError: If either rate is absent or zero
    """
    if from_currency == to_currency:
        return amount

    from_rate = rates.get(from_currency)
    to_rate = rates.get(to_currency)
    if not from_rate:
        raise MissingRateError(f"Missing currency rate: {from_currency}", currency=from_currency)
    if not to_rate:
        raise MissingRateError(f"Missing currency rate: {to_currency}", currency=to_currency)

    usd = _to_decimal(amount) / _to_decimal(from_rate)
    return usd * _to_decimal(to_rate)


class ReportEngine:
    """Filters entries by calendar month and totals them in one currency."""

    def __init__(self, store: CostStorageInterface, rates_client: RatesClient):
        self._store = store
        self._rates = rates_client
        self._logger = get_logger(__name__)

    @staticmethod
    def convert(
        amount: Amount,
        from_currency: str,
        to_currency: str,
        rates: RatesTable,
    ) -> Amount:
        return convert(amount, from_currency, to_currency, rates)

    @staticmethod
    def _check_month(month: int) -> None:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month!r}")

    async def _load(self) -> tuple[list[CostEntry], RatesTable]:
        entries, rates = await _gather_or_cancel(
            self._store.list_all(),
            self._rates.fetch(),
        )
        return entries, rates

    @staticmethod
    def _total(entries: list[CostEntry], currency: str, rates: RatesTable) -> Decimal:
        total = Decimal("0")
        for entry in entries:
            total += _to_decimal(convert(entry.sum, entry.currency, currency, rates))
        return round_money(total)

    async def generate_report(self, year: int, month: int, currency: str) -> Report:
        """
        Build the report for one calendar month.

        Raises:
            ValidationError: If month is outside 1-12
            StorageUnavailable, RatesFetchError, MissingRateError:
                Propagated unchanged from the dependencies
        """
        self._check_month(month)
        entries, rates = await self._load()

        filtered = [e for e in entries if e.recorded_in(year, month)]
        total = self._total(filtered, currency, rates)

        self._logger.debug(
            "report_generated",
            year=year,
            month=month,
            currency=currency,
            cost_count=len(filtered),
        )
        return Report(
            year=year,
            month=month,
            costs=[ReportLineItem.from_entry(e) for e in filtered],
            total=ReportTotal(currency=currency, total=total),
        )

    async def generate_yearly_summary(self, year: int, currency: str) -> YearlySummary:
        """Totals for each of the twelve months, one report per month."""
        reports = await _gather_or_cancel(
            *(self.generate_report(year, month, currency) for month in range(1, 13))
        )
        return YearlySummary(
            year=year,
            currency=currency,
            months=[
                MonthlyTotal(month=r.month, total=r.total.total)
                for r in reports
            ],
        )

    async def generate_category_breakdown(
        self,
        year: int,
        month: int,
        currency: str,
    ) -> CategoryBreakdown:
        """Converted totals per category for one month, in first-seen order."""
        self._check_month(month)
        entries, rates = await self._load()

        by_category: dict[str, list[CostEntry]] = {}
        for entry in entries:
            if entry.recorded_in(year, month):
                by_category.setdefault(entry.category, []).append(entry)

        return CategoryBreakdown(
            year=year,
            month=month,
            currency=currency,
            categories=[
                CategoryTotal(category=name, total=self._total(items, currency, rates))
                for name, items in by_category.items()
            ],
        )
