"""Tests for currency conversion and report generation."""

import asyncio
import threading
from datetime import date
from decimal import Decimal

import pytest

from cost_manager.errors import MissingRateError, RatesFetchError, StorageUnavailable, ValidationError
from cost_manager.reports import ReportEngine, convert, round_money
from cost_manager.services.rates import RatesClient
from cost_manager.services.storage import InMemoryCostStore
from tests.conftest import DEFAULT_URL, FakeResponse, FakeSession, SequenceClock


RATES = {"USD": Decimal("1"), "EURO": Decimal("0.7"), "GBP": Decimal("0.6"), "ILS": Decimal("3.4")}


@pytest.fixture
def scenario_store():
    """Two March 2024 entries and one April 2024 entry."""
    return InMemoryCostStore(
        clock=SequenceClock(date(2024, 3, 5), date(2024, 3, 10), date(2024, 4, 1))
    )


@pytest.fixture
def scenario_client(resolver):
    session = FakeSession({DEFAULT_URL: FakeResponse(200, {"USD": 1, "EURO": 0.7})})
    return RatesClient(resolver, session=session, fetch_attempts=1)


@pytest.fixture
def engine(scenario_store, scenario_client):
    return ReportEngine(scenario_store, scenario_client)


async def seed(store):
    await store.open()
    await store.append({"sum": 100, "currency": "USD", "category": "Food", "description": "Groceries"})
    await store.append({"sum": 50, "currency": "EURO", "category": "Car", "description": "Parking"})
    await store.append({"sum": 10, "currency": "USD", "category": "Food", "description": "Snack"})


class TestConvert:
    """Tests for the conversion function."""

    @pytest.mark.parametrize("currency", ["USD", "EURO", "XXX"])
    def test_identity(self, currency):
        """Test same-currency conversion is the identity, even with no table."""
        assert convert(Decimal("42.5"), currency, currency, {}) == Decimal("42.5")
        assert convert(42.5, currency, currency, RATES) == 42.5

    def test_through_usd(self):
        assert convert(Decimal("34"), "ILS", "USD", RATES) == Decimal("10")
        assert convert(Decimal("10"), "USD", "EURO", RATES) == Decimal("7.0")
        assert convert(Decimal("6"), "GBP", "EURO", RATES) == Decimal("7.0")

    @pytest.mark.parametrize("pair", [("EURO", "GBP"), ("ILS", "EURO"), ("USD", "ILS")])
    def test_round_trip(self, pair):
        """Test converting there and back returns the amount."""
        a = Decimal("123.45")
        x, y = pair
        back = convert(convert(a, x, y, RATES), y, x, RATES)
        assert abs(back - a) <= a * Decimal("1e-9")

    def test_accepts_plain_numbers(self):
        assert convert(10, "USD", "EURO", {"USD": 1, "EURO": 0.7}) == Decimal("7.0")

    def test_missing_from_currency(self):
        with pytest.raises(MissingRateError) as exc_info:
            convert(1, "XXX", "USD", {"USD": 1})
        assert exc_info.value.currency == "XXX"

    def test_missing_to_currency(self):
        with pytest.raises(MissingRateError):
            convert(1, "USD", "XXX", {"USD": 1})

    def test_zero_rate_counts_as_missing(self):
        with pytest.raises(MissingRateError):
            convert(1, "USD", "EURO", {"USD": 1, "EURO": 0})

    def test_engine_exposes_convert(self):
        assert ReportEngine.convert(Decimal("10"), "USD", "EURO", RATES) == Decimal("7.0")


class TestRoundMoney:

    @pytest.mark.parametrize("value, expected", [
        (Decimal("171.428571"), Decimal("171.43")),
        (Decimal("2.675"), Decimal("2.68")),
        (Decimal("2.665"), Decimal("2.67")),
        (Decimal("-2.665"), Decimal("-2.67")),
        (2.675, Decimal("2.68")),
        (7, Decimal("7.00")),
    ])
    def test_half_away_from_zero(self, value, expected):
        assert round_money(value) == expected


class TestGenerateReport:
    """Tests for monthly reports."""

    @pytest.mark.asyncio
    async def test_march_in_usd(self, engine, scenario_store):
        await seed(scenario_store)
        report = await engine.generate_report(2024, 3, "USD")

        assert report.year == 2024
        assert report.month == 3
        assert [c.description for c in report.costs] == ["Groceries", "Parking"]
        assert report.total.currency == "USD"
        assert report.total.total == Decimal("171.43")

    @pytest.mark.asyncio
    async def test_april_in_euro(self, engine, scenario_store):
        await seed(scenario_store)
        report = await engine.generate_report(2024, 4, "EURO")

        assert len(report.costs) == 1
        item = report.costs[0]
        assert (item.sum, item.currency, item.category, item.description, item.day) == (
            Decimal("10"), "USD", "Food", "Snack", 1,
        )
        assert report.total.currency == "EURO"
        assert report.total.total == Decimal("7")

    @pytest.mark.asyncio
    async def test_line_items_keep_original_currency(self, engine, scenario_store):
        """Test only the aggregate is converted."""
        await seed(scenario_store)
        report = await engine.generate_report(2024, 3, "EURO")
        assert [(c.sum, c.currency) for c in report.costs] == [
            (Decimal("100"), "USD"),
            (Decimal("50"), "EURO"),
        ]
        assert [c.day for c in report.costs] == [5, 10]

    @pytest.mark.asyncio
    async def test_total_matches_sum_of_conversions(self, engine, scenario_store):
        await seed(scenario_store)
        entries = await scenario_store.list_all()
        rates = {"USD": 1, "EURO": 0.7}
        expected = round_money(sum(
            convert(e.sum, e.currency, "EURO", rates)
            for e in entries if e.recorded_in(2024, 3)
        ))
        report = await engine.generate_report(2024, 3, "EURO")
        assert report.total.total == expected

    @pytest.mark.asyncio
    async def test_empty_month(self, engine, scenario_store):
        await seed(scenario_store)
        report = await engine.generate_report(2024, 5, "USD")
        assert report.costs == []
        assert report.total.total == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_year_must_match(self, engine, scenario_store):
        await seed(scenario_store)
        report = await engine.generate_report(2023, 3, "USD")
        assert report.costs == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("month", [0, 13, -1])
    async def test_invalid_month(self, engine, scenario_store, month):
        await scenario_store.open()
        with pytest.raises(ValidationError):
            await engine.generate_report(2024, month, "USD")

    @pytest.mark.asyncio
    async def test_concurrent_reports(self, engine, scenario_store):
        """Test several reports can be generated at once."""
        await seed(scenario_store)
        march, april = await asyncio.gather(
            engine.generate_report(2024, 3, "USD"),
            engine.generate_report(2024, 4, "USD"),
        )
        assert march.total.total == Decimal("171.43")
        assert april.total.total == Decimal("10.00")


class TestReportFailures:
    """Tests that dependency failures abort the whole report."""

    @pytest.mark.asyncio
    async def test_missing_rate_fails_report(self, engine, scenario_store):
        await seed(scenario_store)
        await scenario_store.append({"sum": 5, "currency": "JPY", "category": "Food", "description": "Candy"})
        # JPY is recorded in April (the clock repeats its last date)
        with pytest.raises(MissingRateError):
            await engine.generate_report(2024, 4, "USD")
        # March has no JPY entries
        assert (await engine.generate_report(2024, 3, "USD")).total.total == Decimal("171.43")

    @pytest.mark.asyncio
    async def test_rates_failure_fails_report(self, resolver, scenario_store):
        await seed(scenario_store)
        session = FakeSession({DEFAULT_URL: FakeResponse(500, {})})
        engine = ReportEngine(scenario_store, RatesClient(resolver, session=session, fetch_attempts=1))
        with pytest.raises(RatesFetchError):
            await engine.generate_report(2024, 3, "USD")

    @pytest.mark.asyncio
    async def test_rates_failure_fails_even_empty_month(self, resolver, scenario_store):
        """Test there is no best-effort report without rates."""
        await scenario_store.open()
        session = FakeSession({DEFAULT_URL: FakeResponse(404, {})})
        engine = ReportEngine(scenario_store, RatesClient(resolver, session=session, fetch_attempts=1))
        with pytest.raises(RatesFetchError):
            await engine.generate_report(2024, 3, "USD")

    @pytest.mark.asyncio
    async def test_storage_failure_fails_report(self, engine):
        with pytest.raises(StorageUnavailable):
            await engine.generate_report(2024, 3, "USD")


class TestAggregations:
    """Tests for the chart helpers."""

    @pytest.mark.asyncio
    async def test_yearly_summary(self, engine, scenario_store, scenario_client):
        await seed(scenario_store)
        summary = await engine.generate_yearly_summary(2024, "USD")

        assert [m.month for m in summary.months] == list(range(1, 13))
        totals = {m.month: m.total for m in summary.months}
        assert totals[3] == Decimal("171.43")
        assert totals[4] == Decimal("10.00")
        assert totals[1] == Decimal("0")
        assert summary.total == Decimal("181.43")

    @pytest.mark.asyncio
    async def test_category_breakdown(self, engine, scenario_store):
        await seed(scenario_store)
        await scenario_store.append({"sum": 7, "currency": "EURO", "category": "Food", "description": "Bread"})
        breakdown = await engine.generate_category_breakdown(2024, 4, "EURO")

        assert breakdown.currency == "EURO"
        assert [(c.category, c.total) for c in breakdown.categories] == [
            ("Food", Decimal("14.00")),
        ]

    @pytest.mark.asyncio
    async def test_category_breakdown_first_seen_order(self, engine, scenario_store):
        await seed(scenario_store)
        breakdown = await engine.generate_category_breakdown(2024, 3, "USD")
        assert [(c.category, c.total) for c in breakdown.categories] == [
            ("Food", Decimal("100.00")),
            ("Car", Decimal("71.43")),
        ]


class GatedSession(FakeSession):
    """FakeSession whose requests wait until `release` is set."""

    def __init__(self, routes):
        super().__init__(routes)
        self.release = threading.Event()

    def get(self, url, timeout=None, headers=None):
        self.release.wait(timeout=2)
        return super().get(url, timeout=timeout, headers=headers)


class TestFailureCancelsSiblings:
    """Tests that a failing dependency does not leave the other one running."""

    @pytest.mark.asyncio
    async def test_storage_failure_cancels_rates_fetch(self, resolver):
        session = GatedSession({DEFAULT_URL: FakeResponse(200, {"USD": 1})})
        client = RatesClient(resolver, session=session, fetch_attempts=1)
        engine = ReportEngine(InMemoryCostStore(), client)

        with pytest.raises(StorageUnavailable):
            await engine.generate_report(2024, 3, "USD")

        session.release.set()
        await asyncio.sleep(0.05)
        assert client.cache.source is None

    @pytest.mark.asyncio
    async def test_yearly_summary_failure_cancels_other_months(self, resolver):
        session = GatedSession({DEFAULT_URL: FakeResponse(200, {"USD": 1})})
        client = RatesClient(resolver, session=session, fetch_attempts=1)
        engine = ReportEngine(InMemoryCostStore(), client)

        with pytest.raises(StorageUnavailable):
            await engine.generate_yearly_summary(2024, "USD")

        session.release.set()
        await asyncio.sleep(0.05)
        assert client.cache.source is None
