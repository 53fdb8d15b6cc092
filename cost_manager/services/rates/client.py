"""
Exchange Rates Client

Fetches the rate table from the resolved source over HTTP and caches
the last successful table together with the source it came from.

CRITICAL: The cache is keyed by source URL. A cached table is served
only when the currently resolved source is the one it was fetched for,
so changing the configured source can never serve stale rates.

There is no request coalescing: concurrent cold fetches each hit the
network.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cost_manager.config import get_settings
from cost_manager.errors import RatesFetchError
from cost_manager.log import get_logger
from cost_manager.models.rates import BASE_CURRENCY, RatesTable
from cost_manager.services.settings import SettingsResolver


# Only transport failures are worth another attempt
TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


def parse_rates_table(payload: Any, source: Optional[str] = None) -> RatesTable:
    """
    Validate a decoded JSON body into a RatesTable.

    The body must be a flat, non-empty object of currency code to
    positive finite number, with USD equal to exactly 1.

    Raises:
        RatesFetchError: If the body has any other shape
    """
    if not isinstance(payload, dict) or not payload:
        raise RatesFetchError(
            "Exchange rates response is not a currency-to-number mapping",
            source=source,
        )

    table: RatesTable = {}
    for code, value in payload.items():
        if not isinstance(code, str) or not code.strip():
            raise RatesFetchError(f"Invalid currency code in rates: {code!r}", source=source)
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise RatesFetchError(f"Rate for {code} is not a number: {value!r}", source=source)
        rate = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
        if not rate.is_finite() or rate <= 0:
            raise RatesFetchError(f"Rate for {code} must be positive: {value!r}", source=source)
        table[code.strip()] = rate

    if table.get(BASE_CURRENCY) != 1:
        raise RatesFetchError(
            f"Exchange rates must map {BASE_CURRENCY} to exactly 1",
            source=source,
        )
    return table


class RatesCache:
    """The last successful table and the source it was fetched for."""

    def __init__(self):
        self._source: Optional[str] = None
        self._table: Optional[RatesTable] = None

    @property
    def source(self) -> Optional[str]:
        return self._source

    def get(self, source: str) -> Optional[RatesTable]:
        """A copy of the cached table if it was fetched for `source`."""
        if self._table is None or self._source != source:
            return None
        return dict(self._table)

    def put(self, source: str, table: RatesTable) -> None:
        self._source = source
        self._table = dict(table)

    def clear(self) -> None:
        self._source = None
        self._table = None


class RatesClient:
    """
    Cached fetcher of the current rate table.

    Each instance owns its own cache; pass the same instance to every
    consumer that should share it.
    """

    def __init__(
        self,
        resolver: SettingsResolver,
        session: Optional[requests.Session] = None,
        timeout_seconds: Optional[float] = None,
        fetch_attempts: Optional[int] = None,
        cache: Optional[RatesCache] = None,
    ):
        rates_settings = get_settings().rates
        self._resolver = resolver
        # Without an injected session each GET goes through requests.get,
        # so no Session is shared between worker threads
        self._session = session
        self._timeout = timeout_seconds or rates_settings.timeout_seconds
        self._attempts = fetch_attempts or rates_settings.fetch_attempts
        self._cache = cache or RatesCache()
        self._logger = get_logger(__name__)

    @property
    def cache(self) -> RatesCache:
        return self._cache

    async def fetch(self) -> RatesTable:
        """
        Return the rate table for the currently resolved source.

        Raises:
            RatesFetchError: On network failure, non-2xx status or a bad body
        """
        source = self._resolver.resolve()

        cached = self._cache.get(source)
        if cached is not None:
            self._logger.debug("rates_cache_hit", source=source)
            return cached

        table = await self._download(source)
        self._cache.put(source, table)
        self._logger.info("rates_fetched", source=source, currencies=sorted(table))
        return dict(table)

    async def probe(self, url: str) -> RatesTable:
        """
        Fetch and validate a candidate source without touching the cache.

        Used by the configuration surface to test a URL before saving it.
        """
        url = url.strip()
        if not url:
            raise RatesFetchError("Rates URL is not set")
        return await self._download(url)

    def clear_cache(self) -> None:
        self._cache.clear()
        self._logger.debug("rates_cache_cleared")

    async def _download(self, source: str) -> RatesTable:
        return await asyncio.to_thread(self._get_table, source)

    def _get_table(self, source: str) -> RatesTable:
        """Blocking GET + parse, with bounded retry on transport errors."""
        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        try:
            response = retrying(
                self._session.get if self._session is not None else requests.get,
                source,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as e:
            self._logger.warning("rates_fetch_failed", source=source, error=str(e))
            raise RatesFetchError(
                f"Failed to fetch exchange rates from {source}: {e}",
                source=source,
            ) from e

        if not 200 <= response.status_code < 300:
            self._logger.warning(
                "rates_fetch_failed",
                source=source,
                status_code=response.status_code,
            )
            raise RatesFetchError(
                f"Failed to fetch exchange rates: HTTP {response.status_code}",
                source=source,
                status_code=response.status_code,
            )

        try:
            payload = response.json(parse_float=Decimal)
        except ValueError as e:
            raise RatesFetchError(
                f"Exchange rates response is not valid JSON: {e}",
                source=source,
                status_code=response.status_code,
            ) from e

        return parse_rates_table(payload, source=source)
