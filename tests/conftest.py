"""
Shared fixtures for Cost Manager tests.

No real network access: HTTP goes through FakeSession.
SQLite and JSON files live under pytest's tmp_path.
"""

import json
import threading
from datetime import date
from typing import Optional, Union

import pytest
import requests

from cost_manager.services.rates import RatesClient
from cost_manager.services.settings import SettingsResolver
from cost_manager.services.storage import InMemoryCostStore, InMemoryKeyValueStore


DEFAULT_URL = "https://rates.example.com/default.json"
ALT_URL = "https://rates.example.com/alt.json"

SAMPLE_RATES = {"USD": 1, "GBP": 0.6, "EURO": 0.7, "ILS": 3.4}


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Union[dict, str, None] = None):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)

    def json(self, **kwargs):
        return json.loads(self.text, **kwargs)


class FakeSession:
    """
    Stand-in for requests.Session.

    `routes` maps URL -> FakeResponse or an exception instance
    (raised), or a list of those consumed one per call.
    """

    def __init__(self, routes: Optional[dict] = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None, headers=None):
        with self._lock:
            self.calls.append(url)
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0)
        if route is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(route, Exception):
            raise route
        return route

    def calls_to(self, url: str) -> int:
        return self.calls.count(url)


class SequenceClock:
    """Returns the given dates in order, then repeats the last one."""

    def __init__(self, *dates: date):
        self._dates = list(dates)

    def __call__(self) -> date:
        if len(self._dates) > 1:
            return self._dates.pop(0)
        return self._dates[0]


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def resolver(kv_store) -> SettingsResolver:
    return SettingsResolver(kv_store, default_url=DEFAULT_URL)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession({DEFAULT_URL: FakeResponse(200, SAMPLE_RATES)})


@pytest.fixture
def rates_client(resolver, session) -> RatesClient:
    return RatesClient(resolver, session=session, timeout_seconds=1, fetch_attempts=1)


@pytest.fixture
def memory_store() -> InMemoryCostStore:
    return InMemoryCostStore(clock=lambda: date(2024, 3, 5))
