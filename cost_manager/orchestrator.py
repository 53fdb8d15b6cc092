"""
Main Orchestrator for Cost Manager

Wires the core components together for the external collaborators
(entry form, report table, charts, settings page):

    SettingsResolver -> RatesClient -\
                                      +-> ReportEngine
    CostStore -----------------------/

DESIGN DECISION: Components are constructed once and shared by
reference. In particular there is exactly one RatesClient (and so one
rates cache) per CostManager.
"""

from collections.abc import Mapping
from typing import Any, Optional

from cost_manager.config import get_settings, validate_all_settings
from cost_manager.log import configure_logging, get_logger
from cost_manager.models.cost import CostEntry
from cost_manager.models.rates import RatesTable
from cost_manager.models.report import CategoryBreakdown, Report, YearlySummary
from cost_manager.models.user_settings import UserSettings
from cost_manager.reports import ReportEngine
from cost_manager.services.rates import RatesClient
from cost_manager.services.settings import SettingsResolver
from cost_manager.services.storage import (
    CostStorageInterface,
    InMemoryCostStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    SQLiteCostStore,
)


class CostManager:
    """
    Facade over the core components.

    Usage:
        manager = create_app_components()
        await manager.open()
        await manager.add_cost({"sum": 12.5, "currency": "USD", ...})
        report = await manager.generate_report(2024, 3, "EURO")
    """

    def __init__(
        self,
        store: CostStorageInterface,
        settings_resolver: SettingsResolver,
        rates_client: RatesClient,
        report_engine: Optional[ReportEngine] = None,
    ):
        self.store = store
        self.settings_resolver = settings_resolver
        self.rates_client = rates_client
        self.report_engine = report_engine or ReportEngine(store, rates_client)
        self._logger = get_logger(__name__)

    async def open(self) -> None:
        await self.store.open()

    async def close(self) -> None:
        await self.store.close()

    async def __aenter__(self) -> "CostManager":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # Entry form

    async def add_cost(self, fields: Mapping[str, Any]) -> CostEntry:
        return await self.store.append(fields)

    # Report and chart surfaces

    async def generate_report(self, year: int, month: int, currency: str) -> Report:
        return await self.report_engine.generate_report(year, month, currency)

    async def generate_yearly_summary(self, year: int, currency: str) -> YearlySummary:
        return await self.report_engine.generate_yearly_summary(year, currency)

    async def generate_category_breakdown(
        self,
        year: int,
        month: int,
        currency: str,
    ) -> CategoryBreakdown:
        return await self.report_engine.generate_category_breakdown(year, month, currency)

    # Settings page

    def load_settings(self) -> UserSettings:
        return self.settings_resolver.load()

    def save_settings(self, settings: UserSettings) -> None:
        self.settings_resolver.save(settings)

    async def check_rates_url(self, url: str) -> RatesTable:
        """Fetch a candidate rates URL without caching it."""
        return await self.rates_client.probe(url)


def create_app_components(use_storage: bool = True) -> CostManager:
    """
    Factory function to create all application components.

    Args:
        use_storage: Use SQLite and the JSON settings file from
                     StorageSettings. Set to False for in-memory stores.

    Returns:
        An unopened CostManager
    """
    configure_logging()
    logger = get_logger(__name__)
    status = validate_all_settings()
    for section in ("storage", "rates", "app"):
        if not status[section]:
            logger.error("settings_invalid", section=section, error=status[f"{section}_error"])
    settings = get_settings()

    if use_storage:
        store = SQLiteCostStore(settings.storage.database_path)
        kv_store = JsonFileKeyValueStore(settings.storage.settings_path)
    else:
        store = InMemoryCostStore()
        kv_store = InMemoryKeyValueStore()

    resolver = SettingsResolver(kv_store, default_url=settings.rates.default_url)
    rates_client = RatesClient(
        resolver,
        timeout_seconds=settings.rates.timeout_seconds,
        fetch_attempts=settings.rates.fetch_attempts,
    )
    return CostManager(store, resolver, rates_client)
