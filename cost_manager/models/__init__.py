"""
Data Models Package

All data flowing through the core conforms to these Pydantic schemas.
"""

from cost_manager.models.cost import (
    DEFAULT_CATEGORIES,
    SUPPORTED_CURRENCIES,
    CostEntry,
    CreatedDate,
    NewCostEntry,
)
from cost_manager.models.rates import BASE_CURRENCY, RatesTable
from cost_manager.models.report import (
    CategoryBreakdown,
    CategoryTotal,
    MonthlyTotal,
    Report,
    ReportLineItem,
    ReportTotal,
    YearlySummary,
)
from cost_manager.models.user_settings import UserSettings

__all__ = [
    # Cost models
    "DEFAULT_CATEGORIES",
    "SUPPORTED_CURRENCIES",
    "CostEntry",
    "CreatedDate",
    "NewCostEntry",
    # Rates
    "BASE_CURRENCY",
    "RatesTable",
    # Report models
    "CategoryBreakdown",
    "CategoryTotal",
    "MonthlyTotal",
    "Report",
    "ReportLineItem",
    "ReportTotal",
    "YearlySummary",
    # Settings
    "UserSettings",
]
