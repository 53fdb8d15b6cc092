"""
Report Models

Derived, transient values produced by the ReportEngine. Never persisted.

CRITICAL: Report line items carry the ORIGINAL currency and amount.
Only the aggregate total is converted into the requested currency.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from cost_manager.models.cost import CostEntry


class ReportLineItem(BaseModel):
    """One cost as it was recorded."""
    model_config = ConfigDict(frozen=True)

    sum: Decimal
    currency: str
    category: str
    description: str
    day: int = Field(..., ge=1, le=31)

    @classmethod
    def from_entry(cls, entry: CostEntry) -> "ReportLineItem":
        return cls(
            sum=entry.sum,
            currency=entry.currency,
            category=entry.category,
            description=entry.description,
            day=entry.created_date.day,
        )


class ReportTotal(BaseModel):
    """Aggregate in the requested currency, rounded to 2 places."""
    model_config = ConfigDict(frozen=True)

    currency: str
    total: Decimal


class Report(BaseModel):
    """Monthly report."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    costs: list[ReportLineItem] = Field(default_factory=list)
    total: ReportTotal


class MonthlyTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    total: Decimal


class YearlySummary(BaseModel):
    """Per-month totals for one year (bar chart data)."""
    model_config = ConfigDict(frozen=True)

    year: int
    currency: str
    months: list[MonthlyTotal]

    @property
    def total(self) -> Decimal:
        return sum((m.total for m in self.months), Decimal("0"))


class CategoryTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    total: Decimal


class CategoryBreakdown(BaseModel):
    """Per-category totals for one month (pie chart data)."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    currency: str
    categories: list[CategoryTotal] = Field(default_factory=list)
