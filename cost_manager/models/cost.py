"""
Cost Entry Models

These models define the strict schemas for cost entries flowing into
and out of the store.

DESIGN DECISION: Input is validated by a factory (NewCostEntry.create)
that either returns a typed value or raises ValidationError. Nothing is
laundered through blind str()/float() casts.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)

from cost_manager.errors import ValidationError


# Codes offered by the entry form. The core accepts any non-empty code.
SUPPORTED_CURRENCIES = ("USD", "ILS", "GBP", "EURO")

# Categories offered by the entry form. The core treats categories as opaque.
DEFAULT_CATEGORIES = (
    "Food",
    "Car",
    "Education",
    "Health",
    "Housing",
    "Leisure",
    "Other",
)


class CreatedDate(BaseModel):
    """Calendar date a cost entry was recorded on."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    @classmethod
    def from_date(cls, value: date) -> "CreatedDate":
        return cls(year=value.year, month=value.month, day=value.day)


class NewCostEntry(BaseModel):
    """
    Caller-supplied fields for a new cost entry.

    `id` and `created_date` are never accepted from the caller;
    unknown keys are dropped.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        extra="ignore",
    )

    sum: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in the entry's own currency"
    )
    currency: str = Field(
        ...,
        min_length=1,
        description="Currency code, e.g. USD"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Free-form category label"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )

    @field_validator('sum', mode='before')
    @classmethod
    def coerce_sum(cls, v: Any) -> Any:
        """Accept numbers and numeric-looking strings, nothing else."""
        if isinstance(v, bool):
            raise ValueError("sum must be a number")
        if isinstance(v, float):
            return Decimal(repr(v))
        if isinstance(v, str):
            return v.strip()
        return v

    @classmethod
    def create(cls, fields: Mapping[str, Any]) -> "NewCostEntry":
        """
        Validate raw input into a NewCostEntry.

        Raises:
            ValidationError: listing every offending field
        """
        try:
            return cls.model_validate(dict(fields))
        except PydanticValidationError as e:
            issues = [
                f"{'.'.join(str(part) for part in err['loc']) or 'entry'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ValidationError(
                "Invalid cost entry: " + "; ".join(issues),
                issues=issues,
            ) from e


class CostEntry(BaseModel):
    """
    One recorded expense, as stored.

    Immutable: the core never updates or deletes entries.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Store-assigned, increasing id")
    sum: Decimal = Field(..., gt=0)
    currency: str
    category: str
    description: str
    created_date: CreatedDate

    @classmethod
    def from_new(cls, entry_id: int, new: NewCostEntry, created: date) -> "CostEntry":
        return cls(
            id=entry_id,
            sum=new.sum,
            currency=new.currency,
            category=new.category,
            description=new.description,
            created_date=CreatedDate.from_date(created),
        )

    def recorded_in(self, year: int, month: int) -> bool:
        """True if the entry was created in the given calendar month."""
        return self.created_date.year == year and self.created_date.month == month
