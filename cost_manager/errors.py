"""
Error Taxonomy for Cost Manager

DESIGN DECISION: Every failure the core surfaces is one of a closed set of
kinds. Callers branch on `error.kind` (or the exception class) instead of
parsing message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """The closed set of failure kinds raised by the core."""
    VALIDATION = "validation"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    RATES_FETCH = "rates_fetch"
    MISSING_RATE = "missing_rate"


class CostManagerError(Exception):
    """Base exception for all core failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(CostManagerError):
    """A cost entry (or report request) failed field validation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, issues: Optional[list[str]] = None):
        self.issues = issues or [message]
        super().__init__(message)


class StorageUnavailable(CostManagerError):
    """Store not opened yet, or the storage medium rejected the operation."""

    kind = ErrorKind.STORAGE_UNAVAILABLE


class RatesFetchError(CostManagerError):
    """Network failure, non-success status, or an unreadable rate table."""

    kind = ErrorKind.RATES_FETCH

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class MissingRateError(CostManagerError):
    """A conversion referenced a currency absent from (or zero in) the table."""

    kind = ErrorKind.MISSING_RATE

    def __init__(self, message: str, currency: Optional[str] = None):
        self.currency = currency
        super().__init__(message)
