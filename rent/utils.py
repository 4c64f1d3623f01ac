"""
Utilities for rent management - month keys.

Inside the ledger a month is the structured ``MonthKey(year, month)``. The
``"{year}-{month}"`` string form (``"2024-3"``, no zero padding) only exists at
the API boundary and must format back exactly as it was parsed.
"""
import re
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from django.utils import timezone

from core.constants import LedgerLimits
from core.exceptions import ValidationError

MONTH_KEY_RE = re.compile(r'^\s*(\d{4})-(\d{1,2})\s*$')


def _whole_number(value) -> int:
    """int() that refuses to truncate 3.7 to 3"""
    number = int(value)
    if isinstance(value, (float, Decimal)) and number != value:
        raise ValueError(value)
    return number


class MonthKey(NamedTuple):
    year: int
    month: int

    def __str__(self):
        return f"{self.year}-{self.month}"

    @classmethod
    def of(cls, year, month) -> 'MonthKey':
        """Build a validated key from loose year/month values"""
        errors = {}
        try:
            month = _whole_number(month)
            if not 1 <= month <= 12:
                raise ValueError
        except (TypeError, ValueError, OverflowError):
            errors['month'] = ["Invalid month value. Month must be between 1 and 12"]
        try:
            year = _whole_number(year)
            if not LedgerLimits.MIN_YEAR <= year <= LedgerLimits.MAX_YEAR:
                raise ValueError
        except (TypeError, ValueError, OverflowError):
            errors['year'] = [
                f"Invalid year value. Year must be between {LedgerLimits.MIN_YEAR} and {LedgerLimits.MAX_YEAR}"
            ]
        if errors:
            raise ValidationError(message="Invalid month", code="INVALID_MONTH", details=errors)
        return cls(year, month)

    @classmethod
    def parse(cls, value: str) -> 'MonthKey':
        """Parse ``"2024-3"`` (a zero-padded month is tolerated)"""
        match = MONTH_KEY_RE.match(value or '')
        if not match:
            raise ValidationError(
                message="Month key must look like 2024-3",
                code="INVALID_MONTH",
                details={'month_key': ["Month key must look like 2024-3"]}
            )
        return cls.of(match.group(1), match.group(2))

    @classmethod
    def current(cls) -> 'MonthKey':
        today = timezone.localdate()
        return cls(today.year, today.month)

    def label(self) -> str:
        return date(self.year, self.month, 1).strftime('%B %Y')
