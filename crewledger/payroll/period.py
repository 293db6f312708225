"""
Calendar month periods.

Payslips are bucketed by calendar month. The external ``"YYYY-MM"``
string is parsed once at the boundary into a ``Period`` and the core only
ever compares date components against it.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from crewledger.payroll.exceptions import InvalidInputError


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_PERIOD_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


@dataclass(frozen=True, order=True)
class Period:
    """A calendar month, e.g. ``Period(2024, 3)`` for March 2024."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidInputError(f"Invalid month {self.month}, expected 1-12")
        if not 1 <= self.year <= 9999:
            raise InvalidInputError(f"Invalid year {self.year}")

    @classmethod
    def parse(cls, value: str) -> "Period":
        """
        Parse a ``"YYYY-MM"`` period string.

        Raises:
            InvalidInputError: If the string is not a valid year-month
        """
        match = _PERIOD_RE.match(value or "")
        if not match:
            raise InvalidInputError(f"Invalid period '{value}', expected YYYY-MM")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, day: date) -> "Period":
        return cls(day.year, day.month)

    @classmethod
    def from_label(cls, label: str) -> Optional["Period"]:
        """
        Recover a period from a display label such as ``"March 2024"``.

        Also accepts the ``"YYYY-MM"`` form. Returns None when the label
        cannot be interpreted, so callers can fall back to other evidence.
        """
        if not label:
            return None
        try:
            return cls.parse(label)
        except InvalidInputError:
            pass
        try:
            parsed = datetime.strptime(label.strip(), "%B %Y")
        except ValueError:
            return None
        return cls(parsed.year, parsed.month)

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def previous(self) -> "Period":
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
