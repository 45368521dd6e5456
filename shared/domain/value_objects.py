"""
Common Value Objects

- DateSpan: inclusive range of calendar dates
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateSpan(ValueObject):
    """
    Inclusive range of calendar dates

    Unlike hotel stays, a recurring schedule includes its end date.
    """
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"End date ({self.end}) must not be before start date ({self.start})")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"
