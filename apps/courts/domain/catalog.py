"""
Slot Catalog

Canonical, pre-parsed representation of a day type's time slots.
Times of day are parsed once into integer minutes so contiguity checks
compare numbers, never strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

MINUTES_PER_DAY = 24 * 60

WEEKDAY = 'weekday'
WEEKEND = 'weekend'

# date.weekday() order, Monday first
WEEKDAY_NAMES = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')

_TIME_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


def parse_time_of_day(value: str, *, allow_end_of_day: bool = False) -> int:
    """Parse ``HH:MM`` into minutes after midnight.

    ``24:00`` is accepted only when ``allow_end_of_day`` is set, since it
    is meaningful as a slot end but never as a start.
    """

    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        raise ValueError(f"Invalid minutes in {value!r}")
    total = hours * 60 + minutes
    if total == MINUTES_PER_DAY and allow_end_of_day:
        return total
    if hours > 23:
        raise ValueError(f"Invalid hour in {value!r}")
    return total


def format_time_of_day(minutes: int) -> str:
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_type_for(day: date) -> str:
    return WEEKEND if day.weekday() >= 5 else WEEKDAY


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def js_weekday(day: date) -> int:
    """Weekday number with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class CatalogSlot:
    id: int
    start_minute: int
    end_minute: int
    day_type: str
    is_peak: bool = False
    normal_price: Decimal = Decimal('0')
    peak_price: Decimal = Decimal('0')

    @property
    def start_time(self) -> str:
        return format_time_of_day(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_time_of_day(self.end_minute)

    @property
    def hourly_rate(self) -> Decimal:
        return self.peak_price if self.is_peak else self.normal_price


class SlotCatalog:
    """Active slots of one day type, ordered by start minute."""

    def __init__(self, day_type: str, slots: Iterable[CatalogSlot]):
        self.day_type = day_type
        self._slots: Sequence[CatalogSlot] = tuple(sorted(slots, key=lambda s: s.start_minute))
        self._index = {slot.id: position for position, slot in enumerate(self._slots)}

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[CatalogSlot]:
        return iter(self._slots)

    def __getitem__(self, position: int) -> CatalogSlot:
        return self._slots[position]

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self._index

    def index_of(self, slot_id: int) -> Optional[int]:
        return self._index.get(slot_id)

    def get(self, slot_id: int) -> Optional[CatalogSlot]:
        position = self._index.get(slot_id)
        return None if position is None else self._slots[position]
