"""Human-readable code formatting on top of the sequence generator."""

from __future__ import annotations

from datetime import date

from .services import SequenceGenerator, sequence_generator

BOOKING_PREFIX = "BK"
GROUP_PREFIX = "RG"
SEQUENCE_WIDTH = 4


def format_code(prefix: str, day: date, value: int, width: int = SEQUENCE_WIDTH) -> str:
    """Return e.g. ``BK202610190007``. Values wider than ``width`` are kept whole."""

    return f"{prefix}{day.strftime('%Y%m%d')}{value:0{width}d}"


def booking_sequence_key(day: date) -> str:
    return f"booking-{BOOKING_PREFIX}{day.strftime('%Y%m%d')}"


def group_sequence_key(day: date) -> str:
    return f"recurring-group-{GROUP_PREFIX}{day.strftime('%Y%m%d')}"


def next_booking_code(booking_date: date, generator: SequenceGenerator | None = None) -> str:
    """Booking codes reset daily, keyed by the date being booked."""

    generator = generator or sequence_generator
    return format_code(BOOKING_PREFIX, booking_date, generator.next(booking_sequence_key(booking_date)))


def next_group_code(created_on: date, generator: SequenceGenerator | None = None) -> str:
    """Group codes reset daily, keyed by the creation date."""

    generator = generator or sequence_generator
    return format_code(GROUP_PREFIX, created_on, generator.next(group_sequence_key(created_on)))
