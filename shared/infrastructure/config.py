"""Typed access to the COURT_BOOKING settings block."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings  # type: ignore


@dataclass(frozen=True)
class BookingConfig:
    max_recurring_months: int = 3
    advance_booking_days: int = 7
    min_duration_hours: Decimal = Decimal('0.5')
    max_duration_hours: Decimal = Decimal('8')
    recurring_min_duration_hours: Decimal = Decimal('1')
    payment_deadline_minutes: int = 30
    currency: str = 'THB'
    recurring_plan_timeout_seconds: float = 20.0


def booking_config() -> BookingConfig:
    """Read settings.COURT_BOOKING, falling back to defaults per key."""

    raw = getattr(settings, 'COURT_BOOKING', {})
    defaults = BookingConfig()
    return BookingConfig(
        max_recurring_months=int(raw.get('MAX_RECURRING_MONTHS', defaults.max_recurring_months)),
        advance_booking_days=int(raw.get('ADVANCE_BOOKING_DAYS', defaults.advance_booking_days)),
        min_duration_hours=Decimal(str(raw.get('MIN_DURATION_HOURS', defaults.min_duration_hours))),
        max_duration_hours=Decimal(str(raw.get('MAX_DURATION_HOURS', defaults.max_duration_hours))),
        recurring_min_duration_hours=Decimal(
            str(raw.get('RECURRING_MIN_DURATION_HOURS', defaults.recurring_min_duration_hours))
        ),
        payment_deadline_minutes=int(raw.get('PAYMENT_DEADLINE_MINUTES', defaults.payment_deadline_minutes)),
        currency=raw.get('CURRENCY', defaults.currency),
        recurring_plan_timeout_seconds=float(
            raw.get('RECURRING_PLAN_TIMEOUT_SECONDS', defaults.recurring_plan_timeout_seconds)
        ),
    )
