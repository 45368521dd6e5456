"""
Recurring Booking Planner

Expands a weekly pattern into candidate dates, runs the per-date checks
and prices what survives. Storage and availability are reached only
through the callables handed in, so the planner itself stays pure.

A plan interrupted by ``should_continue`` is still a usable result:
dates already decided stay decided and the rest are reported as pending.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from apps.courts.domain.catalog import js_weekday
from shared.domain.errors import DependencyFailure, ValidationError
from shared.domain.value_objects import DateSpan

logger = logging.getLogger(__name__)

SKIP_BLOCKED = 'blocked'
SKIP_CONFLICT = 'conflict'

# Sunday first, matching js_weekday numbering
WEEKDAY_SHORT_NAMES = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')


@dataclass(frozen=True)
class SkippedDate:
    date: date
    reason: str
    detail: str = ''

    def to_dict(self) -> dict:
        return {'date': self.date.isoformat(), 'reason': self.reason, 'detail': self.detail}


@dataclass(frozen=True)
class PriceLine:
    date: date
    weekday: int
    is_weekend: bool
    is_peak: bool
    price_per_hour: Decimal
    duration_hours: Decimal
    subtotal: Decimal

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'weekday': self.weekday,
            'is_weekend': self.is_weekend,
            'is_peak': self.is_peak,
            'price_per_hour': self.price_per_hour,
            'duration_hours': self.duration_hours,
            'subtotal': self.subtotal,
        }


@dataclass
class PlanResult:
    candidates: List[date] = field(default_factory=list)
    valid_dates: List[date] = field(default_factory=list)
    skipped_dates: List[SkippedDate] = field(default_factory=list)
    breakdown: List[PriceLine] = field(default_factory=list)
    total_amount: Decimal = Decimal('0')
    pending_dates: List[date] = field(default_factory=list)

    @property
    def interrupted(self) -> bool:
        return bool(self.pending_dates)

    @property
    def price_per_session(self) -> Decimal:
        return self.breakdown[0].subtotal if self.breakdown else Decimal('0')

    def to_dict(self) -> dict:
        return {
            'dates': [day.isoformat() for day in self.valid_dates],
            'skipped_dates': [skipped.to_dict() for skipped in self.skipped_dates],
            'pending_dates': [day.isoformat() for day in self.pending_dates],
            'interrupted': self.interrupted,
            'pricing': {
                'total_amount': self.total_amount,
                'price_per_session': self.price_per_session,
                'breakdown': [line.to_dict() for line in self.breakdown],
            },
        }


def add_months(day: date, months: int) -> date:
    """Same day of month ``months`` later, clamped to the month's last day."""
    month_index = day.month - 1 + months
    year, month = day.year + month_index // 12, month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def _coerce_date(value, label: str, errors: List[str]) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        errors.append(f"{label} is not a valid date")
        return None


def validate_recurring_request(
    weekdays: Iterable,
    start_date,
    end_date,
    *,
    today: date,
    max_months: int = 3,
):
    """
    Check a recurring pattern, collecting every violation

    Returns ``(weekdays, start, end)`` with weekdays as a sorted tuple of
    ints 0-6 (Sunday = 0). Raises ValidationError listing all problems.
    """
    errors: List[str] = []

    days = list(weekdays or [])
    if not days:
        errors.append("Select at least one day of the week")
    elif any(isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6 for day in days):
        errors.append("Days of the week must be numbers from 0 (Sunday) to 6 (Saturday)")

    start = _coerce_date(start_date, "Start date", errors)
    end = _coerce_date(end_date, "End date", errors)

    if start is not None and start < today:
        errors.append("Start date cannot be in the past")
    if start is not None and end is not None:
        if end < start:
            errors.append("End date must be on or after the start date")
        elif end > add_months(start, max_months):
            errors.append(f"Recurring bookings cannot span more than {max_months} months")

    if errors:
        raise ValidationError(errors)
    return tuple(sorted(set(days))), start, end


def generate_dates(start: date, end: date, weekdays: Iterable[int]) -> List[date]:
    """Every date in [start, end] falling on one of ``weekdays``, ascending."""
    if end < start:
        return []
    wanted = set(weekdays)
    return [day for day in DateSpan(start, end).days() if js_weekday(day) in wanted]


def weekdays_display(weekdays: Iterable[int]) -> str:
    return ', '.join(WEEKDAY_SHORT_NAMES[day] for day in sorted(set(weekdays)))


def plan_recurring(
    dates: Iterable[date],
    *,
    is_blocked: Callable,
    check: Callable,
    hourly_rate: Decimal,
    duration_hours,
    is_peak: bool = False,
    should_continue: Optional[Callable[[], bool]] = None,
) -> PlanResult:
    """
    Decide each candidate date and price the survivors

    ``is_blocked(day)`` returns an object with ``is_blocked`` and ``reason``;
    ``check(day)`` returns an object with ``available``, ``reason`` and
    ``detail``. Blocked dates are never passed to ``check``. An exception
    from either call skips only that date; DependencyFailure fails the
    whole plan.
    """
    duration = Decimal(str(duration_hours))
    rate = Decimal(hourly_rate)
    candidates = list(dates)
    result = PlanResult(candidates=candidates)

    for position, day in enumerate(candidates):
        if should_continue is not None and not should_continue():
            result.pending_dates = candidates[position:]
            logger.warning(
                f"Recurring plan stopped after {position} of {len(candidates)} dates, "
                f"{len(result.pending_dates)} left undecided"
            )
            break

        try:
            block = is_blocked(day)
            if block.is_blocked:
                result.skipped_dates.append(SkippedDate(day, SKIP_BLOCKED, block.reason or ''))
                logger.warning(f"Skipping {day}: date is blocked ({block.reason})")
                continue

            availability = check(day)
        except DependencyFailure:
            raise
        except Exception as exc:
            logger.error(f"Availability check for {day} failed: {exc}", exc_info=True)
            result.skipped_dates.append(SkippedDate(day, SKIP_CONFLICT, str(exc) or "Could not check availability"))
            continue

        if not availability.available:
            detail = availability.detail or "Court is not available at this time"
            result.skipped_dates.append(SkippedDate(day, SKIP_CONFLICT, f"{availability.reason}: {detail}"))
            logger.warning(f"Skipping {day}: {availability.reason}")
            continue

        subtotal = rate * duration
        result.valid_dates.append(day)
        result.breakdown.append(PriceLine(
            date=day,
            weekday=js_weekday(day),
            is_weekend=day.weekday() >= 5,
            is_peak=is_peak,
            price_per_hour=rate,
            duration_hours=duration,
            subtotal=subtotal,
        ))
        result.total_amount += subtotal

    return result
