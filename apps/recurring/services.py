"""Planner wiring against the court catalog and booking store."""

from __future__ import annotations

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Optional

from apps.bookings.services import check_availability
from apps.courts.domain.catalog import SlotCatalog, day_type_for
from apps.courts.models import Court, TimeSlot
from apps.courts.services import is_date_blocked, load_catalog, load_group_play_schedule
from shared.domain.errors import ValidationError

from .domain.planner import PlanResult, generate_dates, plan_recurring

logger = logging.getLogger(__name__)


def deadline_after(seconds: Optional[float]):
    """``should_continue`` callable that turns false once ``seconds`` have passed."""

    if not seconds or seconds <= 0:
        return None
    stop_at = time.monotonic() + seconds
    return lambda: time.monotonic() < stop_at


def plan_for_court(
    court: Court,
    time_slot: TimeSlot,
    weekdays,
    start: date,
    end: date,
    duration_hours,
    *,
    timeout_seconds: Optional[float] = None,
    catalog: Optional[SlotCatalog] = None,
) -> PlanResult:
    """Run the planner for one court and anchor slot.

    The catalog and group-play rules are loaded once for the whole batch.
    A date whose day type differs from the anchor slot's cannot use that
    slot and is skipped as a conflict.
    """

    catalog = catalog if catalog is not None else load_catalog(time_slot.day_type)
    group_play = load_group_play_schedule([court.pk])

    def check(day: date):
        if day_type_for(day) != time_slot.day_type:
            raise ValidationError(
                f"Time slot {time_slot.start_time} is a {time_slot.day_type} slot, {day.isoformat()} is a {day_type_for(day)}"
            )
        return check_availability(
            court,
            day,
            time_slot,
            0,
            duration_hours,
            catalog=catalog,
            group_play=group_play,
        )

    dates = generate_dates(start, end, weekdays)
    logger.info(
        f"Planning {len(dates)} dates on court {court.number} slot {time_slot.start_time} "
        f"between {start} and {end}"
    )
    return plan_recurring(
        dates,
        is_blocked=is_date_blocked,
        check=check,
        hourly_rate=Decimal(time_slot.hourly_price("normal")),
        duration_hours=duration_hours,
        is_peak=bool(time_slot.is_peak),
        should_continue=deadline_after(timeout_seconds),
    )
