"""Availability checking and half-unit claims for bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple, TYPE_CHECKING

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.courts.domain.catalog import SlotCatalog, weekday_name
from apps.courts.domain.policies import GroupPlaySchedule
from apps.courts.models import Court, TimeSlot
from apps.courts.services import get_court, get_time_slot, load_catalog, load_group_play_schedule
from shared.domain.errors import ConflictError, PolicyBlockError, ValidationError
from shared.infrastructure.storage import storage_guard

from .domain.occupancy import (
    CONFLICT,
    POLICY_BLOCKED,
    HalfUnit,
    OccupancyMap,
    SpanError,
    compute_span,
)

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: Optional[str] = None
    conflicting_booking: Optional["Booking"] = None
    units: Tuple[HalfUnit, ...] = ()
    detail: Optional[str] = None

    def raise_for_status(self) -> None:
        """Turn a negative answer into the matching domain error"""
        if self.available:
            return
        if self.reason == POLICY_BLOCKED:
            raise PolicyBlockError(POLICY_BLOCKED, self.detail)
        raise ConflictError(self.reason or CONFLICT, self.detail or "", conflicting_booking=self.conflicting_booking)

    def to_dict(self) -> dict:
        booking = self.conflicting_booking
        return {
            "available": self.available,
            "reason": self.reason,
            "detail": self.detail,
            "conflicting_booking": booking.summary() if booking is not None else None,
            "half_units": [{"time_slot_id": unit.time_slot_id, "half": unit.half.label} for unit in self.units],
        }


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_court(court_id) -> Court:
    """Serialize booking writes per court for the rest of the transaction."""

    with storage_guard("court catalog"):
        court = _lock_queryset_if_possible(Court.objects.filter(pk=court_id)).first()
    if court is None:
        return get_court(court_id)
    return court


def list_bookings(court_id, day: date, exclude_booking_id=None) -> List["Booking"]:
    """Non-cancelled bookings of one court on one date."""

    from .models import Booking  # Local import to prevent circular dependency

    with storage_guard("booking store"):
        queryset = Booking.objects.filter(court_id=court_id, date=day).exclude(status=Booking.Status.CANCELLED)
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return list(queryset.select_related("time_slot"))


def build_occupancy(catalog: SlotCatalog, bookings) -> OccupancyMap:
    return OccupancyMap.from_bookings(catalog, bookings, key=lambda booking: booking.occupancy_key)


def check_availability(
    court,
    day: date,
    time_slot,
    start_minute: int = 0,
    duration_hours=1,
    exclude_booking_id=None,
    *,
    catalog: Optional[SlotCatalog] = None,
    group_play: Optional[GroupPlaySchedule] = None,
) -> AvailabilityResult:
    """Decide whether a court can take the requested span on a date.

    Order of checks: span walk (``insufficient_slots`` / ``non_consecutive``),
    group-play policy on every needed half-unit, then occupancy by other
    bookings. Missing court or slot raises NotFoundError. Callers running
    many checks may pass a preloaded ``catalog`` and ``group_play``.
    """

    if not isinstance(court, Court):
        court = get_court(court)
    if not isinstance(time_slot, TimeSlot):
        time_slot = get_time_slot(time_slot)

    catalog = catalog if catalog is not None else load_catalog(time_slot.day_type)

    try:
        span = compute_span(catalog, time_slot.pk, start_minute, duration_hours)
    except SpanError as exc:
        return AvailabilityResult(available=False, reason=exc.reason, units=exc.partial)
    except LookupError as exc:
        raise ValidationError(str(exc)) from exc
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    occupancy = build_occupancy(catalog, list_bookings(court.pk, day, exclude_booking_id))

    group_play = group_play if group_play is not None else load_group_play_schedule([court.pk])
    weekday = weekday_name(day)
    for unit in span.units:
        slot = span.slot_for(unit)
        window = group_play.window_for(court.pk, weekday, slot.start_minute)
        if window is not None:
            return AvailabilityResult(
                available=False,
                reason=POLICY_BLOCKED,
                units=span.units,
                detail=f"Reserved for group play session {window.name} at {slot.start_time}",
            )

    hit = occupancy.first_conflict(span.units)
    if hit is not None:
        unit, owner = hit
        return AvailabilityResult(
            available=False,
            reason=CONFLICT,
            conflicting_booking=owner,
            units=span.units,
            detail=f"Half-unit {unit} is held by booking {owner.booking_code}",
        )

    return AvailabilityResult(available=True, units=span.units)


def reserve_half_units(booking: "Booking", units) -> None:
    """Write the booking's claims; a concurrent claim on any unit is a conflict."""

    from .models import BookingHalfUnit

    rows = [
        BookingHalfUnit(
            booking=booking,
            court_id=booking.court_id,
            date=booking.date,
            time_slot_id=unit.time_slot_id,
            half=int(unit.half),
        )
        for unit in units
    ]
    try:
        with transaction.atomic():
            BookingHalfUnit.objects.bulk_create(rows)
    except IntegrityError as exc:
        logger.warning(f"Half-unit claim collided for booking {booking.booking_code}: {exc}")
        claimed = Q()
        for unit in units:
            claimed |= Q(time_slot_id=unit.time_slot_id, half=int(unit.half))
        holder = (
            BookingHalfUnit.objects.filter(claimed, court_id=booking.court_id, date=booking.date)
            .exclude(booking=booking)
            .select_related("booking")
            .first()
        )
        raise ConflictError(
            CONFLICT,
            "Requested time was taken by another booking",
            conflicting_booking=holder.booking if holder else None,
        ) from exc


def release_half_units(booking: "Booking") -> int:
    """Drop the booking's claims so the half-units can be booked again."""

    from .models import BookingHalfUnit

    deleted, _ = BookingHalfUnit.objects.filter(booking=booking).delete()
    return deleted
