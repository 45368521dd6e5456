"""Daily schedule grid and customer-facing availability counts.

Both views build one occupancy map per court for the whole date and then
read cells from it, so cost grows with courts x slots + bookings.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from apps.courts.domain.catalog import CatalogSlot, SlotCatalog, day_type_for, weekday_name
from apps.courts.domain.policies import GroupPlaySchedule
from apps.courts.models import Court
from apps.courts.services import (
    get_time_slot,
    is_date_blocked,
    list_bookable_courts,
    load_catalog,
    load_group_play_schedule,
)
from shared.infrastructure.storage import storage_guard

from .domain.occupancy import Half, HalfUnit, OccupancyMap
from .services import build_occupancy

logger = logging.getLogger(__name__)

AVAILABLE = "available"
BOOKED = "booked"
BLOCKED_BY_POLICY = "blocked_by_policy"
BLOCKED_BY_DATE = "blocked_by_date"


@dataclass
class HalfCell:
    half: Half
    state: str
    booking: Optional[dict] = None

    @property
    def available(self) -> bool:
        return self.state == AVAILABLE

    def to_dict(self) -> dict:
        return {"half": self.half.label, "state": self.state, "available": self.available, "booking": self.booking}


@dataclass
class SlotCell:
    slot: CatalogSlot
    blocked_by_policy: bool
    halves: List[HalfCell]

    @property
    def available(self) -> bool:
        # Either half taken makes the slot unavailable in the detailed grid
        return all(cell.available for cell in self.halves)

    def to_dict(self) -> dict:
        return {
            "time_slot_id": self.slot.id,
            "start_time": self.slot.start_time,
            "end_time": self.slot.end_time,
            "is_peak": self.slot.is_peak,
            "available": self.available,
            "blocked_by_policy": self.blocked_by_policy,
            "halves": [cell.to_dict() for cell in self.halves],
        }


@dataclass
class CourtRow:
    court: Court
    slots: List[SlotCell] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "court_id": self.court.pk,
            "court_number": self.court.number,
            "court_name": self.court.name,
            "court_type": self.court.court_type,
            "slots": [cell.to_dict() for cell in self.slots],
        }


@dataclass
class DailySchedule:
    date: date
    day_type: str
    is_blocked: bool
    blocked_reason: Optional[str]
    catalog: SlotCatalog
    courts: List[CourtRow]

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "day_type": self.day_type,
            "is_blocked": self.is_blocked,
            "blocked_reason": self.blocked_reason,
            "time_slots": [
                {"time_slot_id": slot.id, "start_time": slot.start_time, "end_time": slot.end_time, "is_peak": slot.is_peak}
                for slot in self.catalog
            ],
            "courts": [row.to_dict() for row in self.courts],
        }


def _bookings_by_court(day: date, court_ids) -> Dict[int, list]:
    from .models import Booking

    grouped: Dict[int, list] = defaultdict(list)
    with storage_guard("booking store"):
        bookings = (
            Booking.objects.filter(date=day, court_id__in=court_ids)
            .exclude(status=Booking.Status.CANCELLED)
            .order_by("created_at")
        )
        for booking in bookings:
            grouped[booking.court_id].append(booking)
    return grouped


def _occupancy_by_court(catalog: SlotCatalog, day: date, courts) -> Dict[int, OccupancyMap]:
    grouped = _bookings_by_court(day, [court.pk for court in courts])
    return {court.pk: build_occupancy(catalog, grouped.get(court.pk, [])) for court in courts}


def build_schedule(day: date, day_type: Optional[str] = None) -> DailySchedule:
    """Per-court, per-slot, per-half grid for one date."""

    day_type = day_type or day_type_for(day)
    block = is_date_blocked(day)
    catalog = load_catalog(day_type)
    courts = list_bookable_courts()
    occupancy = _occupancy_by_court(catalog, day, courts)
    group_play = load_group_play_schedule()
    weekday = weekday_name(day)

    rows = []
    for court in courts:
        court_map = occupancy[court.pk]
        row = CourtRow(court=court)
        for slot in catalog:
            policy_blocked = group_play.is_slot_blocked(court.pk, weekday, slot.start_minute)
            halves = []
            for half in Half:
                owner = court_map.owner_of(HalfUnit(slot.id, half))
                if owner is not None:
                    halves.append(HalfCell(half, BOOKED, owner.summary()))
                elif policy_blocked:
                    halves.append(HalfCell(half, BLOCKED_BY_POLICY))
                elif block.is_blocked:
                    halves.append(HalfCell(half, BLOCKED_BY_DATE))
                else:
                    halves.append(HalfCell(half, AVAILABLE))
            row.slots.append(SlotCell(slot=slot, blocked_by_policy=policy_blocked, halves=halves))
        rows.append(row)

    return DailySchedule(
        date=day,
        day_type=day_type,
        is_blocked=block.is_blocked,
        blocked_reason=block.reason,
        catalog=catalog,
        courts=rows,
    )


@dataclass(frozen=True)
class SlotAvailability:
    slot: CatalogSlot
    available_court_count: int
    total_courts: int
    booked_court_count: int
    policy_blocked_count: int
    price: Decimal

    def to_dict(self) -> dict:
        return {
            "time_slot_id": self.slot.id,
            "start_time": self.slot.start_time,
            "end_time": self.slot.end_time,
            "is_peak": self.slot.is_peak,
            "price": self.price,
            "available_courts": self.available_court_count,
            "total_courts": self.total_courts,
        }


@dataclass(frozen=True)
class AggregateAvailability:
    date: date
    day_type: str
    is_blocked: bool
    reason: Optional[str] = None
    slots: tuple = ()

    def to_dict(self) -> dict:
        payload = {"date": self.date, "day_type": self.day_type, "is_blocked": self.is_blocked}
        if self.is_blocked:
            payload["reason"] = self.reason
        else:
            payload["slots"] = [slot.to_dict() for slot in self.slots]
        return payload


def aggregate_availability(day: date, group_play: Optional[GroupPlaySchedule] = None) -> AggregateAvailability:
    """Count free courts per slot for customers.

    A court is taken only when both halves of the slot are booked; a
    single booked half still leaves the court counted as available here,
    unlike the detailed grid. Courts held by group play are subtracted
    separately. A blocked date returns no counts at all.
    """

    day_type = day_type_for(day)
    block = is_date_blocked(day)
    if block.is_blocked:
        return AggregateAvailability(date=day, day_type=day_type, is_blocked=True, reason=block.reason)

    catalog = load_catalog(day_type)
    courts = list_bookable_courts()
    occupancy = _occupancy_by_court(catalog, day, courts)
    group_play = group_play if group_play is not None else load_group_play_schedule()
    weekday = weekday_name(day)

    slots = []
    for slot in catalog:
        booked = 0
        policy_blocked = 0
        for court in courts:
            court_map = occupancy[court.pk]
            if all(HalfUnit(slot.id, half) in court_map for half in Half):
                booked += 1
            elif group_play.is_slot_blocked(court.pk, weekday, slot.start_minute):
                policy_blocked += 1
        slots.append(
            SlotAvailability(
                slot=slot,
                available_court_count=len(courts) - booked - policy_blocked,
                total_courts=len(courts),
                booked_court_count=booked,
                policy_blocked_count=policy_blocked,
                price=slot.hourly_rate,
            )
        )
    return AggregateAvailability(date=day, day_type=day_type, is_blocked=False, slots=tuple(slots))


def available_courts(day: date, time_slot_id) -> List[Court]:
    """Courts on which the whole slot (both halves) is free and not held by group play."""

    time_slot = get_time_slot(time_slot_id)
    if is_date_blocked(day).is_blocked:
        return []
    catalog = load_catalog(time_slot.day_type)
    courts = list_bookable_courts()
    occupancy = _occupancy_by_court(catalog, day, courts)
    group_play = load_group_play_schedule()
    weekday = weekday_name(day)
    return [
        court
        for court in courts
        if not any(HalfUnit(time_slot.pk, half) in occupancy[court.pk] for half in Half)
        and not group_play.is_slot_blocked(court.pk, weekday, time_slot.start_minute)
    ]
