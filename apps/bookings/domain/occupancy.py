"""
Occupancy Model

A time slot is two half-units of thirty minutes. A booking occupies the
half-units found by walking forward from its anchor slot through the
day type's ordered catalog. Conflicts are decided on these
``(time_slot_id, half)`` tokens only, so a booking ending at :30 and one
starting at :30 of the same slot compose correctly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Callable, Dict, Generic, Iterable, Optional, Tuple, TypeVar

from apps.courts.domain.catalog import CatalogSlot, SlotCatalog

logger = logging.getLogger(__name__)

INSUFFICIENT_SLOTS = 'insufficient_slots'
NON_CONSECUTIVE = 'non_consecutive'
POLICY_BLOCKED = 'policy_blocked'
CONFLICT = 'conflict'

VALID_START_MINUTES = (0, 30)

OwnerT = TypeVar('OwnerT')


class Half(IntEnum):
    FIRST = 0
    SECOND = 1

    @property
    def label(self) -> str:
        return 'first' if self is Half.FIRST else 'second'


@dataclass(frozen=True, order=True)
class HalfUnit:
    time_slot_id: int
    half: Half

    def __str__(self):
        return f"{self.time_slot_id}:{self.half.label}"


class SpanError(Exception):
    """The walk could not cover the requested duration."""

    def __init__(self, reason: str, partial: Tuple[HalfUnit, ...] = ()):
        self.reason = reason
        self.partial = tuple(partial)
        super().__init__(reason)


@dataclass(frozen=True)
class Span:
    units: Tuple[HalfUnit, ...]
    slots: Tuple[CatalogSlot, ...]

    def slot_for(self, unit: HalfUnit) -> CatalogSlot:
        for slot in self.slots:
            if slot.id == unit.time_slot_id:
                return slot
        raise KeyError(unit)


def half_units_needed(duration_hours) -> int:
    """Number of half-units in a duration; it must be a positive multiple of 0.5."""

    try:
        halves = Decimal(str(duration_hours)) * 2
    except InvalidOperation as exc:
        raise ValueError(f"Invalid duration {duration_hours!r}") from exc
    if halves <= 0 or halves != halves.to_integral_value():
        raise ValueError(f"Duration must be a positive multiple of 0.5 hours, got {duration_hours}")
    return int(halves)


def compute_span(catalog: SlotCatalog, anchor_slot_id: int, start_minute: int, duration_hours) -> Span:
    """Walk the catalog from the anchor and return the occupied half-units.

    Raises ``SpanError`` with ``insufficient_slots`` when the catalog ends
    first and ``non_consecutive`` when two neighbours do not touch
    (``slot[i].end != slot[i+1].start``). Raises ``LookupError`` when the
    anchor is not part of the catalog and ``ValueError`` for a malformed
    start minute or duration.
    """

    if start_minute not in VALID_START_MINUTES:
        raise ValueError(f"Start minute must be 0 or 30, got {start_minute}")
    needed = half_units_needed(duration_hours)

    position = catalog.index_of(anchor_slot_id)
    if position is None:
        raise LookupError(f"Time slot {anchor_slot_id} is not in the active {catalog.day_type} catalog")

    half = Half.SECOND if start_minute == 30 else Half.FIRST
    current = catalog[position]
    slots = [current]
    units = [HalfUnit(current.id, half)]

    while len(units) < needed:
        if half is Half.FIRST:
            half = Half.SECOND
        else:
            if position + 1 >= len(catalog):
                raise SpanError(INSUFFICIENT_SLOTS, tuple(units))
            following = catalog[position + 1]
            if current.end_minute != following.start_minute:
                raise SpanError(NON_CONSECUTIVE, tuple(units))
            position += 1
            current = following
            slots.append(current)
            half = Half.FIRST
        units.append(HalfUnit(current.id, half))

    return Span(tuple(units), tuple(slots))


class OccupancyMap(Generic[OwnerT]):
    """Index of occupied half-units to the booking that holds each of them."""

    def __init__(self):
        self._owners: Dict[HalfUnit, OwnerT] = {}

    def __contains__(self, unit: HalfUnit) -> bool:
        return unit in self._owners

    def __len__(self) -> int:
        return len(self._owners)

    def occupy(self, units: Iterable[HalfUnit], owner: OwnerT) -> None:
        for unit in units:
            self._owners.setdefault(unit, owner)

    def owner_of(self, unit: HalfUnit) -> Optional[OwnerT]:
        return self._owners.get(unit)

    def first_conflict(self, units: Iterable[HalfUnit]) -> Optional[Tuple[HalfUnit, OwnerT]]:
        for unit in units:
            owner = self._owners.get(unit)
            if owner is not None:
                return unit, owner
        return None

    @classmethod
    def from_bookings(
        cls,
        catalog: SlotCatalog,
        bookings: Iterable[OwnerT],
        key: Callable[[Any], Tuple[int, int, Any]],
    ) -> 'OccupancyMap[OwnerT]':
        """Recompute every booking's span against the live catalog.

        ``key`` returns ``(anchor_slot_id, start_minute, duration_hours)``.
        A booking whose span no longer fits the catalog still holds the
        half-units that can be derived up to the break.
        """

        occupancy: OccupancyMap[OwnerT] = cls()
        for booking in bookings:
            anchor_id, start_minute, duration = key(booking)
            try:
                units = compute_span(catalog, anchor_id, start_minute, duration).units
            except SpanError as exc:
                logger.warning(
                    f"Booking {getattr(booking, 'pk', booking)} no longer spans the catalog "
                    f"({exc.reason}); holding {len(exc.partial)} derivable half-units"
                )
                units = exc.partial
            except (LookupError, ValueError) as exc:
                logger.warning(f"Booking {getattr(booking, 'pk', booking)} ignored for occupancy: {exc}")
                continue
            occupancy.occupy(units, booking)
        return occupancy
