"""Tests for half-unit spans, occupancy maps and booking value objects."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest

from apps.bookings.domain.entities import (
    BookingStatus,
    PaymentProgress,
    PaymentStatus,
    ensure_transition,
)
from apps.bookings.domain.occupancy import (
    INSUFFICIENT_SLOTS,
    NON_CONSECUTIVE,
    Half,
    HalfUnit,
    OccupancyMap,
    SpanError,
    compute_span,
    half_units_needed,
)
from apps.bookings.domain.pricing import calculate_price
from apps.courts.domain.catalog import CatalogSlot, SlotCatalog
from shared.domain.errors import ValidationError


def _catalog(*ranges):
    slots = [
        CatalogSlot(id=index, start_minute=start * 60, end_minute=end * 60, day_type="weekday")
        for index, (start, end) in enumerate(ranges, start=1)
    ]
    return SlotCatalog("weekday", slots)


@dataclass
class FakeBooking:
    pk: int
    time_slot_id: int
    start_minute: int = 0
    duration_hours: Decimal = Decimal("1")

    @property
    def occupancy_key(self):
        return self.time_slot_id, self.start_minute, self.duration_hours


def _occupancy(catalog, *bookings):
    return OccupancyMap.from_bookings(catalog, bookings, key=lambda booking: booking.occupancy_key)


# ----------------------------------------------------------------------------
# Span walk
# ----------------------------------------------------------------------------

def test_two_hours_from_top_of_slot_covers_both_slots():
    catalog = _catalog((8, 9), (9, 10))
    span = compute_span(catalog, 1, 0, 2)
    assert span.units == (
        HalfUnit(1, Half.FIRST),
        HalfUnit(1, Half.SECOND),
        HalfUnit(2, Half.FIRST),
        HalfUnit(2, Half.SECOND),
    )


def test_running_past_last_slot_is_insufficient():
    catalog = _catalog((8, 9), (9, 10))
    with pytest.raises(SpanError) as excinfo:
        compute_span(catalog, 1, 30, 2)
    assert excinfo.value.reason == INSUFFICIENT_SLOTS
    assert excinfo.value.partial == (
        HalfUnit(1, Half.SECOND),
        HalfUnit(2, Half.FIRST),
        HalfUnit(2, Half.SECOND),
    )


def test_gap_between_slots_is_non_consecutive():
    catalog = SlotCatalog("weekday", [
        CatalogSlot(id=1, start_minute=480, end_minute=540, day_type="weekday"),
        CatalogSlot(id=2, start_minute=570, end_minute=630, day_type="weekday"),
    ])
    with pytest.raises(SpanError) as excinfo:
        compute_span(catalog, 1, 0, 1.5)
    assert excinfo.value.reason == NON_CONSECUTIVE
    # A span that stays inside the first slot is unaffected by the gap
    assert len(compute_span(catalog, 1, 0, 1).units) == 2


def test_half_hour_bookings_in_the_same_slot_do_not_overlap():
    catalog = _catalog((8, 9))
    first = compute_span(catalog, 1, 0, 0.5).units
    second = compute_span(catalog, 1, 30, 0.5).units
    assert first == (HalfUnit(1, Half.FIRST),)
    assert second == (HalfUnit(1, Half.SECOND),)
    assert not set(first) & set(second)


def test_accepted_spans_only_cross_touching_slots():
    catalog = _catalog((8, 9), (9, 10), (10, 11), (11, 12))
    for anchor in (1, 2, 3, 4):
        for start_minute in (0, 30):
            for halves in range(1, 9):
                try:
                    span = compute_span(catalog, anchor, start_minute, Decimal(halves) / 2)
                except SpanError as exc:
                    assert exc.reason == INSUFFICIENT_SLOTS
                    continue
                assert len(span.units) == halves
                for current, following in zip(span.slots, span.slots[1:]):
                    assert current.end_minute == following.start_minute


def test_unknown_anchor_and_bad_inputs():
    catalog = _catalog((8, 9))
    with pytest.raises(LookupError):
        compute_span(catalog, 99, 0, 1)
    with pytest.raises(ValueError):
        compute_span(catalog, 1, 15, 1)
    with pytest.raises(ValueError):
        half_units_needed("0.75")
    with pytest.raises(ValueError):
        half_units_needed(0)
    assert half_units_needed("2.5") == 5


# ----------------------------------------------------------------------------
# Occupancy map
# ----------------------------------------------------------------------------

def test_second_half_request_hits_full_slot_booking():
    catalog = _catalog((8, 9), (9, 10))
    holder = FakeBooking(pk=1, time_slot_id=1)
    occupancy = _occupancy(catalog, holder)

    requested = compute_span(catalog, 1, 30, 0.5).units
    unit, owner = occupancy.first_conflict(requested)
    assert owner is holder
    assert unit == HalfUnit(1, Half.SECOND)


def test_intersecting_token_sets_always_conflict():
    catalog = _catalog((8, 9), (9, 10), (10, 11))
    requests = [(anchor, start, hours) for anchor in (1, 2, 3) for start in (0, 30) for hours in ("0.5", "1", "1.5")]
    for first in requests:
        try:
            first_units = compute_span(catalog, first[0], first[1], first[2]).units
        except SpanError:
            continue
        occupancy = _occupancy(catalog, FakeBooking(1, first[0], first[1], Decimal(first[2])))
        for second in requests:
            try:
                second_units = compute_span(catalog, second[0], second[1], second[2]).units
            except SpanError:
                continue
            clash = bool(set(first_units) & set(second_units))
            assert (occupancy.first_conflict(second_units) is not None) == clash


def test_booking_broken_by_catalog_change_keeps_derivable_units():
    # Booked for three hours when 10:00-11:00 still existed
    catalog = _catalog((8, 9), (9, 10))
    stale = FakeBooking(pk=7, time_slot_id=1, duration_hours=Decimal("3"))
    occupancy = _occupancy(catalog, stale)
    assert len(occupancy) == 4
    assert occupancy.owner_of(HalfUnit(2, Half.SECOND)) is stale


def test_booking_with_missing_anchor_is_ignored():
    catalog = _catalog((8, 9))
    occupancy = _occupancy(catalog, FakeBooking(pk=3, time_slot_id=42))
    assert len(occupancy) == 0


def test_earlier_booking_keeps_ownership_of_shared_unit():
    catalog = _catalog((8, 9))
    first = FakeBooking(pk=1, time_slot_id=1)
    second = FakeBooking(pk=2, time_slot_id=1, start_minute=30, duration_hours=Decimal("0.5"))
    occupancy = _occupancy(catalog, first, second)
    assert occupancy.owner_of(HalfUnit(1, Half.SECOND)) is first


# ----------------------------------------------------------------------------
# Status and payment
# ----------------------------------------------------------------------------

def test_status_transitions():
    ensure_transition("confirmed", "checked-in")
    ensure_transition("checked-in", "completed")
    ensure_transition("payment_pending", "confirmed")
    ensure_transition("payment_pending", "cancelled")
    for current, target in [("cancelled", "confirmed"), ("completed", "cancelled"), ("checked-in", "cancelled")]:
        with pytest.raises(ValidationError):
            ensure_transition(current, target)
    assert not BookingStatus.CANCELLED.occupies_court
    assert BookingStatus.PAYMENT_PENDING.occupies_court


def test_payment_progress_only_moves_forward():
    progress = PaymentProgress(total=Decimal("300"))
    assert progress.status is PaymentStatus.PENDING

    progress = progress.apply(Decimal("100"))
    assert progress.status is PaymentStatus.PARTIAL
    assert progress.remaining == Decimal("200")

    with pytest.raises(ValidationError):
        progress.apply(Decimal("250"))
    with pytest.raises(ValidationError):
        progress.apply(Decimal("0"))

    progress = progress.apply(Decimal("200"))
    assert progress.status is PaymentStatus.PAID
    with pytest.raises(ValidationError):
        progress.apply(Decimal("1"))


# ----------------------------------------------------------------------------
# Pricing
# ----------------------------------------------------------------------------

@dataclass
class PricedSlot:
    normal: Decimal
    member: Decimal
    is_peak: bool = False

    def hourly_price(self, customer_type="normal"):
        return self.member if customer_type == "member" else self.normal


def test_price_rounds_discount_and_caps_deposit():
    quote = calculate_price(
        PricedSlot(Decimal("350"), Decimal("300")),
        "1.5",
        discount_percent=10,
        deposit_amount=1000,
    )
    assert quote.subtotal == Decimal("525")
    assert quote.discount == Decimal("53")
    assert quote.total == Decimal("472")
    assert quote.deposit == quote.total


def test_price_uses_member_rate():
    quote = calculate_price(PricedSlot(Decimal("350"), Decimal("300")), 2, customer_type="member")
    assert quote.price_per_hour == Decimal("300")
    assert quote.total == Decimal("600")


def test_price_collects_every_error():
    with pytest.raises(ValidationError) as excinfo:
        calculate_price(
            PricedSlot(Decimal("350"), Decimal("300")),
            0,
            customer_type="vip",
            discount_percent=150,
            deposit_amount=-1,
        )
    assert len(excinfo.value.errors) == 4


def test_repricing_never_drops_paid_money_or_status():
    partial = PaymentProgress(total=Decimal("600"), paid=Decimal("200"))
    shrunk = partial.reprice(Decimal("300"))
    assert shrunk.paid == Decimal("200")
    assert shrunk.status is PaymentStatus.PARTIAL
    with pytest.raises(ValidationError):
        partial.reprice(Decimal("150"))

    paid = PaymentProgress(total=Decimal("300"), paid=Decimal("300"))
    with pytest.raises(ValidationError):
        paid.reprice(Decimal("600"))
    assert paid.reprice(Decimal("300")).status is PaymentStatus.PAID
