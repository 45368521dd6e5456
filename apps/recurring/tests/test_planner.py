"""Tests for recurring date expansion, validation, planning and bulk payment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from apps.bookings.domain.entities import PaymentStatus
from apps.courts.domain.catalog import js_weekday
from apps.recurring.domain.payments import BULK, PER_SESSION, BulkPayment
from apps.recurring.domain.planner import (
    SKIP_BLOCKED,
    SKIP_CONFLICT,
    add_months,
    generate_dates,
    plan_recurring,
    validate_recurring_request,
    weekdays_display,
)
from shared.domain.errors import DependencyFailure, ValidationError

MONDAY = date(2026, 11, 2)


@dataclass
class Block:
    is_blocked: bool = False
    reason: Optional[str] = None


@dataclass
class Answer:
    available: bool = True
    reason: Optional[str] = None
    detail: Optional[str] = None


def never_blocked(day):
    return Block()


def always_free(day):
    return Answer()


# ----------------------------------------------------------------------------
# Date expansion
# ----------------------------------------------------------------------------

def test_weekend_pattern_over_two_weeks():
    dates = generate_dates(MONDAY, MONDAY + timedelta(days=13), [0, 6])
    assert dates == [date(2026, 11, 7), date(2026, 11, 8), date(2026, 11, 14), date(2026, 11, 15)]


@pytest.mark.parametrize("weekdays", [[1], [0, 3, 6], [2, 2, 4], list(range(7))])
def test_generated_dates_match_weekdays_and_range(weekdays):
    start, end = MONDAY, MONDAY + timedelta(days=40)
    dates = generate_dates(start, end, weekdays)
    assert dates == sorted(set(dates))
    assert all(start <= day <= end and js_weekday(day) in weekdays for day in dates)
    expected = [start + timedelta(days=n) for n in range(41) if js_weekday(start + timedelta(days=n)) in weekdays]
    assert dates == expected


def test_single_day_range():
    assert generate_dates(MONDAY, MONDAY, [1]) == [MONDAY]
    assert generate_dates(MONDAY, MONDAY, [2]) == []


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 12, 15), 1) == date(2027, 1, 15)


def test_weekdays_display_is_sunday_first():
    assert weekdays_display([6, 0, 3]) == "Sun, Wed, Sat"


# ----------------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------------

def test_valid_request_is_normalised():
    weekdays, start, end = validate_recurring_request(
        [6, 1, 6], "2026-11-02", "2026-12-31", today=MONDAY, max_months=3
    )
    assert weekdays == (1, 6)
    assert start == MONDAY
    assert end == date(2026, 12, 31)


def test_every_violation_is_reported():
    with pytest.raises(ValidationError) as excinfo:
        validate_recurring_request([], MONDAY - timedelta(days=1), MONDAY - timedelta(days=5), today=MONDAY)
    errors = excinfo.value.errors
    assert len(errors) == 3
    assert any("day of the week" in error for error in errors)
    assert any("past" in error for error in errors)
    assert any("on or after" in error for error in errors)


def test_span_limit_and_bad_values():
    with pytest.raises(ValidationError) as excinfo:
        validate_recurring_request([7, "x"], MONDAY, add_months(MONDAY, 3) + timedelta(days=1), today=MONDAY)
    assert len(excinfo.value.errors) == 2

    with pytest.raises(ValidationError) as excinfo:
        validate_recurring_request([1], "not-a-date", "2026-13-01", today=MONDAY)
    assert len(excinfo.value.errors) == 2

    # Exactly max months is still allowed
    validate_recurring_request([1], MONDAY, add_months(MONDAY, 3), today=MONDAY)


# ----------------------------------------------------------------------------
# Planning
# ----------------------------------------------------------------------------

def _plan(dates, **kwargs):
    options = dict(is_blocked=never_blocked, check=always_free, hourly_rate=Decimal("300"), duration_hours=1)
    options.update(kwargs)
    return plan_recurring(dates, **options)


def test_free_weekend_pattern_is_fully_valid():
    dates = generate_dates(MONDAY, MONDAY + timedelta(days=13), [0, 6])
    plan = _plan(dates)
    assert plan.valid_dates == dates
    assert plan.skipped_dates == []
    assert plan.total_amount == Decimal("1200")
    assert [line.subtotal for line in plan.breakdown] == [Decimal("300")] * 4
    assert all(line.is_weekend for line in plan.breakdown)


def test_blocked_dates_skip_the_availability_check():
    dates = [MONDAY, MONDAY + timedelta(days=7)]
    checked = []

    def check(day):
        checked.append(day)
        return Answer()

    plan = _plan(dates, is_blocked=lambda day: Block(day == MONDAY, "Tournament"), check=check)
    assert checked == [MONDAY + timedelta(days=7)]
    assert [(s.date, s.reason, s.detail) for s in plan.skipped_dates] == [(MONDAY, SKIP_BLOCKED, "Tournament")]
    assert plan.valid_dates == [MONDAY + timedelta(days=7)]


def test_unavailable_and_failing_dates_are_conflicts():
    dates = [MONDAY + timedelta(days=7 * n) for n in range(3)]

    def check(day):
        if day == dates[0]:
            return Answer(False, "conflict", "Held by BK202611020001")
        if day == dates[1]:
            raise RuntimeError("catalog changed")
        return Answer()

    plan = _plan(dates, check=check, duration_hours="1.5")
    assert [s.reason for s in plan.skipped_dates] == [SKIP_CONFLICT, SKIP_CONFLICT]
    assert "BK202611020001" in plan.skipped_dates[0].detail
    assert plan.skipped_dates[1].detail == "catalog changed"
    assert plan.valid_dates == [dates[2]]
    assert plan.total_amount == Decimal("450")


def test_storage_failure_aborts_the_plan():
    def check(day):
        raise DependencyFailure("booking store")

    with pytest.raises(DependencyFailure):
        _plan([MONDAY], check=check)


def test_interrupted_plan_keeps_decided_dates():
    dates = [MONDAY + timedelta(days=7 * n) for n in range(5)]
    budget = iter([True, True, False])
    plan = _plan(dates, should_continue=lambda: next(budget))
    assert plan.valid_dates == dates[:2]
    assert plan.pending_dates == dates[2:]
    assert plan.interrupted
    assert plan.total_amount == Decimal("600")
    payload = plan.to_dict()
    assert payload["interrupted"] is True
    assert len(payload["pending_dates"]) == 3


# ----------------------------------------------------------------------------
# Bulk payment
# ----------------------------------------------------------------------------

def test_bulk_payment_is_monotonic():
    payment = BulkPayment(payment_mode=BULK, total=Decimal("1200"))
    seen = [payment.status]
    for amount in ("300", "300", "600"):
        previous = payment.paid
        payment = payment.apply(Decimal(amount))
        assert payment.paid > previous
        assert payment.paid <= payment.total
        seen.append(payment.status)
    assert seen == [PaymentStatus.PENDING, PaymentStatus.PARTIAL, PaymentStatus.PARTIAL, PaymentStatus.PAID]

    with pytest.raises(ValidationError):
        payment.apply(Decimal("1"))


def test_bulk_payment_rejects_overpayment_and_per_session_groups():
    payment = BulkPayment(payment_mode=BULK, total=Decimal("1200"), paid=Decimal("1000"))
    with pytest.raises(ValidationError):
        payment.apply(Decimal("201"))
    with pytest.raises(ValidationError):
        BulkPayment(payment_mode=PER_SESSION, total=Decimal("1200")).apply(Decimal("100"))
