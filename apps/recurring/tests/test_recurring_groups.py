"""Integration tests for recurring group creation, cancellation and payment."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, BookingHalfUnit
from apps.courts.models import BlockedDate, Court, TimeSlot
from apps.recurring.application.command_handlers import (
    ApplyBulkPaymentCommand,
    CancelRecurringGroupCommand,
    CreateRecurringGroupCommand,
    PreviewRecurringCommand,
)
from apps.recurring.models import RecurringBookingGroup
from apps.recurring.tasks import complete_finished_groups
from shared.application.message_bus import message_bus
from shared.domain.errors import ConflictError, ValidationError

User = get_user_model()


def next_monday():
    day = timezone.localdate() + timedelta(days=1)
    while day.weekday() != 0:
        day += timedelta(days=1)
    return day


class RecurringTestCase(TestCase):
    def setUp(self) -> None:
        self.court = Court.objects.create(number=1, name="Court 1")
        self.slot = TimeSlot.objects.create(
            start_time="10:00", end_time="11:00", day_type=TimeSlot.DayType.WEEKEND, normal_price=Decimal("400")
        )
        TimeSlot.objects.create(
            start_time="11:00", end_time="12:00", day_type=TimeSlot.DayType.WEEKEND, normal_price=Decimal("400")
        )
        self.start = next_monday()
        self.end = self.start + timedelta(days=13)
        self.saturdays = [self.start + timedelta(days=5), self.start + timedelta(days=12)]
        self.sundays = [self.start + timedelta(days=6), self.start + timedelta(days=13)]

    def create_command(self, **overrides) -> CreateRecurringGroupCommand:
        values = dict(
            court_id=self.court.pk,
            time_slot_id=self.slot.pk,
            start_date=self.start,
            end_date=self.end,
            weekdays=[0, 6],
            customer_name="Badminton Club",
            customer_phone="0899999999",
        )
        values.update(overrides)
        return CreateRecurringGroupCommand(**values)

    def booking_on(self, day, **extra) -> Booking:
        values = dict(
            booking_code=f"BK-{day:%Y%m%d}-{Booking.objects.count()}",
            court=self.court,
            date=day,
            time_slot=self.slot,
            customer_name="Walk-in",
            customer_phone="0811111111",
        )
        values.update(extra)
        return Booking.objects.create(**values)


class PlanAndCreateTests(RecurringTestCase):
    def test_preview_of_free_weekends(self) -> None:
        preview = message_bus.handle_command(PreviewRecurringCommand(
            court_id=self.court.pk,
            time_slot_id=self.slot.pk,
            start_date=self.start,
            end_date=self.end,
            weekdays=[0, 6],
        ))
        self.assertEqual(len(preview["dates"]), 4)
        self.assertEqual(preview["skipped_dates"], [])
        self.assertEqual(preview["pricing"]["total_amount"], Decimal("1600"))
        self.assertEqual(preview["pricing"]["price_per_session"], Decimal("400"))
        self.assertEqual(preview["summary"]["total_dates"], 4)
        self.assertEqual(preview["summary"]["weekdays_display"], "Sun, Sat")
        self.assertFalse(preview["interrupted"])
        self.assertFalse(Booking.objects.exists())

    def test_preview_reports_blocked_and_taken_dates(self) -> None:
        BlockedDate.objects.create(date=self.saturdays[0], reason="Open day")
        self.booking_on(self.sundays[1])
        preview = message_bus.handle_command(PreviewRecurringCommand(
            court_id=self.court.pk,
            time_slot_id=self.slot.pk,
            start_date=self.start,
            end_date=self.end,
            weekdays=[0, 6],
        ))
        reasons = {entry["date"]: entry["reason"] for entry in preview["skipped_dates"]}
        self.assertEqual(reasons, {self.saturdays[0].isoformat(): "blocked", self.sundays[1].isoformat(): "conflict"})
        self.assertEqual(preview["pricing"]["total_amount"], Decimal("800"))

    def test_weekday_dates_cannot_use_weekend_slot(self) -> None:
        preview = message_bus.handle_command(PreviewRecurringCommand(
            court_id=self.court.pk,
            time_slot_id=self.slot.pk,
            start_date=self.start,
            end_date=self.start + timedelta(days=6),
            weekdays=[1, 6],
        ))
        self.assertEqual(preview["dates"], [self.saturdays[0].isoformat()])
        self.assertEqual([entry["reason"] for entry in preview["skipped_dates"]], ["conflict"])

    def test_create_books_every_free_date(self) -> None:
        group = message_bus.handle_command(self.create_command(duration_hours=Decimal("2")))
        self.assertTrue(group.group_code.startswith(f"RG{timezone.localdate():%Y%m%d}"))
        self.assertEqual(group.total_bookings, 4)
        self.assertEqual(group.status, RecurringBookingGroup.Status.ACTIVE)

        children = list(group.bookings.order_by("recurring_sequence"))
        self.assertEqual([child.recurring_sequence for child in children], [1, 2, 3, 4])
        self.assertEqual([child.date for child in children], sorted(self.saturdays + self.sundays))
        self.assertTrue(all(child.source == Booking.Source.RECURRING for child in children))
        self.assertTrue(all(child.total == Decimal("800") for child in children))
        self.assertEqual(children[0].notes, f"Recurring booking {group.group_code} (1/4)")
        self.assertEqual(BookingHalfUnit.objects.filter(booking__recurring_group=group).count(), 16)

    def test_date_taken_after_preview_moves_to_skipped(self) -> None:
        taken = self.sundays[0]
        self.booking_on(taken)
        group = message_bus.handle_command(self.create_command())
        self.assertEqual(group.total_bookings, 3)
        self.assertEqual([(entry["date"], entry["reason"]) for entry in group.skipped_dates],
                         [(taken.isoformat(), "conflict")])
        self.assertNotIn(taken, group.bookings.values_list("date", flat=True))

    def test_racing_claim_during_creation_is_skipped(self) -> None:
        # A cancelled row is invisible to the checker but still holds a half-unit,
        # as a concurrent writer's claim would
        ghost = self.booking_on(self.saturdays[1], status=Booking.Status.CANCELLED)
        BookingHalfUnit.objects.create(booking=ghost, court=self.court, date=ghost.date, time_slot=self.slot, half=0)

        group = message_bus.handle_command(self.create_command())
        self.assertEqual(group.total_bookings, 3)
        self.assertEqual([entry["date"] for entry in group.skipped_dates], [self.saturdays[1].isoformat()])
        self.assertEqual(
            list(group.bookings.order_by("recurring_sequence").values_list("recurring_sequence", flat=True)),
            [1, 2, 3],
        )

    def test_nothing_bookable_is_conflict(self) -> None:
        for day in self.saturdays + self.sundays:
            BlockedDate.objects.create(date=day)
        with self.assertRaises(ConflictError):
            message_bus.handle_command(self.create_command())
        self.assertFalse(RecurringBookingGroup.objects.exists())

    def test_invalid_pattern_lists_every_error(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            message_bus.handle_command(self.create_command(
                weekdays=[],
                start_date=timezone.localdate() - timedelta(days=1),
                end_date=self.start + timedelta(days=200),
                duration_hours=Decimal("0.5"),
            ))
        self.assertEqual(len(ctx.exception.errors), 4)


class CancelAndPayTests(RecurringTestCase):
    def _group_with_children(self, past: int, upcoming: int) -> RecurringBookingGroup:
        today = timezone.localdate()
        group = RecurringBookingGroup.objects.create(
            group_code="RG-TEST",
            customer_name="Club",
            customer_phone="0899999999",
            court=self.court,
            time_slot=self.slot,
            weekdays=[6],
            start_date=today - timedelta(days=7 * past),
            end_date=today + timedelta(days=7 * upcoming),
            total_bookings=past + upcoming,
        )
        days = [today - timedelta(days=7 * n) for n in range(past, 0, -1)]
        days += [today + timedelta(days=7 * n) for n in range(upcoming)]
        for sequence, day in enumerate(days, start=1):
            self.booking_on(day, recurring_group=group, recurring_sequence=sequence, total=Decimal("400"))
        return group

    def test_cancel_only_touches_future_active_bookings(self) -> None:
        group = self._group_with_children(past=3, upcoming=7)
        group = message_bus.handle_command(CancelRecurringGroupCommand(group_id=group.pk))
        self.assertEqual(group.status, RecurringBookingGroup.Status.CANCELLED)
        self.assertEqual(group.cancelled_bookings, 7)

        today = timezone.localdate()
        self.assertEqual(group.bookings.filter(date__lt=today, status=Booking.Status.CONFIRMED).count(), 3)
        self.assertEqual(group.bookings.filter(date__gte=today, status=Booking.Status.CANCELLED).count(), 7)

        with self.assertRaises(ValidationError):
            message_bus.handle_command(CancelRecurringGroupCommand(group_id=group.pk))

    def test_cancel_skips_checked_in_sessions(self) -> None:
        group = self._group_with_children(past=0, upcoming=3)
        group.bookings.filter(recurring_sequence=1).update(status=Booking.Status.CHECKED_IN)
        group = message_bus.handle_command(CancelRecurringGroupCommand(group_id=group.pk))
        self.assertEqual(group.cancelled_bookings, 2)

    def test_cancel_releases_half_units(self) -> None:
        group = message_bus.handle_command(self.create_command())
        message_bus.handle_command(CancelRecurringGroupCommand(group_id=group.pk))
        self.assertFalse(BookingHalfUnit.objects.filter(booking__recurring_group=group).exists())

    def test_bulk_payment_marks_children_paid_when_complete(self) -> None:
        group = message_bus.handle_command(self.create_command(payment_mode="bulk"))
        self.assertEqual(group.bulk_total_amount, Decimal("1600"))

        group = message_bus.handle_command(ApplyBulkPaymentCommand(group_id=group.pk, amount=Decimal("600")))
        self.assertEqual(group.bulk_payment_status, "partial")
        self.assertFalse(group.bookings.filter(payment_status=Booking.PaymentStatus.PAID).exists())

        with self.assertRaises(ValidationError):
            message_bus.handle_command(ApplyBulkPaymentCommand(group_id=group.pk, amount=Decimal("1001")))

        group = message_bus.handle_command(
            ApplyBulkPaymentCommand(group_id=group.pk, amount=Decimal("1000"), payment_method="transfer")
        )
        self.assertEqual(group.bulk_payment_status, "paid")
        self.assertIsNotNone(group.bulk_paid_at)
        for child in group.bookings.all():
            self.assertEqual(child.payment_status, Booking.PaymentStatus.PAID)
            self.assertEqual(child.payment_method, "transfer")
            self.assertEqual(child.deposit, child.total)

    def test_per_session_group_rejects_bulk_payment(self) -> None:
        group = message_bus.handle_command(self.create_command())
        with self.assertRaises(ValidationError):
            message_bus.handle_command(ApplyBulkPaymentCommand(group_id=group.pk, amount=Decimal("100")))

    def test_finished_groups_are_completed(self) -> None:
        finished = self._group_with_children(past=2, upcoming=0)
        finished.end_date = timezone.localdate() - timedelta(days=1)
        finished.save()
        running = message_bus.handle_command(self.create_command())

        self.assertEqual(complete_finished_groups(), {"completed": 1})
        finished.refresh_from_db()
        running.refresh_from_db()
        self.assertEqual(finished.status, RecurringBookingGroup.Status.COMPLETED)
        self.assertEqual(running.status, RecurringBookingGroup.Status.ACTIVE)


class RecurringAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(username="desk", password="DeskPass123", is_staff=True)
        self.court = Court.objects.create(number=1, name="Court 1")
        self.slot = TimeSlot.objects.create(
            start_time="10:00", end_time="11:00", day_type=TimeSlot.DayType.WEEKEND, normal_price=Decimal("400")
        )
        self.start = next_monday()
        self.client.force_authenticate(self.staff)

    def _pattern(self, **overrides) -> dict:
        payload = {
            "court": self.court.pk,
            "time_slot": self.slot.pk,
            "weekdays": [0, 6],
            "start_date": str(self.start),
            "end_date": str(self.start + timedelta(days=13)),
            "duration_hours": "1.0",
        }
        payload.update(overrides)
        return payload

    def test_preview_endpoint(self) -> None:
        response = self.client.post(reverse("recurring-group-preview"), self._pattern(), format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["summary"]["valid_dates"], 4)
        self.assertEqual(response.data["pricing"]["total_amount"], Decimal("1600"))

    def test_preview_validation_errors(self) -> None:
        response = self.client.post(
            reverse("recurring-group-preview"),
            self._pattern(weekdays=[9], end_date=str(self.start - timedelta(days=1))),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(response.data["errors"]), 2)

    def test_create_list_and_cancel(self) -> None:
        payload = self._pattern(customer_name="Club", customer_phone="0899999999", payment_mode="bulk")
        created = self.client.post(reverse("recurring-group-list"), payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        group_id = created.data["id"]
        self.assertEqual(created.data["total_bookings"], 4)

        listing = self.client.get(reverse("recurring-group-list"), {"search": created.data["group_code"]})
        self.assertEqual(listing.data["count"], 1)
        self.assertEqual(self.client.get(reverse("recurring-group-list"), {"status": "cancelled"}).data["count"], 0)

        children = self.client.get(reverse("recurring-group-bookings", args=[group_id]))
        self.assertEqual([child["recurring_sequence"] for child in children.data], [1, 2, 3, 4])

        payment = self.client.post(
            reverse("recurring-group-payment", args=[group_id]), {"amount": "1600.00"}, format="json"
        )
        self.assertEqual(payment.data["bulk_payment_status"], "paid")

        cancel = self.client.post(reverse("recurring-group-cancel", args=[group_id]), {}, format="json")
        self.assertEqual(cancel.status_code, status.HTTP_200_OK)
        self.assertEqual(cancel.data["cancelled_count"], 4)
        again = self.client.post(reverse("recurring-group-cancel", args=[group_id]), {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

    def test_fully_blocked_pattern_is_conflict(self) -> None:
        for offset in (5, 6, 12, 13):
            BlockedDate.objects.create(date=self.start + timedelta(days=offset))
        payload = self._pattern(customer_name="Club", customer_phone="0899999999")
        response = self.client.post(reverse("recurring-group-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_customers_cannot_manage_groups(self) -> None:
        self.client.force_authenticate(User.objects.create_user(username="player", password="PlayerPass123"))
        response = self.client.post(reverse("recurring-group-preview"), self._pattern(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
