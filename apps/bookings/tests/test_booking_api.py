"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.courts.domain.catalog import day_type_for
from apps.courts.models import BlockedDate, Court, TimeSlot

User = get_user_model()


def upcoming_weekday():
    day = timezone.localdate() + timedelta(days=1)
    while day_type_for(day) != TimeSlot.DayType.WEEKDAY:
        day += timedelta(days=1)
    return day


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, status codes and visibility."""

    def setUp(self) -> None:
        self.staff = User.objects.create_user(username="desk", password="DeskPass123", is_staff=True)
        self.customer = User.objects.create_user(username="player", password="PlayerPass123")
        self.court = Court.objects.create(number=1, name="Court 1")
        self.slot = TimeSlot.objects.create(
            start_time="18:00",
            end_time="19:00",
            day_type=TimeSlot.DayType.WEEKDAY,
            normal_price=Decimal("250"),
            peak_normal_price=Decimal("350"),
            is_peak=True,
        )
        self.day = upcoming_weekday()
        self.list_url = reverse("booking-list")

    def _payload(self, **overrides) -> dict:
        payload = {
            "court": self.court.pk,
            "date": str(self.day),
            "time_slot": self.slot.pk,
            "start_minute": 0,
            "duration_hours": "1.0",
            "customer_name": "Somchai",
            "customer_phone": "0812345678",
        }
        payload.update(overrides)
        return payload

    def test_staff_can_create_booking(self) -> None:
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.list_url, self._payload(discount_percent="10"), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(response.data["start_time"], "18:00")
        self.assertEqual(Decimal(response.data["total"]), Decimal("315"))
        self.assertTrue(response.data["booking_code"].startswith("BK"))

    def test_overlapping_booking_is_conflict(self) -> None:
        self.client.force_authenticate(self.staff)
        first = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)

        response = self.client.post(
            self.list_url, self._payload(start_minute=30, duration_hours="0.5"), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["reason"], "conflict")
        self.assertEqual(response.data["conflicting_booking"]["id"], first.data["id"])

    def test_span_past_catalog_is_conflict(self) -> None:
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.list_url, self._payload(duration_hours="2.0"), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["reason"], "insufficient_slots")

    def test_blocked_date_is_conflict(self) -> None:
        BlockedDate.objects.create(date=self.day, reason="Holiday")
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["reason"], "date_blocked")
        self.assertEqual(response.data["detail"], "Holiday")

    def test_invalid_request_lists_every_error(self) -> None:
        self.client.force_authenticate(self.staff)
        past = timezone.localdate() - timedelta(days=30)
        response = self.client.post(
            self.list_url, self._payload(date=str(past), duration_hours="8.5"), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertGreaterEqual(len(response.data["errors"]), 2)

    def test_unknown_court_is_not_found(self) -> None:
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.list_url, self._payload(court=999), format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_booking_waits_for_payment_and_is_private(self) -> None:
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            self.list_url, self._payload(discount_percent="50", deposit_amount="100"), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.PAYMENT_PENDING)
        self.assertEqual(response.data["source"], Booking.Source.CUSTOMER)
        self.assertEqual(Decimal(response.data["discount"]), Decimal("0"))
        self.assertEqual(Decimal(response.data["deposit"]), Decimal("0"))

        self.client.force_authenticate(self.staff)
        self.client.post(self.list_url, self._payload(court=Court.objects.create(number=2, name="Court 2").pk), format="json")

        self.client.force_authenticate(self.customer)
        listing = self.client.get(self.list_url)
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data["count"], 1)

    def test_front_desk_lifecycle(self) -> None:
        self.client.force_authenticate(self.staff)
        booking_id = self.client.post(self.list_url, self._payload(), format="json").data["id"]

        pay = self.client.post(
            reverse("booking-payment", args=[booking_id]),
            {"amount": "350.00", "payment_method": "cash"},
            format="json",
        )
        self.assertEqual(pay.status_code, status.HTTP_200_OK)
        self.assertEqual(pay.data["payment_status"], "paid")

        check_in = self.client.post(reverse("booking-check-in", args=[booking_id]))
        self.assertEqual(check_in.data["status"], Booking.Status.CHECKED_IN)
        cancel = self.client.post(reverse("booking-cancel", args=[booking_id]), {"reason": "late"}, format="json")
        self.assertEqual(cancel.status_code, status.HTTP_400_BAD_REQUEST)
        check_out = self.client.post(reverse("booking-check-out", args=[booking_id]))
        self.assertEqual(check_out.data["status"], Booking.Status.COMPLETED)

    def test_customer_cannot_check_in(self) -> None:
        self.client.force_authenticate(self.customer)
        booking_id = self.client.post(self.list_url, self._payload(), format="json").data["id"]
        response = self.client.post(reverse("booking-check-in", args=[booking_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_then_rebook(self) -> None:
        self.client.force_authenticate(self.staff)
        booking_id = self.client.post(self.list_url, self._payload(), format="json").data["id"]
        cancel = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")
        self.assertEqual(cancel.data["status"], Booking.Status.CANCELLED)
        again = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(again.status_code, status.HTTP_201_CREATED)

    def test_reschedule_through_patch(self) -> None:
        TimeSlot.objects.create(start_time="19:00", end_time="20:00", day_type=TimeSlot.DayType.WEEKDAY)
        self.client.force_authenticate(self.staff)
        booking_id = self.client.post(self.list_url, self._payload(), format="json").data["id"]
        response = self.client.patch(
            reverse("booking-detail", args=[booking_id]),
            {"start_minute": 30, "duration_hours": "1.0"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["start_time"], "18:30")

    def test_check_availability_endpoint(self) -> None:
        self.client.force_authenticate(self.staff)
        self.client.post(self.list_url, self._payload(duration_hours="0.5"), format="json")
        url = reverse("booking-check-availability")
        body = {"court": self.court.pk, "date": str(self.day), "time_slot": self.slot.pk, "start_minute": 30,
                "duration_hours": "0.5"}
        response = self.client.post(url, body, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["available"])
        self.assertEqual(response.data["half_units"], [{"time_slot_id": self.slot.pk, "half": "second"}])

        body["start_minute"] = 0
        response = self.client.post(url, body, format="json")
        self.assertFalse(response.data["available"])
        self.assertEqual(response.data["reason"], "conflict")

    def test_calculate_price_endpoint(self) -> None:
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            reverse("booking-calculate-price"),
            {"time_slot": self.slot.pk, "duration_hours": "1.5", "include_table": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_peak"])
        self.assertEqual(Decimal(response.data["total"]), Decimal("525"))
        self.assertIn("table", response.data)

    def test_public_availability_needs_no_login(self) -> None:
        response = self.client.get(reverse("booking-public-availability"), {"date": str(self.day)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_blocked"])
        self.assertEqual(response.data["slots"][0]["available_courts"], 1)

    def test_daily_schedule_is_front_desk_only(self) -> None:
        url = reverse("booking-schedule-daily")
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get(url, {"date": str(self.day)}).status_code, status.HTTP_403_FORBIDDEN)
        self.client.force_authenticate(self.staff)
        response = self.client.get(url, {"date": str(self.day)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["courts"]), 1)

    def test_list_filters_by_status(self) -> None:
        self.client.force_authenticate(self.staff)
        booking_id = self.client.post(self.list_url, self._payload(), format="json").data["id"]
        self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")
        self.client.post(self.list_url, self._payload(), format="json")
        response = self.client.get(self.list_url, {"status": "cancelled"})
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["id"], booking_id)
