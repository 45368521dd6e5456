"""Booking models for court reservations."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder

from .domain.entities import BookingStatus, PaymentProgress, PaymentStatus as PaymentState
from .domain.occupancy import Half


class PaymentMethod(models.TextChoices):
    CASH = "cash", _("Cash")
    TRANSFER = "transfer", _("Transfer")
    BANK_TRANSFER = "bank_transfer", _("Bank transfer")
    QR = "qr", _("QR code")
    PROMPTPAY = "promptpay", _("PromptPay")
    CARD = "card", _("Card")


class Booking(EventRecorder, models.Model):
    """A court reservation anchored on a catalog time slot.

    The occupied span is not stored as minutes: it is derived from
    ``(time_slot, start_minute, duration_hours)`` against the live catalog.
    """

    class Status(models.TextChoices):
        PAYMENT_PENDING = BookingStatus.PAYMENT_PENDING.value, _("Awaiting payment")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CHECKED_IN = BookingStatus.CHECKED_IN.value, _("Checked in")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = PaymentState.PENDING.value, _("Pending")
        PARTIAL = PaymentState.PARTIAL.value, _("Partially paid")
        PAID = PaymentState.PAID.value, _("Paid")

    class CustomerType(models.TextChoices):
        NORMAL = "normal", _("Normal")
        MEMBER = "member", _("Member")

    class Source(models.TextChoices):
        ADMIN = "admin", _("Front desk")
        CUSTOMER = "customer", _("Customer")
        RECURRING = "recurring", _("Recurring group")

    booking_code = models.CharField(max_length=20, unique=True, editable=False)
    court = models.ForeignKey("courts.Court", on_delete=models.PROTECT, related_name="bookings")
    date = models.DateField()
    time_slot = models.ForeignKey("courts.TimeSlot", on_delete=models.PROTECT, related_name="bookings")
    start_minute = models.PositiveSmallIntegerField(
        choices=[(0, ":00"), (30, ":30")],
        default=0,
        help_text=_("Minute within the anchor slot at which play starts."),
    )
    duration_hours = models.DecimalField(max_digits=3, decimal_places=1, default=Decimal("1.0"))
    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=20)
    customer_email = models.EmailField(blank=True)
    customer_type = models.CharField(max_length=10, choices=CustomerType.choices, default=CustomerType.NORMAL)
    source = models.CharField(max_length=10, choices=Source.choices, default=Source.ADMIN)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    deposit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Amount paid so far."),
    )
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="THB")
    payment_deadline = models.DateTimeField(null=True, blank=True)
    recurring_group = models.ForeignKey(
        "recurring.RecurringBookingGroup",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    recurring_sequence = models.PositiveSmallIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="court_bookings",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-date", "court__number"]
        constraints = [
            models.UniqueConstraint(
                fields=["recurring_group", "recurring_sequence"],
                condition=models.Q(recurring_group__isnull=False),
                name="booking_unique_group_sequence",
            ),
            models.CheckConstraint(
                condition=models.Q(start_minute__in=[0, 30]),
                name="booking_start_minute_half_hour",
            ),
        ]
        indexes = [
            models.Index(fields=["court", "date"], name="booking_court_date_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_code} court {self.court_id} on {self.date}"

    @property
    def occupancy_key(self):
        return self.time_slot_id, self.start_minute, self.duration_hours

    @property
    def payment_progress(self) -> PaymentProgress:
        return PaymentProgress(total=self.total, paid=min(self.deposit, self.total))

    def is_payment_overdue(self, now=None) -> bool:
        now = now or timezone.now()
        return bool(
            self.status == self.Status.PAYMENT_PENDING
            and self.payment_deadline
            and self.payment_deadline < now
        )

    def summary(self) -> dict:
        return {
            "id": self.pk,
            "booking_code": self.booking_code,
            "customer_name": self.customer_name,
            "status": self.status,
            "payment_status": self.payment_status,
            "start_minute": self.start_minute,
            "duration_hours": self.duration_hours,
            "recurring_group_id": self.recurring_group_id,
        }


class BookingHalfUnit(models.Model):
    """Storage-level claim on one half of a slot for a court and date.

    The unique constraint makes a second claim on the same half-unit fail
    at commit, even if two requests passed the availability check together.
    """

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="half_units")
    court = models.ForeignKey("courts.Court", on_delete=models.CASCADE, related_name="+")
    date = models.DateField()
    time_slot = models.ForeignKey("courts.TimeSlot", on_delete=models.CASCADE, related_name="+")
    half = models.PositiveSmallIntegerField(choices=[(Half.FIRST.value, "first"), (Half.SECOND.value, "second")])

    class Meta:
        verbose_name = _("Booked half-unit")
        verbose_name_plural = _("Booked half-units")
        constraints = [
            models.UniqueConstraint(
                fields=["court", "date", "time_slot", "half"],
                name="unique_court_date_half_unit",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.court_id}/{self.date}/{self.time_slot_id}:{self.half}"
