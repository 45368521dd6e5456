"""Recurring booking group model."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder

from .domain.payments import BULK, PER_SESSION, BulkPayment
from .domain.planner import weekdays_display


def _weekday_numbers_validator(value) -> None:
    from django.core.exceptions import ValidationError  # type: ignore

    if not isinstance(value, list) or not value:
        raise ValidationError(_("Select at least one day of the week."))
    for day in value:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise ValidationError(_("Days of the week must be numbers from 0 (Sunday) to 6 (Saturday)."))


class RecurringBookingGroup(EventRecorder, models.Model):
    """A weekly pattern booked as one booking per planned date.

    Child bookings point back here through ``Booking.recurring_group``
    with a 1-based ``recurring_sequence``.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentMode(models.TextChoices):
        BULK = BULK, _("Pay for all sessions at once")
        PER_SESSION = PER_SESSION, _("Pay per session")

    class BulkPaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PARTIAL = "partial", _("Partially paid")
        PAID = "paid", _("Paid")

    group_code = models.CharField(max_length=20, unique=True, editable=False)
    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=20)
    customer_email = models.EmailField(blank=True)
    court = models.ForeignKey("courts.Court", on_delete=models.PROTECT, related_name="recurring_groups")
    time_slot = models.ForeignKey("courts.TimeSlot", on_delete=models.PROTECT, related_name="recurring_groups")
    weekdays = models.JSONField(
        default=list,
        validators=[_weekday_numbers_validator],
        help_text=_("Days of the week, 0 = Sunday to 6 = Saturday."),
    )
    duration_hours = models.DecimalField(max_digits=3, decimal_places=1, default=Decimal("1.0"))
    start_date = models.DateField()
    end_date = models.DateField()
    payment_mode = models.CharField(max_length=20, choices=PaymentMode.choices, default=PaymentMode.PER_SESSION)
    bulk_total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    bulk_paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    bulk_payment_status = models.CharField(
        max_length=10,
        choices=BulkPaymentStatus.choices,
        default=BulkPaymentStatus.PENDING,
    )
    bulk_payment_method = models.CharField(max_length=20, blank=True)
    bulk_paid_at = models.DateTimeField(null=True, blank=True)
    total_bookings = models.PositiveIntegerField(default=0)
    cancelled_bookings = models.PositiveIntegerField(default=0)
    skipped_dates = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recurring_groups",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Recurring booking group")
        verbose_name_plural = _("Recurring booking groups")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "end_date"], name="recurring_status_end_idx"),
            models.Index(fields=["customer_phone"], name="recurring_phone_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.group_code} ({self.customer_name})"

    @property
    def weekdays_display(self) -> str:
        return weekdays_display(self.weekdays)

    @property
    def bulk_payment(self) -> BulkPayment:
        return BulkPayment(
            payment_mode=self.payment_mode,
            total=self.bulk_total_amount,
            paid=min(self.bulk_paid_amount, self.bulk_total_amount),
        )
