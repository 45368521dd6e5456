"""Serializers for recurring booking groups."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.bookings.models import PaymentMethod

from .application.command_handlers import (
    ApplyBulkPaymentCommand,
    CreateRecurringGroupCommand,
    PreviewRecurringCommand,
)
from .domain.payments import PAYMENT_MODES, PER_SESSION
from .models import RecurringBookingGroup


class RecurringGroupSerializer(serializers.ModelSerializer):
    """Read representation of a recurring group."""

    court_number = serializers.ReadOnlyField(source="court.number")
    start_time = serializers.ReadOnlyField(source="time_slot.start_time")
    weekdays_display = serializers.ReadOnlyField()

    class Meta:
        model = RecurringBookingGroup
        fields = [
            "id",
            "group_code",
            "customer_name",
            "customer_phone",
            "customer_email",
            "court",
            "court_number",
            "time_slot",
            "start_time",
            "weekdays",
            "weekdays_display",
            "duration_hours",
            "start_date",
            "end_date",
            "payment_mode",
            "bulk_total_amount",
            "bulk_paid_amount",
            "bulk_payment_status",
            "bulk_payment_method",
            "bulk_paid_at",
            "total_bookings",
            "cancelled_bookings",
            "skipped_dates",
            "status",
            "notes",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecurringPatternSerializer(serializers.Serializer):
    """Weekly pattern shared by preview and create.

    Range and span rules are checked by the planner so that every
    violation is reported together.
    """

    court = serializers.IntegerField(min_value=1)
    time_slot = serializers.IntegerField(min_value=1)
    weekdays = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    duration_hours = serializers.DecimalField(max_digits=3, decimal_places=1, default=Decimal("1.0"))

    def pattern_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "court_id": data["court"],
            "time_slot_id": data["time_slot"],
            "weekdays": list(data["weekdays"]),
            "start_date": data["start_date"],
            "end_date": data["end_date"],
            "duration_hours": data["duration_hours"],
        }

    def to_command(self, user=None) -> PreviewRecurringCommand:
        return PreviewRecurringCommand(**self.pattern_kwargs())


class RecurringGroupCreateSerializer(RecurringPatternSerializer):
    customer_name = serializers.CharField(max_length=100)
    customer_phone = serializers.RegexField(r"^[0-9+\-\s]{9,20}$", max_length=20)
    customer_email = serializers.EmailField(required=False, allow_blank=True, default="")
    payment_mode = serializers.ChoiceField(choices=PAYMENT_MODES, default=PER_SESSION)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def to_command(self, user=None) -> CreateRecurringGroupCommand:
        data = self.validated_data
        return CreateRecurringGroupCommand(
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            customer_email=data["customer_email"],
            payment_mode=data["payment_mode"],
            notes=data["notes"],
            created_by_id=getattr(user, "pk", None),
            **self.pattern_kwargs(),
        )


class BulkPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    def to_command(self, group_id) -> ApplyBulkPaymentCommand:
        return ApplyBulkPaymentCommand(
            group_id=group_id,
            amount=self.validated_data["amount"],
            payment_method=self.validated_data["payment_method"],
        )
