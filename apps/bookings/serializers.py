"""Serializers for the booking domain."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.courts.domain.catalog import format_time_of_day

from .application.command_handlers import (
    CreateBookingCommand,
    RecordPaymentCommand,
    RescheduleBookingCommand,
)
from .models import Booking, PaymentMethod

START_MINUTE_CHOICES = [0, 30]


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    court_number = serializers.ReadOnlyField(source="court.number")
    start_time = serializers.SerializerMethodField()
    end_time = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "court",
            "court_number",
            "date",
            "time_slot",
            "start_minute",
            "start_time",
            "end_time",
            "duration_hours",
            "customer_name",
            "customer_phone",
            "customer_email",
            "customer_type",
            "source",
            "status",
            "payment_status",
            "payment_method",
            "subtotal",
            "discount_percent",
            "discount",
            "deposit",
            "total",
            "currency",
            "payment_deadline",
            "recurring_group",
            "recurring_sequence",
            "notes",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_start_time(self, obj: Booking) -> str:
        return format_time_of_day(obj.time_slot.start_minute + obj.start_minute)

    def get_end_time(self, obj: Booking) -> str:
        # Nominal end; the catalog walk decides which slots are actually held
        minutes = obj.time_slot.start_minute + obj.start_minute + int(obj.duration_hours * 60)
        return format_time_of_day(min(minutes, 24 * 60))


class BookingCreateSerializer(serializers.Serializer):
    court = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    time_slot = serializers.IntegerField(min_value=1)
    start_minute = serializers.ChoiceField(choices=START_MINUTE_CHOICES, default=0)
    duration_hours = serializers.DecimalField(max_digits=3, decimal_places=1, default=Decimal("1.0"))
    customer_name = serializers.CharField(max_length=100)
    customer_phone = serializers.RegexField(r"^[0-9+\-\s]{9,20}$", max_length=20)
    customer_email = serializers.EmailField(required=False, allow_blank=True, default="")
    customer_type = serializers.ChoiceField(choices=Booking.CustomerType.choices, default=Booking.CustomerType.NORMAL)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100"), default=Decimal("0")
    )
    deposit_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def to_command(self, user) -> CreateBookingCommand:
        data = self.validated_data
        is_staff = bool(getattr(user, "is_staff", False))
        return CreateBookingCommand(
            court_id=data["court"],
            date=data["date"],
            time_slot_id=data["time_slot"],
            start_minute=int(data["start_minute"]),
            duration_hours=data["duration_hours"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            customer_email=data["customer_email"],
            customer_type=data["customer_type"],
            discount_percent=data["discount_percent"] if is_staff else Decimal("0"),
            deposit_amount=data["deposit_amount"] if is_staff else Decimal("0"),
            payment_method=data["payment_method"],
            source=Booking.Source.ADMIN if is_staff else Booking.Source.CUSTOMER,
            require_payment=not is_staff,
            notes=data["notes"],
            created_by_id=getattr(user, "pk", None),
        )


class BookingRescheduleSerializer(serializers.Serializer):
    court = serializers.IntegerField(min_value=1, required=False)
    date = serializers.DateField(required=False)
    time_slot = serializers.IntegerField(min_value=1, required=False)
    start_minute = serializers.ChoiceField(choices=START_MINUTE_CHOICES, required=False)
    duration_hours = serializers.DecimalField(max_digits=3, decimal_places=1, required=False)

    def to_command(self, booking_id) -> RescheduleBookingCommand:
        data = self.validated_data
        start_minute = data.get("start_minute")
        return RescheduleBookingCommand(
            booking_id=booking_id,
            date=data.get("date"),
            court_id=data.get("court"),
            time_slot_id=data.get("time_slot"),
            start_minute=int(start_minute) if start_minute is not None else None,
            duration_hours=data.get("duration_hours"),
        )


class AvailabilityQuerySerializer(serializers.Serializer):
    court = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    time_slot = serializers.IntegerField(min_value=1)
    start_minute = serializers.ChoiceField(choices=START_MINUTE_CHOICES, default=0)
    duration_hours = serializers.DecimalField(
        max_digits=3, decimal_places=1, min_value=Decimal("0.5"), max_value=Decimal("8"), default=Decimal("1.0")
    )
    exclude_booking = serializers.IntegerField(required=False, allow_null=True, default=None)

    def validate_duration_hours(self, value):  # type: ignore
        if (value * 2) != (value * 2).to_integral_value():
            raise serializers.ValidationError("Duration must be in half-hour steps.")
        return value


class PriceQuerySerializer(serializers.Serializer):
    time_slot = serializers.IntegerField(min_value=1)
    duration_hours = serializers.DecimalField(
        max_digits=3, decimal_places=1, min_value=Decimal("0.5"), max_value=Decimal("8"), default=Decimal("1.0")
    )
    customer_type = serializers.ChoiceField(choices=Booking.CustomerType.choices, default=Booking.CustomerType.NORMAL)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100"), default=Decimal("0")
    )
    deposit_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), default=Decimal("0")
    )
    include_table = serializers.BooleanField(default=False)


class ScheduleQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    day_type = serializers.ChoiceField(choices=["weekday", "weekend"], required=False)


class AvailableCourtsQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    time_slot = serializers.IntegerField(min_value=1)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class PaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)

    def to_command(self, booking_id) -> RecordPaymentCommand:
        return RecordPaymentCommand(
            booking_id=booking_id,
            amount=self.validated_data["amount"],
            payment_method=self.validated_data["payment_method"],
        )
