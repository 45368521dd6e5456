"""
Recurring Group Command Handlers

Commands:
- PreviewRecurringCommand: plan and price a weekly pattern without writing
- CreateRecurringGroupCommand: re-plan under a court lock, create group and child bookings
- CancelRecurringGroupCommand: cancel the group and its future active bookings
- ApplyBulkPaymentCommand: record a payment against the group total
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional
import logging

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import persist_booking
from apps.bookings.domain.events import BookingCancelled
from apps.bookings.domain.occupancy import CONFLICT, compute_span
from apps.bookings.domain.pricing import calculate_price
from apps.bookings.models import Booking, PaymentMethod
from apps.bookings.services import lock_court, release_half_units
from apps.courts.models import TimeSlot
from apps.courts.services import get_court, get_time_slot, load_catalog
from apps.sequences.codes import next_group_code
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import ConflictError, NotFoundError, ValidationError
from shared.infrastructure.config import BookingConfig, booking_config
from apps.recurring.domain.events import BulkPaymentApplied, RecurringGroupCancelled, RecurringGroupCreated
from apps.recurring.domain.payments import BULK, PAYMENT_MODES, PER_SESSION
from apps.recurring.domain.planner import (
    SKIP_CONFLICT,
    SkippedDate,
    validate_recurring_request,
    weekdays_display,
)
from apps.recurring.models import RecurringBookingGroup
from apps.recurring.services import plan_for_court

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class PreviewRecurringCommand:
    court_id: int
    time_slot_id: int
    start_date: date
    end_date: date
    weekdays: List[int] = field(default_factory=list)
    duration_hours: Decimal = Decimal('1')


@dataclass
class CreateRecurringGroupCommand:
    court_id: int
    time_slot_id: int
    start_date: date
    end_date: date
    customer_name: str
    customer_phone: str
    weekdays: List[int] = field(default_factory=list)
    duration_hours: Decimal = Decimal('1')
    customer_email: str = ''
    payment_mode: str = PER_SESSION
    notes: str = ''
    created_by_id: Optional[int] = None


@dataclass
class CancelRecurringGroupCommand:
    group_id: int
    reason: str = ''


@dataclass
class ApplyBulkPaymentCommand:
    group_id: int
    amount: Decimal
    payment_method: str = PaymentMethod.CASH


@dataclass(frozen=True)
class ValidPattern:
    court: object
    time_slot: TimeSlot
    weekdays: tuple
    start_date: date
    end_date: date
    duration_hours: Decimal


# ===== Shared steps =====

def validate_pattern(command, config: BookingConfig, today: Optional[date] = None) -> ValidPattern:
    """Resolve references and collect every problem with the pattern"""
    today = today or timezone.localdate()
    court = get_court(command.court_id)
    time_slot = get_time_slot(command.time_slot_id)
    errors: List[str] = []

    try:
        weekdays, start, end = validate_recurring_request(
            command.weekdays,
            command.start_date,
            command.end_date,
            today=today,
            max_months=config.max_recurring_months,
        )
    except ValidationError as exc:
        errors.extend(exc.errors)
        weekdays, start, end = (), None, None

    if not court.is_bookable:
        errors.append(f"Court {court.number} is not available for booking ({court.status})")
    if time_slot.status != TimeSlot.Status.ACTIVE:
        errors.append("Time slot is not active")

    duration = None
    try:
        duration = Decimal(str(command.duration_hours))
    except ArithmeticError:
        errors.append("Duration must be a number of hours")
    else:
        lower, upper = config.recurring_min_duration_hours, config.max_duration_hours
        if duration < lower or duration > upper:
            errors.append(f"Duration must be between {lower} and {upper} hours")
        elif (duration * 2) != (duration * 2).to_integral_value():
            errors.append("Duration must be in half-hour steps")

    if errors:
        raise ValidationError(errors)
    return ValidPattern(court, time_slot, weekdays, start, end, duration)


def preview_payload(pattern: ValidPattern, plan) -> dict:
    payload = plan.to_dict()
    payload['summary'] = {
        'total_dates': len(plan.candidates),
        'valid_dates': len(plan.valid_dates),
        'skipped_dates': len(plan.skipped_dates),
        'pending_dates': len(plan.pending_dates),
        'weekdays': list(pattern.weekdays),
        'weekdays_display': weekdays_display(pattern.weekdays),
        'court': {'id': pattern.court.pk, 'number': pattern.court.number, 'name': pattern.court.name},
        'time_slot': {
            'id': pattern.time_slot.pk,
            'start_time': pattern.time_slot.start_time,
            'end_time': pattern.time_slot.end_time,
        },
        'duration_hours': pattern.duration_hours,
    }
    return payload


def _load_group(group_id, *, lock: bool = False) -> RecurringBookingGroup:
    queryset = RecurringBookingGroup.objects.select_related("court", "time_slot")
    if lock:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(pk=group_id)
    except (RecurringBookingGroup.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Recurring group", group_id)


# ===== Command Handlers =====

class PreviewRecurringHandler:
    """Plan without writing; a plan cut short by the timeout is returned as is"""

    def __init__(self, config_provider: Callable[[], BookingConfig] = booking_config):
        self.config_provider = config_provider

    def handle(self, command: PreviewRecurringCommand) -> dict:
        config = self.config_provider()
        pattern = validate_pattern(command, config)
        plan = plan_for_court(
            pattern.court,
            pattern.time_slot,
            pattern.weekdays,
            pattern.start_date,
            pattern.end_date,
            pattern.duration_hours,
            timeout_seconds=config.recurring_plan_timeout_seconds,
        )
        return preview_payload(pattern, plan)


class CreateRecurringGroupHandler:
    """
    Handler for CreateRecurringGroup command

    1. Validate the pattern, collecting all errors
    2. Lock the court and plan every date again inside the transaction
    3. Mint an RG code and create the group
    4. Create one booking per surviving date, sequence 1..N; a date lost to
       a concurrent claim moves to the skipped list
    5. Refuse the whole request when no date survives
    """

    def __init__(self, config_provider: Callable[[], BookingConfig] = booking_config):
        self.config_provider = config_provider

    def handle(self, command: CreateRecurringGroupCommand) -> RecurringBookingGroup:
        config = self.config_provider()
        if command.payment_mode not in PAYMENT_MODES:
            raise ValidationError(f"Payment mode must be one of {', '.join(PAYMENT_MODES)}")
        pattern = validate_pattern(command, config)
        today = timezone.localdate()

        with DjangoUnitOfWork() as uow:
            court = lock_court(pattern.court.pk)
            catalog = load_catalog(pattern.time_slot.day_type)
            plan = plan_for_court(
                court,
                pattern.time_slot,
                pattern.weekdays,
                pattern.start_date,
                pattern.end_date,
                pattern.duration_hours,
                catalog=catalog,
            )
            if not plan.valid_dates:
                raise ConflictError(
                    CONFLICT,
                    f"None of the {len(plan.candidates)} requested dates can be booked",
                )

            units = compute_span(catalog, pattern.time_slot.pk, 0, pattern.duration_hours).units
            quote = calculate_price(pattern.time_slot, pattern.duration_hours)
            group = RecurringBookingGroup.objects.create(
                group_code=next_group_code(today),
                customer_name=command.customer_name,
                customer_phone=command.customer_phone,
                customer_email=command.customer_email,
                court=court,
                time_slot=pattern.time_slot,
                weekdays=list(pattern.weekdays),
                duration_hours=pattern.duration_hours,
                start_date=pattern.start_date,
                end_date=pattern.end_date,
                payment_mode=command.payment_mode,
                notes=command.notes,
                created_by_id=command.created_by_id,
            )

            skipped = list(plan.skipped_dates)
            created: List[Booking] = []
            planned = len(plan.valid_dates)
            for day in plan.valid_dates:
                sequence = len(created) + 1
                try:
                    with transaction.atomic():
                        booking = persist_booking(
                            court=court,
                            time_slot=pattern.time_slot,
                            day=day,
                            start_minute=0,
                            duration_hours=pattern.duration_hours,
                            quote=quote,
                            units=units,
                            status=Booking.Status.CONFIRMED,
                            currency=config.currency,
                            customer_name=command.customer_name,
                            customer_phone=command.customer_phone,
                            customer_email=command.customer_email,
                            source=Booking.Source.RECURRING,
                            recurring_group=group,
                            recurring_sequence=sequence,
                            notes=f"Recurring booking {group.group_code} ({sequence}/{planned})",
                            created_by_id=command.created_by_id,
                        )
                except ConflictError as exc:
                    logger.warning(f"Date {day} was taken while creating {group.group_code}: {exc}")
                    skipped.append(SkippedDate(day, SKIP_CONFLICT, str(exc)))
                    continue
                created.append(booking)
                uow.collect_events(booking)

            if not created:
                raise ConflictError(CONFLICT, "Every planned date was taken before it could be booked")

            total_amount = sum((booking.total for booking in created), Decimal('0'))
            group.total_bookings = len(created)
            group.skipped_dates = [entry.to_dict() for entry in sorted(skipped, key=lambda entry: entry.date)]
            group.bulk_total_amount = total_amount if group.payment_mode == BULK else Decimal('0')
            group.save(update_fields=["total_bookings", "skipped_dates", "bulk_total_amount", "updated_at"])
            group.record_event(RecurringGroupCreated(
                group_id=group.pk,
                group_code=group.group_code,
                court_id=court.pk,
                total_bookings=group.total_bookings,
                skipped_count=len(skipped),
                total_amount=total_amount,
            ))
            uow.collect_events(group)

        logger.info(
            f"Recurring group {group.group_code} created with {group.total_bookings} bookings, "
            f"{len(group.skipped_dates)} dates skipped"
        )
        return group


class CancelRecurringGroupHandler:
    """Cancel an active group; past, played or already cancelled bookings are left alone"""

    def handle(self, command: CancelRecurringGroupCommand) -> RecurringBookingGroup:
        now = timezone.now()
        today = timezone.localdate()

        with DjangoUnitOfWork() as uow:
            group = _load_group(command.group_id, lock=True)
            if group.status != RecurringBookingGroup.Status.ACTIVE:
                raise ValidationError(f"Cannot cancel a recurring group that is {group.status}")

            future = (
                Booking.objects.select_for_update()
                .filter(
                    recurring_group=group,
                    date__gte=today,
                    status__in=[Booking.Status.PAYMENT_PENDING, Booking.Status.CONFIRMED],
                )
                .order_by("date")
            )
            reason = command.reason[:255] or f"Recurring group {group.group_code} cancelled"
            cancelled = 0
            for booking in future:
                booking.status = Booking.Status.CANCELLED
                booking.cancelled_at = now
                booking.cancellation_reason = reason
                booking.save(update_fields=["status", "cancelled_at", "cancellation_reason", "updated_at"])
                release_half_units(booking)
                booking.record_event(BookingCancelled(
                    booking_id=booking.pk,
                    booking_code=booking.booking_code,
                    reason=reason,
                ))
                uow.collect_events(booking)
                cancelled += 1

            group.status = RecurringBookingGroup.Status.CANCELLED
            group.cancelled_bookings = cancelled
            group.cancelled_at = now
            group.save(update_fields=["status", "cancelled_bookings", "cancelled_at", "updated_at"])
            group.record_event(RecurringGroupCancelled(
                group_id=group.pk,
                group_code=group.group_code,
                cancelled_bookings=cancelled,
            ))
            uow.collect_events(group)

        logger.info(f"Recurring group {group.group_code} cancelled, {cancelled} bookings cancelled")
        return group


class ApplyBulkPaymentHandler:
    """
    Record a payment against a bulk-paid group

    Once the group is fully paid, every child booking that is not
    cancelled is marked paid with the same payment method.
    """

    def handle(self, command: ApplyBulkPaymentCommand) -> RecurringBookingGroup:
        if command.payment_method not in PaymentMethod.values:
            raise ValidationError(f"Unsupported payment method {command.payment_method!r}")

        with DjangoUnitOfWork() as uow:
            group = _load_group(command.group_id, lock=True)
            if group.status == RecurringBookingGroup.Status.CANCELLED:
                raise ValidationError("Cannot take payment for a cancelled recurring group")

            payment = group.bulk_payment.apply(command.amount)
            group.bulk_paid_amount = payment.paid
            group.bulk_payment_status = payment.status.value
            group.bulk_payment_method = command.payment_method
            update_fields = ["bulk_paid_amount", "bulk_payment_status", "bulk_payment_method", "updated_at"]

            marked = 0
            if group.bulk_payment_status == RecurringBookingGroup.BulkPaymentStatus.PAID:
                group.bulk_paid_at = timezone.now()
                update_fields.append("bulk_paid_at")
                marked = (
                    Booking.objects.filter(recurring_group=group)
                    .exclude(status=Booking.Status.CANCELLED)
                    .update(
                        payment_status=Booking.PaymentStatus.PAID,
                        payment_method=command.payment_method,
                        deposit=F("total"),
                        updated_at=timezone.now(),
                    )
                )

            group.save(update_fields=update_fields)
            group.record_event(BulkPaymentApplied(
                group_id=group.pk,
                group_code=group.group_code,
                amount=Decimal(str(command.amount)),
                payment_status=group.bulk_payment_status,
            ))
            uow.collect_events(group)

        logger.info(
            f"Bulk payment of {command.amount} on {group.group_code}, now {group.bulk_payment_status}"
            + (f", {marked} bookings marked paid" if marked else "")
        )
        return group
