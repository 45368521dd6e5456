"""
Booking Command Handlers

Use cases for single court bookings. Each runs inside a unit of work;
events recorded on the booking are published after commit.

Commands:
- CreateBookingCommand: validate, re-check under a court lock, claim half-units
- RescheduleBookingCommand: move a booking, ignoring its own occupancy
- CancelBookingCommand: cancel and release half-units
- CheckInBookingCommand / CheckOutBookingCommand: play lifecycle
- RecordPaymentCommand: accumulate payment towards the total
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, List, Optional
import logging

from django.utils import timezone  # type: ignore

from apps.courts.domain.catalog import day_type_for
from apps.courts.models import Court, TimeSlot
from apps.courts.services import get_court, get_time_slot, is_date_blocked
from apps.sequences.codes import next_booking_code
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import NotFoundError, PolicyBlockError, ValidationError
from shared.infrastructure.config import BookingConfig, booking_config
from apps.bookings.domain.entities import BookingStatus, PaymentProgress, ensure_transition
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCreated,
    BookingPaymentRecorded,
    BookingStatusChanged,
)
from apps.bookings.domain.occupancy import VALID_START_MINUTES
from apps.bookings.domain.pricing import PriceQuote, calculate_price
from apps.bookings.models import Booking, PaymentMethod
from apps.bookings.services import (
    check_availability,
    lock_court,
    release_half_units,
    reserve_half_units,
)

logger = logging.getLogger(__name__)

DATE_BLOCKED = 'date_blocked'


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    court_id: int
    date: date
    time_slot_id: int
    customer_name: str
    customer_phone: str
    start_minute: int = 0
    duration_hours: Decimal = Decimal('1')
    customer_email: str = ''
    customer_type: str = 'normal'
    discount_percent: Decimal = Decimal('0')
    deposit_amount: Decimal = Decimal('0')
    payment_method: str = ''
    source: str = Booking.Source.ADMIN
    require_payment: bool = False
    notes: str = ''
    created_by_id: Optional[int] = None


@dataclass
class RescheduleBookingCommand:
    booking_id: int
    date: Optional[date] = None
    court_id: Optional[int] = None
    time_slot_id: Optional[int] = None
    start_minute: Optional[int] = None
    duration_hours: Optional[Decimal] = None


@dataclass
class CancelBookingCommand:
    booking_id: int
    reason: str = ''


@dataclass
class CheckInBookingCommand:
    booking_id: int


@dataclass
class CheckOutBookingCommand:
    booking_id: int


@dataclass
class RecordPaymentCommand:
    booking_id: int
    amount: Decimal
    payment_method: str = PaymentMethod.CASH


# ===== Shared steps =====

def validate_booking_request(
    court: Court,
    time_slot: TimeSlot,
    day: date,
    start_minute: int,
    duration_hours,
    config: BookingConfig,
    *,
    today: Optional[date] = None,
    min_duration: Optional[Decimal] = None,
    check_advance_window: bool = True,
) -> None:
    """Collect every problem with a booking request, then raise them together"""
    today = today or timezone.localdate()
    errors: List[str] = []

    if not court.is_bookable:
        errors.append(f"Court {court.number} is not available for booking ({court.status})")
    if time_slot.status != TimeSlot.Status.ACTIVE:
        errors.append("Time slot is not active")
    if day < today:
        errors.append("Cannot book in the past")
    elif check_advance_window and day > today + timedelta(days=config.advance_booking_days):
        errors.append(f"Cannot book more than {config.advance_booking_days} days in advance")
    if time_slot.day_type != day_type_for(day):
        errors.append(
            f"Selected time slot is for {time_slot.day_type}, but {day.isoformat()} is a {day_type_for(day)}"
        )
    if start_minute not in VALID_START_MINUTES:
        errors.append("Start minute must be 0 or 30")

    try:
        duration = Decimal(str(duration_hours))
    except ArithmeticError:
        errors.append("Duration must be a number of hours")
    else:
        lower = min_duration if min_duration is not None else config.min_duration_hours
        if duration < lower or duration > config.max_duration_hours:
            errors.append(f"Duration must be between {lower} and {config.max_duration_hours} hours")
        elif (duration * 2) != (duration * 2).to_integral_value():
            errors.append("Duration must be in half-hour steps")

    if errors:
        raise ValidationError(errors)


def ensure_date_open(day: date) -> None:
    block = is_date_blocked(day)
    if block.is_blocked:
        raise PolicyBlockError(DATE_BLOCKED, block.reason)


def persist_booking(
    *,
    court: Court,
    time_slot: TimeSlot,
    day: date,
    start_minute: int,
    duration_hours: Decimal,
    quote: PriceQuote,
    units,
    status: str,
    currency: str,
    **fields,
) -> Booking:
    """Create the booking row with a fresh code and claim its half-units"""
    progress = PaymentProgress(total=quote.total, paid=quote.deposit)
    booking = Booking.objects.create(
        booking_code=next_booking_code(day),
        court=court,
        time_slot=time_slot,
        date=day,
        start_minute=start_minute,
        duration_hours=duration_hours,
        subtotal=quote.subtotal,
        discount=quote.discount,
        deposit=quote.deposit,
        total=quote.total,
        currency=currency,
        status=status,
        payment_status=progress.status.value,
        **fields,
    )
    reserve_half_units(booking, units)
    booking.record_event(BookingCreated(
        booking_id=booking.pk,
        booking_code=booking.booking_code,
        court_id=court.pk,
        date=day,
        time_slot_id=time_slot.pk,
        total=booking.total,
        recurring_group_id=booking.recurring_group_id,
    ))
    return booking


def _load_booking(booking_id, *, lock: bool = False) -> Booking:
    queryset = Booking.objects.select_related("court", "time_slot")
    if lock:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(pk=booking_id)
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Booking", booking_id)


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Validate the request, collecting all errors
    2. Refuse blocked dates
    3. Lock the court row and re-run the availability check
    4. Mint a booking code, price, persist and claim half-units
    5. The half-unit unique constraint rejects any claim that still races
    """

    def __init__(self, config_provider: Callable[[], BookingConfig] = booking_config):
        self.config_provider = config_provider

    def handle(self, command: CreateBookingCommand) -> Booking:
        config = self.config_provider()
        court = get_court(command.court_id)
        time_slot = get_time_slot(command.time_slot_id)

        validate_booking_request(
            court, time_slot, command.date, command.start_minute, command.duration_hours, config
        )
        ensure_date_open(command.date)
        quote = calculate_price(
            time_slot,
            command.duration_hours,
            customer_type=command.customer_type,
            discount_percent=command.discount_percent,
            deposit_amount=command.deposit_amount,
        )

        logger.info(
            f"Creating booking on court {court.number} for {command.date} "
            f"slot {time_slot.start_time} +{command.start_minute}m, {command.duration_hours}h"
        )

        with DjangoUnitOfWork() as uow:
            court = lock_court(court.pk)
            result = check_availability(
                court, command.date, time_slot, command.start_minute, command.duration_hours
            )
            result.raise_for_status()

            pending = command.require_payment and quote.deposit < quote.total
            booking = persist_booking(
                court=court,
                time_slot=time_slot,
                day=command.date,
                start_minute=command.start_minute,
                duration_hours=Decimal(str(command.duration_hours)),
                quote=quote,
                units=result.units,
                status=BookingStatus.PAYMENT_PENDING.value if pending else BookingStatus.CONFIRMED.value,
                currency=config.currency,
                customer_name=command.customer_name,
                customer_phone=command.customer_phone,
                customer_email=command.customer_email,
                customer_type=command.customer_type,
                discount_percent=Decimal(str(command.discount_percent)),
                payment_method=command.payment_method,
                source=command.source,
                notes=command.notes,
                created_by_id=command.created_by_id,
                payment_deadline=(
                    timezone.now() + timedelta(minutes=config.payment_deadline_minutes) if pending else None
                ),
            )
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} created with status {booking.status}")
        return booking


class RescheduleBookingHandler:
    """Move an active booking; its own half-units never conflict with it"""

    def __init__(self, config_provider: Callable[[], BookingConfig] = booking_config):
        self.config_provider = config_provider

    def handle(self, command: RescheduleBookingCommand) -> Booking:
        config = self.config_provider()

        with DjangoUnitOfWork() as uow:
            booking = _load_booking(command.booking_id, lock=True)
            if booking.status not in (Booking.Status.CONFIRMED, Booking.Status.PAYMENT_PENDING):
                raise ValidationError(f"Cannot reschedule a booking with status {booking.status}")

            court = get_court(command.court_id) if command.court_id is not None else booking.court
            time_slot = (
                get_time_slot(command.time_slot_id) if command.time_slot_id is not None else booking.time_slot
            )
            day = command.date or booking.date
            start_minute = command.start_minute if command.start_minute is not None else booking.start_minute
            duration = Decimal(str(
                command.duration_hours if command.duration_hours is not None else booking.duration_hours
            ))

            validate_booking_request(court, time_slot, day, start_minute, duration, config)
            ensure_date_open(day)

            court = lock_court(court.pk)
            result = check_availability(
                court, day, time_slot, start_minute, duration, exclude_booking_id=booking.pk
            )
            result.raise_for_status()

            quote = calculate_price(
                time_slot,
                duration,
                customer_type=booking.customer_type,
                discount_percent=booking.discount_percent,
            )
            progress = booking.payment_progress.reprice(quote.total)
            old = f"court {booking.court.number} {booking.date} slot {booking.time_slot.start_time}"
            release_half_units(booking)
            booking.court = court
            booking.time_slot = time_slot
            booking.date = day
            booking.start_minute = start_minute
            booking.duration_hours = duration
            booking.subtotal = quote.subtotal
            booking.discount = quote.discount
            booking.total = quote.total
            booking.payment_status = progress.status.value
            booking.save()
            reserve_half_units(booking, result.units)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} moved from {old} to court {court.number} {day}")
        return booking


class CancelBookingHandler:
    def handle(self, command: CancelBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _load_booking(command.booking_id, lock=True)
            ensure_transition(booking.status, BookingStatus.CANCELLED.value)
            booking.status = Booking.Status.CANCELLED
            booking.cancelled_at = timezone.now()
            booking.cancellation_reason = command.reason[:255]
            booking.save(update_fields=["status", "cancelled_at", "cancellation_reason", "updated_at"])
            released = release_half_units(booking)
            booking.record_event(BookingCancelled(
                booking_id=booking.pk,
                booking_code=booking.booking_code,
                reason=booking.cancellation_reason,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} cancelled, released {released} half-units")
        return booking


class _StatusChangeHandler:
    target: BookingStatus

    def handle(self, command) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _load_booking(command.booking_id, lock=True)
            old_status = booking.status
            ensure_transition(old_status, self.target.value)
            booking.status = self.target.value
            booking.save(update_fields=["status", "updated_at"])
            booking.record_event(BookingStatusChanged(
                booking_id=booking.pk,
                booking_code=booking.booking_code,
                old_status=old_status,
                new_status=booking.status,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} {old_status} -> {booking.status}")
        return booking


class CheckInBookingHandler(_StatusChangeHandler):
    target = BookingStatus.CHECKED_IN


class CheckOutBookingHandler(_StatusChangeHandler):
    target = BookingStatus.COMPLETED


class RecordPaymentHandler:
    """
    Accumulate a payment on a single booking

    A payment completing a booking that awaits payment confirms it.
    """

    def handle(self, command: RecordPaymentCommand) -> Booking:
        if command.payment_method not in PaymentMethod.values:
            raise ValidationError(f"Unsupported payment method {command.payment_method!r}")

        with DjangoUnitOfWork() as uow:
            booking = _load_booking(command.booking_id, lock=True)
            if booking.status == Booking.Status.CANCELLED:
                raise ValidationError("Cannot take payment for a cancelled booking")

            progress = booking.payment_progress.apply(command.amount)
            booking.deposit = progress.paid
            booking.payment_status = progress.status.value
            booking.payment_method = command.payment_method
            update_fields = ["deposit", "payment_status", "payment_method", "updated_at"]

            if booking.status == Booking.Status.PAYMENT_PENDING and booking.payment_status == Booking.PaymentStatus.PAID:
                ensure_transition(booking.status, BookingStatus.CONFIRMED.value)
                booking.record_event(BookingStatusChanged(
                    booking_id=booking.pk,
                    booking_code=booking.booking_code,
                    old_status=booking.status,
                    new_status=BookingStatus.CONFIRMED.value,
                ))
                booking.status = Booking.Status.CONFIRMED
                booking.payment_deadline = None
                update_fields += ["status", "payment_deadline"]

            booking.save(update_fields=update_fields)
            booking.record_event(BookingPaymentRecorded(
                booking_id=booking.pk,
                booking_code=booking.booking_code,
                amount=Decimal(str(command.amount)),
                payment_status=booking.payment_status,
            ))
            uow.collect_events(booking)

        logger.info(
            f"Payment of {command.amount} recorded on {booking.booking_code}, now {booking.payment_status}"
        )
        return booking
