"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .domain.events import BookingCancelled
from .models import Booking
from .services import release_half_units

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.cancel_expired_bookings")
def cancel_expired_bookings() -> dict[str, int]:
    """
    Cancel bookings still awaiting payment after their deadline.

    Each booking is cancelled in its own unit of work: its half-units are
    released so the time can be booked again and BookingCancelled is
    published once the cancellation commits.

    Returns:
        dict: {"cancelled": number of bookings cancelled}
    """
    now = timezone.now()
    cancelled_count = 0

    expired_ids = list(
        Booking.objects.filter(
            status=Booking.Status.PAYMENT_PENDING,
            payment_deadline__lt=now,
        ).values_list("pk", flat=True)
    )

    for booking_id in expired_ids:
        try:
            with DjangoUnitOfWork() as uow:
                booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
                if booking is None or not booking.is_payment_overdue(now):
                    continue
                booking.status = Booking.Status.CANCELLED
                booking.cancelled_at = now
                booking.cancellation_reason = "Payment deadline passed"
                booking.save(update_fields=["status", "cancelled_at", "cancellation_reason", "updated_at"])
                release_half_units(booking)
                booking.record_event(BookingCancelled(
                    booking_id=booking.pk,
                    booking_code=booking.booking_code,
                    reason=booking.cancellation_reason,
                ))
                uow.collect_events(booking)

            cancelled_count += 1
            logger.info(f"Booking {booking.booking_code} cancelled automatically after payment deadline")
        except Exception as e:
            logger.error(f"Error cancelling expired booking {booking_id}: {e}", exc_info=True)

    if cancelled_count > 0:
        logger.info(f"Cancelled {cancelled_count} expired bookings")

    return {"cancelled": cancelled_count}
