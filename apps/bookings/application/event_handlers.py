"""Subscribers for booking events."""

import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger("apps.bookings.audit")


def log_booking_event(event: DomainEvent) -> None:
    """Write one audit line per committed booking event"""
    payload = event.to_dict()
    for name in ("booking_id", "booking_code", "court_id", "date", "old_status", "new_status", "payment_status"):
        value = getattr(event, name, None)
        if value is not None:
            payload[name] = str(value)
    logger.info(f"{payload['event_type']} {payload}")
