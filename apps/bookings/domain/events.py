"""
Booking Domain Events

Published after the unit of work that produced them commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    booking_id: int
    booking_code: str
    court_id: int
    date: date
    time_slot_id: int
    total: Decimal
    recurring_group_id: Optional[int] = None


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    booking_id: int
    booking_code: str
    reason: str = ''


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """Check-in, check-out and payment confirmation"""
    booking_id: int
    booking_code: str
    old_status: str
    new_status: str


@dataclass(kw_only=True)
class BookingPaymentRecorded(DomainEvent):
    booking_id: int
    booking_code: str
    amount: Decimal
    payment_status: str
