"""Recurring group domain events, published after commit."""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class RecurringGroupCreated(DomainEvent):
    group_id: int
    group_code: str
    court_id: int
    total_bookings: int
    skipped_count: int
    total_amount: Decimal


@dataclass(kw_only=True)
class RecurringGroupCancelled(DomainEvent):
    group_id: int
    group_code: str
    cancelled_bookings: int


@dataclass(kw_only=True)
class BulkPaymentApplied(DomainEvent):
    group_id: int
    group_code: str
    amount: Decimal
    payment_status: str
