"""
Booking Domain Entities

- BookingStatus: lifecycle states and their allowed transitions
- PaymentStatus: pending -> partial -> paid
- PaymentProgress: monotonic payment accumulation against a total
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from shared.domain.base import ValueObject
from shared.domain.errors import ValidationError


class BookingStatus(str, Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PAYMENT_PENDING -> CONFIRMED (paid before the deadline)
    - PAYMENT_PENDING -> CANCELLED (deadline passed or cancelled)
    - CONFIRMED -> CHECKED_IN
    - CONFIRMED -> CANCELLED
    - CHECKED_IN -> COMPLETED
    """
    PAYMENT_PENDING = 'payment_pending'
    CONFIRMED = 'confirmed'
    CHECKED_IN = 'checked-in'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def occupies_court(self) -> bool:
        return self is not BookingStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.COMPLETED)


ALLOWED_TRANSITIONS = {
    BookingStatus.PAYMENT_PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def ensure_transition(current: str, target: str) -> None:
    """Raise ValidationError unless current -> target is allowed"""
    current_status, target_status = BookingStatus(current), BookingStatus(target)
    if current_status.is_terminal:
        raise ValidationError(f"Booking is already {current_status.value}")
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise ValidationError(
            f"Cannot change booking status from {current_status.value} to {target_status.value}"
        )


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID = 'paid'


PAYMENT_ORDER = (PaymentStatus.PENDING, PaymentStatus.PARTIAL, PaymentStatus.PAID)


@dataclass(frozen=True)
class PaymentProgress(ValueObject):
    """
    Paid amount against a total

    ``paid`` only grows and never exceeds ``total``; the derived status
    therefore only moves forward along pending -> partial -> paid.
    """
    total: Decimal
    paid: Decimal = Decimal('0')

    def __post_init__(self):
        if self.total < 0 or self.paid < 0:
            raise ValueError("Amounts cannot be negative")
        if self.paid > self.total:
            raise ValueError("Paid amount cannot exceed total")

    @property
    def status(self) -> PaymentStatus:
        if self.paid >= self.total:
            return PaymentStatus.PAID
        if self.paid > 0:
            return PaymentStatus.PARTIAL
        return PaymentStatus.PENDING

    @property
    def remaining(self) -> Decimal:
        return self.total - self.paid

    def apply(self, amount: Decimal) -> 'PaymentProgress':
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        if self.status is PaymentStatus.PAID:
            raise ValidationError("Payment is already complete")
        if self.paid + amount > self.total:
            raise ValidationError(
                f"Payment of {amount} exceeds the remaining balance of {self.remaining}"
            )
        return PaymentProgress(total=self.total, paid=self.paid + amount)

    def reprice(self, total: Decimal) -> 'PaymentProgress':
        """
        Carry the paid amount over to a new total

        Refused when the new total is below what was already paid or when
        the status would move back (a paid booking made longer).
        """
        total = Decimal(str(total))
        if total < self.paid:
            raise ValidationError(
                f"New total {total} is below the {self.paid} already paid"
            )
        repriced = PaymentProgress(total=total, paid=self.paid)
        if PAYMENT_ORDER.index(repriced.status) < PAYMENT_ORDER.index(self.status):
            raise ValidationError(
                f"Payment status would go back from {self.status.value} to {repriced.status.value}"
            )
        return repriced
