"""
Bulk payment for recurring groups

One running total for the whole group, only when the group was set up
for bulk payment. Progress reuses the single-booking payment rules:
amounts only grow, never past the total.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.errors import ValidationError
from apps.bookings.domain.entities import PaymentProgress, PaymentStatus

BULK = 'bulk'
PER_SESSION = 'per_session'
PAYMENT_MODES = (BULK, PER_SESSION)


@dataclass(frozen=True)
class BulkPayment(ValueObject):
    payment_mode: str
    total: Decimal
    paid: Decimal = Decimal('0')

    @property
    def progress(self) -> PaymentProgress:
        return PaymentProgress(total=self.total, paid=self.paid)

    @property
    def status(self) -> PaymentStatus:
        return self.progress.status

    def apply(self, amount) -> 'BulkPayment':
        if self.payment_mode != BULK:
            raise ValidationError("This recurring group is not set up for bulk payment")
        progress = self.progress.apply(amount)
        return BulkPayment(payment_mode=self.payment_mode, total=self.total, paid=progress.paid)
