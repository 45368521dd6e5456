"""
Price calculation for a single booking

Hourly rate comes from the anchor slot's price table (peak or regular,
member or normal), multiplied by the duration. Discounts round to whole
currency units; the deposit is capped at the total.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from shared.domain.errors import ValidationError

CUSTOMER_TYPES = ('normal', 'member')


@dataclass(frozen=True)
class PriceQuote:
    price_per_hour: Decimal
    duration_hours: Decimal
    subtotal: Decimal
    discount: Decimal
    deposit: Decimal
    total: Decimal
    is_peak: bool

    def to_dict(self) -> dict:
        return {
            'price_per_hour': self.price_per_hour,
            'duration_hours': self.duration_hours,
            'subtotal': self.subtotal,
            'discount': self.discount,
            'deposit': self.deposit,
            'total': self.total,
            'is_peak': self.is_peak,
        }


def calculate_price(
    time_slot,
    duration_hours,
    *,
    customer_type: str = 'normal',
    discount_percent=0,
    deposit_amount=0,
) -> PriceQuote:
    errors = []
    duration = Decimal(str(duration_hours))
    discount_percent = Decimal(str(discount_percent))
    deposit_amount = Decimal(str(deposit_amount))
    if duration <= 0:
        errors.append("Duration must be greater than zero")
    if customer_type not in CUSTOMER_TYPES:
        errors.append('Customer type must be "normal" or "member"')
    if not Decimal('0') <= discount_percent <= Decimal('100'):
        errors.append("Discount percent must be between 0 and 100")
    if deposit_amount < 0:
        errors.append("Deposit cannot be negative")
    if errors:
        raise ValidationError(errors)

    price_per_hour = Decimal(time_slot.hourly_price(customer_type))
    subtotal = price_per_hour * duration
    discount = (subtotal * discount_percent / Decimal('100')).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    total = subtotal - discount
    return PriceQuote(
        price_per_hour=price_per_hour,
        duration_hours=duration,
        subtotal=subtotal,
        discount=discount,
        deposit=min(deposit_amount, total),
        total=total,
        is_peak=bool(time_slot.is_peak),
    )


def price_table(time_slot, customer_type: str = 'normal', max_hours: int = 8) -> List[dict]:
    """Quotes for 1..max_hours whole hours."""
    return [
        calculate_price(time_slot, hours, customer_type=customer_type).to_dict()
        for hours in range(1, max_hours + 1)
    ]
