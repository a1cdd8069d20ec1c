"""Order-total computation.

Everything here is pure: discount codes are read, never written, and the
caller decides what to persist. Amounts are ``Decimal`` rounded half-up to
two places at every boundary where they are returned.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from oclar.constants import DiscountRejection, DiscountType, ShippingMethod
from oclar.errors import ValidationError

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

REJECTION_MESSAGES = {
    DiscountRejection.NOT_FOUND: 'Cod de reducere invalid.',
    DiscountRejection.INACTIVE: 'Codul de reducere nu mai este activ.',
    DiscountRejection.EXPIRED: 'Codul de reducere a expirat.',
    DiscountRejection.NOT_STARTED: 'Codul de reducere nu este încă valabil.',
    DiscountRejection.EXHAUSTED: 'Codul de reducere a atins numărul maxim de utilizări.',
    DiscountRejection.MIN_NOT_MET: 'Valoarea minimă a comenzii pentru acest cod este {minimum} RON.',
}


def money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        # str() keeps 19.99 from turning into 19.989999...
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DiscountCheck:
    valid: bool
    amount: Decimal = ZERO
    reason: Optional[str] = None
    message: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    shipping_method: str
    shipping_cost: Decimal
    discount_code: Optional[str]
    discount_amount: Decimal
    total: Decimal

    def as_metadata(self):
        """String-only mapping, the shape payment-session metadata accepts."""
        return {
            'subtotal': str(self.subtotal),
            'shipping_method': self.shipping_method,
            'shipping_cost': str(self.shipping_cost),
            'discount_code': self.discount_code or '',
            'discount_amount': str(self.discount_amount),
            'total_amount': str(self.total),
        }

    @classmethod
    def from_metadata(cls, metadata):
        subtotal = money(metadata.get('subtotal'))
        shipping_cost = money(metadata.get('shipping_cost'))
        discount_amount = money(metadata.get('discount_amount'))
        return cls(
            subtotal=subtotal,
            shipping_method=normalize_shipping_method(metadata.get('shipping_method')),
            shipping_cost=shipping_cost,
            discount_code=metadata.get('discount_code') or None,
            discount_amount=discount_amount,
            total=money(subtotal + shipping_cost - discount_amount),
        )


def _line_values(item):
    if isinstance(item, dict):
        return item.get('price'), item.get('quantity')
    return item.price, item.quantity


def calculate_subtotal(items) -> Decimal:
    total = ZERO
    for item in items:
        price, quantity = _line_values(item)
        total += money(price) * int(quantity or 0)
    return money(total)


def normalize_shipping_method(method) -> str:
    method = (method or '').strip().lower()
    return method if method in ShippingMethod.RATES else ShippingMethod.DEFAULT


def get_shipping_cost(method) -> Decimal:
    return ShippingMethod.RATES[normalize_shipping_method(method)]


def _reject(reason, code=None, **fmt):
    return DiscountCheck(
        valid=False,
        reason=reason,
        message=REJECTION_MESSAGES[reason].format(**fmt),
        code=code,
    )


def check_discount(discount, subtotal, now=None) -> DiscountCheck:
    """Decide whether ``discount`` applies to ``subtotal`` and for how much."""
    if discount is None:
        return _reject(DiscountRejection.NOT_FOUND)

    now = now or datetime.now()
    subtotal = money(subtotal)

    if not discount.is_active:
        return _reject(DiscountRejection.INACTIVE, discount.code)
    if discount.valid_until is not None and discount.valid_until < now:
        return _reject(DiscountRejection.EXPIRED, discount.code)
    if discount.valid_from is not None and discount.valid_from > now:
        return _reject(DiscountRejection.NOT_STARTED, discount.code)
    if discount.max_uses is not None and (discount.used_count or 0) >= discount.max_uses:
        return _reject(DiscountRejection.EXHAUSTED, discount.code)

    minimum = money(discount.min_order_amount)
    if subtotal < minimum:
        return _reject(DiscountRejection.MIN_NOT_MET, discount.code, minimum=minimum)

    value = money(discount.discount_value)
    if discount.discount_type == DiscountType.PERCENTAGE:
        raw = subtotal * value / Decimal(100)
    else:
        raw = value

    amount = money(min(max(raw, ZERO), subtotal))
    return DiscountCheck(valid=True, amount=amount, code=discount.code)


def calculate_totals(items, shipping_method, discount=None, discount_code=None, now=None) -> PriceBreakdown:
    """Subtotal, shipping, discount and grand total for a cart.

    ``discount_code`` is the code the customer typed; when it is given,
    ``discount`` is the matching record (or None if the lookup failed) and an
    unusable code raises ``ValidationError``.
    """
    subtotal = calculate_subtotal(items)
    method = normalize_shipping_method(shipping_method)
    shipping_cost = get_shipping_cost(method)

    discount_amount = ZERO
    applied_code = None
    if discount_code or discount is not None:
        check = check_discount(discount, subtotal, now=now)
        if not check.valid:
            raise ValidationError(check.message, details={'reason': check.reason})
        discount_amount = check.amount
        applied_code = check.code

    total = money(subtotal + shipping_cost - discount_amount)
    return PriceBreakdown(
        subtotal=subtotal,
        shipping_method=method,
        shipping_cost=shipping_cost,
        discount_code=applied_code,
        discount_amount=discount_amount,
        total=total,
    )
