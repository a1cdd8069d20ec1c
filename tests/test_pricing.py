from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from oclar.errors import ValidationError
from oclar.models import DiscountCode
from oclar.services.pricing import (
    PriceBreakdown, calculate_subtotal, calculate_totals, check_discount, get_shipping_cost, money,
)


def _code(**kwargs):
    data = dict(
        code='SAVE10',
        discount_type='percentage',
        discount_value=Decimal('10'),
        min_order_amount=Decimal('100'),
        max_uses=None,
        used_count=0,
        valid_from=None,
        valid_until=None,
        is_active=True,
    )
    data.update(kwargs)
    return DiscountCode(**data)


def test_subtotal_is_exact_to_two_decimals():
    items = [
        {'price': 19.99, 'quantity': 3},
        {'price': '0.10', 'quantity': 7},
        {'price': Decimal('189.00'), 'quantity': 1},
    ]
    assert calculate_subtotal(items) == Decimal('249.67')


def test_subtotal_of_empty_cart_is_zero():
    assert calculate_subtotal([]) == Decimal('0.00')


@pytest.mark.parametrize('method,cost', [
    ('easybox', Decimal('15.00')),
    ('courier', Decimal('25.00')),
    ('EASYBOX', Decimal('15.00')),
    ('drone', Decimal('25.00')),
    (None, Decimal('25.00')),
])
def test_shipping_cost_table(method, cost):
    assert get_shipping_cost(method) == cost


def test_save10_example():
    items = [{'price': '100.00', 'quantity': 2}]
    breakdown = calculate_totals(items, 'courier', discount=_code(), discount_code='save10')

    assert breakdown.subtotal == Decimal('200.00')
    assert breakdown.shipping_cost == Decimal('25.00')
    assert breakdown.discount_amount == Decimal('20.00')
    assert breakdown.total == Decimal('205.00')
    assert breakdown.discount_code == 'SAVE10'


def test_total_without_discount():
    breakdown = calculate_totals([{'price': '189.00', 'quantity': 1}], 'easybox')
    assert breakdown.discount_amount == Decimal('0.00')
    assert breakdown.total == Decimal('204.00')


def test_minimum_order_not_met():
    check = check_discount(_code(), Decimal('50.00'))
    assert not check.valid
    assert check.reason == 'min_not_met'
    assert '100.00' in check.message


def test_fixed_discount_is_clamped_to_subtotal():
    code = _code(discount_type='fixed', discount_value=Decimal('500'), min_order_amount=Decimal('0'))
    check = check_discount(code, Decimal('120.00'))
    assert check.valid
    assert check.amount == Decimal('120.00')


@pytest.mark.parametrize('subtotal', ['0.01', '33.33', '99.99', '100.00', '1234.56'])
def test_discount_never_exceeds_subtotal(subtotal):
    for code in (
        _code(discount_value=Decimal('100'), min_order_amount=Decimal('0')),
        _code(discount_type='fixed', discount_value=Decimal('75'), min_order_amount=Decimal('0')),
    ):
        check = check_discount(code, Decimal(subtotal))
        assert Decimal('0') <= check.amount <= Decimal(subtotal)


def test_percentage_discount_rounds_half_up():
    code = _code(discount_value=Decimal('15'), min_order_amount=Decimal('0'))
    # 15% of 33.33 = 4.9995
    assert check_discount(code, Decimal('33.33')).amount == Decimal('5.00')


def test_expired_code_is_always_rejected():
    code = _code(valid_until=datetime.now() - timedelta(days=1), min_order_amount=Decimal('0'))
    check = check_discount(code, Decimal('10000'))
    assert not check.valid
    assert check.reason == 'expired'


def test_future_code_is_rejected():
    code = _code(valid_from=datetime.now() + timedelta(days=2))
    assert check_discount(code, Decimal('200')).reason == 'not_started'


def test_max_uses_boundary():
    assert check_discount(_code(max_uses=5, used_count=5), Decimal('200')).reason == 'exhausted'
    assert check_discount(_code(max_uses=5, used_count=4), Decimal('200')).valid


def test_inactive_and_missing_codes_have_distinct_reasons():
    assert check_discount(_code(is_active=False), Decimal('200')).reason == 'inactive'
    assert check_discount(None, Decimal('200')).reason == 'not_found'


def test_invalid_code_raises_during_totals():
    with pytest.raises(ValidationError) as excinfo:
        calculate_totals([{'price': '10', 'quantity': 1}], 'courier', discount=None, discount_code='NOPE')
    assert excinfo.value.details == {'reason': 'not_found'}


def test_breakdown_survives_metadata_round_trip():
    breakdown = calculate_totals([{'price': '100.00', 'quantity': 2}], 'easybox', discount=_code(), discount_code='SAVE10')
    restored = PriceBreakdown.from_metadata(breakdown.as_metadata())
    assert restored == breakdown


def test_money_rounds_floats_through_their_decimal_repr():
    assert money(0.1 + 0.2) == Decimal('0.30')
    assert money(None) == Decimal('0.00')
