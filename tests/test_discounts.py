from datetime import datetime, timedelta, timezone

import pytest

from oclar.extensions import db
from oclar.models import DiscountCode, Order
from oclar.services.discount_service import DiscountService


def test_validate_discount_example(client, make_discount):
    make_discount('SAVE10')
    res = client.post('/api/validate-discount', json={'code': 'save10', 'subtotal': 200})
    assert res.status_code == 200
    assert res.json == {'valid': True, 'code': 'SAVE10', 'discountAmount': 20.0}


def test_validate_discount_minimum_not_met(client, make_discount):
    make_discount('SAVE10')
    res = client.post('/api/validate-discount', json={'code': 'SAVE10', 'subtotal': 50})
    assert res.json['valid'] is False
    assert res.json['reason'] == 'min_not_met'


def test_validate_discount_unknown_code(client):
    res = client.post('/api/validate-discount', json={'code': 'NOPE', 'subtotal': 500})
    assert res.json['valid'] is False
    assert res.json['reason'] == 'not_found'
    assert res.json['message']


def test_validate_discount_has_no_side_effects(app, client, make_discount):
    code_id = make_discount('SAVE10', max_uses=1)
    for _ in range(3):
        assert client.post('/api/validate-discount', json={'code': 'SAVE10', 'subtotal': 200}).json['valid']
    with app.app_context():
        assert db.session.get(DiscountCode, code_id).used_count == 0


def test_expired_code_rejected_over_http(client, make_discount):
    make_discount('OLD', valid_until=datetime.now() - timedelta(hours=1), min_order_amount=0)
    res = client.post('/api/validate-discount', json={'code': 'OLD', 'subtotal': 1000})
    assert res.json['reason'] == 'expired'


def test_code_with_one_use_left_is_accepted_then_rejected(app, client, make_discount, cod_payload):
    make_discount('LAST', max_uses=3, used_count=2)
    assert client.post('/api/validate-discount', json={'code': 'LAST', 'subtotal': 200}).json['valid']

    cod_payload.update(discountCode='LAST', totalAmount=205.0)
    res = client.post('/api/create-order-ramburs', json=cod_payload)
    assert res.status_code == 200

    res = client.post('/api/validate-discount', json={'code': 'LAST', 'subtotal': 200})
    assert res.json['valid'] is False
    assert res.json['reason'] == 'exhausted'

    with app.app_context():
        assert DiscountCode.query.filter_by(code='LAST').one().used_count == 3


def test_redeem_refuses_past_max_uses(app, make_discount):
    code_id = make_discount('ONCE', max_uses=1)
    with app.app_context():
        discount = db.session.get(DiscountCode, code_id)
        assert DiscountService.redeem(discount) is True
        # a second redemption with a stale read still cannot go over the limit
        assert DiscountService.redeem(discount) is False
        db.session.commit()
        db.session.expire_all()
        assert db.session.get(DiscountCode, code_id).used_count == 1


def test_cod_order_rolled_back_when_code_exhausted_at_redeem(app, cod_payload, make_discount, monkeypatch):
    make_discount('RACE', max_uses=1)
    monkeypatch.setattr(DiscountService, 'redeem', staticmethod(lambda discount: False))
    client = app.test_client()

    cod_payload.update(discountCode='RACE', totalAmount=205.0)
    res = client.post('/api/create-order-ramburs', json=cod_payload)

    assert res.status_code == 400
    assert 'utilizări' in res.json['message']
    with app.app_context():
        assert Order.query.count() == 0


def test_admin_discount_crud(app, client, admin_headers):
    res = client.post('/api/admin/discount-codes', headers=admin_headers, json={
        'code': 'vara25', 'discount_type': 'fixed', 'discount_value': 25,
        'min_order_amount': 150, 'max_uses': 10, 'valid_until': '2099-12-31T23:59:00',
    })
    assert res.status_code == 200
    created = res.json['discount']
    assert created['code'] == 'VARA25'
    assert created['used_count'] == 0

    res = client.put('/api/admin/discount-codes', headers=admin_headers, json={
        'id': created['id'], 'code': 'VARA25', 'discount_type': 'percentage',
        'discount_value': 5, 'is_active': False,
    })
    assert res.status_code == 200
    assert res.json['discount']['discount_type'] == 'percentage'
    assert res.json['discount']['is_active'] is False

    listed = client.get('/api/admin?type=discounts', headers=admin_headers).json
    assert [d['code'] for d in listed] == ['VARA25']

    res = client.delete(f"/api/admin/discount-codes?id={created['id']}", headers=admin_headers)
    assert res.status_code == 200
    with app.app_context():
        assert DiscountCode.query.count() == 0


def test_admin_discount_duplicate_code(client, admin_headers, make_discount):
    make_discount('SAVE10')
    res = client.post('/api/admin/discount-codes', headers=admin_headers, json={
        'code': 'Save10', 'discount_type': 'percentage', 'discount_value': 10,
    })
    assert res.status_code == 400
    assert res.json['status'] == 'error'


def test_admin_discount_rejects_unknown_type(client, admin_headers):
    res = client.post('/api/admin/discount-codes', headers=admin_headers, json={
        'code': 'X', 'discount_type': 'bogo', 'discount_value': 10,
    })
    assert res.status_code == 400


def test_utc_expiry_is_converted_to_local_time(app, client, admin_headers):
    valid_until = (datetime.now(timezone.utc) + timedelta(hours=1)).strftime('%Y-%m-%dT%H:%M:%SZ')
    res = client.post('/api/admin/discount-codes', headers=admin_headers, json={
        'code': 'TZ', 'discount_type': 'fixed', 'discount_value': 10, 'valid_until': valid_until,
    })
    assert res.status_code == 200

    res = client.post('/api/validate-discount', json={'code': 'TZ', 'subtotal': 100})
    assert res.json['valid'] is True

    with app.app_context():
        stored = DiscountCode.query.filter_by(code='TZ').one().valid_until
        assert timedelta(minutes=58) < stored - datetime.now() <= timedelta(hours=1)


@pytest.mark.parametrize('subtotal', ['inf', '-inf', 'nan', 'abc', [100]])
def test_validate_discount_rejects_bad_subtotal(client, make_discount, subtotal):
    make_discount('SAVE10')
    res = client.post('/api/validate-discount', json={'code': 'SAVE10', 'subtotal': subtotal})
    assert res.status_code == 400
    assert res.json == {'valid': False, 'message': 'Subtotal invalid.'}


def test_validate_discount_with_non_string_code(client):
    res = client.post('/api/validate-discount', json={'code': 12345, 'subtotal': 200})
    assert res.status_code == 200
    assert res.json['reason'] == 'not_found'
