from decimal import Decimal

import pytest

from oclar import create_app
from oclar.config import TestingConfig
from oclar.extensions import db
from oclar.models import DiscountCode, Order, Product

ADMIN_HEADERS = {'x-admin-secret': TestingConfig.ADMIN_SECRET}


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'oclar.db'}"

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def make_product(app):
    def _make(**kwargs):
        data = {
            'name': 'OclarOrigin - Matte Black',
            'description': 'Ramă din acetat',
            'category': 'Daytime',
            'price': Decimal('189.00'),
            'stock_quantity': 10,
            'image_url': 'https://img.test/origin.jpg',
            'gallery': [],
            'details': ['Greutate: 18g'],
            'colors': ['#171717'],
        }
        data.update(kwargs)
        with app.app_context():
            product = Product(**data)
            db.session.add(product)
            db.session.commit()
            product_id = product.id
            db.session.remove()
        return product_id
    return _make


@pytest.fixture
def make_discount(app):
    def _make(code='SAVE10', **kwargs):
        data = {
            'discount_type': 'percentage',
            'discount_value': Decimal('10'),
            'min_order_amount': Decimal('100'),
            'max_uses': None,
            'used_count': 0,
            'is_active': True,
        }
        data.update(kwargs)
        with app.app_context():
            discount = DiscountCode(code=code, **data)
            db.session.add(discount)
            db.session.commit()
            discount_id = discount.id
            db.session.remove()
        return discount_id
    return _make


@pytest.fixture
def make_order(app):
    def _make(**kwargs):
        data = {
            'customer_name': 'Ana Popescu',
            'customer_email': 'ana@example.com',
            'customer_phone': '0722000000',
            'county': 'Cluj',
            'city': 'Cluj-Napoca',
            'address_line': 'Str. Memorandumului 1',
            'items': [{'id': 1, 'name': 'OclarOrigin', 'quantity': 2, 'price': '100.00'}],
            'subtotal': Decimal('200.00'),
            'shipping_method': 'courier',
            'shipping_cost': Decimal('25.00'),
            'discount_amount': Decimal('0.00'),
            'total_amount': Decimal('225.00'),
            'payment_method': 'ramburs',
            'status': 'pending',
        }
        data.update(kwargs)
        with app.app_context():
            order = Order(**data)
            db.session.add(order)
            db.session.commit()
            order_id = order.id
            db.session.remove()
        return order_id
    return _make


@pytest.fixture
def cod_payload():
    return {
        'customerName': 'Ana Popescu',
        'customerEmail': 'ana@example.com',
        'customerPhone': '0722000000',
        'address': {'county': 'Cluj', 'city': 'Cluj-Napoca', 'line': 'Str. Memorandumului 1'},
        'items': [{'id': 1, 'name': 'OclarOrigin', 'price': 100.0, 'quantity': 2, 'selectedColor': '#171717'}],
        'subtotal': 200.0,
        'shippingMethod': 'courier',
        'totalAmount': 225.0,
    }
