from . import db
from .types import OrderLines, ShippingAddressJSON
from oclar.constants import OrderStatus, PaymentMethod


def _as_float(value):
    return float(value) if value is not None else 0.0


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    # set only for card orders; unique so a redelivered webhook cannot insert twice
    stripe_session_id = db.Column(db.String(255), unique=True, nullable=True)

    customer_name = db.Column(db.String(200), nullable=False)
    customer_email = db.Column(db.String(200), nullable=True)
    customer_phone = db.Column(db.String(50), nullable=True)

    county = db.Column(db.String(100), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    address_line = db.Column(db.String(300), nullable=True)
    shipping_address = db.Column(ShippingAddressJSON, nullable=True)

    items = db.Column(OrderLines, nullable=False)

    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    shipping_method = db.Column(db.String(20), nullable=True)
    shipping_cost = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    discount_code = db.Column(db.String(50), nullable=True)
    discount_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)

    payment_method = db.Column(db.String(20), nullable=False, default=PaymentMethod.RAMBURS)
    status = db.Column(db.String(30), nullable=False, default=OrderStatus.PENDING, index=True)

    oblio_invoice_id = db.Column(db.String(100), nullable=True)
    oblio_invoice_number = db.Column(db.String(100), nullable=True)
    awb_number = db.Column(db.String(100), nullable=True)
    awb_courier = db.Column(db.String(50), nullable=True)

    created_at = db.Column(db.DateTime, server_default=db.func.now(), index=True)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    @property
    def lines(self):
        return OrderLines.decode(OrderLines.encode(self.items or []))

    def address_parts(self):
        """Flat address for invoices and labels, whichever checkout path filled it."""
        if self.address_line or self.city or self.county:
            return {
                'line': self.address_line or '',
                'city': self.city or '',
                'county': self.county or '',
            }
        addr = self.shipping_address
        if addr is None:
            return {'line': '', 'city': '', 'county': ''}
        if isinstance(addr, dict):
            addr = ShippingAddressJSON.decode(addr)
        line = ', '.join(p for p in (addr.line1, addr.line2) if p)
        return {'line': line, 'city': addr.city or '', 'county': addr.state or ''}

    def to_dict(self):
        return {
            'id': self.id,
            'stripe_session_id': self.stripe_session_id,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email or '',
            'customer_phone': self.customer_phone or '',
            'county': self.county,
            'city': self.city,
            'address_line': self.address_line,
            'shipping_address': ShippingAddressJSON.encode(self.shipping_address),
            'items': OrderLines.encode(self.items or []),
            'subtotal': _as_float(self.subtotal),
            'shipping_method': self.shipping_method,
            'shipping_cost': _as_float(self.shipping_cost),
            'discount_code': self.discount_code,
            'discount_amount': _as_float(self.discount_amount),
            'total_amount': _as_float(self.total_amount),
            'payment_method': self.payment_method,
            'status': self.status,
            'oblio_invoice_id': self.oblio_invoice_id,
            'oblio_invoice_number': self.oblio_invoice_number,
            'awb_number': self.awb_number,
            'awb_courier': self.awb_courier,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
