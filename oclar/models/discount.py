from datetime import datetime
from . import db
from oclar.constants import DiscountType


class DiscountCode(db.Model):
    __tablename__ = 'discount_codes'

    id = db.Column(db.Integer, primary_key=True)
    # always stored upper-case
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)

    discount_type = db.Column(db.String(20), nullable=False, default=DiscountType.PERCENTAGE)
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    min_order_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    max_uses = db.Column(db.Integer, nullable=True)
    used_count = db.Column(db.Integer, nullable=False, default=0)

    valid_from = db.Column(db.DateTime, nullable=True)
    valid_until = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, server_default=db.func.now())

    @staticmethod
    def normalize(code):
        return (code or '').strip().upper()

    def to_dict(self):
        def _iso(value):
            return value.isoformat() if isinstance(value, datetime) else None

        return {
            'id': self.id,
            'code': self.code,
            'discount_type': self.discount_type,
            'discount_value': float(self.discount_value),
            'min_order_amount': float(self.min_order_amount or 0),
            'max_uses': self.max_uses,
            'used_count': self.used_count or 0,
            'valid_from': _iso(self.valid_from),
            'valid_until': _iso(self.valid_until),
            'is_active': bool(self.is_active),
        }
