from sqlalchemy import event
from . import db
from .types import StringList
from oclar.constants import ProductStatus


def _as_float(value):
    return float(value) if value is not None else None


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True, index=True)

    image_url = db.Column(db.Text, nullable=True)
    gallery = db.Column(StringList, nullable=False, default=list)

    price = db.Column(db.Numeric(10, 2), nullable=False)
    original_price = db.Column(db.Numeric(10, 2), nullable=True)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    # derived from stock_quantity, see refresh_status
    status = db.Column(db.String(20), nullable=False, default=ProductStatus.OUT_OF_STOCK)

    details = db.Column(StringList, nullable=False, default=list)
    colors = db.Column(StringList, nullable=False, default=list)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    def refresh_status(self):
        self.status = ProductStatus.ACTIVE if (self.stock_quantity or 0) > 0 else ProductStatus.OUT_OF_STOCK

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description or '',
            'category': self.category,
            'imageUrl': self.image_url,
            'gallery': StringList.encode(self.gallery or []),
            'price': _as_float(self.price),
            'original_price': _as_float(self.original_price),
            'stock_quantity': self.stock_quantity,
            'status': self.status,
            'details': StringList.encode(self.details or []),
            'colors': StringList.encode(self.colors or []),
        }


@event.listens_for(Product, 'before_insert')
@event.listens_for(Product, 'before_update')
def _derive_product_status(mapper, connection, target):
    target.refresh_status()
