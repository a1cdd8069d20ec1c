from datetime import datetime, time, timedelta
from flask import current_app

from oclar.extensions import db
from oclar.models import Order
from oclar.errors import ValidationError, NotFoundError
from oclar.utils import parse_iso_date

EDITABLE_FIELDS = ('customer_name', 'customer_phone', 'customer_email', 'city', 'county', 'address_line')


class OrderService:
    @staticmethod
    def list_orders(start_date=None, end_date=None, status=None):
        query = Order.query

        start = parse_iso_date(start_date)
        if start:
            query = query.filter(Order.created_at >= datetime.combine(start, time.min))
        end = parse_iso_date(end_date)
        if end:
            # inclusive of the whole end day
            query = query.filter(Order.created_at < datetime.combine(end + timedelta(days=1), time.min))
        if status:
            query = query.filter(Order.status == status)

        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    @staticmethod
    def get_order(order_id):
        order = db.session.get(Order, order_id)
        if not order:
            raise NotFoundError(f'Comanda #{order_id} nu a fost găsită.')
        return order

    @staticmethod
    def get_orders(order_ids):
        """Orders for a bulk action, in the order the admin selected them."""
        if not order_ids:
            raise ValidationError('Selectează cel puțin o comandă.')
        found = {o.id: o for o in Order.query.filter(Order.id.in_(order_ids)).all()}
        return [found[i] for i in order_ids if i in found]

    @staticmethod
    def update_order(data):
        """Admin edit: contact, address and free-form operational status.

        Money fields and the items snapshot are never editable.
        """
        data = data or {}
        order_id = data.get('orderId') or data.get('id')
        if not order_id:
            raise ValidationError('orderId lipsește.')
        order = OrderService.get_order(order_id)

        changes = {
            field: str(data[field]).strip()
            for field in EDITABLE_FIELDS
            if data.get(field) is not None
        }
        if 'customer_name' in changes and not changes['customer_name']:
            raise ValidationError('Numele clientului nu poate fi gol.')

        if data.get('status') is not None:
            changes['status'] = str(data['status']).strip()
            if not changes['status']:
                raise ValidationError('Statusul nu poate fi gol.')

        for field, value in changes.items():
            setattr(order, field, value)
        db.session.commit()
        current_app.logger.info(f"Order {order.id} updated by admin (status={order.status})")
        return order

    @staticmethod
    def delete_order(order_id):
        order = OrderService.get_order(order_id)
        db.session.delete(order)
        db.session.commit()
