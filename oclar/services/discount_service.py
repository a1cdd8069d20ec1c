from datetime import datetime
from flask import current_app
from pydantic import ValidationError as SchemaError
from sqlalchemy import or_, update, exc

from oclar.extensions import db
from oclar.models import DiscountCode
from oclar.constants import DiscountType
from oclar.errors import ValidationError, NotFoundError
from oclar.schemas import DiscountCodePayload
from oclar.services.pricing import check_discount, money
from oclar.utils import describe_schema_error


def _parse_datetime(value):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'Dată invalidă: {value}')
    if parsed.tzinfo is not None:
        # stored naive in server-local time, the same clock check_discount uses
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class DiscountService:
    @staticmethod
    def find(code):
        normalized = DiscountCode.normalize(code)
        if not normalized:
            return None
        return DiscountCode.query.filter_by(code=normalized).first()

    @staticmethod
    def validate(code, subtotal):
        """Side-effect free; safe to call every time the cart changes."""
        return check_discount(DiscountService.find(code), money(subtotal))

    @staticmethod
    def redeem(discount):
        """Count one use of ``discount`` inside the caller's transaction.

        The increment is conditional so two concurrent redemptions cannot push
        ``used_count`` past ``max_uses``. Returns False when the code was
        already exhausted.
        """
        result = db.session.execute(
            update(DiscountCode)
            .where(
                DiscountCode.id == discount.id,
                or_(DiscountCode.max_uses.is_(None), DiscountCode.used_count < DiscountCode.max_uses),
            )
            .values(used_count=DiscountCode.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        redeemed = result.rowcount == 1
        if redeemed:
            current_app.logger.info(f"Discount code {discount.code} redeemed")
        return redeemed

    # --- admin ---

    @staticmethod
    def list_codes():
        return DiscountCode.query.order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc()).all()

    @staticmethod
    def _apply_payload(discount, data):
        try:
            payload = DiscountCodePayload.model_validate(data or {})
        except SchemaError as e:
            raise ValidationError(describe_schema_error(e))

        if payload.discount_type not in DiscountType.ALL:
            raise ValidationError(f'Tip de reducere invalid: {payload.discount_type}')

        valid_from = _parse_datetime(payload.valid_from)
        valid_until = _parse_datetime(payload.valid_until)
        if valid_from and valid_until and valid_until < valid_from:
            raise ValidationError('Data de expirare este înaintea datei de început.')

        discount.code = DiscountCode.normalize(payload.code)
        discount.discount_type = payload.discount_type
        discount.discount_value = money(payload.discount_value)
        discount.min_order_amount = money(payload.min_order_amount)
        discount.max_uses = payload.max_uses
        discount.valid_from = valid_from
        discount.valid_until = valid_until
        discount.is_active = payload.is_active
        return discount

    @staticmethod
    def _commit(discount):
        try:
            db.session.commit()
        except exc.IntegrityError:
            db.session.rollback()
            raise ValidationError(f'Codul {discount.code} există deja.')
        return discount

    @staticmethod
    def create_code(data):
        discount = DiscountService._apply_payload(DiscountCode(used_count=0), data)
        db.session.add(discount)
        return DiscountService._commit(discount)

    @staticmethod
    def update_code(data):
        code_id = (data or {}).get('id')
        discount = db.session.get(DiscountCode, code_id) if code_id else None
        if not discount:
            raise NotFoundError('Codul de reducere nu a fost găsit.')
        DiscountService._apply_payload(discount, data)
        return DiscountService._commit(discount)

    @staticmethod
    def delete_code(code_id):
        discount = db.session.get(DiscountCode, code_id) if code_id else None
        if not discount:
            raise NotFoundError('Codul de reducere nu a fost găsit.')
        db.session.delete(discount)
        db.session.commit()
