from flask import current_app
from pydantic import ValidationError as SchemaError
from sqlalchemy import exc

from oclar.extensions import db
from oclar.models import Order
from oclar.constants import DiscountRejection, OrderStatus, PaymentMethod
from oclar.errors import ExternalServiceError, ValidationError
from oclar.schemas import CashOnDeliveryRequest, CheckoutSessionRequest, OrderLine, ProcessorAddress
from oclar.services import payments
from oclar.services.discount_service import DiscountService
from oclar.services.notifications import dispatch_order_emails
from oclar.services.pricing import (
    CENT, REJECTION_MESSAGES, PriceBreakdown, calculate_subtotal, calculate_totals, money,
)
from oclar.utils import describe_schema_error, schema_error_details


def _parse(schema, data):
    try:
        return schema.model_validate(data or {})
    except SchemaError as e:
        raise ValidationError(describe_schema_error(e), details=schema_error_details(e))


def _snapshot(items):
    """Freeze cart lines into the order; never re-read from the catalog later."""
    return [OrderLine.model_validate(item.model_dump()) for item in items]


def _price(payload):
    discount = DiscountService.find(payload.discount_code) if payload.discount_code else None
    return discount, calculate_totals(
        payload.items,
        payload.shipping_method,
        discount=discount,
        discount_code=payload.discount_code,
    )


def _line_label(item):
    return f"{item.name} ({item.color})" if item.color else item.name


class CheckoutService:
    @staticmethod
    def create_cod_order(data):
        """Cash-on-delivery checkout. Returns the persisted order."""
        payload = _parse(CashOnDeliveryRequest, data)
        discount, breakdown = _price(payload)

        claimed = money(payload.total_amount)
        if abs(claimed - breakdown.total) > CENT:
            raise ValidationError(
                'Totalul comenzii nu corespunde. Reîncarcă coșul și încearcă din nou.',
                details={'expected': float(breakdown.total), 'received': float(claimed)},
            )

        order = Order(
            customer_name=payload.customer_name,
            customer_email=payload.customer_email or '',
            customer_phone=payload.customer_phone,
            county=payload.address.county,
            city=payload.address.city,
            address_line=payload.address.line,
            items=_snapshot(payload.items),
            subtotal=breakdown.subtotal,
            shipping_method=breakdown.shipping_method,
            shipping_cost=breakdown.shipping_cost,
            discount_code=breakdown.discount_code,
            discount_amount=breakdown.discount_amount,
            total_amount=breakdown.total,
            payment_method=PaymentMethod.RAMBURS,
            status=OrderStatus.PENDING,
        )
        db.session.add(order)

        if discount is not None and not DiscountService.redeem(discount):
            db.session.rollback()
            raise ValidationError(
                REJECTION_MESSAGES[DiscountRejection.EXHAUSTED],
                details={'reason': DiscountRejection.EXHAUSTED},
            )

        db.session.commit()
        current_app.logger.info(f"COD order {order.id} created, total {order.total_amount}")

        dispatch_order_emails(order.id)
        return order

    @staticmethod
    def create_checkout_session(data, base_url):
        """Phase one of the card flow: no order row is written here."""
        payload = _parse(CheckoutSessionRequest, data)
        _, breakdown = _price(payload)
        currency = current_app.config['STRIPE_CURRENCY']

        line_items = []
        for item in payload.items:
            images = [item.image_url] if item.image_url and item.image_url.startswith('http') else []
            line_items.append({
                'price_data': {
                    'currency': currency,
                    'product_data': {'name': _line_label(item), 'images': images},
                    'unit_amount': payments.to_minor_units(item.price),
                },
                'quantity': item.quantity,
            })

        shipping_line = f"Transport ({breakdown.shipping_method})"
        if breakdown.shipping_cost > 0:
            line_items.append({
                'price_data': {
                    'currency': currency,
                    'product_data': {'name': shipping_line},
                    'unit_amount': payments.to_minor_units(breakdown.shipping_cost),
                },
                'quantity': 1,
            })

        coupon_id = None
        discounts = None
        if breakdown.discount_amount > 0:
            coupon_id = payments.create_coupon(breakdown.discount_amount, f"Reducere {breakdown.discount_code}")
            discounts = [{'coupon': coupon_id}]

        metadata = breakdown.as_metadata()
        metadata['shipping_line'] = shipping_line

        try:
            session = payments.create_session(
                line_items,
                metadata,
                base_url,
                discounts=discounts,
                customer_email=payload.customer_email,
            )
        except ExternalServiceError:
            # a coupon is single-use and belongs to this session only
            if coupon_id:
                payments.delete_coupon(coupon_id)
            raise
        current_app.logger.info(f"Checkout session {session['id']} created, total {breakdown.total}")
        return session['url']

    @staticmethod
    def _breakdown_from_session(session, lines):
        metadata = session.get('metadata') or {}
        if metadata.get('subtotal'):
            return PriceBreakdown.from_metadata(metadata)

        # session not created by create_checkout_session; derive from what was charged
        subtotal = calculate_subtotal(lines)
        discount = payments.from_minor_units((session.get('total_details') or {}).get('amount_discount'))
        total = payments.from_minor_units(session.get('amount_total'))
        shipping = max(money(total - subtotal + discount), money(0))
        return PriceBreakdown(
            subtotal=subtotal,
            shipping_method=metadata.get('shipping_method') or None,
            shipping_cost=shipping,
            discount_code=None,
            discount_amount=money(discount),
            total=money(subtotal + shipping - discount),
        )

    @staticmethod
    def complete_card_checkout(session):
        """Phase two: persist the paid order for a completed session.

        Returns ``(order, created)``. A session that already has an order is a
        no-op, so redelivered events do not duplicate orders.
        """
        session_id = session.get('id')
        existing = Order.query.filter_by(stripe_session_id=session_id).first()
        if existing:
            current_app.logger.info(f"Session {session_id} already recorded as order {existing.id}")
            return existing, False

        metadata = session.get('metadata') or {}
        shipping_line = metadata.get('shipping_line')

        lines = []
        for li in payments.list_line_items(session_id):
            if shipping_line and li['description'] == shipping_line:
                continue
            quantity = int(li['quantity'] or 1)
            unit_price = money(payments.from_minor_units(li['amount_subtotal']) / quantity)
            lines.append(OrderLine(name=li['description'] or 'Produs', quantity=quantity, price=unit_price))

        breakdown = CheckoutService._breakdown_from_session(session, lines)
        charged = payments.from_minor_units(session.get('amount_total'))
        if money(charged) != breakdown.total:
            current_app.logger.warning(
                f"Session {session_id} charged {charged} but breakdown totals {breakdown.total}"
            )

        customer = session.get('customer_details') or {}
        shipping = session.get('shipping_details') or \
            (session.get('collected_information') or {}).get('shipping_details') or {}
        address = shipping.get('address') or customer.get('address') or {}

        order = Order(
            stripe_session_id=session_id,
            customer_name=shipping.get('name') or customer.get('name') or 'Client',
            customer_email=customer.get('email') or '',
            customer_phone=customer.get('phone') or '',
            shipping_address=ProcessorAddress.model_validate(address),
            items=lines,
            subtotal=breakdown.subtotal,
            shipping_method=breakdown.shipping_method,
            shipping_cost=breakdown.shipping_cost,
            discount_code=breakdown.discount_code,
            discount_amount=breakdown.discount_amount,
            total_amount=breakdown.total,
            payment_method=PaymentMethod.CARD,
            status=OrderStatus.PAID,
        )
        db.session.add(order)

        if breakdown.discount_code:
            discount = DiscountService.find(breakdown.discount_code)
            # the customer has already paid the discounted price, keep the order either way
            if discount is None or not DiscountService.redeem(discount):
                current_app.logger.warning(
                    f"Discount {breakdown.discount_code} could not be redeemed for session {session_id}"
                )

        try:
            db.session.commit()
        except exc.IntegrityError:
            db.session.rollback()
            existing = Order.query.filter_by(stripe_session_id=session_id).first()
            if existing is None:
                raise
            current_app.logger.info(f"Session {session_id} recorded concurrently as order {existing.id}")
            return existing, False

        current_app.logger.info(f"Card order {order.id} created from session {session_id}")
        dispatch_order_emails(order.id)
        return order, True

    @staticmethod
    def handle_webhook(payload, signature):
        """Verify and process a Stripe event.

        Signature problems raise before anything touches the database; any
        other failure is logged and swallowed so Stripe does not retry forever.
        """
        event = payments.verify_webhook(payload, signature)

        if event.get('type') == payments.CHECKOUT_COMPLETED:
            session = (event.get('data') or {}).get('object') or {}
            try:
                CheckoutService.complete_card_checkout(session)
            except Exception as e:
                db.session.rollback()
                current_app.logger.exception(f"Error processing webhook for session {session.get('id')}: {e}")
        else:
            current_app.logger.info(f"Ignoring Stripe event {event.get('type')}")

        return {'received': True}
