"""Stripe Checkout integration.

Every call into the ``stripe`` library goes through this module so the rest
of the code (and the tests) deal with plain dicts and our own exceptions.
"""
import json

import stripe
from flask import current_app

from oclar.errors import ExternalServiceError, WebhookSignatureError
from oclar.services.pricing import money

CHECKOUT_COMPLETED = 'checkout.session.completed'


def init_app(app):
    stripe.api_key = app.config.get('STRIPE_SECRET_KEY') or None


def to_minor_units(amount):
    """RON to bani."""
    return int(money(amount) * 100)


def from_minor_units(amount):
    return money(amount or 0) / 100


def create_coupon(amount, name):
    """Single-use fixed coupon carrying a validated discount into Checkout."""
    try:
        coupon = stripe.Coupon.create(
            amount_off=to_minor_units(amount),
            currency=current_app.config['STRIPE_CURRENCY'],
            duration='once',
            max_redemptions=1,
            name=name[:40],
        )
    except stripe.StripeError as e:
        current_app.logger.error(f"Stripe coupon creation failed: {e}")
        raise ExternalServiceError(f'Stripe error: {e.user_message or e}', status_code=500)
    return coupon.id


def delete_coupon(coupon_id):
    try:
        stripe.Coupon.delete(coupon_id)
    except stripe.StripeError as e:
        current_app.logger.warning(f"Stripe coupon {coupon_id} could not be deleted: {e}")


def create_session(line_items, metadata, base_url, discounts=None, customer_email=None):
    params = {
        'payment_method_types': ['card'],
        'line_items': line_items,
        'mode': 'payment',
        'billing_address_collection': 'required',
        'shipping_address_collection': {'allowed_countries': ['RO']},
        'phone_number_collection': {'enabled': True},
        'metadata': metadata,
        'success_url': f"{base_url}/#/success",
        'cancel_url': f"{base_url}/#/",
    }
    if discounts:
        params['discounts'] = discounts
    if customer_email:
        params['customer_email'] = customer_email

    try:
        session = stripe.checkout.Session.create(**params)
    except stripe.StripeError as e:
        current_app.logger.error(f"Stripe checkout session creation failed: {e}")
        raise ExternalServiceError(f'Stripe error: {e.user_message or e}', status_code=500)
    return {'id': session.id, 'url': session.url}


def verify_webhook(payload, signature):
    """Check the Stripe-Signature header and return the event as a plain dict."""
    secret = current_app.config.get('STRIPE_WEBHOOK_SECRET')
    if not signature or not secret:
        raise WebhookSignatureError('Webhook Error: Missing signature or secret')
    try:
        stripe.Webhook.construct_event(payload, signature, secret)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(f'Webhook Error: {e}')
    except ValueError as e:
        raise WebhookSignatureError(f'Webhook Error: invalid payload ({e})')
    return json.loads(payload)


def list_line_items(session_id):
    try:
        page = stripe.checkout.Session.list_line_items(session_id, limit=100)
        return [
            {
                'description': li.description,
                'quantity': li.quantity or 1,
                'amount_subtotal': li.amount_subtotal or 0,
                'amount_total': li.amount_total or 0,
            }
            for li in page.auto_paging_iter()
        ]
    except stripe.StripeError as e:
        current_app.logger.error(f"Stripe line items fetch failed for {session_id}: {e}")
        raise ExternalServiceError(f'Stripe error: {e}')
