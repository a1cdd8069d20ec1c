from flask import request, jsonify

from oclar.services.checkout_service import CheckoutService
from . import api_bp
from .utils import json_body, request_origin


@api_bp.route('/api/create-order-ramburs', methods=['POST'])
def create_order_ramburs():
    order = CheckoutService.create_cod_order(json_body())
    return jsonify({'success': True, 'orderId': order.id})


@api_bp.route('/api/create-checkout-session', methods=['POST'])
def create_checkout_session():
    url = CheckoutService.create_checkout_session(json_body(), request_origin())
    return jsonify({'url': url})


@api_bp.route('/api/webhook', methods=['POST'])
def stripe_webhook():
    # raw bytes: the signature is computed over the exact payload
    payload = request.get_data()
    signature = request.headers.get('Stripe-Signature')
    return jsonify(CheckoutService.handle_webhook(payload, signature))
