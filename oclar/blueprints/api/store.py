import math
from datetime import datetime
from flask import request, jsonify, current_app
from sqlalchemy import text

from oclar.extensions import db
from oclar.services.catalog_service import CatalogService
from oclar.services.discount_service import DiscountService
from oclar.services.pricing import get_shipping_cost
from . import api_bp
from .utils import json_body


@api_bp.route('/api/products', methods=['GET'])
def list_products():
    category = request.args.get('category')
    return jsonify(CatalogService.list_products(category))


@api_bp.route('/api/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    return jsonify(CatalogService.get_product(product_id).to_dict())


@api_bp.route('/api/validate-discount', methods=['POST'])
def validate_discount():
    data = json_body()
    code = str(data.get('code') or '').strip()
    if not code:
        return jsonify({'valid': False, 'message': 'Introdu un cod de reducere.'})

    try:
        subtotal = float(data.get('subtotal') or 0)
    except (TypeError, ValueError):
        subtotal = None
    if subtotal is None or not math.isfinite(subtotal):
        return jsonify({'valid': False, 'message': 'Subtotal invalid.'}), 400

    check = DiscountService.validate(code, subtotal)
    if not check.valid:
        return jsonify({'valid': False, 'reason': check.reason, 'message': check.message})

    return jsonify({
        'valid': True,
        'code': check.code,
        'discountAmount': float(check.amount),
    })


@api_bp.route('/api/calculate-shipping', methods=['POST'])
def calculate_shipping():
    method = json_body().get('method')
    return jsonify({'cost': float(get_shipping_cost(method))})


@api_bp.route('/api/status', methods=['GET'])
def status():
    result = {
        'system': 'Online',
        'timestamp': datetime.now().isoformat(),
    }
    try:
        db.session.execute(text('SELECT 1'))
        result['database'] = 'SUCCESS'
        return jsonify(result)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Health check failed: {e}")
        result['database'] = 'FAILED'
        return jsonify(result), 500
