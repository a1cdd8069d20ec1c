from flask import request, jsonify, send_file, current_app
import io

from oclar.constants import Courier, ExportFormat
from oclar.errors import ValidationError
from oclar.services.catalog_service import CatalogService
from oclar.services.discount_service import DiscountService
from oclar.services.export import export_orders
from oclar.services.fulfillment_service import FulfillmentService
from oclar.services.order_service import OrderService
from oclar.utils import parse_id_list
from . import api_bp
from .utils import admin_required, json_body


@api_bp.route('/api/admin', methods=['GET'])
@admin_required
def admin_list():
    data_type = request.args.get('type', 'orders')

    if data_type == 'orders':
        orders = OrderService.list_orders(
            start_date=request.args.get('startDate'),
            end_date=request.args.get('endDate'),
            status=request.args.get('status'),
        )
        return jsonify([o.to_dict() for o in orders])

    if data_type == 'products':
        return jsonify([p.to_dict() for p in CatalogService.list_all()])

    if data_type == 'discounts':
        return jsonify([d.to_dict() for d in DiscountService.list_codes()])

    raise ValidationError(f'Tip necunoscut: {data_type}')


@api_bp.route('/api/admin', methods=['POST'])
@admin_required
def admin_save_product():
    data = json_body()
    is_update = bool(data.get('id'))
    product = CatalogService.save_product(data)
    if is_update:
        return jsonify({'success': True, 'message': 'Produs actualizat', 'id': product.id})
    return jsonify({'success': True, 'id': product.id})


@api_bp.route('/api/admin', methods=['PUT'])
@admin_required
def admin_update_order():
    order = OrderService.update_order(json_body())
    return jsonify({'success': True, 'order': order.to_dict()})


@api_bp.route('/api/admin', methods=['DELETE'])
@admin_required
def admin_delete():
    target_id = request.args.get('id', type=int)
    if not target_id:
        raise ValidationError('id lipsește.')

    if request.args.get('type', 'products') == 'orders':
        OrderService.delete_order(target_id)
    else:
        CatalogService.delete_product(target_id)
    return jsonify({'success': True})


@api_bp.route('/api/admin/discount-codes', methods=['GET'])
@admin_required
def list_discount_codes():
    return jsonify([d.to_dict() for d in DiscountService.list_codes()])


@api_bp.route('/api/admin/discount-codes', methods=['POST'])
@admin_required
def create_discount_code():
    discount = DiscountService.create_code(json_body())
    return jsonify({'success': True, 'discount': discount.to_dict()})


@api_bp.route('/api/admin/discount-codes', methods=['PUT'])
@admin_required
def update_discount_code():
    discount = DiscountService.update_code(json_body())
    return jsonify({'success': True, 'discount': discount.to_dict()})


@api_bp.route('/api/admin/discount-codes', methods=['DELETE'])
@admin_required
def delete_discount_code():
    DiscountService.delete_code(request.args.get('id', type=int))
    return jsonify({'success': True})


@api_bp.route('/api/admin/send-invoices', methods=['POST'])
@admin_required
def send_invoices():
    order_ids = parse_id_list(json_body().get('orderIds'))
    if not order_ids:
        raise ValidationError('Selectează cel puțin o comandă.')

    results = FulfillmentService.send_invoices(order_ids)
    ok = sum(1 for r in results if r['success'])
    current_app.logger.info(f"Invoices: {ok}/{len(results)} succeeded")
    return jsonify({'success': True, 'results': results})


@api_bp.route('/api/admin/generate-awb', methods=['POST'])
@admin_required
def generate_awb():
    data = json_body()
    order_ids = parse_id_list(data.get('orderIds'))
    if not order_ids:
        raise ValidationError('Selectează cel puțin o comandă.')
    courier = str(data.get('courierService') or Courier.FANCOURIER).strip().lower()

    results = FulfillmentService.generate_awbs(order_ids, courier)
    ok = sum(1 for r in results if r['success'])
    current_app.logger.info(f"AWB ({courier}): {ok}/{len(results)} succeeded")
    return jsonify({'success': True, 'results': results})


@api_bp.route('/api/admin/export-orders', methods=['POST'])
@admin_required
def export_orders_file():
    data = json_body()
    order_ids = parse_id_list(data.get('orderIds'))
    fmt = data.get('format', ExportFormat.EXCEL)
    if fmt not in ExportFormat.ALL:
        raise ValidationError(f'Format de export invalid: {fmt}')

    orders = OrderService.get_orders(order_ids)
    content, mimetype, filename = export_orders(orders, fmt)
    return send_file(
        io.BytesIO(content),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )
