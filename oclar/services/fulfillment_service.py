from flask import current_app

from oclar.extensions import db
from oclar.errors import OclarError
from oclar.services.courier import CourierClient
from oclar.services.oblio import OblioClient
from oclar.services.order_service import OrderService


def _run_bulk(order_ids, action):
    """Apply ``action`` to each order; one failure never stops the batch."""
    orders = {o.id: o for o in OrderService.get_orders(order_ids)}
    results = []
    for order_id in order_ids:
        order = orders.get(order_id)
        if order is None:
            results.append({'orderId': order_id, 'success': False, 'error': 'Comanda nu a fost găsită.'})
            continue
        try:
            result = action(order)
            db.session.commit()
            results.append({'orderId': order_id, 'success': True, **result})
        except OclarError as e:
            db.session.rollback()
            current_app.logger.warning(f"Bulk action failed for order {order_id}: {e.message}")
            results.append({'orderId': order_id, 'success': False, 'error': e.message})
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"Bulk action crashed for order {order_id}: {e}")
            results.append({'orderId': order_id, 'success': False, 'error': str(e)})
    return results


class FulfillmentService:
    @staticmethod
    def send_invoices(order_ids):
        client = OblioClient.from_config(current_app.config)

        def _invoice(order):
            invoice = client.create_invoice(order)
            order.oblio_invoice_id = invoice['invoice_id']
            order.oblio_invoice_number = invoice['invoice_number']
            return {'invoiceNumber': invoice['invoice_number'], 'invoiceUrl': invoice['invoice_url']}

        return _run_bulk(order_ids, _invoice)

    @staticmethod
    def generate_awbs(order_ids, courier_service):
        client = CourierClient.from_config(current_app.config)

        def _awb(order):
            awb = client.generate_awb(order, courier_service)
            order.awb_number = awb['awb_number']
            order.awb_courier = courier_service
            return {'awbNumber': awb['awb_number'], 'trackingUrl': awb['tracking_url']}

        return _run_bulk(order_ids, _awb)
