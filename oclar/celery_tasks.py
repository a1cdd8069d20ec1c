from flask import current_app

from oclar.extensions import celery_app
from oclar.services.notifications import send_order_emails


@celery_app.task(bind=True)
def task_send_order_emails(self, order_id):
    """Order confirmation + merchant notification"""
    with self.app.flask_app.app_context():
        try:
            sent = send_order_emails(order_id)
            return {'status': 'completed', 'result': {'sent': sent}}
        except Exception as e:
            # order is already persisted; a failed email is only reported
            current_app.logger.exception(f"Order email failed for order {order_id}: {e}")
            return {'status': 'error', 'message': str(e)}
