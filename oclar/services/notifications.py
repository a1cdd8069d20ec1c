from flask import current_app, render_template
from flask_mail import Message

from oclar.extensions import db, mail
from oclar.models import Order


def _context(order):
    return {
        'order': order,
        'lines': order.lines,
        'address': order.address_parts(),
    }


def build_order_messages(order):
    """Customer confirmation (when we have an address) and merchant notification."""
    ctx = _context(order)
    subject = f"Confirmare comanda #{order.id}"
    messages = []

    if order.customer_email:
        messages.append(Message(
            subject=subject,
            recipients=[order.customer_email],
            body=render_template('emails/order_confirmation.txt', **ctx),
            html=render_template('emails/order_confirmation.html', **ctx),
        ))

    admin_email = current_app.config.get('MAIL_ADMIN_EMAIL')
    if admin_email:
        messages.append(Message(
            subject=f"Comandă nouă #{order.id} ({order.payment_method})",
            recipients=[admin_email],
            body=render_template('emails/order_notification.txt', **ctx),
            reply_to=order.customer_email or None,
        ))
    return messages


def send_order_emails(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        current_app.logger.warning(f"Order email skipped, order {order_id} not found")
        return 0

    messages = build_order_messages(order)
    if not messages:
        current_app.logger.warning(f"No recipients for order {order_id} email")
        return 0

    with mail.connect() as conn:
        for msg in messages:
            conn.send(msg)
    current_app.logger.info(f"Sent {len(messages)} email(s) for order {order_id}")
    return len(messages)


def dispatch_order_emails(order_id):
    """Queue the order emails; never lets a mail problem reach the caller."""
    from oclar.celery_tasks import task_send_order_emails

    try:
        task_send_order_emails.delay(order_id)
    except Exception as e:
        current_app.logger.error(f"Could not queue emails for order {order_id}: {e}")
