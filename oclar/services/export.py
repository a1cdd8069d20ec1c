import io
from datetime import datetime

import openpyxl
import pandas as pd

from oclar.constants import ExportFormat
from oclar.errors import ValidationError

EXPORT_COLUMNS = [
    ('id', 'ID'),
    ('created_at', 'Data'),
    ('customer_name', 'Client'),
    ('customer_email', 'Email'),
    ('customer_phone', 'Telefon'),
    ('county', 'Judet'),
    ('city', 'Oras'),
    ('address_line', 'Adresa'),
    ('items', 'Produse'),
    ('subtotal', 'Subtotal'),
    ('shipping_method', 'Livrare'),
    ('shipping_cost', 'Cost livrare'),
    ('discount_code', 'Cod reducere'),
    ('discount_amount', 'Reducere'),
    ('total_amount', 'Total'),
    ('payment_method', 'Plata'),
    ('status', 'Status'),
    ('oblio_invoice_number', 'Factura'),
    ('awb_number', 'AWB'),
]


def _order_row(order):
    address = order.address_parts()
    return {
        'id': order.id,
        'created_at': order.created_at.strftime('%Y-%m-%d %H:%M') if order.created_at else '',
        'customer_name': order.customer_name,
        'customer_email': order.customer_email or '',
        'customer_phone': order.customer_phone or '',
        'county': address['county'],
        'city': address['city'],
        'address_line': address['line'],
        'items': '; '.join(f"{line.name} x{line.quantity} @ {line.price:.2f}" for line in order.lines),
        'subtotal': float(order.subtotal or 0),
        'shipping_method': order.shipping_method or '',
        'shipping_cost': float(order.shipping_cost or 0),
        'discount_code': order.discount_code or '',
        'discount_amount': float(order.discount_amount or 0),
        'total_amount': float(order.total_amount or 0),
        'payment_method': order.payment_method,
        'status': order.status,
        'oblio_invoice_number': order.oblio_invoice_number or '',
        'awb_number': order.awb_number or '',
    }


def orders_to_dataframe(orders):
    return pd.DataFrame([_order_row(o) for o in orders], columns=[key for key, _ in EXPORT_COLUMNS])


def _to_csv(df):
    # utf-8-sig so Excel picks up the diacritics
    return df.rename(columns=dict(EXPORT_COLUMNS)).to_csv(index=False).encode('utf-8-sig')


def _to_xml(df):
    if df.empty:
        return b'<?xml version="1.0" encoding="utf-8"?>\n<orders/>\n'
    xml = df.to_xml(index=False, root_name='orders', row_name='order', parser='etree')
    return xml.encode('utf-8')


def _to_xlsx(df):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Comenzi'
    ws.append([label for _, label in EXPORT_COLUMNS])
    for row in df.itertuples(index=False):
        ws.append(list(row))

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


EXPORTERS = {
    ExportFormat.XML: (_to_xml, 'application/xml', 'xml'),
    ExportFormat.EXCEL: (_to_csv, 'text/csv', 'csv'),
    ExportFormat.XLSX: (_to_xlsx, 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
}


def export_orders(orders, fmt):
    """Render orders as a downloadable document: (bytes, mimetype, filename)."""
    if fmt not in EXPORTERS:
        raise ValidationError(f"Format de export invalid: {fmt}")
    render, mimetype, extension = EXPORTERS[fmt]
    content = render(orders_to_dataframe(orders))
    filename = f"orders_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"
    return content, mimetype, filename
