"""Oblio.eu invoicing API client."""
from datetime import date, timedelta

import requests
from flask import current_app

from oclar.constants import CURRENCY_LABEL
from oclar.errors import ExternalServiceError


class OblioClient:
    def __init__(self, api_url, email, secret, cif, series, vat=19, timeout=15):
        self.api_url = api_url.rstrip('/')
        self.email = email
        self.secret = secret
        self.cif = cif
        self.series = series
        self.vat = vat
        self.timeout = timeout
        self._token = None

    @classmethod
    def from_config(cls, config):
        if not config.get('OBLIO_EMAIL') or not config.get('OBLIO_SECRET'):
            raise ExternalServiceError('Oblio nu este configurat (OBLIO_EMAIL / OBLIO_SECRET).')
        return cls(
            api_url=config['OBLIO_API_URL'],
            email=config['OBLIO_EMAIL'],
            secret=config['OBLIO_SECRET'],
            cif=config.get('OBLIO_CIF'),
            series=config.get('OBLIO_SERIES'),
            vat=config.get('OBLIO_VAT', 19),
            timeout=config.get('EXTERNAL_API_TIMEOUT', 15),
        )

    def _authorize(self):
        if self._token:
            return self._token
        try:
            response = requests.post(
                f"{self.api_url}/authorize/token",
                json={
                    'client_id': self.email,
                    'client_secret': self.secret,
                    'grant_type': 'client_credentials',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalServiceError(f'Oblio authentication failed: {e}')
        if not response.ok:
            raise ExternalServiceError(f'Oblio authentication failed ({response.status_code})')
        self._token = response.json().get('access_token')
        if not self._token:
            raise ExternalServiceError('Oblio authentication returned no token')
        return self._token

    def _product(self, name, code, price, quantity=1, product_type='Marfa', description=None):
        return {
            'name': name,
            'code': code,
            'description': description or name,
            'price': float(price),
            'currency': CURRENCY_LABEL,
            'vat': self.vat,
            'quantity': quantity,
            'measuringUnit': 'buc',
            'productType': product_type,
        }

    def build_invoice(self, order):
        products = [
            self._product(line.name, f"PROD-{line.id or '000'}", line.price, line.quantity)
            for line in order.lines
        ]
        if order.shipping_cost and order.shipping_cost > 0:
            products.append(self._product('Transport', 'TRANSPORT', order.shipping_cost,
                                          product_type='Serviciu', description='Cost transport'))
        if order.discount_amount and order.discount_amount > 0:
            label = f"Reducere ({order.discount_code})" if order.discount_code else 'Reducere'
            products.append(self._product(label, 'DISCOUNT', -order.discount_amount,
                                          product_type='Discount', description='Cod promotional'))

        address = order.address_parts()
        today = date.today()
        return {
            'cif': self.cif,
            'seriesName': self.series,
            'client': {
                'name': order.customer_name,
                'email': order.customer_email or '',
                'phone': order.customer_phone or '',
                'address': address['line'],
                'city': address['city'],
                'state': address['county'],
                'country': 'Romania',
                'save': False,
            },
            'issueDate': today.isoformat(),
            'dueDate': (today + timedelta(days=14)).isoformat(),
            'currency': CURRENCY_LABEL,
            'products': products,
            'language': 'RO',
            'precision': 2,
            'mentions': f"Comanda #{order.id}",
            'useStock': 0,
        }

    def create_invoice(self, order):
        token = self._authorize()
        try:
            response = requests.post(
                f"{self.api_url}/docs/invoice",
                json=self.build_invoice(order),
                headers={'Authorization': f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ExternalServiceError(f'Oblio invoice creation failed: {e}')
        if not response.ok:
            raise ExternalServiceError(f'Oblio invoice creation failed: {response.text}')

        data = response.json().get('data') or {}
        current_app.logger.info(f"Oblio invoice {data.get('seriesName')}{data.get('number')} for order {order.id}")
        return {
            'invoice_id': str(data.get('id') or f"{data.get('seriesName', '')}{data.get('number', '')}"),
            'invoice_number': f"{data.get('seriesName', '')}{data.get('number', '')}",
            'invoice_url': data.get('link'),
        }
