"""AWB (shipping label) generation through the courier's HTTP API."""
import requests
from flask import current_app

from oclar.constants import Courier, PaymentMethod, ShippingMethod
from oclar.errors import ExternalServiceError


class CourierClient:
    def __init__(self, endpoints, api_keys, timeout=15):
        self.endpoints = endpoints or {}
        self.api_keys = api_keys or {}
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            endpoints=config.get('COURIER_ENDPOINTS'),
            api_keys=config.get('COURIER_API_KEYS'),
            timeout=config.get('EXTERNAL_API_TIMEOUT', 15),
        )

    @staticmethod
    def build_shipment(order):
        address = order.address_parts()
        total = float(order.total_amount)
        return {
            'service': 'FAN BOX' if order.shipping_method == ShippingMethod.EASYBOX else 'Standard',
            'recipient': {
                'name': order.customer_name,
                'phone': order.customer_phone or '',
                'county': address['county'],
                'city': address['city'],
                'address': address['line'],
            },
            'packages': 1,
            'weight': 0.5,
            'declaredValue': total,
            # only collected at the door for cash-on-delivery orders
            'cashOnDelivery': total if order.payment_method == PaymentMethod.RAMBURS else 0,
            'contents': f"Comanda #{order.id}",
            'observations': '',
        }

    def generate_awb(self, order, courier_service):
        if courier_service not in Courier.ALL:
            raise ExternalServiceError(f'Serviciu curier neimplementat: {courier_service}')
        endpoint = self.endpoints.get(courier_service)
        if not endpoint:
            raise ExternalServiceError(f'Curierul {courier_service} nu este configurat.')

        headers = {}
        api_key = self.api_keys.get(courier_service)
        if api_key:
            headers['Authorization'] = f"Bearer {api_key}"

        try:
            response = requests.post(endpoint, json=self.build_shipment(order), headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExternalServiceError(f'{courier_service} AWB request failed: {e}')
        if not response.ok:
            raise ExternalServiceError(f'{courier_service} AWB request failed: {response.text}')

        body = response.json()
        awb_number = body.get('awbNumber') or body.get('awb')
        if not awb_number:
            raise ExternalServiceError(f'{courier_service} returned no AWB number')

        current_app.logger.info(f"AWB {awb_number} ({courier_service}) generated for order {order.id}")
        return {'awb_number': str(awb_number), 'tracking_url': body.get('trackingUrl')}
