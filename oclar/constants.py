from decimal import Decimal


class OrderStatus:
    """Order status values"""
    PENDING = 'pending'
    PAID = 'paid'
    PROCESSING = 'processing'
    SHIPPED = 'shipped'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'

    ALL = [PENDING, PAID, PROCESSING, SHIPPED, DELIVERED, CANCELLED]


class PaymentMethod:
    CARD = 'card'
    RAMBURS = 'ramburs'  # cash on delivery


class ProductStatus:
    ACTIVE = 'active'
    OUT_OF_STOCK = 'out_of_stock'


class DiscountType:
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'

    ALL = [PERCENTAGE, FIXED]


class ShippingMethod:
    """Flat shipping rates in RON"""
    EASYBOX = 'easybox'
    COURIER = 'courier'

    RATES = {
        EASYBOX: Decimal('15.00'),
        COURIER: Decimal('25.00'),
    }
    DEFAULT = COURIER


class DiscountRejection:
    """Reason codes returned when a discount code cannot be used"""
    NOT_FOUND = 'not_found'
    INACTIVE = 'inactive'
    EXPIRED = 'expired'
    NOT_STARTED = 'not_started'
    EXHAUSTED = 'exhausted'
    MIN_NOT_MET = 'min_not_met'


class Courier:
    FANCOURIER = 'fancourier'
    CARGUS = 'cargus'
    GLS = 'gls'

    ALL = [FANCOURIER, CARGUS, GLS]


class ExportFormat:
    XML = 'xml'
    EXCEL = 'excel'  # CSV, opens in Excel
    XLSX = 'xlsx'

    ALL = [XML, EXCEL, XLSX]


CURRENCY_LABEL = 'RON'
