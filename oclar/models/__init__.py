from oclar.extensions import db

from .product import Product
from .order import Order
from .discount import DiscountCode
