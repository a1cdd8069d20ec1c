from __future__ import annotations
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, StringConstraints

# Decimal in Python, plain number in JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used='json')]
RequiredStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class OrderLine(BaseModel):
    """One line of the immutable items snapshot stored on an order."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: Optional[int] = None
    name: RequiredStr
    quantity: int = Field(ge=1)
    price: Money = Field(ge=0)
    color: Optional[str] = Field(default=None, alias='selectedColor')


class CartItem(OrderLine):
    image_url: Optional[str] = Field(default=None, alias='imageUrl')


class Address(BaseModel):
    county: RequiredStr
    city: RequiredStr
    line: RequiredStr


class ProcessorAddress(BaseModel):
    """Address as collected by the payment processor."""
    model_config = ConfigDict(extra='ignore')

    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class CashOnDeliveryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    customer_name: RequiredStr = Field(alias='customerName')
    customer_email: Optional[str] = Field(default=None, alias='customerEmail')
    customer_phone: RequiredStr = Field(alias='customerPhone')
    address: Address
    items: list[CartItem] = Field(min_length=1)
    subtotal: Optional[Decimal] = None
    shipping_method: Optional[str] = Field(default=None, alias='shippingMethod')
    discount_code: Optional[str] = Field(default=None, alias='discountCode')
    total_amount: Decimal = Field(gt=0, alias='totalAmount')


class CheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    items: list[CartItem] = Field(min_length=1)
    shipping_method: Optional[str] = Field(default=None, alias='shippingMethod')
    discount_code: Optional[str] = Field(default=None, alias='discountCode')
    customer_email: Optional[str] = Field(default=None, alias='customerEmail')


class ProductPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: Optional[int] = None
    name: RequiredStr
    description: str = ''
    category: Optional[str] = None
    price: Decimal = Field(ge=0)
    original_price: Optional[Decimal] = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = Field(default=None, alias='imageUrl')
    gallery: list[str] = []
    colors: list[str] = []
    details: list[str] = []


class DiscountCodePayload(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: Optional[int] = None
    code: RequiredStr
    discount_type: str
    discount_value: Decimal = Field(gt=0)
    min_order_amount: Decimal = Field(default=Decimal('0'), ge=0)
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[str] = None
    valid_until: Optional[str] = None
    is_active: bool = True
