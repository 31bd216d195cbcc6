"""
Order and checkout models.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import Field, field_validator

from .base import BackendModel
from .product import Product


OrderStatus = Literal["pending", "paid", "cancelled"]


def normalize_phone(value: str) -> str:
    """10-digit Indian mobile number, optional +91 prefix and separators."""
    digits = re.sub(r"[\s\-()]", "", value)
    if digits.startswith("+91"):
        digits = digits[3:]
    if not re.fullmatch(r"\d{10}", digits):
        raise ValueError("Phone number must have 10 digits")
    return digits


def normalize_pincode(value: str) -> str:
    value = value.strip()
    if not re.fullmatch(r"\d{6}", value):
        raise ValueError("Pincode must have 6 digits")
    return value


class ShippingDetails(BackendModel):
    """Shipping form collected before checkout."""
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str
    pincode: str

    @field_validator("name", "address")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)

    @field_validator("pincode")
    @classmethod
    def validate_pincode(cls, v):
        return normalize_pincode(v)


class OrderItem(BackendModel):
    """Order line with the price captured when the order was created."""
    product: Union[Product, str]
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    price: Optional[Decimal] = None

    @property
    def product_name(self) -> str:
        return self.product.name if isinstance(self.product, Product) else "Product"

    @property
    def unit_price(self) -> Decimal:
        if self.price is not None:
            return self.price
        if isinstance(self.product, Product):
            return self.product.price
        return Decimal("0")


class Order(BackendModel):
    """Finalized purchase record."""
    id: str = Field(..., alias="_id")
    shipping_details: Optional[ShippingDetails] = None
    items: List[OrderItem] = []
    total_amount: Decimal = Decimal("0")
    status: OrderStatus = "pending"
    created_at: Optional[datetime] = None

    @field_validator("shipping_details", mode="before")
    @classmethod
    def lenient_shipping(cls, v):
        # Stored orders are displayed as-is, even if they predate validation
        if isinstance(v, dict):
            try:
                return ShippingDetails.model_validate(v)
            except ValueError:
                return None
        return v


class GatewayOrder(BackendModel):
    """Payment gateway order reserved by order/create-order."""
    id: str
    amount: int  # minor units (paise)
    currency: Optional[str] = None  # settings.CURRENCY when omitted


class CreatedOrder(BackendModel):
    """Response of order/create-order."""
    razorpay_order: GatewayOrder
    order_items: List[dict] = []


class PaymentConfirmation(BackendModel):
    """Fields forwarded to order/verify after the hosted checkout succeeds."""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

    def to_payload(self) -> dict:
        # order/verify expects the gateway's snake_case field names
        return self.model_dump(by_alias=False)
