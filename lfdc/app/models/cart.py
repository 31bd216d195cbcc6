"""
Cart models.
"""

from typing import List, Literal, Optional

from pydantic import Field

from .base import BackendModel
from .product import Product


CartAction = Literal["increase", "decrease"]


class CartItem(BackendModel):
    """One (product, size) line of the cart."""
    id: Optional[str] = Field(None, alias="_id")
    product: Product
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None


class Cart(BackendModel):
    """Per-user cart."""
    id: Optional[str] = Field(None, alias="_id")
    items: List[CartItem] = []
