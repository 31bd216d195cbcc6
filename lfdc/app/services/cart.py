"""
Cart arithmetic.
"""

from decimal import Decimal
from typing import Iterable, Optional

from ..models import CartItem


def cart_total(items: Iterable[CartItem]) -> Decimal:
    """Sum of price x quantity over the cart."""
    return sum((item.product.price * item.quantity for item in items), Decimal("0"))


def cart_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def line_key(product_id: str, size: Optional[str]) -> str:
    """Identifies a cart line: the same product in two sizes is two lines."""
    if size:
        return f"{product_id}–{size}"
    return product_id


def find_item(items: Iterable[CartItem], product_id: str, size: Optional[str]) -> Optional[CartItem]:
    for item in items:
        if item.product.id == product_id and (item.size or None) == (size or None):
            return item
    return None
