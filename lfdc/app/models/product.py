"""
Product models.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from .base import BackendModel


class Product(BackendModel):
    """Catalog product. Read-only on the client."""
    id: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    category: Optional[str] = None
    images: List[str] = []

    @property
    def cover(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def image(self, index: int) -> Optional[str]:
        """Carousel image; the index wraps around."""
        return self.images[index % len(self.images)] if self.images else None
