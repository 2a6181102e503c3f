"""
Cart schemas for request/response validation
"""

from pydantic import Field
from typing import List, Optional

from app.core.config import settings
from app.schemas.base import BaseSchema, Money
from app.api.v1.products.schemas import ProductResponse


class CartLine(BaseSchema):
    """One stored (product, quantity) pair"""
    product_id: int
    quantity: int = Field(..., ge=1)


class CartRecord(BaseSchema):
    """The whole per-session document kept in the key-value store"""
    items: List[CartLine] = []
    updated_at: Optional[str] = None

    def find(self, product_id: int) -> Optional[CartLine]:
        for line in self.items:
            if line.product_id == product_id:
                return line
        return None

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items)


class CartItemCreate(BaseSchema):
    """Schema for adding item to cart"""
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, le=settings.CART_MAX_LINE_QUANTITY)


class CartItemUpdate(BaseSchema):
    """Schema for updating cart item; zero removes the line"""
    quantity: int = Field(..., ge=0, le=settings.CART_MAX_LINE_QUANTITY)


class CartItemResponse(BaseSchema):
    """Stored line joined with the current catalog snapshot"""
    product_id: int
    quantity: int
    product: ProductResponse


class CartResponse(BaseSchema):
    """Schema for cart response"""
    items: List[CartItemResponse]
    total_items: int
    total_amount: Money


class CartMutationResponse(BaseSchema):
    """Result of add/update"""
    product_id: int
    quantity: int
    total_items: int
