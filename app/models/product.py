"""Product catalog model"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, CheckConstraint, Index
from sqlalchemy.orm import relationship

from .base import BaseModel, IntegerIDModel, TimestampedModel


class Product(BaseModel, IntegerIDModel, TimestampedModel):
    """Catalog entry; soft-deleted through is_active so order history can resolve it"""

    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image_key = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    order_items = relationship("OrderItem", back_populates="product")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_non_negative_price"),
        CheckConstraint("stock >= 0", name="check_non_negative_stock"),
        Index("idx_products_active_name", "is_active", "name"),
    )
