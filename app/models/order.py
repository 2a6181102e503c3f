"""Order and order item models"""

from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, IntegerIDModel, TimestampedModel


class OrderStatus(str, enum.Enum):
    """Plain label; any status may follow any other"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(BaseModel, IntegerIDModel, TimestampedModel):
    """Order header with shipping and payment snapshot"""

    __tablename__ = "orders"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)

    shipping_first_name = Column(String(100), nullable=False)
    shipping_last_name = Column(String(100), nullable=False)
    shipping_address = Column(String(500), nullable=False)

    # Never the full card number
    payment_last_four = Column(String(4), nullable=True)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_orders_user_created", "user_id", "created_at"),
    )


class OrderItem(BaseModel, IntegerIDModel):
    """Immutable line snapshot taken at purchase time"""

    __tablename__ = "order_items"

    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
