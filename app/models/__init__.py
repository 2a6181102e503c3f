"""Models package initialization"""

from .base import Base
from .user import User, UserRole
from .product import Product
from .order import Order, OrderItem, OrderStatus
from .session import AuthSession

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "AuthSession",
]
