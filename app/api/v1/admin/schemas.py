"""Admin dashboard schemas"""

from typing import List

from app.schemas.base import BaseSchema
from app.api.v1.orders.schemas import OrderSummaryResponse
from app.api.v1.products.schemas import ProductResponse


class DashboardCounts(BaseSchema):
    products: int
    orders: int
    users: int
    pending_orders: int


class AdminStats(BaseSchema):
    counts: DashboardCounts
    recent_orders: List[OrderSummaryResponse]
    low_stock_products: List[ProductResponse]
