"""
Admin dashboard service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.config import settings
from app.models import Product, OrderStatus
from app.api.v1.orders.services import OrderService
from app.api.v1.products.schemas import ProductResponse
from .schemas import AdminStats, DashboardCounts

RECENT_ORDERS_LIMIT = 5


class AdminService:
    """Aggregates for the admin dashboard"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.orders = OrderService(db)

    async def get_stats(self) -> AdminStats:
        active_products = (await self.db.execute(
            select(func.count(Product.id)).where(Product.is_active.is_(True))
        )).scalar_one()

        low_stock = (await self.db.execute(
            select(Product)
            .where(Product.is_active.is_(True), Product.stock < settings.LOW_STOCK_THRESHOLD)
            .order_by(Product.stock.asc(), Product.name)
            .execution_options(populate_existing=True)
        )).scalars().all()

        return AdminStats(
            counts=DashboardCounts(
                products=active_products,
                orders=await self.orders.count_orders(),
                users=await self.orders.count_users(),
                pending_orders=await self.orders.count_orders(OrderStatus.PENDING),
            ),
            recent_orders=await self.orders.list_orders(limit=RECENT_ORDERS_LIMIT),
            low_stock_products=[ProductResponse.model_validate(p) for p in low_stock],
        )
