"""
Order service layer
Turns a session cart into a persisted order and serves order history
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
import logging
from redis.exceptions import RedisError

from app.models import Order, OrderItem, OrderStatus, User, UserRole
from app.core.cache import RedisCache
from app.core.exceptions import (
    CartEmptyException,
    ForbiddenException,
    NotFoundException,
    OutOfStockException,
    ValidationException,
)
from app.utils.validators import card_last_four, is_valid_card_number
from app.api.v1.cart.services import CartStore
from app.api.v1.products.services import ProductService
from .schemas import OrderCreate, OrderItemResponse, OrderResponse, OrderSummaryResponse

logger = logging.getLogger(__name__)


@dataclass
class PlannedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal


@dataclass
class OrderPlan:
    """Everything validated before the first write"""
    user_id: int
    session_id: Optional[str]
    shipping_first_name: str
    shipping_last_name: str
    shipping_address: str
    payment_last_four: str
    lines: List[PlannedLine] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((line.unit_price * line.quantity for line in self.lines), Decimal("0"))


class OrderService:
    """Order service for business logic"""

    def __init__(self, db: AsyncSession, kv: Optional[RedisCache] = None):
        self.db = db
        self.carts = CartStore(kv) if kv is not None else None
        self.products = ProductService(db)

    async def place_order(self, user_id: int, session_id: Optional[str], data: OrderCreate) -> OrderResponse:
        """
        Checkout the session cart

        Args:
            user_id: Authenticated buyer
            session_id: Cart key from the request, may be None
            data: Shipping and payment details

        Returns:
            The persisted order

        Raises:
            ValidationException: If the card fails the checksum
            CartEmptyException: If there is nothing to buy
            NotFoundException: If a cart product is gone or inactive
            OutOfStockException: If any line exceeds stock
        """
        plan = await self.prepare_order(user_id, session_id, data)
        order = await self.commit_order(plan)

        if session_id:
            try:
                await self.carts.delete(session_id)
            except RedisError:
                # Order is already committed; the client still gets it back
                logger.error(
                    f"Order {order.id} placed but cart {session_id} could not be cleared",
                    exc_info=True
                )

        return await self.get_order(order.id, user_id=user_id, user_type=None)

    async def prepare_order(self, user_id: int, session_id: Optional[str], data: OrderCreate) -> OrderPlan:
        """
        Validate payment, cart and stock; read-only

        Prices are always taken from the catalog.
        """
        payment = data.payment
        if not is_valid_card_number(payment.card_number):
            raise ValidationException(
                "Invalid card number",
                details={"payment.cardNumber": ["Card number failed checksum validation"]}
            )

        record = await self.carts.load(session_id) if session_id else None
        if record is None or not record.items:
            raise CartEmptyException()

        products = await self.products.get_products_by_ids(
            (line.product_id for line in record.items), active_only=True
        )

        plan = OrderPlan(
            user_id=user_id,
            session_id=session_id,
            shipping_first_name=data.shipping.first_name,
            shipping_last_name=data.shipping.last_name,
            shipping_address=data.shipping.address,
            payment_last_four=card_last_four(payment.card_number),
        )

        for line in record.items:
            product = products.get(line.product_id)
            if product is None:
                raise NotFoundException(f"Product {line.product_id}")
            if line.quantity > product.stock:
                raise OutOfStockException(product.name)

            plan.lines.append(PlannedLine(
                product_id=product.id,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=Decimal(product.price),
            ))

        return plan

    async def commit_order(self, plan: OrderPlan) -> Order:
        """
        Write header, items and stock decrements in one transaction

        Each decrement is conditional on enough stock remaining; if any
        affects no row the whole order is rolled back.
        """
        order = Order(
            user_id=plan.user_id,
            total_amount=plan.total_amount,
            status=OrderStatus.PENDING.value,
            shipping_first_name=plan.shipping_first_name,
            shipping_last_name=plan.shipping_last_name,
            shipping_address=plan.shipping_address,
            payment_last_four=plan.payment_last_four,
        )
        self.db.add(order)

        try:
            await self.db.flush()

            for line in plan.lines:
                self.db.add(OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                ))

                if not await self.products.decrement_stock(line.product_id, line.quantity):
                    logger.warning(
                        f"Stock shortfall for product {line.product_id} while committing order "
                        f"for user {plan.user_id}"
                    )
                    raise OutOfStockException(line.product_name)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Order placed: {order.id} by user {plan.user_id} "
            f"({len(plan.lines)} lines, total {plan.total_amount})"
        )
        return order

    def _order_query(self):
        return select(Order).options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.user),
        )

    @staticmethod
    def to_response(order: Order) -> OrderResponse:
        items = [
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.unit_price * item.quantity,
            )
            for item in order.items
        ]
        return OrderResponse(
            id=order.id,
            user_id=order.user_id,
            username=order.user.username if order.user else None,
            status=order.status,
            total_amount=order.total_amount,
            shipping_first_name=order.shipping_first_name,
            shipping_last_name=order.shipping_last_name,
            shipping_address=order.shipping_address,
            payment_last_four=order.payment_last_four,
            items=items,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    @staticmethod
    def to_summary(order: Order) -> OrderSummaryResponse:
        return OrderSummaryResponse(
            id=order.id,
            user_id=order.user_id,
            username=order.user.username if order.user else None,
            status=order.status,
            total_amount=order.total_amount,
            item_count=sum(item.quantity for item in order.items),
            created_at=order.created_at,
        )

    async def get_order(self, order_id: int, user_id: int, user_type: Optional[str]) -> OrderResponse:
        """
        Get order by ID; only its owner or an admin may see it

        Raises:
            NotFoundException: If order not found
            ForbiddenException: If caller is neither owner nor admin
        """
        result = await self.db.execute(
            self._order_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundException("Order")

        if order.user_id != user_id and user_type != UserRole.ADMIN.value:
            raise ForbiddenException("You do not have access to this order")

        return self.to_response(order)

    async def list_orders(self, user_id: Optional[int] = None, limit: Optional[int] = None) -> List[OrderSummaryResponse]:
        """Orders newest first; all users when user_id is None"""
        query = self._order_query().order_by(Order.created_at.desc(), Order.id.desc())
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [self.to_summary(order) for order in result.scalars().all()]

    async def update_status(self, order_id: int, new_status: OrderStatus) -> OrderResponse:
        """
        Set any status; no transition graph is enforced

        Raises:
            NotFoundException: If order not found
        """
        result = await self.db.execute(self._order_query().where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundException("Order")

        old_status = order.status
        order.status = new_status.value
        self.db.add(order)
        await self.db.commit()

        logger.info(f"Order {order_id} status changed: {old_status} -> {new_status.value}")
        return self.to_response(order)

    async def count_orders(self, status: Optional[OrderStatus] = None) -> int:
        query = select(func.count(Order.id))
        if status is not None:
            query = query.where(Order.status == status.value)
        return (await self.db.execute(query)).scalar_one()

    async def count_users(self) -> int:
        return (await self.db.execute(select(func.count(User.id)))).scalar_one()
