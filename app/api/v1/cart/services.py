"""
Cart service layer
Handles the session-scoped shopping cart kept in the key-value store
"""

from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.cache import RedisCache
from app.core.config import settings
from app.core.exceptions import NotFoundException, OutOfStockException, ValidationException
from app.api.v1.products.services import ProductService
from app.api.v1.products.schemas import ProductResponse
from .schemas import (
    CartLine,
    CartRecord,
    CartItemResponse,
    CartResponse,
    CartMutationResponse,
)

logger = logging.getLogger(__name__)


class CartStore:
    """
    Read-modify-write access to one JSON record per session

    There is no version check on save: two concurrent writers to the same
    session race and the last write wins.
    """

    KEY_PREFIX = "cart"

    def __init__(self, kv: RedisCache):
        self.kv = kv

    @classmethod
    def key(cls, session_id: str) -> str:
        return f"{cls.KEY_PREFIX}:{session_id}"

    async def load(self, session_id: str) -> CartRecord:
        data = await self.kv.get_json(self.key(session_id))
        if not data:
            return CartRecord()
        return CartRecord.model_validate(data)

    async def save(self, session_id: str, record: CartRecord) -> None:
        """Rewrite the whole record and restart its idle-expiry timer"""
        record.updated_at = datetime.now(timezone.utc).isoformat()
        await self.kv.set_json(
            self.key(session_id),
            record.model_dump(mode="json", by_alias=True),
            expire=settings.cart_ttl_seconds,
        )

    async def delete(self, session_id: str) -> None:
        await self.kv.delete(self.key(session_id))


class CartService:
    """Shopping cart service"""

    def __init__(self, db: AsyncSession, kv: RedisCache):
        self.db = db
        self.store = CartStore(kv)
        self.products = ProductService(db)

    async def get_cart(self, session_id: str) -> CartResponse:
        """
        Get cart with the current catalog snapshot of every line

        Lines whose product is no longer active are left out of the
        response but stay in storage.
        """
        record = await self.store.load(session_id)
        if not record.items:
            return CartResponse(items=[], total_items=0, total_amount=Decimal("0"))

        products = await self.products.get_products_by_ids(
            (line.product_id for line in record.items), active_only=True
        )

        items = []
        for line in record.items:
            product = products.get(line.product_id)
            if product is None:
                continue
            items.append(CartItemResponse(
                product_id=line.product_id,
                quantity=line.quantity,
                product=ProductResponse.model_validate(product),
            ))

        total_items = sum(item.quantity for item in items)
        total_amount = sum((item.product.price * item.quantity for item in items), Decimal("0"))

        return CartResponse(items=items, total_items=total_items, total_amount=total_amount)

    async def add_item(self, session_id: str, product_id: int, quantity: int) -> CartMutationResponse:
        """
        Add quantity to a line, creating it if needed

        Raises:
            NotFoundException: If product not found or inactive
            ValidationException: If the resulting line exceeds the per-line cap
            OutOfStockException: If the resulting quantity exceeds stock
        """
        product = await self.products.get_product(product_id, active_only=True)
        if not product:
            raise NotFoundException("Product")

        record = await self.store.load(session_id)
        line = record.find(product_id)
        new_quantity = (line.quantity if line else 0) + quantity

        if new_quantity > settings.CART_MAX_LINE_QUANTITY:
            raise ValidationException(
                f"A cart line holds at most {settings.CART_MAX_LINE_QUANTITY} units",
                details={"quantity": [f"Must be at most {settings.CART_MAX_LINE_QUANTITY} in total"]}
            )

        if new_quantity > product.stock:
            raise OutOfStockException(product.name)

        if line:
            line.quantity = new_quantity
        else:
            record.items.append(CartLine(product_id=product_id, quantity=new_quantity))

        await self.store.save(session_id, record)

        return CartMutationResponse(
            product_id=product_id,
            quantity=new_quantity,
            total_items=record.total_items,
        )

    async def update_item(self, session_id: str, product_id: int, quantity: int) -> CartMutationResponse:
        """
        Replace a line's quantity; zero removes the line

        Raises:
            NotFoundException: If the line (or its product) does not exist
            OutOfStockException: If quantity exceeds current stock
        """
        record = await self.store.load(session_id)
        line = record.find(product_id)
        if not line:
            raise NotFoundException("Cart item")

        if quantity == 0:
            record.items.remove(line)
        else:
            product = await self.products.get_product(product_id)
            if not product:
                raise NotFoundException("Product")
            if quantity > product.stock:
                raise OutOfStockException(product.name)
            line.quantity = quantity

        await self.store.save(session_id, record)

        return CartMutationResponse(
            product_id=product_id,
            quantity=quantity,
            total_items=record.total_items,
        )

    async def remove_item(self, session_id: str, product_id: int) -> int:
        """
        Delete a line

        Returns:
            Remaining total item count

        Raises:
            NotFoundException: If the line does not exist
        """
        record = await self.store.load(session_id)
        line = record.find(product_id)
        if not line:
            raise NotFoundException("Cart item")

        record.items.remove(line)
        await self.store.save(session_id, record)
        return record.total_items

    async def clear_cart(self, session_id: str) -> None:
        """Empty the cart; idempotent"""
        await self.store.delete(session_id)
