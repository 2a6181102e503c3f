"""
Product service layer
Handles catalog reads and administrative product changes
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import logging

from app.models import Product
from app.core.exceptions import NotFoundException, ValidationException
from app.utils.helpers import generate_slug
from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Product service for business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_products(self, include_inactive: bool = False) -> List[Product]:
        """Catalog listing ordered by name"""
        query = select(Product).order_by(Product.name)
        if not include_inactive:
            query = query.where(Product.is_active.is_(True))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Product:
        """Active product by slug"""
        result = await self.db.execute(
            select(Product).where(Product.slug == slug, Product.is_active.is_(True))
        )
        product = result.scalar_one_or_none()
        if not product:
            raise NotFoundException("Product")

        if product.stock == 0:
            logger.info(f"Product '{product.name}' (ID: {product.id}) viewed while out of stock")
        return product

    async def get_product(self, product_id: int, active_only: bool = False) -> Optional[Product]:
        """
        Fresh read of a single product

        populate_existing makes sure stock is re-read from the store even if
        the row is already in this session's identity map.
        """
        query = (
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        if active_only:
            query = query.where(Product.is_active.is_(True))

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def require_product(self, product_id: int, active_only: bool = False) -> Product:
        product = await self.get_product(product_id, active_only=active_only)
        if not product:
            raise NotFoundException("Product")
        return product

    async def get_products_by_ids(
        self,
        product_ids: Iterable[int],
        active_only: bool = True
    ) -> Dict[int, Product]:
        """Batch read keyed by id; missing (or inactive) ids are simply absent"""
        ids = list(set(product_ids))
        if not ids:
            return {}

        query = (
            select(Product)
            .where(Product.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        if active_only:
            query = query.where(Product.is_active.is_(True))

        result = await self.db.execute(query)
        return {product.id: product for product in result.scalars().all()}

    async def _ensure_slug_available(self, slug: str, exclude_id: Optional[int] = None) -> None:
        query = select(Product.id).where(Product.slug == slug)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)

        if (await self.db.execute(query)).first():
            raise ValidationException("Product with this name already exists")

    async def create_product(self, data: ProductCreate) -> Product:
        """
        Create new product

        Args:
            data: Product creation data

        Returns:
            Created product

        Raises:
            ValidationException: If the derived slug is already taken
        """
        slug = generate_slug(data.name)
        if not slug:
            raise ValidationException("Name must contain letters or digits", details={"name": ["Invalid name"]})

        await self._ensure_slug_available(slug)

        product = Product(
            name=data.name,
            slug=slug,
            description=data.description,
            price=data.price,
            stock=data.stock,
            image_key=data.image_key,
            is_active=True,
        )
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)

        logger.info(f"Product created: {product.name} (ID: {product.id})")
        return product

    async def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        """
        Apply a partial update; renaming re-derives the slug

        Raises:
            NotFoundException: If product not found
            ValidationException: If nothing to update or slug collision
        """
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationException("No fields to update")

        product = await self.require_product(product_id)

        if "name" in changes and changes["name"] is not None:
            slug = generate_slug(changes["name"])
            if not slug:
                raise ValidationException("Name must contain letters or digits", details={"name": ["Invalid name"]})
            await self._ensure_slug_available(slug, exclude_id=product.id)
            product.slug = slug

        for field, value in changes.items():
            if value is None and field in ("name", "price", "stock", "is_active"):
                raise ValidationException(f"{field} cannot be null", details={field: ["Must not be null"]})
            setattr(product, field, value)

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def deactivate_product(self, product_id: int) -> Product:
        """Soft delete; the row stays so historical orders still resolve"""
        product = await self.require_product(product_id)
        product.is_active = False

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)

        logger.info(f"Product deactivated: {product.name} (ID: {product.id})")
        return product

    async def set_stock(self, product_id: int, stock: int) -> Product:
        """Administrative stock override"""
        product = await self.require_product(product_id)
        product.stock = stock

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Atomic conditional decrement

        Issues `stock = stock - quantity WHERE stock >= quantity` and reports
        whether a row was affected; never drives stock negative. Does not commit.
        """
        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
