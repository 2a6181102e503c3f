"""Products API router"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.api.v1.auth.dependencies import require_admin
from app.schemas.base import success_response
from .schemas import ProductCreate, ProductUpdate, ProductResponse, ProductCreatedResponse
from .services import ProductService

router = APIRouter()


@router.get("", summary="List active products")
async def list_products(db: AsyncSession = Depends(get_db)):
    """Active catalog ordered by name"""
    products = await ProductService(db).list_products()
    return success_response(
        [ProductResponse.model_validate(p) for p in products],
        meta={"total": len(products)}
    )


@router.get("/id/{product_id}", summary="Get product by ID")
async def get_product_by_id(product_id: int, db: AsyncSession = Depends(get_db)):
    """Any product by id, inactive included, for cart and order lookups"""
    product = await ProductService(db).require_product(product_id)
    return success_response(ProductResponse.model_validate(product))


@router.get("/{slug}", summary="Get product by slug")
async def get_product(slug: str, db: AsyncSession = Depends(get_db)):
    product = await ProductService(db).get_by_slug(slug)
    return success_response(ProductResponse.model_validate(product))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create product (admin)")
async def create_product(
    data: ProductCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).create_product(data)
    return success_response(ProductCreatedResponse(id=product.id, slug=product.slug))


@router.patch("/{product_id}", summary="Update product (admin)")
async def update_product(
    product_id: int,
    data: ProductUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).update_product(product_id, data)
    return success_response({"id": product.id, "slug": product.slug, "updated": True})


@router.delete("/{product_id}", summary="Deactivate product (admin)")
async def delete_product(
    product_id: int,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete"""
    product = await ProductService(db).deactivate_product(product_id)
    return success_response({"id": product.id, "deleted": True})
