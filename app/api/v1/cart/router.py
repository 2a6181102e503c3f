"""Session cart routes keyed by the X-Session-ID header"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import RedisCache, get_cache
from app.core.database import get_db
from app.schemas.base import success_response
from app.utils.dependencies import get_session_id
from .schemas import CartItemCreate, CartItemUpdate
from .services import CartService

router = APIRouter()


def get_cart_service(
    db: AsyncSession = Depends(get_db),
    kv: RedisCache = Depends(get_cache)
) -> CartService:
    return CartService(db, kv)


@router.get("", summary="Get cart")
async def get_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service)
):
    """Cart lines with product details and totals"""
    cart = await service.get_cart(session_id)
    return success_response(cart)


@router.post("/items", summary="Add item to cart")
async def add_to_cart(
    item_data: CartItemCreate,
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service)
):
    result = await service.add_item(session_id, item_data.product_id, item_data.quantity)
    return success_response(result)


@router.patch("/items/{product_id}", summary="Update cart item quantity")
async def update_cart_item(
    update_data: CartItemUpdate,
    product_id: int = Path(..., gt=0),
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service)
):
    result = await service.update_item(session_id, product_id, update_data.quantity)
    return success_response(result)


@router.delete("/items/{product_id}", summary="Remove item from cart")
async def remove_from_cart(
    product_id: int = Path(..., gt=0),
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service)
):
    total_items = await service.remove_item(session_id, product_id)
    return success_response({"productId": product_id, "removed": True, "totalItems": total_items})


@router.delete("", summary="Clear cart")
async def clear_cart(
    session_id: str = Depends(get_session_id),
    service: CartService = Depends(get_cart_service)
):
    await service.clear_cart(session_id)
    return success_response({"cleared": True, "totalItems": 0})
