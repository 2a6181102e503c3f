"""
Order API routes
"""

from typing import Optional
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import RedisCache, get_cache
from app.core.database import get_db
from app.schemas.base import success_response
from app.utils.dependencies import get_optional_session_id
from app.api.v1.auth.dependencies import get_current_user
from .schemas import OrderCreate
from .services import OrderService

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
    description="Checkout the cart identified by the X-Session-ID header"
)
async def create_order(
    order_data: OrderCreate,
    session_id: Optional[str] = Depends(get_optional_session_id),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    kv: RedisCache = Depends(get_cache)
):
    """Create new order"""
    service = OrderService(db, kv)
    order = await service.place_order(current_user["id"], session_id, order_data)
    return success_response(order)


@router.get(
    "",
    summary="List orders",
    description="Orders placed by the current user, newest first"
)
async def list_orders(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    orders = await OrderService(db).list_orders(user_id=current_user["id"])
    return success_response(orders, meta={"total": len(orders)})


@router.get(
    "/{order_id}",
    summary="Get order",
    description="Get order details; owner or admin only"
)
async def get_order(
    order_id: int = Path(..., gt=0),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).get_order(
        order_id,
        user_id=current_user["id"],
        user_type=current_user["user_type"]
    )
    return success_response(order)
