"""Admin management endpoints"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.base import success_response
from app.api.v1.auth.dependencies import require_admin
from app.api.v1.orders.schemas import OrderStatusUpdate
from app.api.v1.orders.services import OrderService
from app.api.v1.products.schemas import ProductResponse, StockUpdate
from app.api.v1.products.services import ProductService
from .services import AdminService

router = APIRouter()


@router.get("/stats")
async def get_admin_stats(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Get admin dashboard statistics"""
    stats = await AdminService(db).get_stats()
    return success_response(stats)


@router.get("/products")
async def list_all_products(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Every product, inactive included"""
    products = await ProductService(db).list_products(include_inactive=True)
    return success_response(
        [ProductResponse.model_validate(p) for p in products],
        meta={"total": len(products)}
    )


@router.patch("/products/{product_id}/stock")
async def update_stock(
    data: StockUpdate,
    product_id: int = Path(..., gt=0),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductService(db).set_stock(product_id, data.stock)
    return success_response(ProductResponse.model_validate(product))


@router.get("/orders")
async def list_all_orders(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All orders, newest first"""
    orders = await OrderService(db).list_orders()
    return success_response(orders, meta={"total": len(orders)})


@router.get("/orders/{order_id}")
async def get_order(
    order_id: int = Path(..., gt=0),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).get_order(
        order_id,
        user_id=current_user["id"],
        user_type=current_user["user_type"]
    )
    return success_response(order)


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    data: OrderStatusUpdate,
    order_id: int = Path(..., gt=0),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Set order status; any status may follow any other"""
    order = await OrderService(db).update_status(order_id, data.status)
    return success_response(order)
