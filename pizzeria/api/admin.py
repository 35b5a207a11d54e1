"""Admin back-office endpoints: dashboard, order management and inventory."""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pizzeria.api.dependencies import (
    get_current_admin,
    get_inventory_monitor,
    get_inventory_service,
    get_order_service,
)
from pizzeria.database import get_db
from pizzeria.models.enums import IngredientType, OrderStatus
from pizzeria.models.user import User
from pizzeria.schemas.admin import (
    DashboardResponse,
    InventoryCheckResult,
    MonitorStatus,
    SalesAnalyticsResponse,
)
from pizzeria.schemas.common import ApiResponse
from pizzeria.schemas.ingredient import (
    IngredientResponse,
    InventoryOverview,
    InventoryUpdate,
)
from pizzeria.schemas.order import (
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
)
from pizzeria.services.dashboard import build_dashboard, build_sales_analytics
from pizzeria.services.inventory import InventoryService
from pizzeria.services.inventory_monitor import InventoryMonitor
from pizzeria.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/dashboard", response_model=ApiResponse[DashboardResponse])
def get_dashboard(
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Business totals and the latest orders."""
    dashboard = build_dashboard(db)
    dashboard["recent_orders"] = [
        OrderSummaryResponse.model_validate(o) for o in dashboard["recent_orders"]
    ]
    return ApiResponse(
        message="Dashboard data retrieved successfully",
        data=DashboardResponse.model_validate(dashboard),
    )


@router.get("/analytics", response_model=ApiResponse[SalesAnalyticsResponse])
def get_sales_analytics(
    db: Annotated[Session, Depends(get_db)],
    admin: Annotated[User, Depends(get_current_admin)],
    period: Literal["7d", "30d", "90d"] = "30d",
):
    """Daily revenue, popular bases and order statuses for the last 7, 30 or 90 days."""
    return ApiResponse(
        message="Sales analytics retrieved successfully",
        data=SalesAnalyticsResponse.model_validate(build_sales_analytics(db, period)),
    )


# --- Orders ---


@router.get("/orders", response_model=ApiResponse[OrderListResponse])
def list_all_orders(
    service: Annotated[OrderService, Depends(get_order_service)],
    admin: Annotated[User, Depends(get_current_admin)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: OrderStatus | None = Query(None, alias="status"),
    sort_by: Literal["created_at", "total_amount", "status"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
):
    """Every order, filterable by status."""
    orders, pagination = service.list_all_orders(page, limit, status_filter, sort_by, sort_order)
    return ApiResponse(
        message="Orders retrieved successfully",
        data=OrderListResponse(
            orders=[OrderSummaryResponse.model_validate(o) for o in orders],
            pagination=pagination,
        ),
    )


@router.get("/orders/{order_pk}", response_model=ApiResponse[OrderResponse])
def get_order(
    order_pk: int,
    service: Annotated[OrderService, Depends(get_order_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Any order with items and tracking."""
    order = service.get_order(order_pk)
    return ApiResponse(
        message="Order retrieved successfully", data=OrderResponse.model_validate(order)
    )


@router.put("/orders/{order_pk}/status", response_model=ApiResponse[OrderResponse])
def update_order_status(
    order_pk: int,
    update: OrderStatusUpdate,
    service: Annotated[OrderService, Depends(get_order_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Set an order's status. Out-of-sequence writes are recorded as overrides."""
    order = service.update_status(order_pk, update.status, update.note)
    logger.info(f"Admin {admin.id} set order {order.order_id} to {update.status.value}")
    return ApiResponse(
        message="Order status updated successfully", data=OrderResponse.model_validate(order)
    )


# --- Inventory ---


@router.get("/inventory", response_model=ApiResponse[InventoryOverview])
def get_inventory(
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Every catalog row, including inactive ones, with statistics."""
    overview = service.inventory_overview()
    overview["inventory"] = {
        key: [IngredientResponse.model_validate(item) for item in items]
        for key, items in overview["inventory"].items()
    }
    return ApiResponse(
        message="Inventory retrieved successfully",
        data=InventoryOverview.model_validate(overview),
    )


@router.put(
    "/inventory/{ingredient_type}/{ingredient_id}",
    response_model=ApiResponse[IngredientResponse],
)
def update_inventory_item(
    ingredient_type: IngredientType,
    ingredient_id: int,
    update: InventoryUpdate,
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Set stock, threshold, price or availability of one item."""
    item = service.update_inventory_item(ingredient_type, ingredient_id, update)
    return ApiResponse(
        message="Inventory updated successfully", data=IngredientResponse.model_validate(item)
    )


@router.get("/inventory/monitor/status", response_model=ApiResponse[MonitorStatus])
def get_monitor_status(
    monitor: Annotated[InventoryMonitor, Depends(get_inventory_monitor)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Whether the background check is running and when it ran last."""
    return ApiResponse(
        message="Monitor status retrieved successfully",
        data=MonitorStatus.model_validate(monitor.get_status()),
    )


@router.post("/inventory/monitor/check", response_model=ApiResponse[InventoryCheckResult])
def trigger_inventory_check(
    db: Annotated[Session, Depends(get_db)],
    monitor: Annotated[InventoryMonitor, Depends(get_inventory_monitor)],
    admin: Annotated[User, Depends(get_current_admin)],
):
    """Run an inventory check now."""
    result = monitor.manual_check(db)
    return ApiResponse(
        message="Inventory check completed",
        data=InventoryCheckResult.model_validate(result),
    )
