"""Admin back-office schemas."""

from datetime import datetime

from pydantic import BaseModel

from pizzeria.models.enums import IngredientType
from pizzeria.schemas.order import OrderSummaryResponse


class StockAlertItem(BaseModel):
    """One low or out-of-stock catalog row."""

    type: IngredientType
    id: int
    name: str
    category: str | None
    stock: int
    threshold: int
    price: float


class InventoryCheckSummary(BaseModel):
    """Counts per bucket."""

    total_low_stock: int
    total_out_of_stock: int


class InventoryCheckResult(BaseModel):
    """Outcome of one inventory monitor run."""

    success: bool
    timestamp: datetime
    low_stock_items: list[StockAlertItem]
    out_of_stock_items: list[StockAlertItem]
    summary: InventoryCheckSummary
    availability_updates: int
    alert_sent: bool


class MonitorStatus(BaseModel):
    """Inventory monitor state."""

    is_monitoring: bool
    last_check: datetime | None
    check_interval_minutes: int
    next_check: datetime | None


class DashboardOverview(BaseModel):
    """Headline figures."""

    total_users: int
    total_orders: int
    todays_orders: int
    total_revenue: float
    todays_revenue: float
    average_order_value: float


class StatusCount(BaseModel):
    """Orders per status."""

    status: str
    count: int


class DashboardResponse(BaseModel):
    """Admin dashboard payload."""

    overview: DashboardOverview
    order_status_distribution: list[StatusCount]
    low_stock_items: list[StockAlertItem]
    recent_orders: list[OrderSummaryResponse]


class DailySales(BaseModel):
    """Paid revenue for one calendar day."""

    date: str
    revenue: float
    orders: int


class PopularBase(BaseModel):
    name: str
    count: int


class SalesAnalyticsResponse(BaseModel):
    """Sales analytics over a trailing window."""

    period: str
    sales_by_day: list[DailySales]
    popular_bases: list[PopularBase]
    status_breakdown: list[StatusCount]
