"""Aggregates for the admin dashboard."""

from collections import Counter
from datetime import UTC, datetime, time, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from pizzeria.models.enums import IngredientType, PaymentStatus
from pizzeria.models.order import Order, OrderItem
from pizzeria.models.user import User
from pizzeria.services.inventory import InventoryService

RECENT_ORDERS = 10
POPULAR_BASES = 10
ANALYTICS_PERIODS = {"7d": 7, "30d": 30, "90d": 90}


def build_dashboard(db: Session) -> dict[str, Any]:
    """Totals, status distribution, stock alerts and the latest orders."""
    today_start = datetime.combine(datetime.now(UTC).date(), time.min, tzinfo=UTC)
    paid = Order.payment_status == PaymentStatus.PAID

    total_users = db.query(func.count(User.id)).scalar() or 0
    total_orders = db.query(func.count(Order.id)).scalar() or 0
    todays_orders = (
        db.query(func.count(Order.id)).filter(Order.created_at >= today_start).scalar() or 0
    )
    total_revenue, paid_orders = db.query(
        func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id)
    ).filter(paid).one()
    todays_revenue = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(paid, Order.created_at >= today_start)
        .scalar()
    )

    distribution = (
        db.query(Order.status, func.count(Order.id))
        .group_by(Order.status)
        .order_by(func.count(Order.id).desc())
        .all()
    )

    low_stock, out_of_stock = InventoryService(db).find_stock_alerts()
    recent_orders = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(
        RECENT_ORDERS
    ).all()

    return {
        "overview": {
            "total_users": total_users,
            "total_orders": total_orders,
            "todays_orders": todays_orders,
            "total_revenue": float(total_revenue or 0),
            "todays_revenue": float(todays_revenue or 0),
            "average_order_value": round(float(total_revenue) / paid_orders, 2)
            if paid_orders
            else 0.0,
        },
        "order_status_distribution": [
            {"status": status.value, "count": count} for status, count in distribution
        ],
        "low_stock_items": out_of_stock + low_stock,
        "recent_orders": recent_orders,
    }


def build_sales_analytics(db: Session, period: str = "30d") -> dict[str, Any]:
    """Daily paid sales, best-selling bases and status counts over a trailing window.

    Unknown periods fall back to 30 days. Revenue and bases only count paid
    orders; the status breakdown covers every order placed in the window.
    """
    since = datetime.now(UTC) - timedelta(days=ANALYTICS_PERIODS.get(period, 30))
    in_window = Order.created_at >= since
    paid = Order.payment_status == PaymentStatus.PAID

    day = func.date(Order.created_at)
    sales_by_day = (
        db.query(day, func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id))
        .filter(in_window, paid)
        .group_by(day)
        .order_by(day)
        .all()
    )

    # One count per line item, whatever its quantity
    bases: Counter[str] = Counter()
    paid_items = db.query(OrderItem.ingredients).join(Order).filter(in_window, paid)
    for (ingredients,) in paid_items:
        bases.update(
            i["name"] for i in ingredients if i["type"] == IngredientType.BASE.value
        )

    breakdown = (
        db.query(Order.status, func.count(Order.id))
        .filter(in_window)
        .group_by(Order.status)
        .order_by(func.count(Order.id).desc())
        .all()
    )

    return {
        "period": period,
        "sales_by_day": [
            {"date": str(date), "revenue": float(revenue), "orders": orders}
            for date, revenue, orders in sales_by_day
        ],
        "popular_bases": [
            {"name": name, "count": count} for name, count in bases.most_common(POPULAR_BASES)
        ],
        "status_breakdown": [
            {"status": status.value, "count": count} for status, count in breakdown
        ],
    }
