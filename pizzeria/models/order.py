"""Order, OrderItem and OrderTracking models."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from pizzeria.database import Base
from pizzeria.models.enums import (
    CrustType,
    OrderStatus,
    PaymentStatus,
    PizzaSize,
    TrackingSource,
)
from pizzeria.models.mixins import TimestampMixin


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class Order(Base, TimestampMixin):
    """A placed pizza order.

    ``total_amount`` is fixed at creation and never recomputed, so later
    catalog price changes do not touch placed orders.
    """

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_status", "user_id", "status"),
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(20), unique=True, nullable=False, index=True)  # "PZ202610180042"
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(
        Enum(OrderStatus, name="orderstatus", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=_enum_values),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_intent_id = Column(String(100), unique=True, nullable=True, index=True)
    payment_id = Column(String(100), nullable=True)
    payment_signature = Column(String(128), nullable=True)

    # {"street", "city", "state", "zip_code", "landmark"}
    delivery_address = Column(JSON, nullable=False)
    delivery_instructions = Column(String(500), nullable=True)
    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)

    rating = Column(Integer, nullable=True)
    review = Column(String(1000), nullable=True)
    rated_at = Column(DateTime(timezone=True), nullable=True)

    refund_requested = Column(Boolean, nullable=False, default=False)
    refund_reason = Column(String(500), nullable=True)
    refund_requested_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", backref="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    tracking = relationship(
        "OrderTracking",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderTracking.id",
    )

    @property
    def items_count(self) -> int:
        """Total number of pizzas across line items."""
        return sum(item.quantity for item in self.items)


class OrderItem(Base):
    """One customized pizza line, fully denormalized at order time."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    size = Column(
        Enum(PizzaSize, name="pizzasize", values_callable=_enum_values),
        nullable=False,
        default=PizzaSize.MEDIUM,
    )
    crust_type = Column(
        Enum(CrustType, name="crusttype", values_callable=_enum_values),
        nullable=False,
        default=CrustType.THIN,
    )
    special_instructions = Column(String(500), nullable=True)
    item_price = Column(Numeric(10, 2), nullable=False)
    # [{"type": "base", "ingredient_id": 1, "name": ..., "description": ..., "price": "150.00"}]
    ingredients = Column(JSON, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")


class OrderTracking(Base):
    """Append-only status history entry for an order."""

    __tablename__ = "order_tracking"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, name="orderstatus", values_callable=_enum_values),
        nullable=False,
    )
    message = Column(Text, nullable=False)
    source = Column(
        Enum(TrackingSource, name="trackingsource", values_callable=_enum_values),
        nullable=False,
        default=TrackingSource.SYSTEM,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="tracking")
