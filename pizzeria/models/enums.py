"""Enums for model fields."""

from decimal import Decimal
from enum import Enum


class UserRole(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"


class IngredientType(str, Enum):
    """The five independent ingredient catalogs a pizza is composed from."""

    BASE = "base"
    SAUCE = "sauce"
    CHEESE = "cheese"
    VEGGIE = "veggie"
    MEAT = "meat"

    @property
    def plural(self) -> str:
        """Collection name used when grouping catalog listings."""
        return {
            IngredientType.BASE: "bases",
            IngredientType.SAUCE: "sauces",
            IngredientType.CHEESE: "cheeses",
            IngredientType.VEGGIE: "veggies",
            IngredientType.MEAT: "meats",
        }[self]

    @property
    def label(self) -> str:
        """Human label used in stock alerts."""
        return f"Pizza {self.value.capitalize()}"


class OrderStatus(str, Enum):
    """Order lifecycle states, in progression order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    BAKING = "baking"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Delivered and cancelled orders never progress further."""
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def can_cancel(self) -> bool:
        """Customers may cancel only before preparation starts."""
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    @property
    def display(self) -> str:
        """Human-formatted status, e.g. "Out For Delivery"."""
        return self.value.replace("-", " ").title()


# Normal forward progression. Admin writes outside this table are allowed
# but recorded as overrides in the tracking log.
NEXT_STATUS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.BAKING}),
    OrderStatus.BAKING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class PaymentStatus(str, Enum):
    """Payment state of an order."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class TrackingSource(str, Enum):
    """Who appended a tracking entry."""

    SYSTEM = "system"
    CUSTOMER = "customer"
    ADMIN = "admin"
    ADMIN_OVERRIDE = "admin-override"


class PizzaSize(str, Enum):
    """Pizza sizes with their price multipliers."""

    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    EXTRA_LARGE = "Extra Large"


class CrustType(str, Enum):
    """Crust choices."""

    THIN = "Thin"
    THICK = "Thick"
    STUFFED = "Stuffed"


SIZE_MULTIPLIERS: dict[PizzaSize, Decimal] = {
    PizzaSize.SMALL: Decimal("0.8"),
    PizzaSize.MEDIUM: Decimal("1.0"),
    PizzaSize.LARGE: Decimal("1.3"),
    PizzaSize.EXTRA_LARGE: Decimal("1.6"),
}
