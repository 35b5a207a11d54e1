"""SQLAlchemy models."""

from pizzeria.models.ingredient import (
    INGREDIENT_MODELS,
    PizzaBase,
    PizzaCheese,
    PizzaMeat,
    PizzaSauce,
    PizzaVeggie,
)
from pizzeria.models.order import Order, OrderItem, OrderTracking
from pizzeria.models.user import User

__all__ = [
    "User",
    "PizzaBase",
    "PizzaSauce",
    "PizzaCheese",
    "PizzaVeggie",
    "PizzaMeat",
    "INGREDIENT_MODELS",
    "Order",
    "OrderItem",
    "OrderTracking",
]
