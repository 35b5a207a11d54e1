"""Pydantic schemas for API requests and responses."""

from pizzeria.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from pizzeria.schemas.common import ApiResponse, ErrorResponse, MessageResponse, Pagination
from pizzeria.schemas.ingredient import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    InventoryUpdate,
)
from pizzeria.schemas.order import (
    CreatePaymentOrderRequest,
    OrderItemCreate,
    OrderResponse,
    OrderStatusUpdate,
    VerifyPaymentRequest,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "MessageResponse",
    "Pagination",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "IngredientCreate",
    "IngredientUpdate",
    "IngredientResponse",
    "InventoryUpdate",
    "OrderItemCreate",
    "CreatePaymentOrderRequest",
    "VerifyPaymentRequest",
    "OrderResponse",
    "OrderStatusUpdate",
]
