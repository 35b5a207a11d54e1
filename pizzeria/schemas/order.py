"""Order, checkout and tracking schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pizzeria.models.enums import (
    CrustType,
    IngredientType,
    OrderStatus,
    PaymentStatus,
    PizzaSize,
    TrackingSource,
)
from pizzeria.schemas.auth import Address
from pizzeria.schemas.common import Pagination


class PizzaCustomization(BaseModel):
    """Size and crust options for one pizza line."""

    size: PizzaSize = PizzaSize.MEDIUM
    crust_type: CrustType = CrustType.THIN
    special_instructions: str | None = Field(None, max_length=500)


class OrderItemCreate(BaseModel):
    """One customized pizza in a checkout request."""

    base_id: int
    sauce_id: int
    cheese_id: int
    veggie_ids: list[int] = Field(default_factory=list, max_length=10)
    meat_ids: list[int] = Field(default_factory=list, max_length=10)
    quantity: int = Field(1, ge=1, le=10)
    customizations: PizzaCustomization = Field(default_factory=PizzaCustomization)

    @field_validator("veggie_ids", "meat_ids")
    @classmethod
    def unique_toppings(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError("Toppings must not be repeated")
        return value


class CreatePaymentOrderRequest(BaseModel):
    """Checkout request: priced server-side, never trusted from the client."""

    items: list[OrderItemCreate] = Field(..., min_length=1, max_length=20)
    delivery_address: Address
    delivery_instructions: str | None = Field(None, max_length=500)


class PaymentOrderResponse(BaseModel):
    """Gateway intent details the client needs to open checkout."""

    order_pk: int
    order_id: str
    intent_id: str
    amount: int  # minor units (paisa)
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    """Client-relayed gateway callback."""

    intent_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("intent_id", "razorpay_order_id")
    )
    payment_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("payment_id", "razorpay_payment_id")
    )
    signature: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("signature", "razorpay_signature")
    )


class CancelOrderRequest(BaseModel):
    """Customer cancellation."""

    reason: str | None = Field(None, max_length=500)


class RefundRequest(BaseModel):
    """Customer refund request."""

    reason: str = Field(..., min_length=1, max_length=500)


class RateOrderRequest(BaseModel):
    """Rating for a delivered order."""

    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    """Admin status write."""

    status: OrderStatus
    note: str | None = Field(None, max_length=500, validation_alias=AliasChoices("note", "notes"))


class IngredientSnapshot(BaseModel):
    """Ingredient as it was when the order was placed."""

    type: IngredientType
    ingredient_id: int
    name: str
    description: str
    price: float


class OrderItemResponse(BaseModel):
    """Order line response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    quantity: int
    size: PizzaSize
    crust_type: CrustType
    special_instructions: str | None
    item_price: float
    ingredients: list[IngredientSnapshot]


class TrackingEntryResponse(BaseModel):
    """Status history entry."""

    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus
    message: str
    source: TrackingSource
    created_at: datetime


class OrderResponse(BaseModel):
    """Full order response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    user_id: int
    total_amount: float
    currency: str
    status: OrderStatus
    payment_status: PaymentStatus
    payment_intent_id: str | None
    payment_id: str | None
    delivery_address: Address
    delivery_instructions: str | None
    estimated_delivery_time: datetime | None
    actual_delivery_time: datetime | None
    rating: int | None
    review: str | None
    refund_requested: bool
    refund_reason: str | None
    items: list[OrderItemResponse]
    tracking: list[TrackingEntryResponse]
    created_at: datetime
    updated_at: datetime


class OrderSummaryResponse(BaseModel):
    """Compact order row for list views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    user_id: int
    status: OrderStatus
    payment_status: PaymentStatus
    total_amount: float
    items_count: int
    created_at: datetime


class OrderListResponse(BaseModel):
    """Paginated order list."""

    orders: list[OrderSummaryResponse]
    pagination: Pagination
