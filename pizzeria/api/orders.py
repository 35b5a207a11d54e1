"""Customer order endpoints: checkout, payment verification and order actions."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, status

from pizzeria.api.dependencies import get_current_user, get_order_service
from pizzeria.models.enums import OrderStatus
from pizzeria.models.user import User
from pizzeria.schemas.common import ApiResponse
from pizzeria.schemas.order import (
    CancelOrderRequest,
    CreatePaymentOrderRequest,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    PaymentOrderResponse,
    RateOrderRequest,
    RefundRequest,
    VerifyPaymentRequest,
)
from pizzeria.services.order_service import OrderService
from pizzeria.services.pricing import to_minor_units

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])

SortField = Literal["created_at", "total_amount", "status"]
SortOrder = Literal["asc", "desc"]


@router.post(
    "/create-payment-order",
    response_model=ApiResponse[PaymentOrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Price the cart and open a payment intent.

    The order is stored as pending; stock is taken when payment is verified.
    """
    order, intent = await service.create_payment_order(current_user, request)
    return ApiResponse(
        message="Payment order created successfully",
        data=PaymentOrderResponse(
            order_pk=order.id,
            order_id=order.order_id,
            intent_id=intent["id"],
            amount=to_minor_units(order.total_amount),
            currency=intent.get("currency", order.currency),
            key_id=service.gateway.key_id,
        ),
    )


@router.post("/verify-payment", response_model=ApiResponse[OrderResponse])
def verify_payment(
    request: VerifyPaymentRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Verify the checkout callback and confirm the order."""
    order = service.verify_payment(
        request.intent_id, request.payment_id, request.signature, user=current_user
    )
    return ApiResponse(
        message="Payment verified successfully", data=OrderResponse.model_validate(order)
    )


@router.get("", response_model=ApiResponse[OrderListResponse])
def list_orders(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    status_filter: OrderStatus | None = Query(None, alias="status"),
    sort_by: SortField = "created_at",
    sort_order: SortOrder = "desc",
):
    """The caller's orders, newest first by default."""
    orders, pagination = service.list_user_orders(
        current_user, page, limit, status_filter, sort_by, sort_order
    )
    return ApiResponse(
        message="Orders retrieved successfully",
        data=OrderListResponse(
            orders=[OrderSummaryResponse.model_validate(o) for o in orders],
            pagination=pagination,
        ),
    )


@router.get("/{order_pk}", response_model=ApiResponse[OrderResponse])
def get_order(
    order_pk: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Get one of the caller's orders with items and tracking."""
    order = service.get_user_order(current_user, order_pk)
    return ApiResponse(
        message="Order retrieved successfully", data=OrderResponse.model_validate(order)
    )


@router.put("/{order_pk}/cancel", response_model=ApiResponse[OrderResponse])
def cancel_order(
    order_pk: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
    request: CancelOrderRequest | None = None,
):
    """Cancel a pending or confirmed order."""
    reason = request.reason if request else None
    order = service.cancel_order(current_user, order_pk, reason)
    return ApiResponse(
        message="Order cancelled successfully", data=OrderResponse.model_validate(order)
    )


@router.post("/{order_pk}/refund", response_model=ApiResponse[OrderResponse])
def request_refund(
    order_pk: int,
    request: RefundRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Ask for a refund on a paid, undelivered order."""
    order = service.request_refund(current_user, order_pk, request.reason)
    return ApiResponse(
        message="Refund request submitted successfully",
        data=OrderResponse.model_validate(order),
    )


@router.post("/{order_pk}/rate", response_model=ApiResponse[OrderResponse])
def rate_order(
    order_pk: int,
    request: RateOrderRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[OrderService, Depends(get_order_service)],
):
    """Rate a delivered order."""
    order = service.rate_order(current_user, order_pk, request.rating, request.review)
    return ApiResponse(
        message="Order rated successfully", data=OrderResponse.model_validate(order)
    )
