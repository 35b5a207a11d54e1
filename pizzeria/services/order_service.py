"""Order lifecycle: checkout, payment capture, customer actions and admin status writes."""

import logging
import random
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any, NoReturn

from sqlalchemy import asc, desc, update
from sqlalchemy.orm import Session

from pizzeria.exceptions import (
    BusinessRuleError,
    ConflictError,
    InsufficientStockError,
    InvalidIngredientError,
    NotFoundError,
    PaymentVerificationError,
    StockConflictError,
)
from pizzeria.models.enums import (
    NEXT_STATUS,
    IngredientType,
    OrderStatus,
    PaymentStatus,
    TrackingSource,
)
from pizzeria.models.ingredient import get_ingredient_model
from pizzeria.models.mixins import IngredientMixin
from pizzeria.models.order import Order, OrderItem, OrderTracking
from pizzeria.models.user import User
from pizzeria.schemas.common import Pagination
from pizzeria.schemas.order import CreatePaymentOrderRequest, OrderItemCreate
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory import InventoryService
from pizzeria.services.payment_gateway import PaymentGateway
from pizzeria.services.pricing import calculate_line_price, to_minor_units
from pizzeria.services.realtime import OrderEventType, publish_order_event

logger = logging.getLogger(__name__)

ESTIMATED_DELIVERY = timedelta(minutes=45)
MAX_REVIEW_LENGTH = 1000
SORTABLE_FIELDS = {
    "created_at": Order.created_at,
    "total_amount": Order.total_amount,
    "status": Order.status,
}

StockKey = tuple[IngredientType, int]


def snapshot_ingredient(item: IngredientMixin) -> dict[str, Any]:
    """Copy everything an order needs to display an ingredient forever."""
    return {
        "type": item.ingredient_type.value,
        "ingredient_id": item.id,
        "name": item.name,
        "description": item.description,
        "category": item.category,
        "price": str(item.price),
    }


def stock_requirements(order: Order) -> Counter[StockKey]:
    """Aggregate quantity needed per ingredient across an order's lines."""
    needed: Counter[StockKey] = Counter()
    for item in order.items:
        for ingredient in item.ingredients:
            key = (IngredientType(ingredient["type"]), ingredient["ingredient_id"])
            needed[key] += item.quantity
    return needed


class OrderService:
    """Service for order-related operations."""

    def __init__(
        self,
        db: Session,
        email_service: EmailService,
        gateway: PaymentGateway | None = None,
    ):
        self.db = db
        self.email_service = email_service
        self.gateway = gateway or PaymentGateway()

    # --- Checkout ---

    def _resolve(self, ingredient_type: IngredientType, ingredient_id: int) -> IngredientMixin:
        model = get_ingredient_model(ingredient_type)
        item = self.db.get(model, ingredient_id)
        if item is None or not item.is_active:
            raise InvalidIngredientError("Invalid pizza ingredients selected")
        if not item.is_available:
            raise InvalidIngredientError(f"{item.name} is currently unavailable")
        return item

    def price_line(
        self, line: OrderItemCreate
    ) -> tuple[Decimal, list[IngredientMixin]]:
        """Resolve a line's ingredients and compute its price."""
        base = self._resolve(IngredientType.BASE, line.base_id)
        sauce = self._resolve(IngredientType.SAUCE, line.sauce_id)
        cheese = self._resolve(IngredientType.CHEESE, line.cheese_id)
        veggies = [self._resolve(IngredientType.VEGGIE, vid) for vid in line.veggie_ids]
        meats = [self._resolve(IngredientType.MEAT, mid) for mid in line.meat_ids]

        price = calculate_line_price(
            base.price,
            sauce.price,
            cheese.price,
            [v.price for v in veggies],
            [m.price for m in meats],
            size=line.customizations.size,
            quantity=line.quantity,
        )
        return price, [base, sauce, cheese, *veggies, *meats]

    def build_order_items(
        self, lines: list[OrderItemCreate]
    ) -> tuple[list[OrderItem], Decimal]:
        """Price every line and check aggregated stock before anything is persisted."""
        order_items: list[OrderItem] = []
        total = Decimal("0")
        needed: Counter[StockKey] = Counter()
        resolved: dict[StockKey, IngredientMixin] = {}

        for line in lines:
            price, ingredients = self.price_line(line)
            for ingredient in ingredients:
                key = (ingredient.ingredient_type, ingredient.id)
                needed[key] += line.quantity
                resolved[key] = ingredient
            order_items.append(
                OrderItem(
                    quantity=line.quantity,
                    size=line.customizations.size,
                    crust_type=line.customizations.crust_type,
                    special_instructions=line.customizations.special_instructions,
                    item_price=price,
                    ingredients=[snapshot_ingredient(i) for i in ingredients],
                )
            )
            total += price

        for key, quantity in needed.items():
            ingredient = resolved[key]
            if ingredient.stock < quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for {ingredient.name}. Available: {ingredient.stock}"
                )

        return order_items, total

    def _generate_order_id(self) -> str:
        date_str = datetime.now(UTC).strftime("%Y%m%d")
        for _ in range(10):
            candidate = f"PZ{date_str}{random.randint(0, 9999):04d}"  # noqa: S311
            if not self.db.query(Order.id).filter(Order.order_id == candidate).first():
                return candidate
        raise ConflictError("Could not allocate an order number, please retry")

    async def create_payment_order(
        self, user: User, request: CreatePaymentOrderRequest
    ) -> tuple[Order, dict[str, Any]]:
        """Price the cart, open a gateway intent and persist a pending order.

        Nothing is written and no intent is created if any ingredient is
        invalid or short on stock. Stock is only taken at payment capture.
        """
        order_items, total = self.build_order_items(request.items)
        order_ref = self._generate_order_id()

        intent = await self.gateway.create_intent(
            to_minor_units(total),
            receipt=order_ref,
            notes={"user_id": str(user.id), "item_count": str(len(order_items))},
        )

        order = Order(
            order_id=order_ref,
            user_id=user.id,
            total_amount=total,
            currency=intent.get("currency", self.gateway.currency),
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_intent_id=intent["id"],
            delivery_address=request.delivery_address.model_dump(),
            delivery_instructions=request.delivery_instructions,
            estimated_delivery_time=datetime.now(UTC) + ESTIMATED_DELIVERY,
            items=order_items,
        )
        self._append_tracking(
            order, OrderStatus.PENDING, "Order placed, awaiting payment", TrackingSource.SYSTEM
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Created order {order.order_id} for user {user.id}: {total} ({intent['id']})")
        publish_order_event(order.id, OrderEventType.ORDER_CREATED, {"status": order.status.value})
        return order, intent

    # --- Payment ---

    def verify_payment(
        self, intent_id: str, payment_id: str, signature: str, user: User | None = None
    ) -> Order:
        """Check the checkout callback signature, then capture."""
        if not self.gateway.verify_signature(intent_id, payment_id, signature):
            logger.warning(f"Payment signature mismatch for intent {intent_id}")
            raise PaymentVerificationError("Payment verification failed")
        return self.capture_payment(intent_id, payment_id, signature, user=user)

    def _get_by_intent(self, intent_id: str, user: User | None = None) -> Order:
        order = self.db.query(Order).filter(Order.payment_intent_id == intent_id).first()
        if not order or (user is not None and order.user_id != user.id):
            raise NotFoundError("Order not found")
        return order

    def _claim_payment(
        self,
        order: Order,
        payment_id: str,
        signature: str | None,
        new_status: OrderStatus,
    ) -> bool:
        """Mark an unpaid, pending order as paid in the current transaction.

        The conditional UPDATE lets exactly one capture of an intent win; a
        concurrent capture matches no row and must not touch stock.
        """
        result = self.db.execute(
            update(Order)
            .where(
                Order.id == order.id,
                Order.status == OrderStatus.PENDING,
                Order.payment_status.in_([PaymentStatus.PENDING, PaymentStatus.FAILED]),
            )
            .values(
                payment_status=PaymentStatus.PAID,
                status=new_status,
                payment_id=payment_id,
                payment_signature=signature,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def capture_payment(
        self,
        intent_id: str,
        payment_id: str,
        signature: str | None = None,
        user: User | None = None,
    ) -> Order:
        """Confirm a paid order and take its stock in one transaction.

        Safe to call twice for the same intent, including concurrently from
        the checkout callback and the gateway webhook.
        """
        order = self._get_by_intent(intent_id, user)

        if order.payment_status == PaymentStatus.PAID:
            logger.info(f"Order {order.order_id} already paid, ignoring repeat capture")
            return order

        if not self._claim_payment(order, payment_id, signature, OrderStatus.CONFIRMED):
            self.db.rollback()
            self.db.refresh(order)
            if order.payment_status == PaymentStatus.PAID:
                logger.info(f"Order {order.order_id} captured concurrently, nothing to do")
                return order
            self._capture_for_cancelled_order(order, payment_id)

        try:
            InventoryService(self.db).decrement_stock(stock_requirements(order))
            self._append_tracking(
                order,
                OrderStatus.CONFIRMED,
                "Payment received, order confirmed",
                TrackingSource.SYSTEM,
            )
            self.db.commit()
        except StockConflictError:
            self.db.rollback()
            if not self._cancel_for_stock_shortfall(order, payment_id):
                return order
            raise StockConflictError(
                "Some ingredients sold out before payment completed; "
                "the order was cancelled and your payment will be refunded"
            ) from None
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(order)
        logger.info(f"Payment {payment_id} captured for order {order.order_id}")
        publish_order_event(
            order.id, OrderEventType.PAYMENT_CONFIRMED, {"status": order.status.value}
        )
        self._notify(order, self.email_service.send_order_confirmation, order, order.user)
        return order

    def _capture_for_cancelled_order(self, order: Order, payment_id: str) -> NoReturn:
        """Record a late payment on a cancelled order and flag it for refund."""
        if order.status != OrderStatus.CANCELLED:
            raise BusinessRuleError("Order is not awaiting payment")

        order.payment_status = PaymentStatus.PAID
        order.payment_id = payment_id
        self._flag_refund(order, "Payment received for a cancelled order")
        self._append_tracking(
            order, order.status, "Payment received after cancellation", TrackingSource.SYSTEM
        )
        self.db.commit()
        raise BusinessRuleError("Order was cancelled; your payment will be refunded")

    def _cancel_for_stock_shortfall(self, order: Order, payment_id: str) -> bool:
        """Compensating transaction after a failed capture.

        Returns False when another capture confirmed the order in the meantime.
        """
        if not self._claim_payment(order, payment_id, None, OrderStatus.CANCELLED):
            self.db.rollback()
            self.db.refresh(order)
            if order.payment_status == PaymentStatus.PAID:
                return False
            self._capture_for_cancelled_order(order, payment_id)

        self.db.refresh(order)
        self._flag_refund(order, "Insufficient stock at payment capture")
        self._append_tracking(
            order,
            OrderStatus.CANCELLED,
            "Cancelled: ingredients sold out before payment completed",
            TrackingSource.SYSTEM,
        )
        self.db.commit()
        logger.error(
            f"Order {order.order_id} paid ({payment_id}) but stock was short; "
            "cancelled and flagged for refund"
        )
        publish_order_event(order.id, OrderEventType.ORDER_CANCELLED, {"status": "cancelled"})
        return True

    def mark_payment_failed(self, intent_id: str) -> Order:
        """Record a failed payment on a still-pending order."""
        order = self._get_by_intent(intent_id)
        if order.payment_status != PaymentStatus.PENDING:
            return order
        order.payment_status = PaymentStatus.FAILED
        self._append_tracking(order, order.status, "Payment failed", TrackingSource.SYSTEM)
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"Payment failed for order {order.order_id}")
        publish_order_event(order.id, OrderEventType.PAYMENT_FAILED, {"status": order.status.value})
        return order

    # --- Queries ---

    def _paginate(
        self,
        query,
        page: int,
        limit: int,
        sort_by: str,
        sort_order: str,
    ) -> tuple[list[Order], Pagination]:
        column = SORTABLE_FIELDS.get(sort_by, Order.created_at)
        direction = asc if sort_order == "asc" else desc
        total = query.count()
        orders = (
            query.order_by(direction(column), direction(Order.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return orders, Pagination.build(page, limit, total)

    def list_user_orders(
        self,
        user: User,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Order], Pagination]:
        """Paginated orders of one user."""
        query = self.db.query(Order).filter(Order.user_id == user.id)
        if status:
            query = query.filter(Order.status == status)
        return self._paginate(query, page, limit, sort_by, sort_order)

    def list_all_orders(
        self,
        page: int = 1,
        limit: int = 20,
        status: OrderStatus | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> tuple[list[Order], Pagination]:
        """Paginated orders of every user (admin)."""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return self._paginate(query, page, limit, sort_by, sort_order)

    def get_order(self, order_pk: int) -> Order:
        order = self.db.get(Order, order_pk)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_user_order(self, user: User, order_pk: int) -> Order:
        """Get an order owned by user."""
        order = (
            self.db.query(Order).filter(Order.id == order_pk, Order.user_id == user.id).first()
        )
        if not order:
            raise NotFoundError("Order not found")
        return order

    # --- Customer actions ---

    def cancel_order(self, user: User, order_pk: int, reason: str | None = None) -> Order:
        """Cancel a pending or confirmed order."""
        order = self.get_user_order(user, order_pk)
        if not order.status.can_cancel:
            raise BusinessRuleError("Order cannot be cancelled at this stage")

        order.status = OrderStatus.CANCELLED
        self._append_tracking(
            order,
            OrderStatus.CANCELLED,
            reason or "Order cancelled by customer",
            TrackingSource.CUSTOMER,
        )
        if order.payment_status == PaymentStatus.PAID:
            self._flag_refund(order, "Order cancelled after payment")
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Order {order.order_id} cancelled by user {user.id}")
        publish_order_event(order.id, OrderEventType.ORDER_CANCELLED, {"status": "cancelled"})
        return order

    def request_refund(self, user: User, order_pk: int, reason: str) -> Order:
        """Flag a refund request for manual follow-up."""
        order = self.get_user_order(user, order_pk)
        if order.payment_status != PaymentStatus.PAID:
            raise BusinessRuleError("Refund can only be requested for paid orders")
        if order.status == OrderStatus.DELIVERED:
            raise BusinessRuleError("Cannot request refund for delivered orders")
        if order.refund_requested:
            raise BusinessRuleError("A refund has already been requested for this order")

        self._flag_refund(order, reason)
        self._append_tracking(
            order, order.status, "Refund requested by customer", TrackingSource.CUSTOMER
        )
        self.db.commit()
        self.db.refresh(order)

        # TODO: call the gateway refund API once refunds are automated
        logger.info(f"Refund requested for order {order.order_id}: {reason}")
        publish_order_event(order.id, OrderEventType.REFUND_REQUESTED, {"reason": reason})
        return order

    def rate_order(
        self, user: User, order_pk: int, rating: int, review: str | None = None
    ) -> Order:
        """Attach a 1-5 rating to a delivered order."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise BusinessRuleError("Rating must be between 1 and 5")
        if review and len(review) > MAX_REVIEW_LENGTH:
            raise BusinessRuleError(f"Review cannot exceed {MAX_REVIEW_LENGTH} characters")

        order = self.get_user_order(user, order_pk)
        if order.status != OrderStatus.DELIVERED:
            raise BusinessRuleError("Order must be delivered to submit a rating")

        order.rating = rating
        order.review = review
        order.rated_at = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(order)
        return order

    # --- Admin ---

    def update_status(self, order_pk: int, new_status: OrderStatus, note: str | None = None) -> Order:
        """Admin status write.

        Any status may be set. Writes outside the normal progression are
        logged as overrides in the tracking log.
        """
        order = self.get_order(order_pk)
        old_status = order.status
        is_normal_step = new_status == old_status or new_status in NEXT_STATUS[old_status]
        source = TrackingSource.ADMIN if is_normal_step else TrackingSource.ADMIN_OVERRIDE
        message = note or f"Order status updated to {new_status.value}"

        order.status = new_status
        self._append_tracking(order, new_status, message, source)
        if new_status == OrderStatus.DELIVERED and old_status != OrderStatus.DELIVERED:
            order.actual_delivery_time = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(order)

        if source == TrackingSource.ADMIN_OVERRIDE:
            logger.warning(
                f"Admin override on order {order.order_id}: {old_status.value} -> {new_status.value}"
            )
        else:
            logger.info(
                f"Order {order.order_id} status {old_status.value} -> {new_status.value}"
            )
        publish_order_event(
            order.id,
            OrderEventType.STATUS_CHANGED,
            {"status": new_status.value, "previous_status": old_status.value, "message": message},
        )

        if old_status != new_status and order.user:
            if new_status == OrderStatus.DELIVERED:
                self._notify(order, self.email_service.send_order_delivered, order, order.user)
            else:
                self._notify(
                    order, self.email_service.send_order_status_update, order, order.user, message
                )
        return order

    # --- Helpers ---

    def _append_tracking(
        self, order: Order, status: OrderStatus, message: str, source: TrackingSource
    ) -> None:
        order.tracking.append(
            OrderTracking(
                status=status,
                message=message,
                source=source,
                created_at=datetime.now(UTC),
            )
        )

    def _flag_refund(self, order: Order, reason: str) -> None:
        order.refund_requested = True
        order.refund_reason = reason
        order.refund_requested_at = datetime.now(UTC)

    def _notify(self, order: Order, send: Callable[..., bool], *args: Any) -> None:
        """Run an email sender without letting failures escape."""
        try:
            send(*args)
        except Exception as e:
            logger.warning(f"Failed to send email for order {order.order_id}: {e}")
