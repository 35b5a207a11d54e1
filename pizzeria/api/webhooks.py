"""Webhook endpoint for payment gateway callbacks."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from pizzeria.api.dependencies import get_order_service
from pizzeria.exceptions import NotFoundError, PizzeriaError
from pizzeria.schemas.common import MessageResponse
from pizzeria.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


async def raw_body(request: Request) -> bytes:
    """The unparsed body; signatures are computed over the exact bytes sent."""
    return await request.body()


@router.post("/payments", response_model=MessageResponse)
def handle_payment_webhook(
    body: Annotated[bytes, Depends(raw_body)],
    service: Annotated[OrderService, Depends(get_order_service)],
    x_razorpay_signature: Annotated[str | None, Header()] = None,
):
    """Handle payment.captured and payment.failed events.

    Runs in the threadpool: capture commits and sends the confirmation email
    synchronously. The gateway retries anything that is not a 2xx, so events
    for unknown orders or in a state we cannot act on are acknowledged and
    logged.
    """
    if not service.gateway.verify_webhook_signature(body, x_razorpay_signature):
        logger.warning("Rejected payment webhook with invalid signature")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook signature",
        )

    try:
        event = json.loads(body)
        event_type = event["event"]
        payment = event["payload"]["payment"]["entity"]
        intent_id = payment["order_id"]
        payment_id = payment["id"]
    except (ValueError, KeyError, TypeError):
        logger.warning("Malformed payment webhook body")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed webhook payload",
        ) from None

    logger.info(f"Received payment webhook {event_type} for intent {intent_id}")

    try:
        if event_type == "payment.captured":
            service.capture_payment(intent_id, payment_id)
        elif event_type == "payment.failed":
            service.mark_payment_failed(intent_id)
        else:
            return MessageResponse(message=f"Event {event_type} ignored")
    except NotFoundError:
        logger.warning(f"Webhook {event_type} for unknown intent {intent_id}")
        return MessageResponse(message="Event ignored: order not found")
    except PizzeriaError as e:
        # Compensation already ran; nothing for the gateway to retry
        logger.warning(f"Webhook {event_type} for intent {intent_id} not applied: {e.message}")
        return MessageResponse(message=e.message)

    return MessageResponse(message="Webhook processed")
