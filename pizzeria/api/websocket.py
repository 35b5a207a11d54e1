"""Live order tracking over WebSocket."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from redis import RedisError

from pizzeria.database import SessionLocal
from pizzeria.models.enums import OrderStatus
from pizzeria.models.order import Order
from pizzeria.models.user import User
from pizzeria.services.auth import decode_access_token
from pizzeria.services.realtime import OrderEventStream

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])

KEEPALIVE_SECONDS = 30
CLOSE_UNAUTHORIZED = 4001
CLOSE_FORBIDDEN = 4003

TERMINAL_STATUSES = frozenset(s.value for s in OrderStatus if s.is_terminal)


class TrackingRejected(Exception):
    """The handshake cannot be accepted; carries the close code to send."""

    def __init__(self, code: int, reason: str) -> None:
        super().__init__(reason)
        self.code = code
        self.reason = reason


def load_tracked_order(token: str, order_pk: int) -> dict[str, Any]:
    """Check the viewer may track the order and return its current state."""
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise TrackingRejected(CLOSE_UNAUTHORIZED, "Invalid token")

    with SessionLocal() as db:
        viewer = db.get(User, int(payload["sub"]))
        if viewer is None:
            raise TrackingRejected(CLOSE_UNAUTHORIZED, "User not found")
        order = db.get(Order, order_pk)
        if order is None or (order.user_id != viewer.id and not viewer.is_admin):
            raise TrackingRejected(CLOSE_FORBIDDEN, "Access denied")
        return {"status": order.status.value, "payment_status": order.payment_status.value}


async def forward_until_settled(websocket: WebSocket, events: OrderEventStream) -> None:
    async for event in events:
        await websocket.send_json(event)
        if event.get("data", {}).get("status") in TERMINAL_STATUSES:
            await websocket.close()
            return


async def keepalive(websocket: WebSocket) -> None:
    while True:
        await asyncio.sleep(KEEPALIVE_SECONDS)
        await websocket.send_json({"type": "ping"})


async def drain_client(websocket: WebSocket) -> None:
    # Clients only send pongs; returns by raising WebSocketDisconnect
    while True:
        await websocket.receive_text()


@router.websocket("/orders/{order_pk}")
async def track_order(websocket: WebSocket, order_pk: int, token: str = Query(...)) -> None:
    """Push an order's status changes to its owner or an admin.

    Browsers cannot set headers on the handshake, so the access token comes in
    the query string. The first frame is a snapshot of the order. The socket
    is closed by the server once the order is delivered or cancelled.
    """
    try:
        snapshot = await asyncio.to_thread(load_tracked_order, token, order_pk)
    except TrackingRejected as rejected:
        await websocket.close(code=rejected.code, reason=rejected.reason)
        return

    await websocket.accept()
    await websocket.send_json({"type": "snapshot", "order_pk": order_pk, "data": snapshot})
    if snapshot["status"] in TERMINAL_STATUSES:
        await websocket.close()
        return

    close_code = 1000
    try:
        async with OrderEventStream(order_pk) as events:
            tasks = [
                asyncio.create_task(forward_until_settled(websocket, events)),
                asyncio.create_task(keepalive(websocket)),
                asyncio.create_task(drain_client(websocket)),
            ]
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
    except RedisError as e:
        logger.error(f"Tracking unavailable for order {order_pk}: {e}")
        close_code = 1011
    else:
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.warning(f"Tracking socket for order {order_pk} ended: {error!r}")

    if (
        websocket.application_state == WebSocketState.CONNECTED
        and websocket.client_state == WebSocketState.CONNECTED
    ):
        await websocket.close(code=close_code)
    logger.info(f"Stopped tracking order {order_pk}")
