import asyncio
import contextlib
import logging
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from foodadmin.core.errors import OrderNotFound, ServiceError
from foodadmin.events.bus import event_bus
from foodadmin.models.order import OrderStatus
from foodadmin.schemas.order import OrderStatusResponse, OrderStatusUpdate, order_detail_response
from foodadmin.schemas.response import SuccessResponse
from foodadmin.services.order_service import get_order_by_id, list_orders, update_order_status
from typing import Optional
from uuid import UUID

router = APIRouter()
log = logging.getLogger(__name__)

# Order changes pushed to connected admin screens
LIVE_EVENT_PATTERN = "order.*"


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(status: Optional[OrderStatus] = None):
    """Lists orders newest first; omit status to see all of them."""
    try:
        orders = await list_orders(status)
        return SuccessResponse(data=[order_detail_response(o).model_dump() for o in orders])
    except Exception as e:
        log.error(f"Error listing orders: {e}")
        raise HTTPException(status_code=500, detail="Failed to load orders.")


@router.websocket("/live")
async def order_changes_socket(websocket: WebSocket):
    """
    Streams committed order changes. Screens re-fetch the order list on each
    message instead of patching their local state.
    """
    queue: asyncio.Queue = asyncio.Queue()

    async def forward(event_type, event):
        queue.put_nowait(event)

    async def push_changes():
        while True:
            event = await queue.get()
            await websocket.send_json(event)

    # Subscribe before accepting so no change is missed once the client is connected
    event_bus.subscribe(LIVE_EVENT_PATTERN, forward)
    sender = None
    try:
        await websocket.accept()
        sender = asyncio.create_task(push_changes())
        # Client messages are ignored; reading only detects the disconnect
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        event_bus.unsubscribe(LIVE_EVENT_PATTERN, forward)
        if sender:
            sender.cancel()
            # Collects a send failure too, so it is not reported as never retrieved
            with contextlib.suppress(Exception, asyncio.CancelledError):
                await sender
        log.info("Live order feed client disconnected.")


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID):
    """Fetches details for a specific order."""
    try:
        order = await get_order_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return SuccessResponse(data=order_detail_response(order).model_dump())
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error fetching order {order_id}: {e}")
        raise HTTPException(status_code=500, detail="Server failed to fetch order details.")


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: UUID, payload: OrderStatusUpdate):
    """
    Updates status (e.g. 'preparing', 'ready', 'delivered').
    """
    try:
        # Pydantic ensures payload.status is a valid OrderStatus Enum value
        order = await update_order_status(order_id, payload.status)
        data = OrderStatusResponse(
            order_id=order.id,
            status=order.status,
            message=f"Order status updated to {order.status.value}",
        ).model_dump()
        return SuccessResponse(data=data)
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error updating order status: {e}")
        raise HTTPException(status_code=500, detail="Server failed to update order status.")
