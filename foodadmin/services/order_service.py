import logging
from tortoise.transactions import in_transaction
from typing import List, Optional
from foodadmin.core.errors import OrderNotFound
from foodadmin.models.order import Order, OrderStatus
from foodadmin.events.outbox_utility import create_outbox_event
from uuid import UUID

log = logging.getLogger(__name__)


async def list_orders(status: Optional[OrderStatus] = None) -> List[Order]:
    """Newest orders first, with line items and their menu item names."""
    query = Order.all()
    if status is not None:
        query = query.filter(status=status)
    return await query.order_by("-created_at").prefetch_related("items", "items__menu_item")


async def get_order_by_id(order_id: UUID) -> Optional[Order]:
    """Fetches order details with items, including the menu item name/price."""
    # Pre-fetch related entities to minimize DB queries (N+1 avoidance)
    return await Order.get_or_none(id=order_id).prefetch_related('items', 'items__menu_item')


async def update_order_status(order_id: UUID, new_status: OrderStatus) -> Order:
    """
    Sets the order status and emits the change event. Any status may follow any
    other, so an admin can correct a mistaken update.
    """
    async with in_transaction() as conn:
        order = await Order.get_or_none(id=order_id).using_db(conn)

        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        # Selecting the current status again changes nothing
        if order.status == new_status:
            return order

        old_status = order.status
        order.status = new_status
        await order.save(update_fields=['status', 'updated_at'], using_db=conn)

        # This insertion happens in the same DB transaction as the order.save()
        await create_outbox_event(
            aggregate_type="order",
            aggregate_id=order.id,
            event_type="order.status_changed.v1",
            payload={
                "order_id": str(order.id),
                "old_status": old_status.value,
                "new_status": new_status.value,
                "user_id": order.user_id,
            },
            conn=conn
        )

    log.info(f"Order {order.id} moved from {old_status.value} to {new_status.value}.")
    return order
