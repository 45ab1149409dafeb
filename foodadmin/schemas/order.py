from pydantic import BaseModel
from typing import List, Optional
import uuid
from decimal import Decimal

from foodadmin.models.order import OrderStatus


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status."""
    status: OrderStatus


class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    name: str
    quantity: int
    price: str  # Use string for Decimal type serialization
    line_total: str


class OrderDetailResponse(BaseModel):
    """Schema for fetching detailed order information."""
    id: uuid.UUID
    user_id: str
    customer_name: str
    customer_email: str
    status: OrderStatus
    total_amount: Decimal
    payment_method: str
    notes: Optional[str]
    items: List[OrderItemResponse]
    created_at: str


class OrderStatusResponse(BaseModel):
    order_id: uuid.UUID
    status: OrderStatus
    message: str


def order_detail_response(order) -> OrderDetailResponse:
    """Expects items and items__menu_item to be prefetched."""
    items = [
        OrderItemResponse(
            name=i.menu_item.name if i.menu_item is not None else "Deleted item",
            quantity=i.quantity,
            price=str(i.price_at_time),
            line_total=str(i.line_total),
        )
        for i in order.items
    ]
    return OrderDetailResponse(
        id=order.id,
        user_id=order.user_id,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        status=order.status,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        notes=order.notes,
        items=items,
        created_at=str(order.created_at),
    )
