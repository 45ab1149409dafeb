# foodadmin/models/__init__.py
from .menu import MenuItem, MenuCategory
from .inventory import InventoryLog
from .order import Order, OrderItem, OrderStatus
from .outbox import OutboxEvent

# Export all models
__all__ = [
    "InventoryLog",
    "MenuCategory",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OutboxEvent",
]
