from enum import Enum
from tortoise import fields, models
import uuid


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user_id = fields.CharField(max_length=64)
    customer_name = fields.CharField(max_length=255, default="")
    customer_email = fields.CharField(max_length=255, default="")
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    total_amount = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    payment_method = fields.CharField(max_length=32, default="cash")
    notes = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"
        indexes = [
            ("status",),                 # Status-based filtering
            ("user_id",),                # User order history
            ("created_at",),             # Newest-first listing
            ("status", "created_at"),    # Composite: status with time
        ]


class OrderItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.ForeignKeyField("models.Order", related_name="items")
    menu_item = fields.ForeignKeyField(
        "models.MenuItem",
        related_name="order_items",
        null=True,
        on_delete=fields.SET_NULL,
    )
    quantity = fields.IntField()
    price_at_time = fields.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        table = "order_items"
        indexes = [
            ("order_id",),              # Order line items
            ("menu_item_id",),          # Menu item popularity
        ]

    @property
    def line_total(self):
        return self.price_at_time * self.quantity
