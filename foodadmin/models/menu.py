from enum import Enum
from tortoise import fields, models
from tortoise.validators import MinValueValidator
import uuid


class MenuCategory(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    DESSERTS = "desserts"


class MenuItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=100)
    description = fields.TextField(default="")
    price = fields.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    category = fields.CharEnumField(MenuCategory, max_length=16)
    stock_quantity = fields.IntField(default=0, validators=[MinValueValidator(0)])
    # Derived from stock_quantity on every stock write
    is_available = fields.BooleanField(default=False)
    image_url = fields.CharField(max_length=500, null=True)
    # Optimistic concurrency token, bumped with each stock write
    version = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "menu_items"
        indexes = [
            ("category", "name"),   # Menu screen ordering
            ("stock_quantity",),    # Inventory screen ordering / low stock scans
        ]

    def __str__(self):
        return self.name
