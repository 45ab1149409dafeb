from tortoise import fields, models
from tortoise.validators import MinValueValidator
import uuid

from foodadmin.core.errors import LedgerEntryImmutable


class InventoryLog(models.Model):
    """
    Append-only audit record of a single stock adjustment.
    Rows are written once by the adjustment workflow and never touched again.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    # Lookup reference only, no foreign key: the id outlives a deleted menu item
    menu_item_id = fields.UUIDField()
    change_amount = fields.IntField() # positive = restock, negative = removal
    previous_stock = fields.IntField(validators=[MinValueValidator(0)])
    new_stock = fields.IntField(validators=[MinValueValidator(0)])
    reason = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "inventory_logs"
        indexes = [
            ("created_at",),                  # Recent changes across all items
            ("menu_item_id", "created_at"),   # Recent changes for one item
        ]

    async def save(self, *args, **kwargs):
        if self._saved_in_db:
            raise LedgerEntryImmutable(f"Inventory log entry {self.id} cannot be modified.")
        await super().save(*args, **kwargs)

    async def delete(self, *args, **kwargs):
        raise LedgerEntryImmutable(f"Inventory log entry {self.id} cannot be deleted.")
