import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from foodadmin.models.menu import MenuCategory

DELETED_ITEM_NAME = "Deleted item"


class StockAdjustmentRequest(BaseModel):
    """A single stock change requested by an admin."""
    menu_item_id: uuid.UUID
    change_amount: int = Field(..., description="Signed change: positive restocks, negative removes stock.")
    # Blank reasons are rejected by the adjustment workflow with a typed error
    reason: str = Field("", max_length=500, description="Why the stock changed, e.g. Restocking, Damaged goods.")


class InventoryItemResponse(BaseModel):
    """Stock snapshot of one menu item."""
    id: uuid.UUID
    name: str
    category: MenuCategory
    stock_quantity: int
    is_available: bool
    updated_at: str


class AdjustmentLogResponse(BaseModel):
    """One ledger entry, joined with its menu item name for display."""
    id: uuid.UUID
    menu_item_id: uuid.UUID
    menu_item_name: str
    change_amount: int
    previous_stock: int
    new_stock: int
    reason: str
    created_at: str


class StockAdjustmentResponse(BaseModel):
    item: InventoryItemResponse
    entry: AdjustmentLogResponse
    message: str


class InventoryOverviewResponse(BaseModel):
    threshold: int
    items: List[InventoryItemResponse]
    low_stock: List[InventoryItemResponse]
    recent_adjustments: List[AdjustmentLogResponse]


def inventory_item_response(item) -> InventoryItemResponse:
    return InventoryItemResponse(
        id=item.id,
        name=item.name,
        category=item.category,
        stock_quantity=item.stock_quantity,
        is_available=item.is_available,
        updated_at=str(item.updated_at),
    )


def adjustment_log_response(entry, menu_item_name: Optional[str] = None) -> AdjustmentLogResponse:
    if menu_item_name is None:
        # Set by recent_adjustments
        menu_item_name = getattr(entry, "menu_item_name", DELETED_ITEM_NAME)
    return AdjustmentLogResponse(
        id=entry.id,
        menu_item_id=entry.menu_item_id,
        menu_item_name=menu_item_name,
        change_amount=entry.change_amount,
        previous_stock=entry.previous_stock,
        new_stock=entry.new_stock,
        reason=entry.reason,
        created_at=str(entry.created_at),
    )
