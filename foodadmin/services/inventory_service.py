import logging
from typing import Iterable, List, NamedTuple, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from foodadmin.core.config import ADJUSTMENT_MAX_RETRIES, LOW_STOCK_THRESHOLD, RECENT_ADJUSTMENTS_LIMIT
from foodadmin.core.errors import (
    ConcurrentModification,
    MenuItemNotFound,
    MissingReason,
    NegativeStock,
    PersistenceFailure,
    ZeroDelta,
)
from foodadmin.events.outbox_utility import create_outbox_event
from foodadmin.models.inventory import InventoryLog
from foodadmin.models.menu import MenuItem
from foodadmin.schemas.inventory import DELETED_ITEM_NAME, StockAdjustmentRequest

log = logging.getLogger(__name__)


class StockAdjustment(NamedTuple):
    item: MenuItem
    entry: InventoryLog


class InventoryOverview(NamedTuple):
    items: List[MenuItem]
    low_stock: List[MenuItem]
    recent_adjustments: List[InventoryLog]


class _StaleStockRead(Exception):
    """The stored stock moved between our read and our write."""


def validate_request(change_amount: int, reason: Optional[str]) -> str:
    """Input checks that need no store access. Returns the cleaned reason."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise MissingReason("Please provide a reason for the adjustment.")
    if change_amount == 0:
        raise ZeroDelta("Adjustment amount must be a non-zero number.")
    return cleaned


def compute_new_stock(current_stock: int, change_amount: int) -> int:
    new_stock = current_stock + change_amount
    if new_stock < 0:
        raise NegativeStock(
            f"Stock quantity cannot be negative: {current_stock} {change_amount:+d} = {new_stock}."
        )
    return new_stock


def low_stock_items(items: Iterable[MenuItem], threshold: int = LOW_STOCK_THRESHOLD) -> List[MenuItem]:
    """Items at or below the threshold, in the order they were given."""
    return [item for item in items if item.stock_quantity <= threshold]


async def _compare_and_set_stock(conn, item: MenuItem, new_stock: int) -> bool:
    """
    Writes the new stock only if nobody else wrote the row since it was read.
    Returns False when the version check matched no row.
    """
    updated = await MenuItem.filter(id=item.id, version=item.version).using_db(conn).update(
        stock_quantity=new_stock,
        is_available=new_stock > 0,
        version=item.version + 1,
        updated_at=timezone.now(),
    )
    return updated == 1


async def _apply_once(request: StockAdjustmentRequest, reason: str) -> StockAdjustment:
    try:
        async with in_transaction() as conn:
            # Lock the row where the backend supports it; the version check covers the rest
            item = await MenuItem.filter(id=request.menu_item_id).using_db(conn).select_for_update().first()
            if not item:
                raise MenuItemNotFound(f"Menu item {request.menu_item_id} not found.")

            previous_stock = item.stock_quantity
            new_stock = compute_new_stock(previous_stock, request.change_amount)

            if not await _compare_and_set_stock(conn, item, new_stock):
                raise _StaleStockRead()

            entry = await InventoryLog.create(
                menu_item_id=item.id,
                change_amount=request.change_amount,
                previous_stock=previous_stock,
                new_stock=new_stock,
                reason=reason,
                using_db=conn,
            )

            await create_outbox_event(
                aggregate_type="menu_item",
                aggregate_id=item.id,
                event_type="inventory.stock_adjusted.v1",
                payload={
                    "menu_item_id": str(item.id),
                    "log_id": str(entry.id),
                    "change_amount": request.change_amount,
                    "previous_stock": previous_stock,
                    "new_stock": new_stock,
                    "reason": reason,
                },
                conn=conn,
            )
            if new_stock <= LOW_STOCK_THRESHOLD:
                await create_outbox_event(
                    aggregate_type="menu_item",
                    aggregate_id=item.id,
                    event_type="inventory.low_stock_alert.v1",
                    payload={
                        "menu_item_id": str(item.id),
                        "name": item.name,
                        "stock_quantity": new_stock,
                        "threshold": LOW_STOCK_THRESHOLD,
                    },
                    conn=conn,
                )
    except BaseORMException as e:
        log.error(f"Stock adjustment for {request.menu_item_id} rolled back: {e}")
        raise PersistenceFailure("Failed to update stock. No changes were saved.") from e

    # Reflect only what was committed
    item.stock_quantity = new_stock
    item.is_available = new_stock > 0
    item.version += 1
    return StockAdjustment(item=item, entry=entry)


async def apply_adjustment(request: StockAdjustmentRequest) -> StockAdjustment:
    """
    Applies a signed stock change to one menu item and records it in the ledger.

    The stock write and the ledger entry commit together or not at all. The
    new stock is derived from the value stored at write time; if another
    session wins the race the whole cycle is retried, and after
    ADJUSTMENT_MAX_RETRIES lost races ConcurrentModification is raised.
    """
    reason = validate_request(request.change_amount, request.reason)

    for attempt in range(1, ADJUSTMENT_MAX_RETRIES + 1):
        try:
            result = await _apply_once(request, reason)
        except _StaleStockRead:
            log.warning(
                f"Stock for {request.menu_item_id} changed concurrently "
                f"(attempt {attempt}/{ADJUSTMENT_MAX_RETRIES})."
            )
            continue
        log.info(
            f"Stock adjusted for '{result.item.name}': {result.entry.previous_stock} -> "
            f"{result.entry.new_stock} ({request.change_amount:+d}, reason: {reason})"
        )
        return result

    raise ConcurrentModification(
        f"Stock for menu item {request.menu_item_id} kept changing. Reload the item and try again."
    )


async def list_inventory() -> List[MenuItem]:
    """All menu items, most urgent (lowest stock) first."""
    return await MenuItem.all().order_by("stock_quantity", "name")


async def get_stock(menu_item_id: UUID) -> MenuItem:
    item = await MenuItem.get_or_none(id=menu_item_id)
    if not item:
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found.")
    return item


async def get_low_stock_items(threshold: int = LOW_STOCK_THRESHOLD) -> List[MenuItem]:
    return low_stock_items(await list_inventory(), threshold)


async def recent_adjustments(
    menu_item_id: Optional[UUID] = None,
    limit: int = RECENT_ADJUSTMENTS_LIMIT,
) -> List[InventoryLog]:
    """
    Newest ledger entries first. Each entry gets a menu_item_name for display,
    DELETED_ITEM_NAME when the menu item no longer exists.
    """
    query = InventoryLog.all()
    if menu_item_id is not None:
        query = query.filter(menu_item_id=menu_item_id)
    entries = await query.order_by("-created_at").limit(limit)

    item_ids = list({entry.menu_item_id for entry in entries})
    names = dict(await MenuItem.filter(id__in=item_ids).values_list("id", "name"))
    for entry in entries:
        entry.menu_item_name = names.get(entry.menu_item_id, DELETED_ITEM_NAME)
    return entries


async def inventory_overview(
    threshold: int = LOW_STOCK_THRESHOLD,
    limit: int = RECENT_ADJUSTMENTS_LIMIT,
) -> InventoryOverview:
    items = await list_inventory()
    return InventoryOverview(
        items=items,
        low_stock=low_stock_items(items, threshold),
        recent_adjustments=await recent_adjustments(limit=limit),
    )
