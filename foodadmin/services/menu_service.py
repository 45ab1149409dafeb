import logging
from typing import List, Optional
from uuid import UUID

from tortoise.transactions import in_transaction

from foodadmin.core.errors import MenuItemNotFound
from foodadmin.events.outbox_utility import create_outbox_event
from foodadmin.models.menu import MenuCategory, MenuItem
from foodadmin.models.order import OrderItem
from foodadmin.schemas.menu import MenuItemCreate, MenuItemUpdate

log = logging.getLogger(__name__)


async def list_menu_items(category: Optional[MenuCategory] = None) -> List[MenuItem]:
    """Menu items grouped by category, alphabetical within each."""
    query = MenuItem.all()
    if category is not None:
        query = query.filter(category=category)
    return await query.order_by("category", "name")


async def get_menu_item(menu_item_id: UUID) -> MenuItem:
    item = await MenuItem.get_or_none(id=menu_item_id)
    if not item:
        raise MenuItemNotFound(f"Menu item {menu_item_id} not found.")
    return item


async def create_menu_item(data: MenuItemCreate) -> MenuItem:
    """Adds a dish with its opening stock; availability follows the stock."""
    async with in_transaction() as conn:
        item = await MenuItem.create(
            name=data.name,
            description=data.description,
            price=data.price,
            category=data.category,
            stock_quantity=data.stock_quantity,
            is_available=data.stock_quantity > 0,
            image_url=data.image_url_str(),
            using_db=conn,
        )
        await create_outbox_event(
            aggregate_type="menu_item",
            aggregate_id=item.id,
            event_type="menu.item_created.v1",
            payload={"menu_item_id": str(item.id), "name": item.name, "category": item.category.value},
            conn=conn,
        )
    log.info(f"Menu item '{item.name}' created with stock {item.stock_quantity}.")
    return item


async def update_menu_item(menu_item_id: UUID, data: MenuItemUpdate) -> MenuItem:
    """
    Edits the descriptive fields of a dish. Stock and availability are left
    untouched; they only change through inventory adjustments.
    """
    async with in_transaction() as conn:
        item = await MenuItem.get_or_none(id=menu_item_id).using_db(conn)
        if not item:
            raise MenuItemNotFound(f"Menu item {menu_item_id} not found.")

        item.name = data.name
        item.description = data.description
        item.price = data.price
        item.category = data.category
        item.image_url = data.image_url_str()
        await item.save(
            update_fields=["name", "description", "price", "category", "image_url", "updated_at"],
            using_db=conn,
        )
        await create_outbox_event(
            aggregate_type="menu_item",
            aggregate_id=item.id,
            event_type="menu.item_updated.v1",
            payload={"menu_item_id": str(item.id), "name": item.name, "category": item.category.value},
            conn=conn,
        )
    return item


async def delete_menu_item(menu_item_id: UUID) -> None:
    """
    Removes a dish. Its inventory history is left untouched and keeps the
    item id; order lines lose their link to it.
    """
    async with in_transaction() as conn:
        item = await MenuItem.get_or_none(id=menu_item_id).using_db(conn)
        if not item:
            raise MenuItemNotFound(f"Menu item {menu_item_id} not found.")
        # Same effect as ON DELETE SET NULL, for backends that do not enforce it
        await OrderItem.filter(menu_item_id=item.id).using_db(conn).update(menu_item_id=None)
        await item.delete(using_db=conn)
        await create_outbox_event(
            aggregate_type="menu_item",
            aggregate_id=menu_item_id,
            event_type="menu.item_deleted.v1",
            payload={"menu_item_id": str(menu_item_id), "name": item.name},
            conn=conn,
        )
    log.info(f"Menu item '{item.name}' deleted.")
