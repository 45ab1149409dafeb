import logging
from fastapi import APIRouter, HTTPException, status
from foodadmin.core.errors import ServiceError
from foodadmin.models.menu import MenuCategory
from foodadmin.schemas.menu import MenuItemCreate, MenuItemUpdate, menu_item_response
from foodadmin.schemas.response import SuccessResponse
from foodadmin.services.menu_service import (
    create_menu_item,
    delete_menu_item,
    get_menu_item,
    list_menu_items,
    update_menu_item,
)
from typing import Optional
from uuid import UUID

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_menu_endpoint(category: Optional[MenuCategory] = None):
    """Lists menu items ordered by category and name."""
    try:
        items = await list_menu_items(category)
        return SuccessResponse(data=[menu_item_response(i).model_dump() for i in items])
    except Exception as e:
        log.error(f"Error listing menu items: {e}")
        raise HTTPException(status_code=500, detail="Failed to load menu items.")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_menu_item_endpoint(item_data: MenuItemCreate):
    """Adds a new dish to the menu."""
    try:
        item = await create_menu_item(item_data)
        return SuccessResponse(data=menu_item_response(item).model_dump())
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error adding menu item: {e}")
        raise HTTPException(status_code=500, detail="Failed to save menu item.")


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(menu_item_id: UUID):
    try:
        item = await get_menu_item(menu_item_id)
        return SuccessResponse(data=menu_item_response(item).model_dump())
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error fetching menu item {menu_item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load menu item.")


@router.put("/{menu_item_id}", response_model=SuccessResponse)
async def update_menu_item_endpoint(menu_item_id: UUID, item_data: MenuItemUpdate):
    """Edits a dish. Stock is adjusted through the inventory endpoints instead."""
    try:
        item = await update_menu_item(menu_item_id, item_data)
        return SuccessResponse(data=menu_item_response(item).model_dump())
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error updating menu item {menu_item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save menu item.")


@router.delete("/{menu_item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(menu_item_id: UUID):
    try:
        await delete_menu_item(menu_item_id)
        return SuccessResponse(data={"menu_item_id": str(menu_item_id), "message": "Menu item has been deleted."})
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error deleting menu item {menu_item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete menu item.")
