import logging
from fastapi import APIRouter, HTTPException, Query, status
from foodadmin.core.config import LOW_STOCK_THRESHOLD, RECENT_ADJUSTMENTS_LIMIT
from foodadmin.core.errors import ServiceError
from foodadmin.schemas.inventory import (
    InventoryOverviewResponse,
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    adjustment_log_response,
    inventory_item_response,
)
from foodadmin.schemas.response import SuccessResponse
from foodadmin.services.inventory_service import (
    apply_adjustment,
    get_low_stock_items,
    get_stock,
    inventory_overview,
    recent_adjustments,
)
from typing import Optional
from uuid import UUID

log = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def get_inventory_overview(
    threshold: int = Query(LOW_STOCK_THRESHOLD, ge=0),
    limit: int = Query(RECENT_ADJUSTMENTS_LIMIT, ge=1, le=100),
):
    """Everything the inventory screen shows: stock per item, low stock alerts and recent changes."""
    try:
        overview = await inventory_overview(threshold=threshold, limit=limit)
        data = InventoryOverviewResponse(
            threshold=threshold,
            items=[inventory_item_response(i) for i in overview.items],
            low_stock=[inventory_item_response(i) for i in overview.low_stock],
            recent_adjustments=[adjustment_log_response(e) for e in overview.recent_adjustments],
        ).model_dump()
        return SuccessResponse(data=data)
    except Exception as e:
        log.error(f"Error loading inventory data: {e}")
        raise HTTPException(status_code=500, detail="Failed to load inventory data.")


@router.get("/low-stock", response_model=SuccessResponse)
async def get_low_stock(threshold: int = Query(LOW_STOCK_THRESHOLD, ge=0)):
    """Items at or below the threshold, lowest stock first."""
    try:
        items = await get_low_stock_items(threshold)
        return SuccessResponse(data=[inventory_item_response(i).model_dump() for i in items])
    except Exception as e:
        log.error(f"Error fetching low stock items: {e}")
        raise HTTPException(status_code=500, detail="Failed to load low stock items.")


@router.get("/adjustments", response_model=SuccessResponse)
async def list_adjustments(
    menu_item_id: Optional[UUID] = None,
    limit: int = Query(RECENT_ADJUSTMENTS_LIMIT, ge=1, le=100),
):
    """Most recent stock adjustments, newest first, for all items or a single one."""
    try:
        entries = await recent_adjustments(menu_item_id=menu_item_id, limit=limit)
        return SuccessResponse(data=[adjustment_log_response(e).model_dump() for e in entries])
    except Exception as e:
        log.error(f"Error fetching inventory logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to load inventory changes.")


@router.post("/adjustments", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_adjustment(request_data: StockAdjustmentRequest):
    """
    Applies a signed stock change with a reason. The new stock is computed from
    the stored value at write time, not from what the admin saw on screen.
    """
    try:
        result = await apply_adjustment(request_data)
        data = StockAdjustmentResponse(
            item=inventory_item_response(result.item),
            entry=adjustment_log_response(result.entry, menu_item_name=result.item.name),
            message=f"Stock for {result.item.name} has been updated.",
        ).model_dump()
        return SuccessResponse(data=data)
    except ServiceError:
        # Typed failures (missing reason, negative stock, conflicts) are rendered by the handler
        raise
    except Exception as e:
        log.error(f"Error adjusting stock for {request_data.menu_item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update stock.")


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_inventory_stock(menu_item_id: UUID):
    """Fetches the current stock for a specific menu item."""
    try:
        item = await get_stock(menu_item_id)
        return SuccessResponse(data=inventory_item_response(item).model_dump())
    except ServiceError:
        raise
    except Exception as e:
        log.error(f"Error fetching inventory: {e}")
        raise HTTPException(status_code=500, detail="Server failed to fetch inventory.")
