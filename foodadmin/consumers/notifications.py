import logging
from typing import Any, Dict

from foodadmin.events.bus import EventBus

log = logging.getLogger("foodadmin.alerts")


async def handle_low_stock_alert(event_type: str, event: Dict[str, Any]):
    payload = event["payload"]
    log.warning(
        f"LOW STOCK: '{payload.get('name')}' has {payload.get('stock_quantity')} remaining "
        f"(threshold {payload.get('threshold')})."
    )


async def handle_order_status_changed(event_type: str, event: Dict[str, Any]):
    payload = event["payload"]
    log.info(f"Order {payload.get('order_id')} status updated to {payload.get('new_status')}")


def register_default_subscribers(bus: EventBus) -> None:
    bus.subscribe("inventory.low_stock_alert.v1", handle_low_stock_alert)
    bus.subscribe("order.status_changed.v1", handle_order_status_changed)
