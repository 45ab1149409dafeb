import asyncio
import gc
import pytest
from datetime import datetime
from decimal import Decimal
from fastapi.testclient import TestClient
from types import SimpleNamespace
from unittest.mock import patch, AsyncMock
from uuid import uuid4

from foodadmin.api.v1.orders import order_changes_socket
from foodadmin.core.errors import (
    ConcurrentModification,
    MenuItemNotFound,
    MissingReason,
    NegativeStock,
    OrderNotFound,
    PersistenceFailure,
)
from foodadmin.events.bus import event_bus
from foodadmin.main import app
from foodadmin.models.menu import MenuCategory
from foodadmin.models.order import OrderStatus
from foodadmin.services.inventory_service import InventoryOverview, StockAdjustment


@pytest.fixture
def client():
    return TestClient(app)


def fake_item(stock=8, name="Paneer Wrap"):
    return SimpleNamespace(
        id=uuid4(),
        name=name,
        description="",
        price=Decimal("149.00"),
        category=MenuCategory.LUNCH,
        stock_quantity=stock,
        is_available=stock > 0,
        image_url=None,
        created_at=datetime(2024, 5, 1, 9, 30),
        updated_at=datetime(2024, 5, 1, 9, 30),
    )


def fake_entry(item, change_amount=-2, previous_stock=10, deleted=False):
    entry = SimpleNamespace(
        id=uuid4(),
        menu_item_id=item.id,
        change_amount=change_amount,
        previous_stock=previous_stock,
        new_stock=previous_stock + change_amount,
        reason="Damaged goods",
        created_at=datetime(2024, 5, 1, 10, 0),
    )
    if not deleted:
        entry.menu_item_name = item.name
    return entry


class TestInventoryRoutes:
    def test_adjustment_success(self, client):
        item = fake_item(stock=8)
        with patch('foodadmin.api.v1.inventory.apply_adjustment', new_callable=AsyncMock) as mock_apply:
            mock_apply.return_value = StockAdjustment(item=item, entry=fake_entry(item))

            response = client.post("/api/v1/inventory/adjustments", json={
                "menu_item_id": str(item.id),
                "change_amount": -2,
                "reason": "Damaged goods",
            })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["item"]["stock_quantity"] == 8
        assert data["entry"]["previous_stock"] == 10
        assert data["entry"]["menu_item_name"] == "Paneer Wrap"
        request = mock_apply.call_args.args[0]
        assert request.change_amount == -2

    @pytest.mark.parametrize("error, status_code, code", [
        (MissingReason(), 400, "missing_reason"),
        (NegativeStock("Stock quantity cannot be negative"), 400, "negative_stock"),
        (MenuItemNotFound(), 404, "not_found"),
        (ConcurrentModification(), 409, "concurrent_modification"),
        (PersistenceFailure(), 503, "persistence_failure"),
    ])
    def test_adjustment_errors_are_typed(self, client, error, status_code, code):
        with patch('foodadmin.api.v1.inventory.apply_adjustment', new_callable=AsyncMock) as mock_apply:
            mock_apply.side_effect = error
            response = client.post("/api/v1/inventory/adjustments", json={
                "menu_item_id": str(uuid4()),
                "change_amount": -20,
                "reason": "",
            })

        assert response.status_code == status_code
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == code

    def test_adjustment_requires_whole_number(self, client):
        response = client.post("/api/v1/inventory/adjustments", json={
            "menu_item_id": str(uuid4()),
            "change_amount": 1.5,
            "reason": "Restocking",
        })
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    def test_overview(self, client):
        low, plenty = fake_item(stock=3, name="Samosa"), fake_item(stock=40)
        with patch('foodadmin.api.v1.inventory.inventory_overview', new_callable=AsyncMock) as mock_overview:
            mock_overview.return_value = InventoryOverview(
                items=[low, plenty],
                low_stock=[low],
                recent_adjustments=[fake_entry(low), fake_entry(plenty, deleted=True)],
            )
            response = client.get("/api/v1/inventory/?threshold=5")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["threshold"] == 5
        assert [i["name"] for i in data["low_stock"]] == ["Samosa"]
        assert [e["menu_item_name"] for e in data["recent_adjustments"]] == ["Samosa", "Deleted item"]
        mock_overview.assert_awaited_once_with(threshold=5, limit=20)

    def test_adjustment_log_limit_is_bounded(self, client):
        response = client.get("/api/v1/inventory/adjustments?limit=0")
        assert response.status_code == 422

    def test_stock_not_found(self, client):
        with patch('foodadmin.api.v1.inventory.get_stock', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = MenuItemNotFound("Menu item not found.")
            response = client.get(f"/api/v1/inventory/{uuid4()}")
        assert response.status_code == 404


class TestMenuRoutes:
    def test_create_menu_item(self, client):
        with patch('foodadmin.api.v1.menu.create_menu_item', new_callable=AsyncMock) as mock_create:
            mock_create.return_value = fake_item(stock=12)
            response = client.post("/api/v1/menu/", json={
                "name": "Paneer Wrap",
                "price": 149,
                "category": "lunch",
                "stock_quantity": 12,
            })

        assert response.status_code == 201
        assert response.json()["data"]["is_available"] is True

    def test_create_rejects_unknown_category(self, client):
        response = client.post("/api/v1/menu/", json={"name": "Brunch Plate", "price": 10, "category": "brunch"})
        assert response.status_code == 422

    def test_list_menu_by_category(self, client):
        with patch('foodadmin.api.v1.menu.list_menu_items', new_callable=AsyncMock) as mock_list:
            mock_list.return_value = [fake_item()]
            response = client.get("/api/v1/menu/?category=lunch")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1
        mock_list.assert_awaited_once_with(MenuCategory.LUNCH)

    def test_delete_missing_item(self, client):
        with patch('foodadmin.api.v1.menu.delete_menu_item', new_callable=AsyncMock) as mock_delete:
            mock_delete.side_effect = MenuItemNotFound()
            response = client.delete(f"/api/v1/menu/{uuid4()}")
        assert response.status_code == 404


class TestOrderRoutes:
    def test_get_order_success(self, client):
        """Test order retrieval"""
        with patch('foodadmin.api.v1.orders.get_order_by_id', new_callable=AsyncMock) as mock_get_order:
            item = SimpleNamespace(
                menu_item=SimpleNamespace(name="Paneer Wrap"),
                quantity=2,
                price_at_time=Decimal("149.00"),
                line_total=Decimal("298.00"),
            )
            mock_get_order.return_value = SimpleNamespace(
                id=uuid4(),
                user_id="user-12345",
                customer_name="Asha",
                customer_email="asha@example.com",
                status=OrderStatus.PENDING,
                total_amount=Decimal("298.00"),
                payment_method="card",
                notes=None,
                items=[item],
                created_at="2024-05-01T10:30:00",
            )

            response = client.get(f"/api/v1/orders/{uuid4()}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["items"][0] == {"name": "Paneer Wrap", "quantity": 2, "price": "149.00", "line_total": "298.00"}

    def test_get_order_not_found(self, client):
        with patch('foodadmin.api.v1.orders.get_order_by_id', new_callable=AsyncMock) as mock_get_order:
            mock_get_order.return_value = None
            response = client.get(f"/api/v1/orders/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_update_status(self, client):
        with patch('foodadmin.api.v1.orders.update_order_status', new_callable=AsyncMock) as mock_update:
            mock_update.return_value = SimpleNamespace(id=uuid4(), status=OrderStatus.READY)
            response = client.patch(f"/api/v1/orders/{uuid4()}/status", json={"status": "ready"})

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ready"
        assert mock_update.call_args.args[1] == OrderStatus.READY

    def test_update_status_of_unknown_order(self, client):
        with patch('foodadmin.api.v1.orders.update_order_status', new_callable=AsyncMock) as mock_update:
            mock_update.side_effect = OrderNotFound()
            response = client.patch(f"/api/v1/orders/{uuid4()}/status", json={"status": "preparing"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_update_status_rejects_unknown_status(self, client):
        response = client.patch(f"/api/v1/orders/{uuid4()}/status", json={"status": "lost"})
        assert response.status_code == 422

    def test_live_feed_pushes_order_changes(self, client):
        with client.websocket_connect("/api/v1/orders/live") as ws:
            ws.portal.call(event_bus.publish, "order.status_changed.v1", {
                "event_type": "order.status_changed.v1",
                "payload": {"new_status": "ready"},
            })
            ws.portal.call(event_bus.publish, "inventory.stock_adjusted.v1", {"payload": {}})
            ws.portal.call(event_bus.publish, "order.status_changed.v1", {"payload": {"new_status": "delivered"}})

            first = ws.receive_json()
            second = ws.receive_json()

        assert first["payload"]["new_status"] == "ready"
        # Inventory events are not part of the order feed
        assert second["payload"]["new_status"] == "delivered"


@pytest.mark.asyncio
async def test_live_feed_collects_failed_send():
    """A socket that dies mid-send is cleaned up without a stray task error."""
    loop = asyncio.get_running_loop()
    reported = []
    loop.set_exception_handler(lambda loop, context: reported.append(context["message"]))
    subscribers_before = event_bus.subscriber_count("order.status_changed.v1")

    websocket = AsyncMock()
    websocket.send_json.side_effect = RuntimeError("connection reset")

    async def receive():
        await event_bus.publish("order.status_changed.v1", {"payload": {"new_status": "ready"}})
        # Let the sender pick the event up and fail
        for _ in range(3):
            await asyncio.sleep(0)
        return {"type": "websocket.disconnect"}

    websocket.receive = receive
    try:
        await order_changes_socket(websocket)
        gc.collect()
    finally:
        loop.set_exception_handler(None)

    websocket.send_json.assert_awaited_once()
    assert event_bus.subscriber_count("order.status_changed.v1") == subscribers_before
    assert reported == []
