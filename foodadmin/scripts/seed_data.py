# foodadmin/scripts/seed_data.py
import asyncio
from decimal import Decimal
from foodadmin.core.db import init_db, close_db
from foodadmin.models.menu import MenuItem, MenuCategory
from foodadmin.models.order import Order, OrderItem, OrderStatus
from foodadmin.schemas.inventory import StockAdjustmentRequest
from foodadmin.services.inventory_service import apply_adjustment

MENU = [
    ("Masala Omelette", MenuCategory.BREAKFAST, "89.00", 40),
    ("Paneer Wrap", MenuCategory.LUNCH, "149.00", 8),
    ("Chili Paneer Rice", MenuCategory.DINNER, "199.00", 25),
    ("Samosa", MenuCategory.SNACKS, "25.00", 0),
    ("Cold Coffee", MenuCategory.BEVERAGES, "79.00", 60),
    ("Gulab Jamun", MenuCategory.DESSERTS, "59.00", 12),
]

async def seed():
    items = {}
    any_created = False
    for name, category, price, stock in MENU:
        item, created = await MenuItem.get_or_create(
            name=name,
            defaults={"category": category, "price": Decimal(price), "stock_quantity": stock, "is_available": stock > 0},
        )
        items[name] = item
        any_created = any_created or created
        print("Menu item:", name, str(item.id), "(new)" if created else "(existing)")

    if not any_created:
        print("Menu already seeded; skipping adjustments and orders.")
        return

    # Go through the workflow so the ledger has history to show
    await apply_adjustment(StockAdjustmentRequest(menu_item_id=items["Gulab Jamun"].id, change_amount=-4, reason="Damaged goods"))
    await apply_adjustment(StockAdjustmentRequest(menu_item_id=items["Cold Coffee"].id, change_amount=20, reason="Restocking"))

    order = await Order.create(
        user_id="user-12345",
        customer_name="Demo Customer",
        customer_email="demo@example.com",
        status=OrderStatus.PENDING,
        payment_method="card",
        notes="Less spicy please",
    )
    total = Decimal("0")
    for name, qty in (("Paneer Wrap", 2), ("Cold Coffee", 1)):
        item = items[name]
        await OrderItem.create(order=order, menu_item=item, quantity=qty, price_at_time=item.price)
        total += item.price * qty
    order.total_amount = total
    await order.save(update_fields=["total_amount"])

    print("Order:", str(order.id), "total", total)
    print("Seed complete.")

async def main():
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
