"""
Seed demo data.

WARNING: wipes orders, stock records, products and users first.
Demo orders go through OrderService, so stock levels reflect them.

Creates:
1. Users - one admin, two staff (password 123456)
2. Products - a small stationery/office catalog
3. Inventory - 50 units each (ink: 5, reorder level 3)
4. Orders - one completed, one processing

Usage:
    python -m scripts.seed_all
"""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import delete

from app.database import get_db_session, init_db
from app.models.user import User, UserRole
from app.models.product import Product
from app.models.inventory import Inventory
from app.models.order import Order, OrderItem, OrderStatus
from app.core.security import get_password_hash
from app.services.order_service import OrderService


DEMO_PASSWORD = "123456"

USERS = [
    {"name": "Admin", "email": "admin@example.com", "role": UserRole.ADMIN},
    {"name": "Ravi", "email": "staff1@example.com", "role": UserRole.STAFF},
    {"name": "Suresh", "email": "staff2@example.com", "role": UserRole.STAFF},
]

PRODUCTS = [
    {"name": "A4 Paper Bundle", "sku": "PAPER-A4", "category": "Stationery", "price": "280", "cost": "200", "unit": "pack"},
    {"name": "Notebook 200 Pages", "sku": "NOTE-200", "category": "Stationery", "price": "60", "cost": "40", "unit": "pcs"},
    {"name": "Blue Ball Pen", "sku": "PEN-BLUE", "category": "Stationery", "price": "10", "cost": "6", "unit": "pcs"},
    {"name": "Printer Ink Black", "sku": "INK-BLK", "category": "Electronics", "price": "850", "cost": "650", "unit": "pcs"},
    {"name": "Stapler Machine", "sku": "STAPLER", "category": "Office", "price": "120", "cost": "90", "unit": "pcs"},
    {"name": "Marker Pen", "sku": "MARKER", "category": "Office", "price": "35", "cost": "25", "unit": "pcs"},
]


async def clear_data(session) -> None:
    print("Clearing existing data...")
    for model in (OrderItem, Order, Inventory, Product, User):
        await session.execute(delete(model))
    await session.commit()


async def seed_users(session) -> dict:
    users = {}
    for data in USERS:
        user = User(
            name=data["name"],
            email=data["email"],
            password_hash=get_password_hash(DEMO_PASSWORD),
            role=data["role"].value,
        )
        session.add(user)
        users[data["email"]] = user
    await session.commit()
    print(f"  Created {len(users)} users")
    return users


async def seed_products(session, admin: User) -> list:
    products = []
    for data in PRODUCTS:
        product = Product(
            name=data["name"],
            sku=data["sku"],
            category=data["category"],
            price=Decimal(data["price"]),
            cost=Decimal(data["cost"]),
            unit=data["unit"],
            created_by=admin.id,
        )
        session.add(product)
        products.append(product)
    await session.flush()

    for product in products:
        is_ink = "INK" in product.sku
        session.add(
            Inventory(
                product_id=product.id,
                quantity=5 if is_ink else 50,
                reorder_level=3 if is_ink else 10,
                location="Main Store",
                updated_by=admin.id,
            )
        )
    await session.commit()
    print(f"  Created {len(products)} products with stock")
    return products


async def seed_orders(session, users: dict, products: list) -> None:
    service = OrderService(session)

    order1 = await service.create_order(
        items=[
            {"product_id": products[0].id, "quantity": 2},
            {"product_id": products[2].id, "quantity": 10},
        ],
        notes="Demo order - completed",
        created_by=users["staff1@example.com"].id,
    )
    await service.update_order_status(order1.id, OrderStatus.COMPLETED)

    order2 = await service.create_order(
        items=[
            {"product_id": products[3].id, "quantity": 1},
            {"product_id": products[1].id, "quantity": 5},
        ],
        discount=Decimal("50"),
        notes="Demo order - processing",
        created_by=users["staff2@example.com"].id,
    )
    await service.update_order_status(order2.id, OrderStatus.PROCESSING)
    print("  Created 2 orders")


async def main():
    print("Seeding demo data...")
    await init_db()

    async with get_db_session() as session:
        await clear_data(session)
        users = await seed_users(session)
        products = await seed_products(session, users["admin@example.com"])
        await seed_orders(session, users, products)

    print("Seed completed successfully!")
    for data in USERS:
        print(f"  {data['role'].value:<6}: {data['email']} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
