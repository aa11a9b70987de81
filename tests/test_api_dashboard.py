from decimal import Decimal


async def test_dashboard_stats(client, staff_headers, make_product, monkeypatch):
    from app.config import settings

    monkeypatch.setattr(settings, "RECENT_ORDERS_LIMIT", 2)
    pen = await make_product(price="10.00", stock=100)
    ink = await make_product(price="850.00", stock=5, reorder_level=3)
    await make_product(stock=1, is_deleted=True)

    for items in (
        [{"product_id": str(pen.id), "quantity": 10}],
        [{"product_id": str(ink.id), "quantity": 2}],
        [{"product_id": str(pen.id), "quantity": 1}, {"product_id": str(ink.id), "quantity": 1}],
    ):
        response = await client.post("/api/orders", json={"items": items}, headers=staff_headers)
        assert response.status_code == 201

    response = await client.get("/api/dashboard/stats", headers=staff_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total_products"] == 2
    # ink at 2 (reorder 3) and the deleted product's record at 1 (reorder 10)
    assert body["low_stock_count"] == 2
    assert body["total_orders"] == 3
    assert Decimal(body["total_revenue"]) == Decimal("100") + Decimal("1700") + Decimal("860")
    assert len(body["recent_orders"]) == 2
    assert body["recent_orders"][0]["creator"]["email"] == "staff1@example.com"


async def test_dashboard_empty(client, staff_headers):
    response = await client.get("/api/dashboard/stats", headers=staff_headers)

    body = response.json()
    assert body["total_orders"] == 0
    assert Decimal(body["total_revenue"]) == Decimal("0")
    assert body["recent_orders"] == []


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "connected"


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert "InventoryHub" in response.json()["message"]
