import asyncio
from decimal import Decimal
import uuid

import pytest
from sqlalchemy import select, func

from app.core.exceptions import (
    AccessDeniedError,
    InsufficientStockError,
    InvalidRequestError,
    InvalidStatusError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from app.database import async_session_factory
from app.models.inventory import StockDirection
from app.models.order import Order, OrderStatus
from app.models.user import UserRole
from app.services.inventory_service import InventoryService
from app.services.order_service import OrderService


async def _order_count() -> int:
    async with async_session_factory() as session:
        return await session.scalar(select(func.count(Order.id)))


class TestCreateOrder:

    async def test_totals_and_stock(self, db_session, make_product, staff_user, stock_of):
        product = await make_product(price="100.00", stock=10)
        service = OrderService(db_session)

        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 3}],
            tax=Decimal("10"),
            discount=Decimal("5"),
            created_by=staff_user.id,
        )

        assert order.sub_total == Decimal("300.00")
        assert order.total == Decimal("305.00")
        assert order.status == OrderStatus.PLACED.value
        assert order.created_by == staff_user.id
        assert await stock_of(product.id) == 7

    async def test_line_items_snapshot_product(self, db_session, make_product, staff_user):
        pen = await make_product(price="10.00", stock=100, name="Blue Ball Pen", sku="PEN-BLUE")
        paper = await make_product(price="280.00", stock=50, name="A4 Paper Bundle", sku="PAPER-A4")
        service = OrderService(db_session)

        order = await service.create_order(
            items=[
                {"product_id": paper.id, "quantity": 2},
                {"product_id": pen.id, "quantity": 10},
            ],
            created_by=staff_user.id,
        )

        assert [(i.sku, i.name, i.price, i.quantity) for i in order.items] == [
            ("PAPER-A4", "A4 Paper Bundle", Decimal("280.00"), 2),
            ("PEN-BLUE", "Blue Ball Pen", Decimal("10.00"), 10),
        ]
        assert order.sub_total == sum(i.price * i.quantity for i in order.items)
        assert order.sub_total == Decimal("660.00")
        assert order.creator.email == staff_user.email

    async def test_snapshot_survives_product_changes(self, db_session, make_product, staff_user):
        product = await make_product(price="50.00", stock=5, name="Marker Pen")
        service = OrderService(db_session)

        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=staff_user.id,
        )
        product.price = Decimal("75.00")
        product.name = "Marker Pen XL"
        await db_session.commit()

        reloaded = await service.get_order_by_id(order.id, staff_user.id, UserRole.STAFF)
        assert reloaded.items[0].price == Decimal("50.00")
        assert reloaded.items[0].name == "Marker Pen"

    async def test_total_clamped_at_zero(self, db_session, make_product, staff_user):
        product = await make_product(price="20.00", stock=5)
        service = OrderService(db_session)

        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            discount=Decimal("100"),
            created_by=staff_user.id,
        )

        assert order.sub_total == Decimal("20.00")
        assert order.total == Decimal("0.00")

    async def test_repeated_product_is_decremented_cumulatively(
        self, db_session, make_product, staff_user, stock_of
    ):
        product = await make_product(stock=5)
        product_id = product.id
        staff_id = staff_user.id
        service = OrderService(db_session)

        order = await service.create_order(
            items=[
                {"product_id": product_id, "quantity": 2},
                {"product_id": product_id, "quantity": 2},
            ],
            created_by=staff_id,
        )
        assert len(order.items) == 2
        assert await stock_of(product_id) == 1

        with pytest.raises(InsufficientStockError):
            await service.create_order(
                items=[
                    {"product_id": product_id, "quantity": 1},
                    {"product_id": product_id, "quantity": 1},
                ],
                created_by=staff_id,
            )
        assert await stock_of(product_id) == 1

    async def test_inactive_product_can_be_ordered(self, db_session, make_product, staff_user):
        product = await make_product(stock=5)
        product.status = "inactive"
        await db_session.commit()
        service = OrderService(db_session)

        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=staff_user.id,
        )

        assert order.items[0].product_id == product.id

    async def test_insufficient_stock(self, db_session, make_product, staff_user, stock_of):
        product = await make_product(stock=2, name="Printer Ink Black")
        product_id = product.id
        service = OrderService(db_session)

        with pytest.raises(InsufficientStockError) as exc_info:
            await service.create_order(
                items=[{"product_id": product_id, "quantity": 5}],
                created_by=staff_user.id,
            )

        assert exc_info.value.available == 2
        assert exc_info.value.required == 5
        assert exc_info.value.product_id == product_id
        assert await stock_of(product_id) == 2
        assert await _order_count() == 0

    async def test_failure_on_later_item_rolls_back_earlier_items(
        self, db_session, make_product, staff_user, stock_of
    ):
        good = await make_product(stock=10)
        gone = await make_product(stock=10, is_deleted=True)
        good_id, gone_id = good.id, gone.id
        service = OrderService(db_session)

        with pytest.raises(ProductNotFoundError) as exc_info:
            await service.create_order(
                items=[
                    {"product_id": good_id, "quantity": 3},
                    {"product_id": gone_id, "quantity": 1},
                ],
                created_by=staff_user.id,
            )

        assert exc_info.value.product_id == gone_id
        assert await stock_of(good_id) == 10
        assert await _order_count() == 0

    async def test_stock_failure_on_later_item_restores_first(
        self, db_session, make_product, staff_user, stock_of
    ):
        first = await make_product(stock=10)
        second = await make_product(stock=1)
        first_id, second_id = first.id, second.id
        service = OrderService(db_session)

        with pytest.raises(InsufficientStockError):
            await service.create_order(
                items=[
                    {"product_id": first_id, "quantity": 4},
                    {"product_id": second_id, "quantity": 2},
                ],
                created_by=staff_user.id,
            )

        assert await stock_of(first_id) == 10
        assert await stock_of(second_id) == 1
        assert await _order_count() == 0

    async def test_unknown_product(self, db_session, staff_user):
        service = OrderService(db_session)
        missing = uuid.uuid4()

        with pytest.raises(ProductNotFoundError) as exc_info:
            await service.create_order(
                items=[{"product_id": missing, "quantity": 1}],
                created_by=staff_user.id,
            )

        assert str(missing) in exc_info.value.message

    @pytest.mark.parametrize(
        "items",
        [
            [],
            None,
            [{"quantity": 1}],
            [{"product_id": "not-a-uuid", "quantity": 1}],
            [{"product_id": str(uuid.uuid4()), "quantity": 0}],
            [{"product_id": str(uuid.uuid4()), "quantity": -2}],
            [{"product_id": str(uuid.uuid4()), "quantity": 1.5}],
            [{"product_id": str(uuid.uuid4())}],
        ],
    )
    async def test_malformed_cart(self, db_session, staff_user, items):
        service = OrderService(db_session)

        with pytest.raises(InvalidRequestError):
            await service.create_order(items=items, created_by=staff_user.id)

    async def test_negative_tax_rejected(self, db_session, make_product, staff_user, stock_of):
        product = await make_product(stock=5)
        service = OrderService(db_session)

        with pytest.raises(InvalidRequestError):
            await service.create_order(
                items=[{"product_id": product.id, "quantity": 1}],
                tax=Decimal("-1"),
                created_by=staff_user.id,
            )
        assert await stock_of(product.id) == 5


async def test_concurrent_orders_never_oversell(make_product, staff_user, other_staff_user, stock_of):
    product = await make_product(stock=5)
    product_id = product.id

    async def place(user_id):
        async with async_session_factory() as session:
            return await OrderService(session).create_order(
                items=[{"product_id": product_id, "quantity": 3}],
                created_by=user_id,
            )

    results = await asyncio.gather(
        place(staff_user.id),
        place(other_staff_user.id),
        return_exceptions=True,
    )

    placed = [r for r in results if isinstance(r, Order)]
    rejected = [r for r in results if isinstance(r, InsufficientStockError)]
    assert len(placed) == 1
    assert len(rejected) == 1
    assert rejected[0].available == 2
    assert rejected[0].required == 3
    assert await stock_of(product_id) == 2
    assert await _order_count() == 1


async def test_concurrent_orders_on_overlapping_products(
    make_product, staff_user, other_staff_user, stock_of
):
    a = await make_product(stock=10)
    b = await make_product(stock=10)
    a_id, b_id = a.id, b.id

    async def place(user_id, items):
        async with async_session_factory() as session:
            return await OrderService(session).create_order(items=items, created_by=user_id)

    # Opposite cart order on each side
    await asyncio.gather(
        place(staff_user.id, [{"product_id": a_id, "quantity": 1}, {"product_id": b_id, "quantity": 2}]),
        place(other_staff_user.id, [{"product_id": b_id, "quantity": 3}, {"product_id": a_id, "quantity": 4}]),
    )

    assert await stock_of(a_id) == 5
    assert await stock_of(b_id) == 5
    assert await _order_count() == 2


async def test_order_and_stock_out_adjustment_never_oversell(make_product, staff_user, stock_of):
    product = await make_product(stock=5)
    product_id = product.id

    async def place():
        async with async_session_factory() as session:
            return await OrderService(session).create_order(
                items=[{"product_id": product_id, "quantity": 3}],
                created_by=staff_user.id,
            )

    async def write_off():
        async with async_session_factory() as session:
            return await InventoryService(session).adjust_stock(
                product_id, StockDirection.OUT, 3
            )

    results = await asyncio.gather(place(), write_off(), return_exceptions=True)

    succeeded = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, InsufficientStockError)]
    assert len(succeeded) == 1
    assert len(rejected) == 1
    assert rejected[0].available == 2
    assert await stock_of(product_id) == 2
    assert await _order_count() == len([r for r in succeeded if isinstance(r, Order)])


async def test_first_order_on_product_without_stock_record(
    db_session, make_product, staff_user, stock_of
):
    product = await make_product()
    product_id = product.id
    service = OrderService(db_session)

    with pytest.raises(InsufficientStockError) as exc_info:
        await service.create_order(
            items=[{"product_id": product_id, "quantity": 1}],
            created_by=staff_user.id,
        )

    assert exc_info.value.available == 0
    assert await _order_count() == 0
    # The empty record is part of the rolled-back unit of work
    assert await stock_of(product_id) is None


class TestOrderStatus:

    async def test_any_status_can_follow_any_other(self, db_session, make_product, staff_user, stock_of):
        product = await make_product(stock=5)
        service = OrderService(db_session)
        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 2}],
            created_by=staff_user.id,
        )

        for status in ("completed", "placed", OrderStatus.CANCELLED, "processing"):
            order = await service.update_order_status(order.id, status)
            assert order.status == OrderStatus(status).value

        # Status changes never move stock
        assert await stock_of(product.id) == 3

    async def test_invalid_status(self, db_session, make_product, staff_user):
        product = await make_product(stock=5)
        service = OrderService(db_session)
        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=staff_user.id,
        )

        with pytest.raises(InvalidStatusError):
            await service.update_order_status(order.id, "shipped")

    async def test_status_checked_before_existence(self, db_session):
        service = OrderService(db_session)

        with pytest.raises(InvalidStatusError):
            await service.update_order_status(uuid.uuid4(), "shipped")
        with pytest.raises(OrderNotFoundError):
            await service.update_order_status(uuid.uuid4(), "completed")


class TestOrderReads:

    async def test_staff_cannot_read_other_staff_order(
        self, db_session, make_product, admin_user, staff_user, other_staff_user
    ):
        product = await make_product(stock=5)
        service = OrderService(db_session)
        order = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=staff_user.id,
        )

        with pytest.raises(AccessDeniedError):
            await service.get_order_by_id(order.id, other_staff_user.id, UserRole.STAFF.value)

        found = await service.get_order_by_id(order.id, admin_user.id, UserRole.ADMIN.value)
        assert found.id == order.id

        own = await service.get_order_by_id(order.id, staff_user.id, UserRole.STAFF.value)
        assert own.id == order.id

    async def test_not_found_before_access_check(self, db_session, staff_user):
        service = OrderService(db_session)

        with pytest.raises(OrderNotFoundError):
            await service.get_order_by_id(uuid.uuid4(), staff_user.id, UserRole.STAFF.value)

    async def test_list_scoping(
        self, db_session, make_product, admin_user, staff_user, other_staff_user
    ):
        product = await make_product(stock=10)
        service = OrderService(db_session)
        mine = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=staff_user.id,
        )
        theirs = await service.create_order(
            items=[{"product_id": product.id, "quantity": 1}],
            created_by=other_staff_user.id,
        )

        staff_orders = await service.get_orders(staff_user.id, UserRole.STAFF.value)
        assert [o.id for o in staff_orders] == [mine.id]

        admin_orders = await service.get_orders(admin_user.id, UserRole.ADMIN.value)
        assert [o.id for o in admin_orders] == [theirs.id, mine.id]
