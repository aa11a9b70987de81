"""
Shared fixtures.

The app reads its settings at import time, so the environment is pointed at a
throwaway SQLite file before anything from `app` is imported.
"""
import os
import tempfile
from decimal import Decimal
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="inventoryhub-tests-")
_DB_PATH = Path(_DB_DIR) / "test.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ALLOW_ADMIN_SIGNUP"] = "true"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select

from app.database import Base, engine, async_session_factory
from app import models  # noqa: F401
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models.inventory import Inventory
from app.models.product import Product
from app.models.user import User, UserRole


@pytest.fixture(autouse=True)
async def setup_database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest.fixture
async def db_session():
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    async def _make_user(
        email: str,
        role: UserRole = UserRole.STAFF,
        name: str = "Test User",
        password: str = "secret123",
        is_active: bool = True,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role.value,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def admin_user(make_user):
    return await make_user("admin@example.com", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
async def staff_user(make_user):
    return await make_user("staff1@example.com", name="Ravi")


@pytest.fixture
async def other_staff_user(make_user):
    return await make_user("staff2@example.com", name="Suresh")


@pytest.fixture
def make_product(db_session, admin_user):
    """Create a product, optionally with a stock record holding `stock` units."""
    counter = {"n": 0}

    async def _make_product(
        price="100.00",
        stock=None,
        name=None,
        sku=None,
        category="General",
        reorder_level=10,
        is_deleted=False,
    ) -> Product:
        counter["n"] += 1
        product = Product(
            name=name or f"Product {counter['n']}",
            sku=sku or f"SKU-{counter['n']:03d}",
            category=category,
            price=Decimal(str(price)),
            is_deleted=is_deleted,
            created_by=admin_user.id,
        )
        db_session.add(product)
        await db_session.flush()

        if stock is not None:
            db_session.add(
                Inventory(
                    product_id=product.id,
                    quantity=stock,
                    reorder_level=reorder_level,
                )
            )
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make_product


@pytest.fixture
def stock_of():
    """Read a product's persisted quantity through a separate session (None if no record)."""
    async def _stock_of(product_id):
        async with async_session_factory() as session:
            result = await session.execute(
                select(Inventory.quantity).where(Inventory.product_id == product_id)
            )
            return result.scalar_one_or_none()

    return _stock_of


def auth_headers(user: User) -> dict:
    token = create_access_token(
        subject=user.id,
        additional_claims={"email": user.email, "role": user.role},
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return auth_headers(staff_user)


@pytest.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def headers_for():
    return auth_headers
