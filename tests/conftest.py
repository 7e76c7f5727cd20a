"""
Shared fixtures: an in-memory MongoDB per test, staff accounts, products
and an HTTP client bound to the FastAPI app.
"""

import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "hardware_pos_test")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from hardware_pos.core.database import DOCUMENT_MODELS, init_db
from hardware_pos.core.security import create_access_token
from hardware_pos.main import app
from hardware_pos.models.product import Product, ProductCategory, Unit
from hardware_pos.models.user import User, UserRole
from hardware_pos.schemas.sale import SaleCreate


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    await init_db(client)
    for model in DOCUMENT_MODELS:
        await model.delete_all()
    yield client


@pytest.fixture
async def staff(db):
    user = User(email="cashier@hardwarestore.com", username="cashier", role=UserRole.STAFF)
    await user.insert()
    return user


@pytest.fixture
async def manager(db):
    user = User(email="manager@hardwarestore.com", username="manager", role=UserRole.ADMIN)
    await user.insert()
    return user


@pytest.fixture
def make_product(db):
    async def _make(**overrides):
        fields = {
            "name": "Claw Hammer",
            "unit": Unit.PIECE,
            "category": ProductCategory.TOOLS,
            "purchase_price": 60.0,
            "sale_price": 100.0,
            "quantity": 10,
        }
        fields.update(overrides)
        product = Product(**fields)
        await product.insert()
        return product
    return _make


@pytest.fixture
def basket():
    """Build a SaleCreate from (product, quantity, extra line fields) tuples."""
    def _basket(*lines, **fields):
        items = []
        for line in lines:
            product, quantity, *extra = line
            item = {"product_id": product.id, "quantity": quantity}
            if extra:
                item.update(extra[0])
            items.append(item)
        fields.setdefault("amount_paid", 100000)
        return SaleCreate(items=items, **fields)
    return _basket


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth():
    return auth_headers
