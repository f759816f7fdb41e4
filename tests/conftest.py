"""Root conftest: test configuration and an in-memory database per test.

Invariants:
    - DATABASE_URL points at SQLite before any marketplace module is imported
    - Every test gets a fresh in-memory database with all tables created
    - Sessions are configured like the application's (no expire on commit,
      no autoflush) so services behave the same as in production
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.config.database import Base
import marketplace.models  # noqa: F401
from marketplace.schemas.account import AccountCreate
from marketplace.schemas.enterprise import EnterpriseCreate, ExternalLinkCreate
from marketplace.schemas.product import ImageRef, ProductCreate
from marketplace.schemas.reference import ReferenceCreate
from marketplace.services import accounts, enterprises, products, reference


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


async def count_rows(db: AsyncSession, model, *where) -> int:
    """Number of rows of ``model`` matching ``where``."""
    query = select(func.count()).select_from(model)
    if where:
        query = query.where(*where)
    return (await db.execute(query)).scalar_one()


# --- Domain fixtures ---------------------------------------------------------


@pytest.fixture
async def lookups(test_db):
    """Two of each lookup row: roles, categories, car models, brands."""
    roles = [await reference.create_role(test_db, ReferenceCreate(name=n)) for n in ("buyer", "seller")]
    categories = [await reference.create_category(test_db, ReferenceCreate(name=n)) for n in ("Engine", "Brakes")]
    car_models = [await reference.create_car_model(test_db, ReferenceCreate(name=n)) for n in ("Corolla", "Civic")]
    brands = [await reference.create_brand(test_db, ReferenceCreate(name=n)) for n in ("Bosch", "Denso")]
    return SimpleNamespace(
        roles=[r.id for r in roles],
        categories=[c.id for c in categories],
        car_models=[c.id for c in car_models],
        brands=[b.id for b in brands],
    )


def account_data(**overrides) -> AccountCreate:
    data = {
        "username": "seller",
        "email": "seller@example.com",
        "phone": "+5600000000",
        "password_hash": "hashed",
    }
    data.update(overrides)
    return AccountCreate(**data)


def enterprise_data(**overrides) -> EnterpriseCreate:
    data = {
        "tax_id": "76.111.111-1",
        "address": "1 Main Street",
        "representative_name": "Alex Rep",
        "representative_id": "11.111.111-1",
    }
    data.update(overrides)
    return EnterpriseCreate(**data)


def product_data(enterprise_id: int, lookups, **overrides) -> ProductCreate:
    """A product that satisfies the catalog predicate."""
    data = {
        "name": "Oil filter",
        "stock": 10,
        "price": Decimal("12.50"),
        "enterprise_id": enterprise_id,
        "category_ids": [lookups.categories[0]],
        "car_model_ids": [lookups.car_models[0]],
        "brand_ids": [lookups.brands[0]],
        "images": [ImageRef(url="https://img.example/1.png")],
    }
    data.update(overrides)
    return ProductCreate(**data)


@pytest.fixture
async def account(test_db, lookups):
    return await accounts.create_account(test_db, account_data(role_ids=[lookups.roles[1]]))


@pytest.fixture
async def enterprise(test_db, account):
    return await enterprises.create_enterprise(
        test_db,
        enterprise_data(
            account_id=account.id,
            links=[
                ExternalLinkCreate(name="Website", url="https://shop.example"),
                ExternalLinkCreate(name="Instagram", url="https://instagram.com/shop"),
            ],
        ),
    )


@pytest.fixture
async def product(test_db, enterprise, lookups):
    return await products.create_product(test_db, product_data(enterprise.id, lookups))


@pytest.fixture
async def client(test_session_factory):
    """FastAPI test client with the DB dependency overridden."""
    from httpx import ASGITransport, AsyncClient

    from marketplace.config.database import get_db
    from marketplace.main import app

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
