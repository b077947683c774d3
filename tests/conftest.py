import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.data.models  # noqa: F401
from storefront.api import register
from storefront.api.routers.addresses import get_zip_code_cache, get_zip_code_client
from storefront.data.database import Base, get_db, make_engine
from storefront.domain.schemas import CustomerCreate, ProductCreate
from storefront.services.customer_service import CustomerService
from storefront.services.product_service import ProductService
from storefront.services.stock_ledger import StockLedger
from storefront.services.zip_code_cache import ZipCodeCache


class FakeRedis:
    """Just enough of redis.Redis for the ZIP cache."""

    def __init__(self):
        self.store = {}
        self.down = False
        self.set_calls = []

    def get(self, name):
        if self.down:
            raise RedisConnectionError("connection refused")
        return self.store.get(name)

    def set(self, name, value, **kwargs):
        if self.down:
            raise RedisConnectionError("connection refused")
        self.set_calls.append((name, value, kwargs))
        self.store[name] = value
        return True


class FakeZipCodeClient:
    def __init__(self, locations=None):
        self.locations = dict(locations or {})
        self.calls = []

    def get(self, zip_code):
        self.calls.append(zip_code)
        return self.locations.get(zip_code)


@pytest.fixture()
def engine():
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def fake_redis():
    return FakeRedis()


@pytest.fixture()
def zip_cache(fake_redis):
    return ZipCodeCache(client=fake_redis)


@pytest.fixture()
def zip_client():
    return FakeZipCodeClient(
        {
            "73301": {"city": "Austin", "state": "TX"},
            "10001": {"city": "New York", "state": "NY"},
        }
    )


@pytest.fixture()
def customer(db):
    return CustomerService(db).register(CustomerCreate(name="John Doe", email="john.doe@gmail.com"))


@pytest.fixture()
def make_product(db):
    def _make(name="Keyboard", price=2999, stock=10, description=None):
        product = ProductService(db).add_product(
            ProductCreate(name=name, description=description, price=price)
        )
        if stock:
            StockLedger(db).add_stock(product.inventory_id, stock)
        return ProductService(db).get_product(product.id)

    return _make


@pytest.fixture()
def client(session_factory, zip_client, zip_cache):
    app = register(FastAPI())

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_zip_code_client] = lambda: zip_client
    app.dependency_overrides[get_zip_code_cache] = lambda: zip_cache
    return TestClient(app)
