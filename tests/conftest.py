"""Pytest configuration and fixtures"""
import os
import tempfile
import uuid
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

# Test environment, before any shopcart import reads settings
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.gettempdir(), f'shopcart-test-{os.getpid()}.db')}",
)
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
os.environ.setdefault("PRODUCT_SERVICE_URL", "http://product-service.test")
os.environ.setdefault("CART_ADMIN_KEY", "test_admin_key")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from shopcart.data.database import Base
from shopcart.data.models import CartModel  # noqa: F401
from shopcart.domain.context import CartContext
from shopcart.domain.errors import ProductNotFound
from shopcart.domain.schemas import Cart, CartItem, Product, Requirement
from shopcart.services.cart_cache import CartCache
from shopcart.services.cart_service import CartService
from shopcart.services.lock_service import LockService
from shopcart.services.notification_service import CartNotifier
from shopcart.services.product_client import ProductClient


PRODUCTS = {
    # no stockAmount = no stock check
    "prod-tee": {
        "_id": "prod-tee",
        "name": "Plain tee",
        "type": "product",
        "subtype": "physical",
        "url": "plain-tee",
        "properties": {"size": "M"},
        "prices": {"price": 20.0, "priceNoTax": 16.26, "tax": 3.74},
    },
    "prod-limited": {
        "_id": "prod-limited",
        "name": "Limited print",
        "type": "product",
        "subtype": "physical",
        "stockAmount": 3,
        "prices": {"price": 120.0},
    },
    "prod-ebook": {
        "_id": "prod-ebook",
        "name": "Ebook",
        "type": "product",
        "subtype": "digital",
        "stockAmount": 1,
    },
    "prod-sub": {
        "_id": "prod-sub",
        "name": "Coffee subscription",
        "type": "subscription",
        "stockAmount": -1,
        "prices": {"price": 25.0},
    },
}


def make_token() -> str:
    return uuid.uuid4().hex


def make_cart(token: str | None = None, items=None, **fields) -> Cart:
    now = fields.pop("when", datetime.now(timezone.utc))
    return Cart(
        hash=token or make_token(),
        ip=fields.pop("ip", "10.0.0.1"),
        date_created=fields.pop("date_created", now),
        date_updated=fields.pop("date_updated", now),
        items=items or [],
        **fields,
    )


def make_item(item_id: str = "prod-tee", amount: float = 1, requirements=None, **fields) -> CartItem:
    return CartItem(
        id=item_id,
        amount=amount,
        requirements=[Requirement(**r) for r in (requirements or [])],
        **fields,
    )


@pytest.fixture
def session_factory(tmp_path):
    """SQLite file database, one per test"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'carts.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mock_product_client():
    """Product client serving PRODUCTS"""
    client = Mock(spec=ProductClient)

    def fetch(product_id):
        if product_id not in PRODUCTS:
            raise ProductNotFound(product_id)
        return Product.model_validate(PRODUCTS[product_id])

    client.fetch_product.side_effect = fetch
    return client


@pytest.fixture
def mock_cache():
    cache = Mock(spec=CartCache)
    cache.get_me.return_value = None
    return cache


@pytest.fixture
def mock_notifier():
    return Mock(spec=CartNotifier)


@pytest.fixture
def sweep_lock():
    """Sweep lock that is free by default"""
    lock = Mock(spec=LockService)
    lock.acquire.return_value = True
    lock.release.return_value = True
    return lock


@pytest.fixture
def service(db, mock_product_client, mock_cache, mock_notifier):
    return CartService(
        db=db,
        product_client=mock_product_client,
        cache=mock_cache,
        notifier=mock_notifier,
    )


@pytest.fixture
def ctx():
    return CartContext(token=make_token(), ip="127.0.0.1")
