from datetime import datetime
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.database import build_engine, build_session_factory, init_db
from storefront import models  # noqa: F401  (registers tables on Base.metadata)
from storefront.config import Settings
from storefront.repository import CatalogRepository
from storefront.routes import cart_router, catalog_router, health_router, order_router


class DictRedis:
    """In-process stand-in for the few redis.Redis calls the cart store makes."""

    def __init__(self):
        self.data = {}
        self.expiries = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiries[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.expiries.pop(key, None)
                removed += 1
        return removed

    def ping(self):
        return True


class RecordingProducer:
    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    def publish(self, topic, event):
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.published.append((topic, event))


@pytest.fixture()
def engine():
    engine = build_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def catalog(db):
    return CatalogRepository(db)


@pytest.fixture()
def products(catalog, db):
    """Three shirts and a dress. P1 is the 500.00 shirt used throughout."""
    created = {
        "P1": catalog.create_product(
            product_id="P1",
            name="Linen Shirt",
            price=Decimal("500.00"),
            category="shirts",
            sizes=["S", "M", "L"],
            colors=["red", "blue"],
            images=["/img/linen-1.jpg", "/img/linen-2.jpg"],
            featured=True,
            rating=4.8,
            reviews=40,
            created_at=datetime(2026, 1, 1),
        ),
        "P2": catalog.create_product(
            product_id="P2",
            name="Oxford Shirt",
            price=Decimal("250.00"),
            category="shirts",
            images=["/img/oxford-1.jpg"],
            rating=4.1,
            reviews=90,
            created_at=datetime(2026, 3, 1),
        ),
        "P3": catalog.create_product(
            product_id="P3",
            name="Plain Tee",
            price=Decimal("199.50"),
            category="shirts",
            images=[],
            rating=3.9,
            reviews=5,
            created_at=datetime(2026, 2, 1),
        ),
        "D1": catalog.create_product(
            product_id="D1",
            name="Anarkali Dress",
            price=Decimal("1899.00"),
            category="dresses",
            images=["/img/anarkali-1.jpg"],
            featured=True,
            rating=4.9,
            reviews=12,
            created_at=datetime(2026, 4, 1),
        ),
    }
    db.commit()
    return created


def make_settings(**overrides):
    values = {"database_url": "sqlite:///:memory:", "cart_backend": "redis", "kafka_enabled": False}
    values.update(overrides)
    return Settings(**values)


def make_app(session_factory, settings, redis_client=None, producer=None):
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.redis = redis_client
    app.state.producer = producer
    return app


@pytest.fixture()
def redis_client():
    return DictRedis()


@pytest.fixture()
def producer():
    return RecordingProducer()


@pytest.fixture()
def client(session_factory, products, redis_client, producer):
    app = make_app(session_factory, make_settings(), redis_client=redis_client, producer=producer)
    return TestClient(app)


@pytest.fixture()
def cookie_client(session_factory, products):
    app = make_app(session_factory, make_settings(cart_backend="cookie"))
    return TestClient(app)


@pytest.fixture()
def client_factory(session_factory, products):
    """Build a TestClient with custom settings or collaborators."""

    def factory(redis_client=None, producer=None, **settings):
        app = make_app(
            session_factory,
            make_settings(**settings),
            redis_client=redis_client if redis_client is not None else DictRedis(),
            producer=producer,
        )
        return TestClient(app)

    return factory
