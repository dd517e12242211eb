"""FastAPI dependencies.

Collaborators live on `app.state` (set by the lifespan in `storefront.main`,
or directly by tests): `settings`, `session_factory`, `redis` and `producer`.
"""

from typing import Iterator, Optional
from uuid import uuid4

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from shared.database import session_scope
from shared.kafka_client import BaseKafkaProducer
from storefront.cart_engine import CartEngine
from storefront.cart_repository import CartSession, CartStore, CookieCartStore, RedisCartStore
from storefront.config import Settings
from storefront.order_assembler import OrderAssembler
from storefront.repository import CatalogRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    yield from session_scope(request.app.state.session_factory)


def get_catalog(db: Session = Depends(get_db)) -> CatalogRepository:
    return CatalogRepository(db)


def get_producer(request: Request) -> Optional[BaseKafkaProducer]:
    return getattr(request.app.state, "producer", None)


def get_cart_session(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> CartSession:
    """Identify the client context; issue a session cookie when there is none."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        session_id = str(uuid4())
        response.set_cookie(settings.session_cookie_name, session_id, httponly=True, samesite="lax")
    return CartSession(
        session_id=session_id,
        response=response,
        client_state=request.cookies.get(settings.cart_cookie_name),
    )


def get_cart_store(
    request: Request,
    settings: Settings = Depends(get_settings),
    catalog: CatalogRepository = Depends(get_catalog),
) -> CartStore:
    if settings.cart_backend == "cookie":
        return CookieCartStore(
            catalog,
            cookie_name=settings.cart_cookie_name,
            max_age=settings.cart_ttl_seconds,
            clamp_on_add=settings.cart_clamp_on_add,
        )
    return RedisCartStore(request.app.state.redis, ttl_seconds=settings.cart_ttl_seconds)


def get_cart_engine(
    settings: Settings = Depends(get_settings),
    catalog: CatalogRepository = Depends(get_catalog),
) -> CartEngine:
    return CartEngine(catalog, clamp_on_add=settings.cart_clamp_on_add)


def get_order_assembler(
    catalog: CatalogRepository = Depends(get_catalog),
    producer: Optional[BaseKafkaProducer] = Depends(get_producer),
) -> OrderAssembler:
    return OrderAssembler(catalog, producer=producer)
