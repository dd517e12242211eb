"""
Cart Repository Module

One CartStore abstraction for cart ownership, with two backends picked once
through configuration (CART_BACKEND):

    - RedisCartStore: server-side cart keyed by the client's session id.
    - CookieCartStore: client-held cart. The client only keeps
      (product_id, size, color, quantity) per line; every load rebuilds the
      lines from the catalog, so tampered names or prices never survive.

Data Format (Redis):
    Key: "cart:3b9f0c9e-5a51-4c33-9d63-3f0f2d1f8a77"
    Value: '[
        {"product_id": "PROD-1", "name": "Linen Shirt", "price": "500.00",
         "image": "/img/linen-1.jpg", "size": "M", "color": "red", "quantity": 2}
    ]'

TTL Management:
    - Each cart is stored with CART_TTL_SECONDS expiration (24 hours by default)
    - TTL resets on every cart modification

Example Usage:
    ```python
    store = RedisCartStore(redis.Redis(decode_responses=True))
    session = CartSession(session_id="3b9f0c9e-...", response=response)

    cart = store.load(session)
    engine.add(cart, "PROD-1", "M", "red", 2)
    store.save(session, cart)

    # after a committed order
    store.clear(session)
    ```
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

import redis
from fastapi import Response

from storefront.cart_engine import MAX_LINE_QUANTITY, MIN_LINE_QUANTITY, Cart, CartLineItem, ProductLookup, first_image

logger = logging.getLogger(__name__)


@dataclass
class CartSession:
    """The client context that owns a cart."""

    session_id: str
    response: Optional[Response] = None
    client_state: Optional[str] = None


class CartStore(ABC):
    """Loads and saves the cart owned by a CartSession."""

    @abstractmethod
    def load(self, session: CartSession) -> Cart:
        """Return the session's cart, empty if none exists."""

    @abstractmethod
    def save(self, session: CartSession, cart: Cart) -> None:
        """Persist the cart for the session."""

    @abstractmethod
    def clear(self, session: CartSession) -> None:
        """Drop the session's cart."""


class RedisCartStore(CartStore):
    """Server-side cart storage in Redis."""

    CART_KEY_PREFIX = "cart:"

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 86400):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _key(self, session: CartSession) -> str:
        return f"{self.CART_KEY_PREFIX}{session.session_id}"

    def load(self, session: CartSession) -> Cart:
        cart_json = self.redis.get(self._key(session))
        if cart_json is None:
            return Cart()
        return Cart(items=[CartLineItem.model_validate(item) for item in json.loads(cart_json)])

    def save(self, session: CartSession, cart: Cart) -> None:
        if cart.is_empty():
            self.redis.delete(self._key(session))
            return
        payload = json.dumps([item.model_dump(mode="json") for item in cart.items])
        self.redis.set(self._key(session), payload, ex=self.ttl_seconds)
        logger.info(
            f"Saved cart with {len(cart.items)} lines",
            extra={"session_id": session.session_id},
        )

    def clear(self, session: CartSession) -> None:
        self.redis.delete(self._key(session))
        logger.info("Cleared cart", extra={"session_id": session.session_id})


class CookieCartStore(CartStore):
    """Client-held cart, re-validated against the catalog on every load.

    Quantities follow the same add policy as CartEngine: the upper bound is
    only enforced when `clamp_on_add` is set.
    """

    def __init__(
        self,
        catalog: ProductLookup,
        cookie_name: str = "storefront_cart",
        max_age: int = 86400,
        clamp_on_add: bool = False,
    ):
        self.catalog = catalog
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.clamp_on_add = clamp_on_add

    def _bounded(self, quantity: int) -> int:
        quantity = max(MIN_LINE_QUANTITY, quantity)
        return min(quantity, MAX_LINE_QUANTITY) if self.clamp_on_add else quantity

    def load(self, session: CartSession) -> Cart:
        cart = Cart()
        for raw in self._parse(session.client_state):
            try:
                product_id = str(raw["product_id"])
                quantity = int(raw.get("quantity", MIN_LINE_QUANTITY))
            except (KeyError, TypeError, ValueError, OverflowError):
                logger.warning("Dropping malformed client cart line", extra={"session_id": session.session_id})
                continue

            product = self.catalog.find_product_by_id(product_id)
            if product is None:
                logger.warning(
                    f"Dropping client cart line for unknown product {product_id}",
                    extra={"session_id": session.session_id},
                )
                continue

            quantity = self._bounded(quantity)
            line = CartLineItem(
                product_id=str(product.product_id),
                name=product.name,
                price=Decimal(str(product.price)),
                image=first_image(product.images),
                size=str(raw.get("size") or ""),
                color=str(raw.get("color") or ""),
                quantity=quantity,
            )
            existing = cart.find(line.key)
            if existing is not None:
                existing.quantity = self._bounded(existing.quantity + line.quantity)
            else:
                cart.items.append(line)
        return cart

    def save(self, session: CartSession, cart: Cart) -> None:
        state = [
            {"product_id": item.product_id, "size": item.size, "color": item.color, "quantity": item.quantity}
            for item in cart.items
        ]
        session.client_state = self.encode_state(state)
        if session.response is not None:
            session.response.set_cookie(
                self.cookie_name,
                session.client_state,
                max_age=self.max_age,
                httponly=True,
                samesite="lax",
            )

    def clear(self, session: CartSession) -> None:
        session.client_state = None
        if session.response is not None:
            session.response.delete_cookie(self.cookie_name)

    @staticmethod
    def encode_state(state: List[Dict[str, Any]]) -> str:
        """Cookie-safe encoding of the client cart lines."""
        return base64.urlsafe_b64encode(json.dumps(state).encode("utf-8")).decode("ascii").rstrip("=")

    @staticmethod
    def _parse(client_state: Optional[str]) -> List[Dict[str, Any]]:
        if not client_state:
            return []
        padded = client_state + "=" * (-len(client_state) % 4)
        try:
            data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        except (ValueError, UnicodeError):
            logger.warning("Ignoring unreadable client cart state")
            return []
        return [line for line in data if isinstance(line, dict)] if isinstance(data, list) else []
