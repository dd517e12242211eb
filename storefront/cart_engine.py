"""
Cart Engine

In-memory rules for a shopping cart: how line items are identified, merged,
quantity-checked and totaled.

A line item is identified by (product_id, size, color). Adding an item whose
key already exists bumps that line's quantity instead of appending a second
line. Name, price and image always come from the catalog product, never from
the client.

Quantity rules:
    - update_quantity accepts MIN_LINE_QUANTITY..MAX_LINE_QUANTITY only
    - add rejects quantities below MIN_LINE_QUANTITY; it merges without an
      upper cap unless the engine is built with clamp_on_add=True

Every operation validates before mutating, so a rejected call leaves the
cart exactly as it was.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Protocol, Tuple

from pydantic import BaseModel, Field

from storefront.errors import InvalidRequestError, NotFoundError

logger = logging.getLogger(__name__)

MIN_LINE_QUANTITY = 1
MAX_LINE_QUANTITY = 5

LineKey = Tuple[str, str, str]


class CartLineItem(BaseModel):
    """One distinct (product, size, color) entry in a cart."""

    product_id: str
    name: str
    price: Decimal = Field(ge=0)
    image: Optional[str] = None
    size: str = ""
    color: str = ""
    quantity: int = Field(ge=MIN_LINE_QUANTITY)

    @property
    def key(self) -> LineKey:
        return line_key(self.product_id, self.size, self.color)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart(BaseModel):
    """Ordered line items owned by one client context."""

    items: List[CartLineItem] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return cart_total(self.items)

    @property
    def item_count(self) -> int:
        return cart_item_count(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def find(self, key: LineKey) -> Optional[CartLineItem]:
        return next((item for item in self.items if item.key == key), None)


class ProductLookup(Protocol):
    """The slice of the catalog store the engine reads from."""

    def find_product_by_id(self, product_id: str): ...


def line_key(product_id, size, color) -> LineKey:
    return (str(product_id), size or "", color or "")


def cart_total(items: Iterable[CartLineItem]) -> Decimal:
    """Sum of price x quantity over all line items."""
    return sum((item.price * item.quantity for item in items), Decimal("0"))


def cart_item_count(items: Iterable[CartLineItem]) -> int:
    """Sum of quantities, used for the cart badge."""
    return sum(item.quantity for item in items)


def first_image(images) -> Optional[str]:
    if isinstance(images, list) and images:
        return str(images[0]) if images[0] is not None else None
    return None


class CartEngine:
    """Applies add/update/remove operations to a Cart."""

    def __init__(self, catalog: ProductLookup, clamp_on_add: bool = False):
        self.catalog = catalog
        self.clamp_on_add = clamp_on_add

    def add(self, cart: Cart, product_id: str, size: str, color: str, quantity: int = 1) -> Cart:
        """Add a product to the cart, merging with an existing line of the same key."""
        if quantity < MIN_LINE_QUANTITY:
            raise InvalidRequestError(f"Quantity must be at least {MIN_LINE_QUANTITY}")

        product = self.catalog.find_product_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        key = line_key(product_id, size, color)
        existing = cart.find(key)
        if existing is not None:
            new_quantity = existing.quantity + quantity
            if self.clamp_on_add:
                new_quantity = min(new_quantity, MAX_LINE_QUANTITY)
            existing.quantity = new_quantity
            logger.info(f"Merged {quantity} x {key} into existing line (now {existing.quantity})")
        else:
            if self.clamp_on_add:
                quantity = min(quantity, MAX_LINE_QUANTITY)
            cart.items.append(
                CartLineItem(
                    product_id=str(product.product_id),
                    name=product.name,
                    price=Decimal(str(product.price)),
                    image=first_image(product.images),
                    size=key[1],
                    color=key[2],
                    quantity=quantity,
                )
            )
            logger.info(f"Added {quantity} x {key} as a new line")
        return cart

    def update_quantity(self, cart: Cart, index: int, quantity: int) -> Cart:
        """Replace the quantity of the line at index."""
        if not 0 <= index < len(cart.items) or not MIN_LINE_QUANTITY <= quantity <= MAX_LINE_QUANTITY:
            raise InvalidRequestError("Invalid quantity or item index.")
        cart.items[index].quantity = quantity
        return cart

    def remove(self, cart: Cart, index: int) -> CartLineItem:
        """Remove and return the line at index; the remaining lines keep their order."""
        if not 0 <= index < len(cart.items):
            raise NotFoundError("Item not found or already removed.")
        return cart.items.pop(index)

    @staticmethod
    def total(cart: Cart) -> Decimal:
        return cart_total(cart.items)

    @staticmethod
    def item_count(cart: Cart) -> int:
        return cart_item_count(cart.items)
