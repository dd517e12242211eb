"""
events.py - Kafka Event Schema Definitions

PURPOSE:
    Defines the event schemas the storefront publishes to Kafka.
    Uses Pydantic for data validation and serialization.

EVENTS:
    - cart.item_added: a line item was added (or merged) into a cart
    - cart.item_removed: a line item was removed from a cart
    - order.placed: a cart was converted into a persisted order

COMMON FIELDS (BaseEvent):
    - event_id: Unique identifier (UUID)
    - event_type: Event category and action
    - timestamp: UTC timestamp of event creation
    - correlation_id: Links related events (the cart session id)

USAGE:
    event = OrderPlacedEvent(
        correlation_id=session_id,
        order_id="ORD-1A2B3C4D5E6F",
        items=[...],
        total=1500.0,
        payment_method="COD",
    )
    json_data = event.model_dump_json()
"""

from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import BaseModel, Field


class BaseEvent(BaseModel):
    """Base event model for all Kafka events."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str


class CartItemAddedEvent(BaseEvent):
    """Published when a line item is added to (or merged into) a cart."""

    event_type: str = "cart.item_added"
    product_id: str
    size: str
    color: str
    quantity: int
    price: float


class CartItemRemovedEvent(BaseEvent):
    """Published when a line item is removed from a cart."""

    event_type: str = "cart.item_removed"
    product_id: str
    size: str
    color: str


class OrderPlacedEvent(BaseEvent):
    """Published once an order has been committed to the catalog store."""

    event_type: str = "order.placed"
    order_id: str
    items: List[Dict[str, Any]]
    total: float
    payment_method: str


EVENT_TYPE_MAP = {
    "cart.item_added": CartItemAddedEvent,
    "cart.item_removed": CartItemRemovedEvent,
    "order.placed": OrderPlacedEvent,
}

ALL_TOPICS = list(EVENT_TYPE_MAP)
