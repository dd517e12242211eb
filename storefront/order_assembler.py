"""
Order Assembler

Turns a finalized cart plus customer input into a persisted Order.

CHECKOUT STATES (one attempt):
    Validating -> Persisting -> Committed   (caller clears the cart)
    Validating -> Rejected                  (EmptyCartError / OrderValidationError)
    Persisting -> Failed                    (PersistenceError)

Rejected and Failed leave the cart untouched so the customer can retry.
The total is always recomputed from the cart lines; a client-supplied total
is never accepted.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel

from shared.events import OrderPlacedEvent
from storefront.cart_engine import Cart, cart_total
from storefront.errors import EmptyCartError, OrderValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "COD"
REQUIRED_CUSTOMER_FIELDS = ("name", "email", "phone")


class CustomerInfo(BaseModel):
    """Customer and shipping details submitted at checkout."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [field for field in REQUIRED_CUSTOMER_FIELDS if not (getattr(self, field) or "").strip()]

    def shipping_address(self) -> Dict[str, Optional[str]]:
        return {"street": self.street, "city": self.city, "state": self.state, "pincode": self.pincode}


class PlacedOrder(BaseModel):
    order_id: str
    total: Decimal
    payment_method: str


class OrderWriter(Protocol):
    def save_order(
        self,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        shipping_address: Dict[str, Optional[str]],
        items: List[Dict[str, Any]],
        total: Decimal,
        payment_method: str,
    ): ...


class OrderAssembler:
    """Validates checkout input and persists an order snapshot."""

    def __init__(self, catalog: OrderWriter, producer=None):
        self.catalog = catalog
        self.producer = producer

    def place_order(
        self,
        cart: Cart,
        customer: CustomerInfo,
        payment_method: Optional[str] = None,
        correlation_id: str = "",
    ) -> PlacedOrder:
        """Persist the cart as an order. Does not clear the cart."""
        logger.info("Checkout validating", extra={"session_id": correlation_id})
        if cart.is_empty():
            logger.warning("Checkout rejected: empty cart", extra={"session_id": correlation_id})
            raise EmptyCartError()

        missing = customer.missing_fields()
        if missing:
            logger.warning(f"Checkout rejected: missing {missing}", extra={"session_id": correlation_id})
            raise OrderValidationError(missing)

        total = cart_total(cart.items)
        items = [item.model_dump(mode="json") for item in cart.items]
        method = (payment_method or "").strip() or DEFAULT_PAYMENT_METHOD

        logger.info("Checkout persisting", extra={"session_id": correlation_id})
        # PersistenceError propagates; the caller keeps the cart.
        order = self.catalog.save_order(
            customer_name=customer.name.strip(),
            customer_email=customer.email.strip(),
            customer_phone=customer.phone.strip(),
            shipping_address=customer.shipping_address(),
            items=items,
            total=total,
            payment_method=method,
        )
        logger.info(
            f"Order {order.order_id} committed, total {total}",
            extra={"session_id": correlation_id, "order_id": order.order_id},
        )

        self._publish_placed(order.order_id, items, total, method, correlation_id)
        return PlacedOrder(order_id=order.order_id, total=total, payment_method=method)

    def _publish_placed(self, order_id, items, total, payment_method, correlation_id) -> None:
        if self.producer is None:
            return
        event = OrderPlacedEvent(
            correlation_id=correlation_id or order_id,
            order_id=order_id,
            items=items,
            total=float(total),
            payment_method=payment_method,
        )
        try:
            self.producer.publish("order.placed", event)
        except Exception as e:
            # The order is already committed; a lost notification must not fail checkout.
            logger.error(f"Failed to publish order.placed for {order_id}: {e}", extra={"order_id": order_id})
