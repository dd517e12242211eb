"""Storefront error taxonomy.

Every error carries the HTTP status the route layer converts it to. None of
them is fatal to the process.
"""

from typing import List


class StorefrontError(Exception):
    """Base class for recoverable storefront errors."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(StorefrontError):
    """Unknown product, cart index or order."""

    status_code = 404


class InvalidRequestError(StorefrontError):
    """Quantity outside the accepted range."""

    status_code = 400


class OrderValidationError(StorefrontError):
    """Required customer fields are missing at checkout."""

    status_code = 422

    def __init__(self, missing_fields: List[str]):
        super().__init__(f"Missing required fields: {', '.join(missing_fields)}")
        self.missing_fields = list(missing_fields)


class EmptyCartError(StorefrontError):
    """Checkout attempted with no items in the cart."""

    status_code = 400

    def __init__(self, detail: str = "Cart is empty"):
        super().__init__(detail)


class PersistenceError(StorefrontError):
    """The catalog store rejected an order write."""

    status_code = 503
