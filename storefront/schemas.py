from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- requests ----------
class AddToCartRequest(CamelModel):
    """Request model for adding an item to the cart."""

    product_id: str
    size: str = ""
    color: str = ""
    quantity: int = 1


class UpdateQuantityRequest(CamelModel):
    """Request model for updating a line's quantity."""

    index: int
    quantity: int


class PlaceOrderRequest(CamelModel):
    """Checkout form. Required fields are checked by the order assembler."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    payment: Optional[str] = None


class ContactRequest(CamelModel):
    name: str
    email: str
    message: str = ""


# ---------- responses ----------
class CartItemResponse(CamelModel):
    """Response model for a cart line."""

    product_id: str
    name: str
    price: float
    image: Optional[str] = None
    size: str
    color: str
    quantity: int
    item_total: float


class CartMutationResponse(CamelModel):
    success: bool = True
    cart: List[CartItemResponse]
    cart_count: int


class CartResponse(CamelModel):
    """Response model for the cart page."""

    cart: List[CartItemResponse]
    total: float
    cart_count: int


class OrderPlacedResponse(CamelModel):
    success: bool = True
    order_id: str
    total: float
    payment_method: str
    cart_count: int = 0


class ProductResponse(CamelModel):
    """Response model for a catalog product."""

    product_id: str
    name: str
    description: str = ""
    price: float
    original_price: Optional[float] = None
    category: str
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    in_stock: bool = True
    featured: bool = False
    discount: int = 0
    rating: float = 0.0
    reviews: int = 0
    tags: List[str] = Field(default_factory=list)


class HomeResponse(CamelModel):
    featured_products: List[ProductResponse]
    new_arrivals: List[ProductResponse]
    best_sellers: List[ProductResponse]
    cart_count: int


class ShopResponse(CamelModel):
    products: List[ProductResponse]
    categories: List[str]
    current_category: str
    current_sort: str
    cart_count: int


class ProductDetailResponse(CamelModel):
    product: ProductResponse
    related_products: List[ProductResponse]
    cart_count: int


class OrderResponse(CamelModel):
    """Response model for a placed order."""

    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: Dict[str, Optional[str]]
    items: List[Dict[str, Any]]
    total: float
    payment_method: str
    status: str
    payment_status: str
    created_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    service: str
    version: str
