import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from shared.events import BaseEvent, CartItemAddedEvent, CartItemRemovedEvent
from shared.kafka_client import BaseKafkaProducer
from storefront.cart_engine import Cart, CartEngine, line_key
from storefront.cart_repository import CartSession, CartStore
from storefront.dependencies import (
    get_cart_engine,
    get_cart_session,
    get_cart_store,
    get_catalog,
    get_order_assembler,
    get_producer,
)
from storefront.errors import EmptyCartError, NotFoundError, OrderValidationError, StorefrontError
from storefront.order_assembler import CustomerInfo, OrderAssembler
from storefront.repository import CatalogRepository
from storefront.schemas import (
    AddToCartRequest,
    CartItemResponse,
    CartMutationResponse,
    CartResponse,
    ContactRequest,
    HealthResponse,
    HomeResponse,
    OrderPlacedResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductDetailResponse,
    ProductResponse,
    ShopResponse,
    UpdateQuantityRequest,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "storefront"
SERVICE_VERSION = "1.0.0"

health_router = APIRouter(tags=["health"])
catalog_router = APIRouter(tags=["catalog"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


# ---------- helpers ----------
def _http_error(e: StorefrontError, session: Optional[CartSession] = None) -> HTTPException:
    logger.warning(f"{type(e).__name__}: {e.detail}", extra={"session_id": session.session_id if session else None})
    if isinstance(e, OrderValidationError):
        return HTTPException(status_code=e.status_code, detail={"error": e.detail, "missingFields": e.missing_fields})
    return HTTPException(status_code=e.status_code, detail=e.detail)


def _cart_lines(cart: Cart) -> List[CartItemResponse]:
    return [
        CartItemResponse(
            product_id=item.product_id,
            name=item.name,
            price=float(item.price),
            image=item.image,
            size=item.size,
            color=item.color,
            quantity=item.quantity,
            item_total=float(item.line_total),
        )
        for item in cart.items
    ]


def _mutation_response(cart: Cart) -> CartMutationResponse:
    return CartMutationResponse(success=True, cart=_cart_lines(cart), cart_count=cart.item_count)


def _products(products) -> List[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in products]


def _publish(producer: Optional[BaseKafkaProducer], topic: str, event: BaseEvent) -> None:
    if producer is None:
        return
    try:
        producer.publish(topic, event)
    except Exception as e:
        # The cart change is already saved.
        logger.error(f"Failed to publish {topic}: {e}", extra={"correlation_id": event.correlation_id})


# ---------- health ----------
@health_router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", service=SERVICE_NAME, version=SERVICE_VERSION)


# ---------- catalog ----------
@catalog_router.get("/", response_model=HomeResponse)
async def home(
    catalog: CatalogRepository = Depends(get_catalog),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> HomeResponse:
    """Featured products, new arrivals and best sellers."""
    return HomeResponse(
        featured_products=_products(catalog.list_featured()),
        new_arrivals=_products(catalog.list_new_arrivals()),
        best_sellers=_products(catalog.list_best_sellers()),
        cart_count=store.load(session).item_count,
    )


@catalog_router.get("/shop", response_model=ShopResponse)
async def shop(
    category: Optional[str] = None,
    sort: str = "newest",
    catalog: CatalogRepository = Depends(get_catalog),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> ShopResponse:
    """Products filtered by category and sorted."""
    return ShopResponse(
        products=_products(catalog.list_products(category=category, sort=sort)),
        categories=catalog.list_categories(),
        current_category=category or "all",
        current_sort=sort,
        cart_count=store.load(session).item_count,
    )


@catalog_router.get("/products/{product_id}", response_model=ProductDetailResponse)
async def product_detail(
    product_id: str,
    catalog: CatalogRepository = Depends(get_catalog),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> ProductDetailResponse:
    """Product details plus related products from the same category."""
    product = catalog.find_product_by_id(product_id)
    if product is None:
        raise _http_error(NotFoundError("Product not found"), session)
    return ProductDetailResponse(
        product=ProductResponse.model_validate(product),
        related_products=_products(catalog.list_related(product)),
        cart_count=store.load(session).item_count,
    )


@catalog_router.post("/contact")
async def contact(payload: ContactRequest) -> dict:
    """Acknowledge a contact form submission."""
    logger.info(f"Contact form submission from {payload.name} <{payload.email}>: {payload.message}")
    return {"success": "Thank you for your message! We will get back to you soon."}


# ---------- cart ----------
@cart_router.post("/add", response_model=CartMutationResponse)
async def add_to_cart(
    payload: AddToCartRequest,
    engine: CartEngine = Depends(get_cart_engine),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
    producer: Optional[BaseKafkaProducer] = Depends(get_producer),
) -> CartMutationResponse:
    """Add a product to the cart, merging lines with the same product, size and color."""
    key = line_key(payload.product_id, payload.size, payload.color)
    try:
        cart = store.load(session)
        existing = cart.find(key)
        before = existing.quantity if existing is not None else 0
        engine.add(cart, payload.product_id, payload.size, payload.color, payload.quantity)
        store.save(session, cart)
    except StorefrontError as e:
        raise _http_error(e, session)
    except Exception as e:
        logger.error(f"Error adding item to cart: {e}", extra={"session_id": session.session_id})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to add to cart")

    line = cart.find(key)
    _publish(
        producer,
        "cart.item_added",
        CartItemAddedEvent(
            correlation_id=session.session_id,
            product_id=line.product_id,
            size=line.size,
            color=line.color,
            quantity=line.quantity - before,
            price=float(line.price),
        ),
    )
    return _mutation_response(cart)


@cart_router.get("", response_model=CartResponse)
async def view_cart(
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> CartResponse:
    """Current cart, its total and item count."""
    cart = store.load(session)
    return CartResponse(cart=_cart_lines(cart), total=float(cart.total), cart_count=cart.item_count)


@cart_router.post("/update", response_model=CartMutationResponse)
async def update_cart_item(
    payload: UpdateQuantityRequest,
    engine: CartEngine = Depends(get_cart_engine),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> CartMutationResponse:
    """Set the quantity of the line at `index` (1 to 5)."""
    try:
        cart = store.load(session)
        engine.update_quantity(cart, payload.index, payload.quantity)
        store.save(session, cart)
    except StorefrontError as e:
        raise _http_error(e, session)
    except Exception as e:
        logger.error(f"Error updating cart item: {e}", extra={"session_id": session.session_id})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to update cart")
    return _mutation_response(cart)


@cart_router.post("/remove/{index}", response_model=CartMutationResponse)
async def remove_cart_item(
    index: int,
    engine: CartEngine = Depends(get_cart_engine),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
    producer: Optional[BaseKafkaProducer] = Depends(get_producer),
) -> CartMutationResponse:
    """Remove the line at `index`."""
    try:
        cart = store.load(session)
        removed = engine.remove(cart, index)
        store.save(session, cart)
    except StorefrontError as e:
        raise _http_error(e, session)
    except Exception as e:
        logger.error(f"Error removing cart item: {e}", extra={"session_id": session.session_id})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to remove from cart")

    _publish(
        producer,
        "cart.item_removed",
        CartItemRemovedEvent(
            correlation_id=session.session_id,
            product_id=removed.product_id,
            size=removed.size,
            color=removed.color,
        ),
    )
    return _mutation_response(cart)


@cart_router.get("/checkout", response_model=CartResponse)
async def checkout_summary(
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> CartResponse:
    """Cart summary for the checkout page. An empty cart cannot be checked out."""
    cart = store.load(session)
    if cart.is_empty():
        raise _http_error(EmptyCartError(), session)
    return CartResponse(cart=_cart_lines(cart), total=float(cart.total), cart_count=cart.item_count)


@cart_router.post("/order", response_model=OrderPlacedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: PlaceOrderRequest,
    assembler: OrderAssembler = Depends(get_order_assembler),
    store: CartStore = Depends(get_cart_store),
    session: CartSession = Depends(get_cart_session),
) -> OrderPlacedResponse:
    """Convert the cart into an order. The cart is cleared only once the order is committed."""
    customer = CustomerInfo(**payload.model_dump(exclude={"payment"}))
    try:
        cart = store.load(session)
        placed = assembler.place_order(cart, customer, payload.payment, correlation_id=session.session_id)
    except StorefrontError as e:
        raise _http_error(e, session)
    except Exception as e:
        logger.error(f"Error placing order: {e}", extra={"session_id": session.session_id})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to process order")

    try:
        store.clear(session)
    except Exception as e:
        # The order is already committed.
        logger.error(
            f"Failed to clear cart after order {placed.order_id}: {e}",
            extra={"session_id": session.session_id, "order_id": placed.order_id},
        )

    return OrderPlacedResponse(
        order_id=placed.order_id,
        total=float(placed.total),
        payment_method=placed.payment_method,
        cart_count=0,
    )


# ---------- orders ----------
@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> OrderResponse:
    """Get order details."""
    order = catalog.get_order(order_id)
    if order is None:
        raise _http_error(NotFoundError(f"Order {order_id} not found"))
    return OrderResponse.model_validate(order)
