import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import distinct
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.errors import PersistenceError
from storefront.models import Order, OrderStatus, PaymentStatus, Product

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "newest": (Product.created_at.desc(), Product.product_id),
    "price-low": (Product.price.asc(), Product.product_id),
    "price-high": (Product.price.desc(), Product.product_id),
    "rating": (Product.rating.desc(), Product.product_id),
}


class CatalogRepository:
    """Repository for products (read) and orders (create/read)."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    # -------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------
    def create_product(self, name: str, price: Decimal, category: str, **fields: Any) -> Product:
        """Create a new product."""
        product_id = fields.pop("product_id", None) or f"PROD-{uuid4().hex[:12].upper()}"
        product = Product(product_id=product_id, name=name, price=price, category=category, **fields)
        self.db.add(product)
        self.db.flush()
        logger.info(f"Created product {product_id}: {name}")
        return product

    def find_product_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID."""
        return self.db.query(Product).filter(Product.product_id == str(product_id)).first()

    def find_product_by_name(self, name: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.name == name).first()

    def list_featured(self, limit: int = 6) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.featured.is_(True))
            .order_by(Product.product_id)
            .limit(limit)
            .all()
        )

    def list_new_arrivals(self, limit: int = 8) -> List[Product]:
        return self.db.query(Product).order_by(*SORT_ORDERS["newest"]).limit(limit).all()

    def list_best_sellers(self, limit: int = 4) -> List[Product]:
        return self.db.query(Product).order_by(Product.reviews.desc(), Product.product_id).limit(limit).all()

    def list_products(self, category: Optional[str] = None, sort: str = "newest") -> List[Product]:
        """List products, optionally filtered by category. Unknown sort keys fall back to newest."""
        query = self.db.query(Product)
        if category and category != "all":
            query = query.filter(Product.category == category)
        return query.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS["newest"])).all()

    def list_categories(self) -> List[str]:
        rows = self.db.query(distinct(Product.category)).order_by(Product.category).all()
        return [row[0] for row in rows]

    def list_related(self, product: Product, limit: int = 4) -> List[Product]:
        """Other products in the same category."""
        return (
            self.db.query(Product)
            .filter(Product.category == product.category, Product.product_id != product.product_id)
            .order_by(Product.product_id)
            .limit(limit)
            .all()
        )

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def save_order(
        self,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        shipping_address: Dict[str, Optional[str]],
        items: List[Dict[str, Any]],
        total: Decimal,
        payment_method: str,
    ) -> Order:
        """Persist a new order and commit. Raises PersistenceError if the write fails."""
        order_id = f"ORD-{uuid4().hex[:12].upper()}"
        order = Order(
            order_id=order_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            shipping_address=shipping_address,
            items=items,
            total=total,
            payment_method=payment_method,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
        )
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save order {order_id}: {e}", extra={"order_id": order_id})
            raise PersistenceError("Unable to process order") from e

        logger.info(f"Created order {order_id} for {customer_email}", extra={"order_id": order_id})
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by order_id."""
        return self.db.query(Order).filter(Order.order_id == order_id).first()
