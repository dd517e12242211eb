from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, Numeric, String, Uuid, func

from shared.database import Base


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Product(Base):
    """Catalog product. Read-only to the cart and checkout flow."""

    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    product_id = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    category = Column(String(100), nullable=False, index=True)
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    in_stock = Column(Boolean, default=True, nullable=False)
    stock_count = Column(Integer, default=100, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    discount = Column(Integer, default=0, nullable=False)
    rating = Column(Float, default=4.5, nullable=False)
    reviews = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Order(Base):
    """Immutable snapshot of a cart at checkout."""

    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    order_id = Column(String(255), unique=True, nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    shipping_address = Column(JSON, nullable=False, default=dict)  # street, city, state, pincode
    items = Column(JSON, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    status = Column(String(50), default=OrderStatus.PENDING.value, nullable=False)
    payment_status = Column(String(50), default=PaymentStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
