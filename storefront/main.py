"""
storefront/main.py - Clothing Storefront Service

PURPOSE:
    Product browsing, shopping cart and checkout for the clothing storefront.
    Products and orders live in the database; carts live in Redis (keyed by
    the session cookie) or in a client-held cookie, depending on CART_BACKEND.

API ENDPOINTS:
    GET    /health                  - Health check
    GET    /                        - Featured, new arrivals, best sellers
    GET    /shop?category=&sort=    - Catalog listing
    GET    /products/{product_id}   - Product detail with related products
    POST   /contact                 - Contact form
    POST   /cart/add                - Add item (merges same product/size/color)
    GET    /cart                    - Cart, total and item count
    POST   /cart/update             - Set quantity of line at index (1-5)
    POST   /cart/remove/{index}     - Remove line at index
    GET    /cart/checkout           - Checkout summary
    POST   /cart/order              - Place order, clears cart on success
    GET    /orders/{order_id}       - Order details

KAFKA EVENTS PUBLISHED (only when KAFKA_ENABLED=true):
    - cart.item_added, cart.item_removed, order.placed

TESTING COMMANDS:
    1. Add an item:
        curl -c jar -b jar -X POST http://localhost:3000/cart/add \
          -H "Content-Type: application/json" \
          -d '{"productId": "PROD-...", "size": "M", "color": "red", "quantity": 2}'

    2. View the cart:
        curl -b jar http://localhost:3000/cart

    3. Place the order:
        curl -b jar -X POST http://localhost:3000/cart/order \
          -H "Content-Type: application/json" \
          -d '{"name": "Asha", "email": "asha@example.com", "phone": "9800000000", "payment": "COD"}'
"""

import logging
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI

from shared.database import build_engine, build_session_factory, init_db
from shared.kafka_client import BaseKafkaProducer
from shared.logging_config import setup_logging
from shared.topic_initializer import create_topics
from storefront.config import Settings
from storefront.routes import SERVICE_NAME, SERVICE_VERSION, cart_router, catalog_router, health_router, order_router

settings = Settings()

setup_logging(SERVICE_NAME, level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    logger.info("Starting Storefront Service...")

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.session_factory = build_session_factory(engine)
    app.state.redis = None
    app.state.producer = None

    try:
        init_db(engine)
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if settings.seed_products:
        from storefront.seed_data import seed_products

        db = app.state.session_factory()
        try:
            seed_products(db)
            logger.info("Products seeded")
        except Exception as e:
            logger.error(f"Failed to seed products: {e}")
        finally:
            db.close()

    if settings.cart_backend == "redis":
        try:
            app.state.redis = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                decode_responses=True,
            )
            app.state.redis.ping()
            logger.info("Redis connected")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    if settings.kafka_enabled:
        try:
            create_topics(settings.kafka_bootstrap_servers)
            app.state.producer = BaseKafkaProducer(settings.kafka_bootstrap_servers, client_id="storefront-producer")
            logger.info("Kafka producer initialized")
        except Exception as e:
            logger.error(f"Failed to initialize Kafka producer: {e}")
            raise

    yield

    logger.info("Shutting down Storefront Service...")
    if app.state.redis is not None:
        app.state.redis.close()
    if app.state.producer is not None:
        app.state.producer.flush()
    engine.dispose()


app = FastAPI(title="Storefront Service", version=SERVICE_VERSION, lifespan=lifespan)
app.include_router(health_router)
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(order_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.storefront_port)
