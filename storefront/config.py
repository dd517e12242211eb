import os
from typing import Literal

from pydantic_settings import BaseSettings


def _default_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.environ["DATABASE_URL"]
    return (
        f"postgresql://{os.getenv('POSTGRES_USER', 'postgres')}:{os.getenv('POSTGRES_PASSWORD', 'postgres')}@"
        f"{os.getenv('POSTGRES_HOST', 'localhost')}:{os.getenv('POSTGRES_PORT', '5432')}/"
        f"{os.getenv('POSTGRES_DB', 'karyo_clothing')}"
    )


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseSettings):
    """Application settings."""

    database_url: str = _default_database_url()
    redis_host: str = os.getenv("REDIS_HOST", "localhost")
    redis_port: int = int(os.getenv("REDIS_PORT", "6379"))

    cart_backend: Literal["redis", "cookie"] = os.getenv("CART_BACKEND", "redis")
    cart_ttl_seconds: int = int(os.getenv("CART_TTL_SECONDS", "86400"))
    cart_clamp_on_add: bool = _env_flag("CART_CLAMP_ON_ADD", "false")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "storefront_session")
    cart_cookie_name: str = os.getenv("CART_COOKIE_NAME", "storefront_cart")

    kafka_enabled: bool = _env_flag("KAFKA_ENABLED", "false")
    kafka_bootstrap_servers: str = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")

    seed_products: bool = _env_flag("SEED_PRODUCTS", "true")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    storefront_port: int = int(os.getenv("STOREFRONT_PORT", "3000"))
