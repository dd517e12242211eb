"""
logging_config.py - Centralized JSON Logging Configuration

PURPOSE:
    Provides structured JSON logging for the storefront with timezone-aware
    timestamps and request context (session, order, correlation) injection.

JSON LOG FIELDS:
    - timestamp: ISO 8601 in LOG_TIMEZONE (default UTC)
    - level: Log level (INFO, ERROR, WARNING, DEBUG, CRITICAL)
    - logger: Module name where the log originated (e.g., "storefront.cart_engine")
    - message: The actual log message
    - service_name: Name of the service (injected automatically)
    - session_id / order_id / correlation_id / event_type: only when passed via `extra`
    - exception: Full stack trace (only when exc_info is set)

USAGE:
    from shared.logging_config import setup_logging
    setup_logging("storefront", level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Order placed", extra={"order_id": "ORD-1A2B3C4D5E6F"})

EXAMPLE JSON OUTPUT:
    {
        "timestamp": "2026-10-19T09:12:03.114210+00:00",
        "level": "INFO",
        "logger": "storefront.order_assembler",
        "message": "Order ORD-1A2B3C4D5E6F committed",
        "service_name": "storefront",
        "order_id": "ORD-1A2B3C4D5E6F"
    }
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict
from zoneinfo import ZoneInfo

CONTEXT_FIELDS = ("service_name", "correlation_id", "session_id", "order_id", "event_type")


class JsonFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log record."""

    def __init__(self, tz_name: str = None):
        super().__init__()
        self.tz = ZoneInfo(tz_name or os.getenv("LOG_TIMEZONE", "UTC"))

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, self.tz).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ServiceFilter(logging.Filter):
    """Stamps every record with the owning service's name."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        return True


def setup_logging(service_name: str, level: str = "INFO") -> None:
    """Setup JSON logging for a service. Safe to call more than once."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(ServiceFilter(service_name))

    logger = logging.getLogger()
    logger.setLevel(level)
    for existing in list(logger.handlers):
        if isinstance(existing.formatter, JsonFormatter):
            logger.removeHandler(existing)
    logger.addHandler(handler)
