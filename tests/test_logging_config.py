"""Tests for the JSON log formatter."""

import json
import logging
import sys

from shared.logging_config import JsonFormatter, ServiceFilter


def _record(message="Order placed", **extra):
    record = logging.LogRecord("storefront.order_assembler", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_record_as_json():
    payload = json.loads(JsonFormatter("UTC").format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "storefront.order_assembler"
    assert payload["message"] == "Order placed"
    assert payload["timestamp"].endswith("+00:00")


def test_context_fields_come_from_extra():
    payload = json.loads(JsonFormatter("UTC").format(_record(order_id="ORD-1", session_id="s1")))
    assert payload["order_id"] == "ORD-1"
    assert payload["session_id"] == "s1"
    assert "correlation_id" not in payload


def test_service_filter_stamps_service_name():
    record = _record()
    assert ServiceFilter("storefront").filter(record) is True
    assert json.loads(JsonFormatter("UTC").format(record))["service_name"] == "storefront"


def test_exception_is_included():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    payload = json.loads(JsonFormatter("UTC").format(record))
    assert "ValueError: boom" in payload["exception"]
