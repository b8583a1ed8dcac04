"""
Tests for structured logging helpers
"""

import json
import logging

import pytest

from upsync.utils.logging_config import (
    BridgeJsonFormatter,
    LogContextFilter,
    clear_log_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    set_up_event_id,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


def make_record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="upsync.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


def test_get_logger_nests_under_application_logger():
    assert get_logger("routes.webhook").name == "upsync.routes.webhook"
    assert get_logger("upsync.services.up_service").name == "upsync.services.up_service"
    assert get_logger("upsync").name == "upsync"


def test_set_correlation_id_generates_uuid():
    correlation_id = set_correlation_id()

    assert get_correlation_id() == correlation_id
    assert len(correlation_id) == 36

    clear_log_context()
    assert get_correlation_id() is None


def test_filter_adds_context():
    record = make_record()
    set_correlation_id("corr-123")
    set_up_event_id("evt-9")

    LogContextFilter().filter(record)

    assert record.correlation_id == "corr-123"
    assert record.up_event_id == "evt-9"


def test_filter_without_context():
    record = make_record()

    LogContextFilter().filter(record)

    assert record.correlation_id == "N/A"
    assert not hasattr(record, "up_event_id")


def test_formatter_emits_json():
    record = make_record("Transaction created")
    record.correlation_id = "corr-456"
    formatter = BridgeJsonFormatter(service="Up-PocketSmith Bridge", version="1.0.0")

    output = json.loads(formatter.format(record))

    assert output["message"] == "Transaction created"
    assert output["level"] == "INFO"
    assert output["logger"] == "upsync.test"
    assert output["correlation_id"] == "corr-456"
    assert output["service"] == "Up-PocketSmith Bridge"
    assert output["version"] == "1.0.0"
    assert output["timestamp"].endswith("+00:00")
