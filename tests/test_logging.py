import json
import logging
from backoffice.core.logging_config import (
    SecurityFilter, StructuredFormatter, get_logger, mask_account_number, set_request_context,
)

def _record(msg, **fields):
    record = logging.LogRecord("backoffice.test", logging.INFO, __file__, 10, msg, None, None)
    if fields:
        record.extra_fields = fields
    return record

def test_mask_account_number():
    assert mask_account_number(12345678) == "****5678"
    assert mask_account_number("123") == "***"

def test_formatter_emits_json_with_request_context():
    set_request_context("req-1", "corr-1")
    try:
        line = StructuredFormatter("backoffice-service").format(_record("Payment created: 3", payment_id=3))
    finally:
        set_request_context(None, None)

    entry = json.loads(line)
    assert entry["message"] == "Payment created: 3"
    assert entry["service"]["name"] == "backoffice-service"
    assert entry["request"] == {"request_id": "req-1", "correlation_id": "corr-1"}
    assert entry["fields"] == {"payment_id": 3}

def test_formatter_omits_empty_context():
    entry = json.loads(StructuredFormatter("svc").format(_record("plain")))
    assert "request" not in entry
    assert "fields" not in entry

def test_security_filter_masks_account_numbers_and_passwords():
    record = _record(
        "Connecting to postgresql+psycopg2://user:hunter2@db:5432/backoffice",
        bank_account_number=11112222, recipient_account_number=None, account_id=7,
    )
    assert SecurityFilter().filter(record) is True
    assert "hunter2" not in record.msg
    assert "user:***@db" in record.msg
    assert record.extra_fields == {"bank_account_number": "****2222", "recipient_account_number": None, "account_id": 7}

def test_bound_fields_merge_into_extra_fields():
    logger = get_logger("backoffice.test", component="admin")
    _, kwargs = logger.process("msg", {"extra": {"extra_fields": {"page": 2}}})
    assert kwargs["extra"]["extra_fields"] == {"component": "admin", "page": 2}
