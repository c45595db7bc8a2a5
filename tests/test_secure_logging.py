import json
import logging

from decipher_engine.core.secure_logging import (
    JsonFormatter,
    RedactingFilter,
    SecretRedactor,
    StructuredLogger,
    setup_secure_logging,
)


def test_email_redaction():
    message = "Contact admin@example.com for help"
    redacted = SecretRedactor.redact(message)
    assert "[EMAIL_REDACTED]" in redacted
    assert "admin@example.com" not in redacted


def test_url_key_redaction():
    message = "POST https://example.test/v1/models/m:generateContent?key=abc123secret&alt=json"
    redacted = SecretRedactor.redact(message)
    assert "abc123secret" not in redacted
    assert "?key=[KEY_REDACTED]&alt=json" in redacted


def test_bearer_and_google_key_redaction():
    key = "AIza" + "x" * 35
    redacted = SecretRedactor.redact(f"Authorization: Bearer abcdefghijkl, fallback {key}")
    assert "abcdefghijkl" not in redacted
    assert key not in redacted


def test_filter_redacts_message_arguments():
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "calling %s", ("url?token=zzz999",), None)
    RedactingFilter().filter(record)
    assert record.getMessage() == "calling url?token=[KEY_REDACTED]"


def test_json_formatter():
    record = logging.LogRecord("decipher_engine.x", logging.WARNING, __file__, 1, "hello", None, None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "decipher_engine.x"
    assert payload["message"] == "hello"


def test_setup_secure_logging():
    logger = setup_secure_logging("INFO", enable_redaction=True)
    assert logger is not None
    assert logger.enable_redaction is True
    assert any(
        isinstance(f, RedactingFilter) for handler in logging.getLogger().handlers for f in handler.filters
    )


def test_structured_logger_appends_fields(caplog):
    logger = StructuredLogger("decipher_engine.tests", enable_redaction=True)
    with caplog.at_level(logging.INFO, logger="decipher_engine.tests"):
        logger.info("Oracle call", url="https://x.test/?key=secret42", steps=2)
    assert "Oracle call [url=https://x.test/?key=[KEY_REDACTED] steps=2]" in caplog.text
