"""Unit tests for log sanitization."""

import logging

from emarsys_client.utils.security import (
    SanitizingFormatter,
    sanitize_headers,
    sanitize_string,
)

HEADER = (
    'UsernameToken Username="userX",PasswordDigest="NGE4MWNk",'
    'Nonce="VqRNlECxJcvmZpKD",Created="2023-02-06T00:00:00Z"'
)


def test_sanitize_string_redacts_digest_and_nonce():
    sanitized = sanitize_string(HEADER)
    assert "NGE4MWNk" not in sanitized
    assert "VqRNlECxJcvmZpKD" not in sanitized
    assert 'Username="userX"' in sanitized
    assert 'Created="2023-02-06T00:00:00Z"' in sanitized


def test_sanitize_string_passthrough():
    assert sanitize_string("") == ""
    assert sanitize_string("GET /api/v2/settings") == "GET /api/v2/settings"


def test_sanitize_headers():
    headers = {"X-WSSE": HEADER, "Content-Type": "application/json"}
    sanitized = sanitize_headers(headers)

    assert sanitized["X-WSSE"] == f"<REDACTED:length={len(HEADER)}>"
    assert sanitized["Content-Type"] == "application/json"
    assert headers["X-WSSE"] == HEADER


def test_formatter_sanitizes_args():
    formatter = SanitizingFormatter("%(message)s")
    record = logging.LogRecord(
        "emarsys_client", logging.DEBUG, __file__, 1, "header=%s", (HEADER,), None
    )
    output = formatter.format(record)
    assert "NGE4MWNk" not in output
    assert output.startswith("header=UsernameToken")


def test_setup_secure_logging_is_idempotent(monkeypatch):
    from emarsys_client.utils import security

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    httpx_level = logging.getLogger("httpx").level
    monkeypatch.setattr(security, "_LOGGING_CONFIGURED", False)
    try:
        security.setup_secure_logging("DEBUG")
        handlers = root.handlers[:]
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, SanitizingFormatter) for h in handlers)
        assert logging.getLogger("httpx").level == logging.WARNING

        security.setup_secure_logging("ERROR")
        assert root.handlers == handlers
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("httpx").setLevel(httpx_level)
