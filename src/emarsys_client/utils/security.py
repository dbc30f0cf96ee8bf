"""Log sanitization and secure logging setup.

WSSE headers contain a password digest that stays valid for a few minutes
after it is created, so they must never reach the logs in clear text.
This module provides:
- String and header sanitization for WSSE credentials
- A logging formatter that applies the sanitization automatically
- An idempotent ``setup_secure_logging`` helper
"""

import copy
import logging
import re
import sys
from typing import Any, Dict

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "password_digest": re.compile(r'(PasswordDigest=")[^"]*(")'),
    "nonce": re.compile(r'(Nonce=")[^"]*(")'),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "x-wsse",
    "authorization",
    "cookie",
    "set-cookie",
}


def sanitize_string(value: str) -> str:
    """Redact WSSE credentials embedded in ``value``.

    :param value: String to sanitize
    :type value: str
    :return: String with digest and nonce values replaced by ``<REDACTED>``
    :rtype: str
    """
    if not value:
        return value
    for pattern in SENSITIVE_PATTERNS.values():
        value = pattern.sub(r"\1<REDACTED>\2", value)
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Copy with sensitive header values redacted
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(dict(headers))
    for key, value in sanitized.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
    return sanitized


class SanitizingFormatter(logging.Formatter):
    """Formatter that redacts WSSE credentials from every record."""

    def format(self, record: logging.LogRecord) -> str:
        if record.args:
            try:
                record.msg = sanitize_string(record.msg % record.args)
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up root logging with automatic sanitization.

    Safe to call more than once; only the first call installs the handler.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True
