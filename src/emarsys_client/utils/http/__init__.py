"""HTTP utilities public API (barrel module).

This package provides:
- The transport abstraction and its default httpx implementation
- The retry policy used by the request executor

Recommended import pattern for consumers:
    from emarsys_client.utils.http import HTTPTransport, RetryPolicy
"""

from .retry import DEFAULT_MAX_RETRIES, RetryPolicy
from .transport import (
    DEFAULT_TIMEOUT,
    HTTPTransport,
    Transport,
    create_limits,
    create_ssl_context,
    create_timeout,
    create_transport,
)

__all__ = [
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "HTTPTransport",
    "RetryPolicy",
    "Transport",
    "create_limits",
    "create_ssl_context",
    "create_timeout",
    "create_transport",
]
