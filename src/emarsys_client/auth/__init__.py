"""Request authentication for the Emarsys API."""

from .rng import LaggedFibonacciSource
from .wsse import (
    WSSE_HEADER,
    WSSESigner,
    format_created,
    generate_nonce,
    generate_wsse,
    password_digest,
    unix_nanos,
)

__all__ = [
    "LaggedFibonacciSource",
    "WSSE_HEADER",
    "WSSESigner",
    "format_created",
    "generate_nonce",
    "generate_wsse",
    "password_digest",
    "unix_nanos",
]
