"""Emarsys API client package.

This package provides an async client for the Emarsys marketing-automation
REST API. It signs every request with a WSSE header, retries transient
failures with exponential backoff, and unwraps the API's response envelope
into typed payloads or structured exceptions.

:var __version__: Current package version
:type __version__: str
"""

from .client import EmarsysClient
from .exceptions import (
    APIError,
    ConfigurationError,
    EmarsysError,
    EnvelopeDecodeError,
    PayloadDecodeError,
    ReplyError,
    TransportError,
)
from .models.envelope import ResponseEnvelope
from .utils.http.retry import RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "ConfigurationError",
    "EmarsysClient",
    "EmarsysError",
    "EnvelopeDecodeError",
    "PayloadDecodeError",
    "ReplyError",
    "ResponseEnvelope",
    "RetryPolicy",
    "TransportError",
]
