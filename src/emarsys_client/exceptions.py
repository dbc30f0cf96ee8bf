"""Structured exception classes for the Emarsys API client."""

import json
from typing import Any, Dict, Optional


class EmarsysError(Exception):
    """Base exception for all Emarsys client errors.

    Every failure surfaced by the client derives from this class, so callers
    have a single failure path to check. ``retryable`` tells the request
    executor whether another attempt may succeed.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    :param retryable: Whether the executor may retry the request
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ConfigurationError(EmarsysError):
    """Raised when the client cannot be built from its configuration.

    :param message: Description of the configuration error
    :param setting: Optional name of the problematic setting
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class TransportError(EmarsysError):
    """Raised when the HTTP request itself fails.

    Network, TLS and connection failures end up here. They are never
    retried.

    :param message: Description of the transport failure
    :param original_error: The exception raised by the transport
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)
        self.original_error = original_error


class APIError(EmarsysError):
    """Raised when the API answered but the answer is an error.

    The HTTP status code and the raw, undecoded response body are always
    kept for diagnostics.

    :param message: Description of the API error
    :param status_code: HTTP status code from the API response
    :param response_body: Raw response body bytes
    :param retryable: Whether the executor may retry the request
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[bytes] = None,
        code: str = "API_ERROR",
        retryable: bool = False,
    ):
        details: Dict[str, Any] = {}
        if status_code:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body.decode("utf-8", "replace")
        super().__init__(
            message=message, code=code, details=details, retryable=retryable
        )
        self.status_code = status_code
        self.response_body = response_body


class EnvelopeDecodeError(APIError):
    """Raised when a response body is not a valid envelope.

    :param message: Description of the decode failure
    :param status_code: HTTP status code of the response
    :param response_body: Raw response body bytes
    :param retryable: Whether the executor may retry the request
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[bytes] = None,
        retryable: bool = False,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            response_body=response_body,
            code="ENVELOPE_DECODE_ERROR",
            retryable=retryable,
        )


class ReplyError(APIError):
    """Raised for application-level errors reported in the envelope.

    Covers both a non-200 HTTP status with a decodable envelope and the
    documented "HTTP 200 errors", where the status is 200 but ``replyCode``
    is non-zero.

    :param envelope: The decoded response envelope
    :param response_body: Raw response body bytes
    :param retryable: Whether the executor may retry the request
    """

    def __init__(
        self,
        envelope: Any,
        response_body: Optional[bytes] = None,
        retryable: bool = False,
    ):
        message = (
            f"ReplyCode:{envelope.reply_code} ReplyText:{envelope.reply_text!r}, "
            f"HasData:{envelope.data is not None}"
        )
        super().__init__(
            message=message,
            status_code=envelope.http_status_code,
            response_body=response_body,
            code="REPLY_ERROR",
            retryable=retryable,
        )
        self.envelope = envelope
        self.reply_code = envelope.reply_code
        self.reply_text = envelope.reply_text
        self.details["reply_code"] = envelope.reply_code
        self.details["reply_text"] = envelope.reply_text


class PayloadDecodeError(APIError):
    """Raised when the envelope ``data`` does not match the expected type.

    :param message: Description of the payload validation failure
    :param envelope: The decoded response envelope
    :param response_body: Raw response body bytes
    """

    def __init__(
        self,
        message: str,
        envelope: Any,
        response_body: Optional[bytes] = None,
    ):
        super().__init__(
            message=message,
            status_code=envelope.http_status_code,
            response_body=response_body,
            code="PAYLOAD_DECODE_ERROR",
        )
        self.envelope = envelope
        self.reply_code = envelope.reply_code
        self.reply_text = envelope.reply_text
