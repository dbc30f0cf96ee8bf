"""Response envelope model and decoding for the Emarsys API.

Every Emarsys response wraps its payload in the same envelope::

    {"replyCode": 0, "replyText": "OK", "data": ...}

Errors are signalled two ways: through the HTTP status and through a
non-zero ``replyCode`` even on HTTP 200. ``decode_response`` folds both into
one exception hierarchy so callers have a single failure path.

See https://dev.emarsys.com/docs/emarsys-api/ZG9jOjI0ODk5NzY4-http-200-errors
"""

import logging
from functools import lru_cache
from typing import Any, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from ..exceptions import EnvelopeDecodeError, PayloadDecodeError, ReplyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

HTTP_OK = 200


class EnvelopeBody(BaseModel):
    """Fields of the envelope that are read from the response body.

    A JSON ``null`` for ``replyText`` decodes as an empty string.

    :param reply_code: Application reply code, 0 on success
    :type reply_code: int
    :param reply_text: Human-readable reply text
    :type reply_text: str
    :param data: Undecoded payload, validated later against the caller's type
    :type data: Any
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    reply_code: int = Field(..., alias="replyCode")
    reply_text: str = Field("", alias="replyText")
    data: Any = None

    @field_validator("reply_text", mode="before")
    @classmethod
    def null_reply_text(cls, value: Any) -> Any:
        return "" if value is None else value


class ResponseEnvelope(EnvelopeBody):
    """Outer wrapper of every Emarsys API response.

    :param http_status_code: HTTP status set from the transport response;
                             an ``httpStatusCode`` key in the body is ignored
    :type http_status_code: int
    """

    http_status_code: int = 0

    @property
    def is_success(self) -> bool:
        return self.http_status_code == HTTP_OK and self.reply_code == 0


@lru_cache(maxsize=128)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def decode_envelope(body: bytes, status_code: int) -> ResponseEnvelope:
    """Strictly decode ``body`` as an envelope.

    :param body: Raw response body
    :type body: bytes
    :param status_code: HTTP status of the response
    :type status_code: int
    :return: Envelope with ``http_status_code`` set from ``status_code``
    :rtype: ResponseEnvelope
    :raises pydantic.ValidationError: If the body is not valid JSON or lacks
                                      ``replyCode``
    """
    envelope = EnvelopeBody.model_validate_json(body)
    return ResponseEnvelope(
        http_status_code=status_code,
        reply_code=envelope.reply_code,
        reply_text=envelope.reply_text,
        data=envelope.data,
    )


def decode_response(
    body: bytes,
    status_code: int,
    response_type: Optional[Type[T]] = None,
) -> Optional[T]:
    """Decode a raw response into the caller's payload type.

    Non-200 responses always raise a retryable error: ``ReplyError`` when
    the envelope decodes, ``EnvelopeDecodeError`` when it does not. On
    HTTP 200 every failure is permanent: a malformed envelope, a non-zero
    ``replyCode`` or a ``data`` value that does not validate against
    ``response_type``.

    :param body: Raw response body
    :type body: bytes
    :param status_code: HTTP status of the response
    :type status_code: int
    :param response_type: Type ``data`` is validated into; ``None`` skips
                          payload validation
    :type response_type: Optional[Type[T]]
    :return: Validated payload, or ``None`` without a ``response_type``
    :raises EnvelopeDecodeError: If the body is not a valid envelope
    :raises ReplyError: On a non-200 status or a non-zero reply code
    :raises PayloadDecodeError: If ``data`` does not match ``response_type``
    """
    if status_code != HTTP_OK:
        try:
            envelope = decode_envelope(body, status_code)
        except ValidationError as e:
            raise EnvelopeDecodeError(
                f"emarsys.client: failed to unmarshal HTTP error response: {e}",
                status_code=status_code,
                response_body=body,
                retryable=True,
            ) from e
        raise ReplyError(envelope, response_body=body, retryable=True)

    try:
        envelope = decode_envelope(body, status_code)
    except ValidationError as e:
        raise EnvelopeDecodeError(
            f"emarsys.client: failed to unmarshal HTTP envelope response: {e}",
            status_code=status_code,
            response_body=body,
        ) from e

    if envelope.reply_code != 0:
        logger.debug(
            f"HTTP 200 with replyCode {envelope.reply_code}: {envelope.reply_text}"
        )
        raise ReplyError(envelope, response_body=body)

    if response_type is None:
        return None

    try:
        return _adapter(response_type).validate_python(envelope.data)
    except ValidationError as e:
        raise PayloadDecodeError(
            f"emarsys.client: failed to unmarshal HTTP data response: {e}",
            envelope=envelope,
            response_body=body,
        ) from e
