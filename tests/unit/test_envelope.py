"""Unit tests for response envelope decoding and classification."""

import json
from typing import List

import pytest
from pydantic import BaseModel, ValidationError

from emarsys_client.exceptions import (
    EnvelopeDecodeError,
    PayloadDecodeError,
    ReplyError,
)
from emarsys_client.models.envelope import (
    ResponseEnvelope,
    decode_envelope,
    decode_response,
)


class Contact(BaseModel):
    id: int
    email: str


def envelope_body(reply_code=0, reply_text="OK", data=None, **extra):
    payload = {"replyCode": reply_code, "replyText": reply_text, "data": data}
    payload.update(extra)
    return json.dumps(payload).encode("utf-8")


class TestDecodeEnvelope:
    def test_status_comes_from_transport(self):
        body = envelope_body(httpStatusCode=999)
        envelope = decode_envelope(body, 200)
        assert envelope.http_status_code == 200
        assert envelope.reply_code == 0
        assert envelope.reply_text == "OK"
        assert envelope.is_success

    def test_missing_reply_code_rejected(self):
        with pytest.raises(ValidationError):
            decode_envelope(b'{"replyText": "OK", "data": {}}', 200)

    def test_malformed_json_rejected(self):
        with pytest.raises(ValidationError):
            decode_envelope(b"<html>Bad Gateway</html>", 502)

    def test_body_status_field_ignored(self):
        for value in (None, "oops", 200):
            body = envelope_body(httpStatusCode=value)
            assert decode_envelope(body, 502).http_status_code == 502

    def test_null_reply_text_is_empty(self):
        envelope = decode_envelope(b'{"replyCode": 0, "replyText": null}', 200)
        assert envelope.reply_text == ""

    def test_optional_fields_default(self):
        envelope = decode_envelope(b'{"replyCode": 0}', 200)
        assert envelope.reply_text == ""
        assert envelope.data is None

    def test_populate_by_name(self):
        envelope = ResponseEnvelope(http_status_code=400, reply_code=1, reply_text="x")
        assert not envelope.is_success


class TestDecodeResponseSuccess:
    def test_typed_payload(self):
        body = envelope_body(data={"id": 1, "email": "a@example.com"})
        contact = decode_response(body, 200, Contact)
        assert contact == Contact(id=1, email="a@example.com")

    def test_generic_payload(self):
        body = envelope_body(data=[1, 2, 3])
        assert decode_response(body, 200, List[int]) == [1, 2, 3]

    def test_null_reply_text_with_payload(self):
        body = b'{"replyCode": 0, "replyText": null, "data": [1]}'
        assert decode_response(body, 200, List[int]) == [1]

    def test_without_response_type(self):
        assert decode_response(envelope_body(data={"anything": True}), 200) is None


class TestDecodeResponseErrors:
    def test_reply_code_on_200_is_permanent(self):
        body = envelope_body(reply_code=1003, reply_text="Invalid key", data="")
        with pytest.raises(ReplyError) as exc_info:
            decode_response(body, 200, Contact)

        err = exc_info.value
        assert err.status_code == 200
        assert err.reply_code == 1003
        assert err.reply_text == "Invalid key"
        assert err.response_body == body
        assert not err.retryable

    def test_malformed_200_is_permanent(self):
        with pytest.raises(EnvelopeDecodeError) as exc_info:
            decode_response(b"not json", 200, Contact)
        assert exc_info.value.status_code == 200
        assert exc_info.value.response_body == b"not json"
        assert not exc_info.value.retryable

    def test_payload_mismatch_is_permanent(self):
        body = envelope_body(data={"id": "not-a-number"})
        with pytest.raises(PayloadDecodeError) as exc_info:
            decode_response(body, 200, Contact)

        err = exc_info.value
        assert err.status_code == 200
        assert err.reply_code == 0
        assert err.response_body == body
        assert not err.retryable

    def test_non_200_with_envelope(self):
        body = envelope_body(reply_code=2008, reply_text="No contact found")
        with pytest.raises(ReplyError) as exc_info:
            decode_response(body, 400, Contact)

        err = exc_info.value
        assert err.status_code == 400
        assert err.reply_code == 2008
        assert err.response_body == body
        assert err.envelope.http_status_code == 400
        assert err.retryable

    def test_non_200_with_reply_code_zero_is_still_error(self):
        with pytest.raises(ReplyError) as exc_info:
            decode_response(envelope_body(), 500)
        assert exc_info.value.status_code == 500

    def test_non_200_undecodable(self):
        body = b"<html>Service Unavailable</html>"
        with pytest.raises(EnvelopeDecodeError) as exc_info:
            decode_response(body, 503)

        err = exc_info.value
        assert err.status_code == 503
        assert err.response_body == body
        assert err.retryable
        assert "failed to unmarshal HTTP error response" in str(err)
