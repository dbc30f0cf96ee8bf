"""Pydantic models for the Emarsys API client."""

from .envelope import EnvelopeBody, ResponseEnvelope, decode_envelope, decode_response

__all__ = ["EnvelopeBody", "ResponseEnvelope", "decode_envelope", "decode_response"]
