"""Pydantic models for the REST client."""

from botrest.models.payload import (
    Attachment,
    EncodedBody,
    MultipartPayload,
    RequestPayload,
    StructuredPayload,
    build_payload,
)
from botrest.models.request import HTTPMethod, Route, bucket_key_for
from botrest.models.response import ErrorEnvelope, FieldError, RateLimitHeaders

__all__ = [
    "Attachment",
    "EncodedBody",
    "MultipartPayload",
    "RequestPayload",
    "StructuredPayload",
    "build_payload",
    "HTTPMethod",
    "Route",
    "bucket_key_for",
    "ErrorEnvelope",
    "FieldError",
    "RateLimitHeaders",
]
