"""Rate-limit aware REST client core for the bot API."""

from botrest.clients import GatewayClient, HTTPTransport
from botrest.exceptions import (
    APIError,
    EncodingError,
    GatewayError,
    HTTPError,
    ProtocolError,
    TransportError,
)
from botrest.models import Attachment, MultipartPayload, StructuredPayload, build_payload

__version__ = "1.0.0"

__all__ = [
    "GatewayClient",
    "HTTPTransport",
    "APIError",
    "EncodingError",
    "GatewayError",
    "HTTPError",
    "ProtocolError",
    "TransportError",
    "Attachment",
    "MultipartPayload",
    "StructuredPayload",
    "build_payload",
]
