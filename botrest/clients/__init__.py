"""HTTP clients for the bot API."""

from botrest.clients.gateway_client import GatewayClient
from botrest.clients.http_transport import HTTPTransport

__all__ = ["GatewayClient", "HTTPTransport"]
