"""Error hierarchy surfaced on every failed call."""

from typing import Any, Dict, List, Optional


class GatewayError(Exception):
    """Base exception for REST client failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TransportError(GatewayError):
    """The request never produced a response (connection error, timeout)."""

    def __init__(self, method: str, url: str, original: Exception):
        self.method = method
        self.url = url
        self.original = original
        super().__init__(
            f"{method} {url} failed before a response arrived: {original!r}",
            {"method": method, "url": url},
        )


class EncodingError(GatewayError):
    """A request payload could not be turned into a wire body."""


class HTTPError(GatewayError):
    """Non-success response from the API."""

    def __init__(
        self,
        status: int,
        reason: str,
        message: str,
        headers: Optional[Dict[str, str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        super().__init__(message, details)

    @property
    def rate_limited(self) -> bool:
        return self.status == 429


class APIError(HTTPError):
    """Non-success response carrying a decodable error envelope."""

    def __init__(
        self,
        status: int,
        reason: str,
        code: Any,
        error_message: str,
        trace: Optional[List[str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.error_message = error_message
        self.trace = trace or []

        message = f"{status} {reason} (error code: {code}): {error_message}"
        if self.trace:
            message = message + "\n" + "\n".join(self.trace)

        super().__init__(
            status,
            reason,
            message,
            headers=headers,
            details={"code": code, "message": error_message, "trace": self.trace},
        )


class ProtocolError(HTTPError):
    """Non-success response whose body is not an error envelope."""

    def __init__(
        self,
        status: int,
        reason: str,
        body: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.body = body
        super().__init__(
            status,
            reason,
            f"{status} {reason}\n{body}",
            headers=headers,
            details={"body": body},
        )
