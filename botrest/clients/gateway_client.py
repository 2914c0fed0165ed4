"""Rate-limit aware REST client for the bot API."""

import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from botrest.clients.http_transport import HTTPTransport
from botrest.config import Settings
from botrest.exceptions import EncodingError, ProtocolError
from botrest.models.payload import (
    EncodedBody,
    JSON_CONTENT_TYPE,
    RequestPayload,
    as_payload,
    assemble_headers,
)
from botrest.models.request import HTTPMethod, Route
from botrest.services.cache_service import ResponseCache
from botrest.services.error_service import ErrorService
from botrest.services.rate_limit_service import RateLimitService
from botrest.services.scheduler_service import RequestScheduler

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://discord.com/api/v10"
AUDIT_LOG_REASON_HEADER = "X-Audit-Log-Reason"

Dispatch = Callable[[Any], Any]


def passthrough(data: Any) -> Any:
    return data


class GatewayClient:
    """Schedules, paces and executes API calls.

    Every call is admitted through a FIFO scheduler, held back while its
    rate-limit bucket is exhausted, sent, and classified. Decoded success
    bodies are handed to ``dispatch`` and its return value becomes the
    call's result. Successful GET results are cached by exact route.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        dispatch: Optional[Dispatch] = None,
        transport: Optional[HTTPTransport] = None,
        scheduler: Optional[RequestScheduler] = None,
        rate_limits: Optional[RateLimitService] = None,
        cache: Optional[ResponseCache] = None,
        user_agent: Optional[str] = None,
    ):
        """Initialize gateway client.

        Args:
            token: Bot token sent in the Authorization header
            api_url: Fixed host plus versioned API prefix
            dispatch: Receives each decoded success body; may be async
            transport: HTTP transport (a default httpx one is created if omitted)
            scheduler: Admission queue (concurrency 1 if omitted)
            rate_limits: Bucket table
            cache: Response cache for GET results
            user_agent: User-Agent header value
        """
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.dispatch = dispatch or passthrough
        self.transport = transport or HTTPTransport()
        self.scheduler = scheduler or RequestScheduler()
        self.rate_limits = rate_limits or RateLimitService()
        self.cache = cache if cache is not None else ResponseCache()
        self.user_agent = user_agent

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        dispatch: Optional[Dispatch] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GatewayClient":
        """Build a client with every collaborator configured from settings."""
        return cls(
            token=settings.BOT_TOKEN,
            api_url=settings.api_url,
            dispatch=dispatch,
            transport=HTTPTransport(
                timeout=settings.REQUEST_TIMEOUT,
                client=http_client,
                transport=http_transport,
            ),
            scheduler=RequestScheduler(concurrency=settings.SCHEDULER_CONCURRENCY),
            rate_limits=RateLimitService(
                guard_margin=settings.RATE_LIMIT_GUARD_MARGIN,
                poll_interval=settings.RATE_LIMIT_POLL_INTERVAL,
            ),
            cache=ResponseCache(enabled=settings.CACHE_ENABLED),
            user_agent=settings.user_agent,
        )

    @property
    def default_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bot {self.token}",
            "Content-Type": JSON_CONTENT_TYPE,
        }
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    async def get(self, route: str, payload: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.GET, route, payload, **kwargs)

    async def post(self, route: str, payload: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.POST, route, payload, **kwargs)

    async def put(self, route: str, payload: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.PUT, route, payload, **kwargs)

    async def patch(self, route: str, payload: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.PATCH, route, payload, **kwargs)

    async def delete(self, route: str, payload: Any = None, **kwargs) -> Any:
        return await self.request(HTTPMethod.DELETE, route, payload, **kwargs)

    async def request(
        self,
        method: HTTPMethod,
        route: str,
        payload: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        reason: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Schedule one API call and wait for its result.

        Args:
            method: HTTP method
            route: Path below the API prefix, e.g. ``/channels/123/messages``
            payload: A RequestPayload, or a bare structured value
            params: Query parameters
            reason: Audit log reason
            headers: Header overrides

        Returns:
            The dispatch result, or None for an empty success body

        Raises:
            GatewayError: On any failure of this call
        """
        try:
            target = Route(method=HTTPMethod(method), path=route)
        except ValueError as e:
            raise EncodingError(f"Invalid route {method!r} {route!r}: {e}") from e

        return await self.scheduler.submit(
            lambda: self._perform(target, route, payload, params, reason, headers)
        )

    def cache_key(self, route: str, params: Optional[Mapping[str, Any]] = None) -> str:
        if not params:
            return route
        return f"{route}?{httpx.QueryParams(params)}"

    async def _perform(
        self,
        target: Route,
        route: str,
        payload: Any,
        params: Optional[Mapping[str, Any]],
        reason: Optional[str],
        headers: Optional[Mapping[str, str]],
    ) -> Any:
        method = target.method
        bucket_key = target.bucket_key
        cache_key = self.cache_key(route, params)

        if method is HTTPMethod.GET and cache_key in self.cache:
            logger.debug(f"Cache hit for {cache_key}")
            return self.cache.get(cache_key)

        await self.rate_limits.wait_until_available(bucket_key)

        body, request_headers = self._build_request(payload, reason, headers)
        response = await self.transport.send(
            method.value,
            target.url(self.api_url),
            headers=request_headers,
            content=body.content,
            params=params,
        )

        logger.debug(
            f"{method.value} {route} -> {response.status_code}",
            extra={
                "method": method.value,
                "route": route,
                "status": response.status_code,
                "bucket": bucket_key,
            },
        )

        await self.rate_limits.update_from_headers(bucket_key, response.headers)

        result = await self._handle_response(response)

        if method is HTTPMethod.GET and result is not None:
            self.cache.set(cache_key, result)
        return result

    def _build_request(
        self,
        payload: Any,
        reason: Optional[str],
        headers: Optional[Mapping[str, str]],
    ):
        request_payload: Optional[RequestPayload] = as_payload(payload)
        if request_payload is not None and headers:
            request_payload = request_payload.model_copy(
                update={"headers": {**request_payload.headers, **headers}}
            )

        body = request_payload.encode() if request_payload is not None else EncodedBody()
        request_headers = assemble_headers(self.default_headers, request_payload, body)
        if request_payload is None and headers:
            request_headers.update(headers)
        if reason:
            request_headers[AUDIT_LOG_REASON_HEADER] = quote(reason, safe=" ")
        return body, request_headers

    async def _handle_response(self, response: httpx.Response) -> Any:
        if not response.is_success:
            raise ErrorService.decode_error_response(
                response.status_code,
                response.reason_phrase,
                response.content,
                response.headers,
            )

        if not response.content:
            return None

        try:
            data = response.json()
        except ValueError:
            raise ProtocolError(
                response.status_code,
                response.reason_phrase,
                response.text,
                headers=dict(response.headers),
            )

        result = self.dispatch(data)
        if inspect.isawaitable(result):
            result = await result
        return result

    def invalidate_cache(self, route: str, params: Optional[Mapping[str, Any]] = None) -> bool:
        return self.cache.invalidate(self.cache_key(route, params))

    async def close(self):
        """Stop the scheduler and close the HTTP transport."""
        await self.scheduler.close()
        await self.transport.close()

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
