"""Pytest configuration and fixtures."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from botrest.clients import GatewayClient, HTTPTransport
from botrest.services import RateLimitService

API_URL = "https://api.test/api/v10"


class FakeClock:
    """Manually advanced monotonic clock with a matching sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


class RecordingHandler:
    """MockTransport handler replaying queued responses and recording requests."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[Dict[str, Any]] = []

    def queue(
        self,
        status: int = 200,
        json_body: Any = None,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ):
        if json_body is not None:
            content = json.dumps(json_body).encode()
        self._responses.append({"status_code": status, "content": content, "headers": headers or {}})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            response_kwargs = self._responses.pop(0)
        else:
            response_kwargs = {"status_code": 204, "content": b"", "headers": {}}
        return httpx.Response(**response_kwargs)


def rate_limit_headers(remaining: int, reset_after: float, limit: int = 5) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset-After": str(reset_after),
        "X-RateLimit-Bucket": "abcd1234",
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def dispatched():
    """Values received by the dispatch collaborator."""
    return []


@pytest_asyncio.fixture
async def client(handler, clock, dispatched):
    """Gateway client wired to a mock transport and a fake clock."""

    def dispatch(data):
        dispatched.append(data)
        return data

    gateway = GatewayClient(
        token="test-token",
        api_url=API_URL,
        dispatch=dispatch,
        transport=HTTPTransport(transport=httpx.MockTransport(handler)),
        rate_limits=RateLimitService(guard_margin=0, clock=clock, sleep=clock.sleep),
        user_agent="DiscordBot (botrest-tests, 1.0.0)",
    )
    yield gateway
    await gateway.close()
