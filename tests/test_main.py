"""Tests for the command line bootstrap."""

import json

import httpx
import pytest

from botrest.config import Settings
from main import lifespan, parse_args, run
from tests.conftest import RecordingHandler


@pytest.fixture
def settings():
    return Settings(BOT_TOKEN="cli-token", API_BASE_URL="https://api.test/api", API_VERSION=10)


def test_parse_args():
    args = parse_args(["post", "/channels/1/messages", "--json", '{"content": "x"}', "--reason", "why"])

    assert args.method == "POST"
    assert args.route == "/channels/1/messages"
    assert args.body == '{"content": "x"}'
    assert args.files == []
    assert args.reason == "why"


def test_settings_api_url(settings):
    assert settings.api_url == "https://api.test/api/v10"
    assert settings.user_agent.startswith("DiscordBot (")


@pytest.mark.asyncio
async def test_lifespan_builds_client_from_settings(settings):
    handler = RecordingHandler()
    async with lifespan(settings, http_transport=httpx.MockTransport(handler)) as client:
        assert client.token == "cli-token"
        assert client.api_url == "https://api.test/api/v10"
        assert client.scheduler.concurrency == settings.SCHEDULER_CONCURRENCY
    assert client.scheduler.closed


@pytest.mark.asyncio
async def test_run_prints_result(settings, capsys):
    handler = RecordingHandler()
    handler.queue(200, {"id": "42", "username": "bot"})

    code = await run(parse_args(["GET", "/users/@me"]), settings, http_transport=httpx.MockTransport(handler))

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"id": "42", "username": "bot"}
    assert handler.requests[0].headers["Authorization"] == "Bot cli-token"


@pytest.mark.asyncio
async def test_run_reports_api_error(settings, capsys):
    handler = RecordingHandler()
    handler.queue(404, {"code": 10003, "message": "Unknown Channel"})

    code = await run(parse_args(["GET", "/channels/123456789012345678"]), settings, http_transport=httpx.MockTransport(handler))

    assert code == 1
    assert "Unknown Channel" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_run_rejects_invalid_json(settings, capsys):
    code = await run(parse_args(["POST", "/channels/1/messages", "--json", "{nope"]), settings)

    assert code == 2
    assert "Invalid request" in capsys.readouterr().err
