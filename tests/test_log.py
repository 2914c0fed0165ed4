"""Tests for logging setup."""

import json
import logging

import pytest

from botrest.log import configure_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_json_records_carry_extra_fields(restore_root_logger, capsys):
    configure_logging("DEBUG", "json")

    logging.getLogger("botrest.clients.gateway_client").debug(
        "GET /users/@me -> 200", extra={"method": "GET", "route": "/users/@me", "status": 200}
    )

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "GET /users/@me -> 200"
    assert record["level"] == "debug"
    assert record["route"] == "/users/@me"
    assert record["status"] == 200


def test_text_format_and_level(restore_root_logger, capsys):
    configure_logging("warning", "text")

    logging.getLogger("botrest").info("hidden")
    logging.getLogger("botrest").warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "botrest - WARNING - shown" in out
    assert restore_root_logger.level == logging.WARNING
