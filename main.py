"""Bootstrap entry point: perform one API call from the command line."""

import argparse
import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional

import httpx

from botrest.clients import GatewayClient
from botrest.config import Settings, get_settings
from botrest.exceptions import GatewayError
from botrest.log import configure_logging
from botrest.models import build_payload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(
    settings: Settings,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[GatewayClient]:
    """Lifecycle manager for a configured client."""
    logger.info(f"Starting {settings.SERVICE_NAME} v{settings.SERVICE_VERSION}")
    logger.info(
        "API: %s | Concurrency: %s",
        settings.api_url,
        settings.SCHEDULER_CONCURRENCY,
    )

    client = GatewayClient.from_settings(settings, http_transport=http_transport)
    try:
        yield client
    finally:
        logger.info(f"Shutting down {settings.SERVICE_NAME}")
        await client.close()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send one request to the bot API")
    parser.add_argument("method", choices=["GET", "POST", "PUT", "PATCH", "DELETE"], type=str.upper)
    parser.add_argument("route", help="Path below the API prefix, e.g. /users/@me")
    parser.add_argument("--json", dest="body", help="JSON request body")
    parser.add_argument("--file", dest="files", action="append", default=[], help="Attachment path")
    parser.add_argument("--reason", help="Audit log reason")
    return parser.parse_args(argv)


async def run(
    args: argparse.Namespace,
    settings: Settings,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    try:
        value = json.loads(args.body) if args.body else None
        attachments = [(Path(path).name, Path(path).read_bytes()) for path in args.files]
        payload = build_payload(value, attachments) if (value is not None or attachments) else None
    except (ValueError, OSError, GatewayError) as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2

    async with lifespan(settings, http_transport=http_transport) as client:
        try:
            result = await client.request(args.method, args.route, payload, reason=args.reason)
        except GatewayError as e:
            print(e.message, file=sys.stderr)
            return 1

    if result is not None:
        print(json.dumps(result, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    return asyncio.run(run(parse_args(argv), settings))


if __name__ == "__main__":
    sys.exit(main())
