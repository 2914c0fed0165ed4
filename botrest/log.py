"""Logging setup shared by the client and the bootstrap entry point."""

import logging
import sys

import structlog

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, ...)
        log_format: ``json`` renders records through structlog, keeping
            ``extra=`` fields as keys; anything else uses a plain text format
    """
    if log_format.lower() == "json":
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.ExtraAdder(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
            ],
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx logs every request at INFO; the client emits its own record
    logging.getLogger("httpx").setLevel(logging.WARNING)
