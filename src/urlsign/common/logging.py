"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog and the standard library root logger."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer: Any
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger bound to a module name."""
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


class KeyMaterialTrace:
    """
    Debug sink for intermediate signing material.

    Bucket keys and expected tokens are secrets: anyone who sees them can mint
    tokens for that bucket. Signing code only emits them when a caller hands it
    one of these objects, so nothing is logged by default.
    """

    def __init__(self, logger: Any | None = None) -> None:
        self._logger = logger or get_logger("urlsign.key_material")

    def bucket_key(self, bucket_index: int, key: bytes) -> None:
        self._logger.debug("Derived bucket key", bucket_index=bucket_index, bucket_key=key.hex())

    def expected_token(self, bucket_index: int, token: str) -> None:
        self._logger.debug("Expected token", bucket_index=bucket_index, token=token)
