"""
Structured logging configuration using structlog wrapping stdlib.

Engine and provider modules log key/value events through get_logger(); the
config loader and third-party libraries use the standard logging module.
Both end up on one stderr handler, rendered as JSON or as console lines.

Usage:
    from taskflow.config_models import load_engine_config
    from taskflow.logging_config import setup_logging

    setup_logging(load_engine_config().logging)
"""

from __future__ import annotations

import logging
import sys

import structlog

from taskflow.config_models import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    config = config or LoggingConfig()
    numeric_level = getattr(logging, config.level.upper(), logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if config.json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from plain logging.getLogger() users get the same fields
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # The CLI prints results on stdout, so logs stay on stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
