"""Structured logging for the session engine (structlog over stdlib logging)."""

from __future__ import annotations

import json
import logging
import sys

import structlog

from deliberate_thinking.core.config import Settings


ROOT_LOGGER = "deliberate_thinking"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and attach a stderr handler to the package logger.

    Stdout is left alone: it belongs to whatever transport serializes responses.
    """
    settings = settings or Settings.from_env()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_json:
        renderer = structlog.processors.JSONRenderer(
            serializer=lambda obj, **kw: json.dumps(obj, ensure_ascii=False, **kw)
        )
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

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level, logging.INFO))

    structlog.contextvars.bind_contextvars(session=settings.session_name)


def get_logger(name: str = ROOT_LOGGER) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
