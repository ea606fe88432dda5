"""
Structured logging configuration for fund-compass.

Wires ``structlog`` and stdlib ``logging`` together so that library
modules can keep using ``logging.getLogger("batch")`` while the API layer
uses ``get_logger()``; both end up in the same formatter.

Usage::

    from fund_lib.core.logging_config import setup_logging, get_logger

    setup_logging(service="fund-api")
    logger = get_logger("tracker")
    logger.info("compass_built", funds=12, skipped=1)

``LOG_FORMAT=console`` (default) gives coloured, human-readable lines;
``LOG_FORMAT=json`` gives one JSON object per line.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(
    *,
    service: str = "fund-compass",
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure ``structlog`` and the root stdlib logger for the process.

    Parameters
    ----------
    service:
        Name bound to every log event.
    level:
        Root log level.  Falls back to ``LOG_LEVEL``, then ``"INFO"``.
    log_format:
        ``"console"`` or ``"json"``.  Falls back to ``LOG_FORMAT``, then
        ``"console"``.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "console").lower()

    numeric_level = getattr(logging, level, logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            pad_event_to=30,
        )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    # One line per upstream request is too chatty at INFO.
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service)


def get_logger(
    name: str | None = None, **initial_binds: Any
) -> structlog.stdlib.BoundLogger:
    """Return a structured logger, optionally bound with extra context.

    >>> logger = get_logger("tracker", group="default")
    >>> logger.info("estimates_refreshed", funds=8)
    """
    log = structlog.get_logger(name)
    if initial_binds:
        log = log.bind(**initial_binds)
    return log
